"""
Agent implementations for ReviewLens.

Contains the pipeline stages that turn an App Store URL into analysis:
- App Info Agent
- Review Collection Agent (multi-region ingestion)
- Text Analysis (word frequency + sentiment)
- Review Analytics (trends, distributions, versions)
"""
