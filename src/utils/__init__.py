"""
Utility modules for ReviewLens.

Cross-cutting concerns:
- Feed client: HTTP access to the App Store feed and lookup endpoints
- Dates: Timestamp parsing and ordering
- Storage: File I/O helpers for reports and exports
"""
