"""
Canvas layout for ReviewLens visual outputs.

- Word cloud: spiral-then-grid placement of frequent review terms
"""
