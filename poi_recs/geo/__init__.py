"""
Geo helpers for the scoring engine.

Responsibilities:
- Great-circle distances between coordinates (single pair and vectorised).
- Deriving activity clusters from the stops already on an itinerary.
"""
