"""
Room data ingestion package.

Responsibilities:
- Read a raw restaurant-room export.
- Normalize it into the canonical room schema.
- Persist the processed room table locally for the recommendation engine.
"""
