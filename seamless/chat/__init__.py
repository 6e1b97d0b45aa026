"""
Conversational intake.

Responsibilities:
- Validate and coerce event requirements at the boundary.
- Merge each extractor guess into the running requirements snapshot.
- Track which required slots are still missing and when intake is ready.
"""
