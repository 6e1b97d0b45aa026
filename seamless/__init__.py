"""
Seamless private-dining venue matcher.

Responsibilities:
- Fold conversationally extracted event requirements into a running snapshot.
- Narrow, score and group bookable restaurant rooms against those requirements.
- Surface free-text room notes relevant to a guest's question.
"""
