"""
Embeddings layer for room-note retrieval.

Responsibilities:
- Load a lightweight sentence-transformer model.
- Precompute embeddings for room notes (offline), skipping unchanged text.
- Encode guest questions at request time.
- Answer nearest-neighbour lookups over the note vectors.
"""
