from __future__ import annotations

import logging
from typing import Callable, Collection

import numpy as np

from ..embeddings.encoder import encode_text, normalize_whitespace
from ..embeddings.index import RoomVectorIndex
from ..errors import RetrievalUnavailable
from .data_store import RoomRepository
from .models import RetrievedNote

logger = logging.getLogger(__name__)


class SemanticRetriever:
    """Nearest-neighbour lookup over room-note embeddings.

    Embedding the query and searching the index are separate steps so the
    embedding call can run while the candidate filter is still working.
    """

    def __init__(
        self,
        index: RoomVectorIndex | None,
        repository: RoomRepository,
        encoder: Callable[[str], np.ndarray] = encode_text,
    ) -> None:
        self.index = index
        self.repository = repository
        self.encoder = encoder

    def embed_query(self, query_text: str | None) -> np.ndarray | None:
        """Embed the normalised query; ``None`` when there is nothing to embed."""
        normalized = normalize_whitespace(query_text)
        if not normalized:
            return None
        try:
            return self.encoder(normalized)
        except Exception as exc:
            raise RetrievalUnavailable("Query embedding failed") from exc

    def search(
        self,
        vector: np.ndarray,
        candidate_ids: Collection[int],
        k: int,
    ) -> list[RetrievedNote]:
        if self.index is None:
            raise RetrievalUnavailable("Room note index is not loaded")

        # An empty candidate set searches every room
        restriction = candidate_ids or None
        try:
            hits = self.index.query(vector, k, restriction)
        except ValueError as exc:
            raise RetrievalUnavailable("Vector lookup failed") from exc
        if not hits:
            return []

        rooms = {room.id: room for room in self.repository.fetch_by_ids([room_id for room_id, _ in hits])}

        notes: list[RetrievedNote] = []
        for room_id, distance in hits:
            room = rooms.get(room_id)
            if room is None or not normalize_whitespace(room.notes):
                continue
            notes.append(
                RetrievedNote(
                    room_id=room_id,
                    distance=distance,
                    restaurant_name=room.restaurant_name,
                    room_name=room.room_name,
                    notes=room.notes,
                )
            )
        return notes

    def retrieve(
        self,
        query_text: str | None,
        candidate_ids: Collection[int],
        k: int,
    ) -> list[RetrievedNote]:
        """Top ``k`` rooms whose notes match ``query_text``, closest first."""
        vector = self.embed_query(query_text)
        if vector is None:
            return []
        return self.search(vector, candidate_ids, k)
