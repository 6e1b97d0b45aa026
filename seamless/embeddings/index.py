from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity

from .config import DEFAULT_EMBEDDING_CONFIG, EmbeddingConfig

logger = logging.getLogger(__name__)


class RoomVectorIndex:
    """In-memory note vectors keyed by room id.

    Distances are cosine distances (``1 - cosine similarity``), smaller is
    closer.
    """

    def __init__(
        self,
        room_ids: Iterable[int],
        vectors: np.ndarray,
        text_hashes: Iterable[str] | None = None,
        model: str = DEFAULT_EMBEDDING_CONFIG.model_name,
    ) -> None:
        self.room_ids = np.asarray(list(room_ids), dtype=np.int64)
        self.vectors = np.asarray(vectors, dtype=np.float32)
        if self.vectors.ndim == 1:
            rows = len(self.room_ids)
            self.vectors = self.vectors.reshape(rows, -1) if rows else self.vectors.reshape(0, 0)
        hashes = list(text_hashes) if text_hashes is not None else [""] * len(self.room_ids)
        self.text_hashes = np.asarray(hashes, dtype=str)
        self.model = model

        if len(self.room_ids) != len(self.vectors) or len(self.room_ids) != len(self.text_hashes):
            raise ValueError("room_ids, vectors and text_hashes must have the same length")

    def __len__(self) -> int:
        return len(self.room_ids)

    def query(
        self,
        vector: np.ndarray,
        k: int,
        id_restriction: Iterable[int] | None = None,
    ) -> list[tuple[int, float]]:
        """Return up to ``k`` ``(room_id, distance)`` pairs, closest first."""
        if k <= 0 or len(self) == 0:
            return []

        if id_restriction is None:
            mask = np.ones(len(self), dtype=bool)
        else:
            mask = np.isin(self.room_ids, np.fromiter(id_restriction, dtype=np.int64))
        if not mask.any():
            return []

        ids = self.room_ids[mask]
        query_vec = np.asarray(vector, dtype=np.float32).reshape(1, -1)
        distances = 1.0 - cosine_similarity(query_vec, self.vectors[mask]).flatten()

        order = np.argsort(distances, kind="stable")[:k]
        return [(int(ids[i]), float(distances[i])) for i in order]

    def entry(self, room_id: int) -> tuple[np.ndarray, str] | None:
        """Stored vector and text hash for a room, if indexed."""
        positions = np.flatnonzero(self.room_ids == room_id)
        if positions.size == 0:
            return None
        pos = positions[0]
        return self.vectors[pos], str(self.text_hashes[pos])

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        np.savez(
            path,
            room_ids=self.room_ids,
            vectors=self.vectors,
            text_hashes=self.text_hashes,
            model=np.asarray(self.model),
        )

    @classmethod
    def load(cls, path: Path) -> RoomVectorIndex:
        with np.load(path, allow_pickle=False) as data:
            return cls(
                room_ids=data["room_ids"],
                vectors=data["vectors"],
                text_hashes=data["text_hashes"],
                model=str(data["model"]),
            )


_index: RoomVectorIndex | None = None


def get_vector_index(config: EmbeddingConfig = DEFAULT_EMBEDDING_CONFIG) -> RoomVectorIndex | None:
    """Return the note index, loading it on first call, or None if file missing."""
    global _index
    if _index is None and config.index_path.exists():
        _index = RoomVectorIndex.load(config.index_path)
        logger.info("Loaded %d room note vectors from %s", len(_index), config.index_path)
    return _index
