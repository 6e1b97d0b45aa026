"""
Offline script to (re)build the room-note embedding index.

Rooms with empty notes are left out. Rooms whose note text and model are
unchanged since the last run keep their stored vector.

Usage:
    python -m seamless.embeddings.precompute
"""
from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Sequence

import numpy as np

from ..recommendations.data_store import get_repository
from ..recommendations.models import RoomRecord
from .config import DEFAULT_EMBEDDING_CONFIG, EmbeddingConfig
from .encoder import encode_batch, normalize_whitespace
from .index import RoomVectorIndex


def text_hash(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def build_index(
    rooms: Sequence[RoomRecord],
    existing: RoomVectorIndex | None = None,
    config: EmbeddingConfig = DEFAULT_EMBEDDING_CONFIG,
) -> tuple[RoomVectorIndex, dict[str, int]]:
    """Embed room notes, reusing vectors from ``existing`` when unchanged."""
    reusable = existing if existing is not None and existing.model == config.model_name else None

    ids: list[int] = []
    hashes: list[str] = []
    vectors: dict[int, np.ndarray] = {}
    to_embed: list[tuple[int, str]] = []
    skipped = 0

    for room in rooms:
        notes = normalize_whitespace(room.notes)
        if not notes:
            skipped += 1
            continue
        digest = text_hash(notes)
        ids.append(room.id)
        hashes.append(digest)

        stored = reusable.entry(room.id) if reusable is not None else None
        if stored is not None and stored[1] == digest:
            vectors[room.id] = stored[0]
        else:
            to_embed.append((room.id, notes))

    if to_embed:
        encoded = encode_batch([notes for _, notes in to_embed], config)
        if len(encoded) != len(to_embed):
            raise ValueError(
                f"Embedding count mismatch: got {len(encoded)}, expected {len(to_embed)}"
            )
        for (room_id, _), vector in zip(to_embed, encoded):
            vectors[room_id] = np.asarray(vector)

    matrix = (
        np.vstack([vectors[room_id] for room_id in ids])
        if ids
        else np.zeros((0, config.dimension), dtype=np.float32)
    )
    index = RoomVectorIndex(ids, matrix, hashes, model=config.model_name)
    stats = {
        "embedded": len(to_embed),
        "reused": len(ids) - len(to_embed),
        "skipped": skipped,
    }
    return index, stats


def run_precompute(config: EmbeddingConfig = DEFAULT_EMBEDDING_CONFIG) -> Path:
    rooms = get_repository().list_all(limit=1_000_000)
    existing = RoomVectorIndex.load(config.index_path) if config.index_path.exists() else None

    print(f"Indexing notes for {len(rooms)} rooms ...")
    index, stats = build_index(rooms, existing, config)

    index.save(config.index_path)
    print(
        f"Saved {len(index)} vectors to {config.index_path} "
        f"(embedded {stats['embedded']}, reused {stats['reused']}, skipped {stats['skipped']})"
    )
    return config.index_path


if __name__ == "__main__":
    run_precompute()
