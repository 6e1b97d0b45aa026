from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_PROCESSED_DIR = Path(__file__).resolve().parent.parent / "data" / "processed"


@dataclass(frozen=True)
class RankingConfig:
    rooms_path: Path = Path(os.getenv("ROOMS_CSV", str(_PROCESSED_DIR / "rooms.csv")))
    top_size: int = 3
    others_size: int = 12
    max_rooms: int = 1000
    candidate_limit: int = 500
    retrieval_k: int = 6
    retrieval_timeout: float = float(os.getenv("RETRIEVAL_TIMEOUT_SECONDS", "5.0"))


DEFAULT_RANKING_CONFIG = RankingConfig()
