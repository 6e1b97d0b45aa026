from __future__ import annotations

import json
from pathlib import Path
from typing import List

import pandas as pd

from .config import DEFAULT_INGESTION_CONFIG, IngestionConfig

IMAGE_PATH_SEPARATOR = "|"

CANONICAL_COLUMNS: List[str] = [
    "id",
    "restaurant_name",
    "room_name",
    "restaurant_des",
    "room_desc",
    "address",
    "event_type",
    "lat",
    "lng",
    "seated_capacity",
    "standing_capacity",
    "privacy_level",
    "noise_level",
    "primary_vibe",
    "vibe_tags",
    "cuisine",
    "a_v",
    "min_spend_estimate",
    "menu_link",
    "contact_email",
    "room_photo_link",
    "image_paths",
    "cake_fee",
    "corkage_fee",
    "notes",
]

NUMERIC_COLUMNS: List[str] = [
    "lat",
    "lng",
    "seated_capacity",
    "standing_capacity",
    "min_spend_estimate",
]

# Raw exports name a few columns differently; the first present alias wins.
_ALIASES: dict[str, List[str]] = {
    "restaurant_name": ["restaurant_name", "restaurant", "name"],
    "room_name": ["room_name", "room"],
    "address": ["address", "full_address", "location"],
    "lat": ["lat", "latitude"],
    "lng": ["lng", "lon", "longitude"],
    "seated_capacity": ["seated_capacity", "seated", "capacity"],
    "standing_capacity": ["standing_capacity", "standing"],
    "a_v": ["a_v", "av", "a/v"],
    "min_spend_estimate": ["min_spend_estimate", "min_spend", "minimum_spend"],
}


def _is_missing(value: object) -> bool:
    return value is None or (not isinstance(value, (list, tuple)) and bool(pd.isna(value)))


def _parse_amount(value: object) -> float | None:
    """Parse "$1,500" or "1500" into 1500.0."""
    if _is_missing(value):
        return None
    raw = str(value).replace("$", "").replace(",", "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def _normalize_image_paths(value: object) -> str:
    if _is_missing(value):
        return ""
    raw = str(value).strip()
    if not raw:
        return ""
    if raw.startswith("["):
        try:
            items = json.loads(raw)
        except json.JSONDecodeError:
            items = raw.strip("[]").split(",")
    else:
        items = raw.replace(IMAGE_PATH_SEPARATOR, ",").split(",")
    paths = [str(item).strip().strip('"') for item in items]
    return IMAGE_PATH_SEPARATOR.join(p for p in paths if p)


def normalize_rooms(df: pd.DataFrame) -> pd.DataFrame:
    """Map a raw room export onto ``CANONICAL_COLUMNS``."""

    def _first_present(columns: List[str]) -> str | None:
        for col in columns:
            if col in df.columns:
                return col
        return None

    canonical = pd.DataFrame(index=df.index)
    for column in CANONICAL_COLUMNS:
        source = _first_present(_ALIASES.get(column, [column]))
        canonical[column] = df[source] if source else None

    if canonical["id"].isna().all():
        canonical["id"] = range(1, len(canonical) + 1)
    canonical["id"] = pd.to_numeric(canonical["id"], errors="coerce")
    canonical = canonical.dropna(subset=["id"])
    canonical["id"] = canonical["id"].astype(int)

    for column in NUMERIC_COLUMNS:
        canonical[column] = canonical[column].apply(_parse_amount)

    canonical["restaurant_name"] = canonical["restaurant_name"].fillna("").astype(str).str.strip()
    canonical["image_paths"] = canonical["image_paths"].apply(_normalize_image_paths)

    return canonical[CANONICAL_COLUMNS].reset_index(drop=True)


def run_ingestion(config: IngestionConfig = DEFAULT_INGESTION_CONFIG) -> Path:
    """
    Execute the room ingestion pipeline.

    Steps:
    - Read the raw room export.
    - Map raw fields into the canonical room schema.
    - Persist cleaned data as CSV for downstream use.
    """

    config.processed_data_dir.mkdir(parents=True, exist_ok=True)

    raw = pd.read_csv(config.raw_path)
    canonical = normalize_rooms(raw)

    output_path = config.processed_path
    canonical.to_csv(output_path, index=False)
    return output_path


if __name__ == "__main__":
    path = run_ingestion()
    print(f"Ingestion complete. Processed rooms saved to: {path}")
