from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable

import pandas as pd

from ..data_ingestion.ingest import CANONICAL_COLUMNS, IMAGE_PATH_SEPARATOR
from ..errors import RepositoryError
from .config import DEFAULT_RANKING_CONFIG
from .models import RoomRecord, StructuralPredicates
from .normalize import has_av_indicator, normalize_text

logger = logging.getLogger(__name__)

_INT_COLUMNS = ("seated_capacity", "standing_capacity")
_FLOAT_COLUMNS = ("lat", "lng", "min_spend_estimate")


def _prepare(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    for column in CANONICAL_COLUMNS:
        if column not in df.columns:
            df[column] = None
    for column in _INT_COLUMNS + _FLOAT_COLUMNS:
        df[column] = pd.to_numeric(df[column], errors="coerce")

    # Pre-normalise the columns the structural filter matches against
    df["address_norm"] = df["address"].fillna("").astype(str).apply(normalize_text)
    for column in ("privacy_level", "noise_level", "event_type", "a_v"):
        df[f"{column}_lower"] = df[column].fillna("").astype(str).str.lower()

    return df


def _value(row: pd.Series, column: str) -> Any:
    value = row.get(column)
    if value is None or (not isinstance(value, (list, tuple)) and pd.isna(value)):
        return None
    return value


def _row_to_record(row: pd.Series) -> RoomRecord:
    data: dict[str, Any] = {}
    for column in CANONICAL_COLUMNS:
        value = _value(row, column)
        if value is None:
            continue
        if column in _INT_COLUMNS:
            value = int(value)
        elif column in _FLOAT_COLUMNS:
            value = float(value)
        elif column == "image_paths":
            if isinstance(value, str):
                value = [p for p in value.split(IMAGE_PATH_SEPARATOR) if p]
            else:
                value = list(value)
        elif column == "id":
            value = int(value)
        else:
            value = str(value)
        data[column] = value
    return RoomRecord(**data)


class RoomRepository:
    """Read-only access to the room table held in a DataFrame."""

    def __init__(self, df: pd.DataFrame) -> None:
        self._df = _prepare(df)

    @classmethod
    def from_records(cls, records: Iterable[dict[str, Any]]) -> RoomRepository:
        return cls(pd.DataFrame(list(records)))

    def __len__(self) -> int:
        return len(self._df)

    def list_all(self, limit: int = DEFAULT_RANKING_CONFIG.max_rooms) -> list[RoomRecord]:
        try:
            return [_row_to_record(row) for _, row in self._df.head(limit).iterrows()]
        except (KeyError, TypeError, ValueError) as exc:
            raise RepositoryError("Failed to list rooms") from exc

    def list_by_structural_filter(
        self,
        predicates: StructuralPredicates,
        limit: int = DEFAULT_RANKING_CONFIG.candidate_limit,
    ) -> list[int]:
        """Return ids of rooms passing every set predicate, in table order."""
        df = self._df
        try:
            mask = pd.Series(True, index=df.index)

            if predicates.city_token:
                mask &= df["address_norm"].str.contains(predicates.city_token, regex=False)
            if predicates.min_capacity is not None:
                mask &= df["seated_capacity"].ge(predicates.min_capacity).fillna(False)
            if predicates.max_spend is not None:
                mask &= df["min_spend_estimate"].le(predicates.max_spend).fillna(False)

            for column, needle in (
                ("privacy_level", predicates.privacy_level),
                ("noise_level", predicates.noise_level),
                ("event_type", predicates.event_type),
            ):
                if needle:
                    mask &= df[f"{column}_lower"].str.contains(needle.lower(), regex=False)

            if predicates.needs_av:
                mask &= df["a_v_lower"].apply(has_av_indicator)

            return df.loc[mask, "id"].head(limit).astype(int).tolist()
        except (KeyError, TypeError, ValueError) as exc:
            raise RepositoryError("Structural room filter failed") from exc

    def fetch_by_ids(self, ids: Iterable[int]) -> list[RoomRecord]:
        """Return the rooms for ``ids`` in the order requested; unknown ids are skipped."""
        wanted = list(ids)
        try:
            by_id = {
                int(row["id"]): row
                for _, row in self._df[self._df["id"].isin(wanted)].iterrows()
            }
            return [_row_to_record(by_id[i]) for i in wanted if i in by_id]
        except (KeyError, TypeError, ValueError) as exc:
            raise RepositoryError("Failed to fetch rooms by id") from exc

    def resolve_restaurant(self, query: str) -> RoomRecord | None:
        """First room whose restaurant name contains ``query`` (case-insensitive)."""
        needle = query.strip().lower()
        if not needle:
            return None
        names = self._df["restaurant_name"].fillna("").astype(str).str.lower()
        matches = self._df[names.str.contains(needle, regex=False)]
        if matches.empty:
            return None
        return _row_to_record(matches.iloc[0])


_repository: RoomRepository | None = None


def load_repository(path: Path) -> RoomRepository:
    try:
        df = pd.read_csv(path)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise RepositoryError(f"Could not load rooms from {path}") from exc
    logger.info("Loaded %d rooms from %s", len(df), path)
    return RoomRepository(df)


def get_repository() -> RoomRepository:
    """Return the process-wide room repository, loading it on first call."""
    global _repository
    if _repository is None:
        _repository = load_repository(DEFAULT_RANKING_CONFIG.rooms_path)
    return _repository
