from __future__ import annotations

from .config import DEFAULT_RANKING_CONFIG
from .data_store import RoomRepository
from .models import SearchInput, StructuralPredicates
from .normalize import city_token


def build_predicates(search: SearchInput) -> StructuralPredicates:
    """Translate requirements into store-side predicates; unset slots add none."""
    _, token = city_token(search.area_label)
    return StructuralPredicates(
        city_token=token or None,
        min_capacity=search.headcount,
        max_spend=search.budget_total,
        privacy_level=search.privacy_level,
        noise_level=search.noise_level,
        event_type=search.event_type,
        needs_av=search.needs_av,
    )


def filter_candidates(
    search: SearchInput,
    repository: RoomRepository,
    limit: int = DEFAULT_RANKING_CONFIG.candidate_limit,
) -> set[int]:
    """Ids of rooms that pass every structural predicate.

    An empty set is a valid answer; it widens note retrieval to all rooms.
    """
    return set(repository.list_by_structural_filter(build_predicates(search), limit=limit))
