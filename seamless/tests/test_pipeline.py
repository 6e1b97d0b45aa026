from __future__ import annotations

import time
from unittest.mock import MagicMock

import pytest

from conftest import SF_LAT, SF_LNG, axis
from seamless.errors import RepositoryError
from seamless.recommendations.config import RankingConfig
from seamless.recommendations.data_store import RoomRepository
from seamless.recommendations.models import RankRequest
from seamless.recommendations.pipeline import lookup_restaurant, rank
from seamless.recommendations.semantic import SemanticRetriever


def _retriever(note_index, repository, encoder=None):
    return SemanticRetriever(note_index, repository, encoder=encoder or (lambda text: axis(2)))


def test_rank_splits_top_and_others(repository, note_index):
    request = RankRequest(
        areaLabel="San Francisco, CA",
        radiusMiles="5",
        headcount="12",
        lat=SF_LAT,
        lng=SF_LNG,
    )

    result = rank(request, repository=repository, retriever=_retriever(note_index, repository))

    assert [g.restaurant_name for g in result.top] == ["Harbor House", "Golden Gate Grill"]
    assert [g.restaurant_name for g in result.others] == ["Oakland Social"]
    assert result.total_rooms == 5
    assert result.total_restaurants == 3
    assert result.notes == []
    assert result.retrieval_degraded is False

    harbor = result.top[0]
    assert harbor.best_room.room.room_name == "Wine Cellar"
    assert harbor.rooms_preview == ["Wine Cellar", "Loft"]
    assert harbor.best_room.reasons[:3] == [
        "0.0 miles away",
        "Address match: San Francisco",
        "Seated cap 12 (exact fit)",
    ]


def test_question_returns_notes(repository, note_index):
    request = RankRequest(lat=SF_LAT, lng=SF_LNG, question="somewhere with a heated patio")

    result = rank(request, repository=repository, retriever=_retriever(note_index, repository))

    assert [n.room_id for n in result.notes] == [3, 1, 4]
    assert result.retrieval_degraded is False


def test_notes_restricted_to_candidates(repository, note_index):
    request = RankRequest(headcount="25", question="heated patio")
    result = rank(request, repository=repository, retriever=_retriever(note_index, repository))
    # Only rooms 2 and 4 seat 25; room 2 has no notes
    assert [n.room_id for n in result.notes] == [4]


def test_encoder_failure_degrades(repository, note_index):
    encoder = MagicMock(side_effect=RuntimeError("model unavailable"))
    request = RankRequest(headcount="12", question="patio")

    result = rank(request, repository=repository, retriever=_retriever(note_index, repository, encoder))

    assert result.retrieval_degraded is True
    assert result.notes == []
    assert result.top


def test_missing_index_degrades(repository):
    request = RankRequest(question="patio")
    retriever = SemanticRetriever(None, repository, encoder=lambda text: axis(0))

    result = rank(request, repository=repository, retriever=retriever)

    assert result.retrieval_degraded is True
    assert result.total_restaurants == 3


def test_slow_retrieval_times_out(repository, note_index):
    def slow_encoder(text):
        time.sleep(0.5)
        return axis(0)

    config = RankingConfig(retrieval_timeout=0.05)
    request = RankRequest(question="patio")

    result = rank(request, config, repository=repository, retriever=_retriever(note_index, repository, slow_encoder))

    assert result.retrieval_degraded is True
    assert result.notes == []
    assert result.total_rooms == 5


def test_slow_vector_search_times_out(repository):
    def slow_query(vector, k, restriction=None):
        time.sleep(0.5)
        return [(1, 0.0)]

    index = MagicMock()
    index.query.side_effect = slow_query
    retriever = SemanticRetriever(index, repository, encoder=lambda text: axis(0))

    config = RankingConfig(retrieval_timeout=0.05)
    result = rank(RankRequest(question="patio"), config, repository=repository, retriever=retriever)

    assert result.retrieval_degraded is True
    assert result.notes == []
    assert result.total_rooms == 5


def test_no_question_skips_embedding(repository, note_index):
    encoder = MagicMock()
    result = rank(RankRequest(), repository=repository, retriever=_retriever(note_index, repository, encoder))

    encoder.assert_not_called()
    assert result.retrieval_degraded is False
    assert len(result.top) == 3


def test_repository_failure_propagates(note_index):
    repository = MagicMock(spec=RoomRepository)
    repository.list_all.side_effect = RepositoryError("store offline")
    repository.list_by_structural_filter.return_value = []

    with pytest.raises(RepositoryError):
        rank(RankRequest(headcount="4"), repository=repository, retriever=_retriever(note_index, repository))


def test_lookup_restaurant(repository):
    match = lookup_restaurant("harbor", repository=repository)
    assert match is not None
    assert match.restaurant_name == "Harbor House"
    assert match.room_name == "Wine Cellar"
    assert lookup_restaurant("nobody", repository=repository) is None
