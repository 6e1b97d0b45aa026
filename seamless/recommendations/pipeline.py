from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout

import numpy as np

from ..embeddings.index import RoomVectorIndex, get_vector_index
from ..errors import RetrievalUnavailable
from .aggregation import aggregate
from .candidates import filter_candidates
from .config import DEFAULT_RANKING_CONFIG, RankingConfig
from .data_store import RoomRepository, get_repository
from .models import RankingResult, RankRequest, RetrievedNote, RoomRecord, SearchInput
from .scoring import score_room
from .semantic import SemanticRetriever

logger = logging.getLogger(__name__)


def _load_index() -> RoomVectorIndex | None:
    try:
        return get_vector_index()
    except (OSError, ValueError, KeyError):
        logger.warning("Room note index could not be loaded", exc_info=True)
        return None


def _collect_notes(
    pool: ThreadPoolExecutor,
    retriever: SemanticRetriever,
    query_future: Future[np.ndarray | None] | None,
    candidate_ids: set[int],
    config: RankingConfig,
    deadline: float,
) -> tuple[list[RetrievedNote], bool]:
    """Finish note retrieval by ``deadline``. Returns the notes and whether retrieval degraded.

    The query embedding and the vector search share one time budget.
    """
    if query_future is None:
        return [], False

    try:
        vector = query_future.result(timeout=max(0.0, deadline - time.monotonic()))
        if vector is None:
            return [], False
        search_future = pool.submit(retriever.search, vector, candidate_ids, config.retrieval_k)
        return search_future.result(timeout=max(0.0, deadline - time.monotonic())), False
    except FutureTimeout:
        logger.warning("Note retrieval timed out after %.1fs, ranking without notes", config.retrieval_timeout)
    except RetrievalUnavailable:
        logger.warning("Note retrieval unavailable, ranking without notes", exc_info=True)
    return [], True


def rank(
    request: RankRequest,
    config: RankingConfig = DEFAULT_RANKING_CONFIG,
    repository: RoomRepository | None = None,
    retriever: SemanticRetriever | None = None,
) -> RankingResult:
    """Score every room against ``request`` and split restaurants into top and others.

    The candidate filter, the full room listing and the query embedding run
    concurrently; the vector search follows within the same retrieval
    timeout. Retrieval problems only drop the notes; repository errors
    propagate so no partial ranking is returned.
    """
    start_time = time.time()
    search = SearchInput.from_request(request)
    if repository is None:
        repository = get_repository()
    if retriever is None:
        retriever = SemanticRetriever(_load_index(), repository)

    pool = ThreadPoolExecutor(max_workers=3, thread_name_prefix="rank")
    try:
        rooms_future = pool.submit(repository.list_all, config.max_rooms)
        candidates_future = pool.submit(filter_candidates, search, repository, config.candidate_limit)
        query_future = pool.submit(retriever.embed_query, search.question) if search.question else None
        deadline = time.monotonic() + config.retrieval_timeout

        rooms: list[RoomRecord] = rooms_future.result()
        candidate_ids = candidates_future.result()
        notes, degraded = _collect_notes(pool, retriever, query_future, candidate_ids, config, deadline)
    finally:
        # Slow retrieval work is abandoned, not awaited
        pool.shutdown(wait=False, cancel_futures=True)

    scored = [score_room(room, search) for room in rooms]
    result = aggregate(scored, search, config)

    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    logger.info(
        "Ranked %d rooms across %d restaurants (%d candidates, %d notes, degraded=%s) in %.1f ms",
        result.total_rooms,
        result.total_restaurants,
        len(candidate_ids),
        len(notes),
        degraded,
        elapsed_ms,
    )

    return result.model_copy(update={"notes": notes, "retrieval_degraded": degraded})


def lookup_restaurant(query: str, repository: RoomRepository | None = None) -> RoomRecord | None:
    """Find the first room of a restaurant whose name contains ``query``."""
    if repository is None:
        repository = get_repository()
    return repository.resolve_restaurant(query)
