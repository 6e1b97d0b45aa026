from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from .chat.intake import (
    advance_conversation,
    changed_fields,
    conversation_status,
    edit_requirement,
    missing_required,
)
from .chat.models import (
    ChatRequest,
    ChatResponse,
    EditRequest,
    EditResponse,
)
from .errors import InvalidRequirements, RepositoryError
from .recommendations.models import (
    RankingResult,
    RankRequest,
    ResolveRequest,
    ResolveResponse,
)
from .recommendations.pipeline import lookup_restaurant, rank

logger = logging.getLogger(__name__)

MAX_HISTORY_CHARS = 20_000

app = FastAPI(title="Seamless Private Dining API", version="1.0.0")


@app.exception_handler(RepositoryError)
async def repository_error_handler(request: Request, exc: RepositoryError) -> JSONResponse:
    logger.error("Room store failure on %s", request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=503,
        content={"detail": "Venue data is unavailable right now, please try again."},
    )


@app.exception_handler(InvalidRequirements)
async def invalid_requirements_handler(request: Request, exc: InvalidRequirements) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# ── Intake endpoints ─────────────────────────────────────────────────────


@app.post("/intake/chat", response_model=ChatResponse)
def intake_chat(body: ChatRequest) -> ChatResponse:
    total_chars = sum(len(message.content) for message in body.messages)
    if total_chars > MAX_HISTORY_CHARS:
        raise HTTPException(status_code=413, detail="Payload too large")

    outcome = advance_conversation(
        body.messages,
        body.current,
        pending_budget_per_head=body.pending_budget_per_head,
    )

    return ChatResponse(
        assistant_message=outcome.assistant_message,
        requirements=outcome.requirements,
        is_complete=outcome.is_complete,
        missing=outcome.missing,
        status=outcome.status,
        changed_fields=outcome.changed_fields,
        pending_budget_per_head=outcome.pending_budget_per_head,
    )


@app.post("/intake/edit", response_model=EditResponse)
def intake_edit(body: EditRequest) -> EditResponse:
    updated, pending = edit_requirement(
        body.requirements,
        body.slot,
        body.value,
        per_head=body.per_head,
        pending_per_head=body.pending_budget_per_head,
    )
    missing = missing_required(updated)
    return EditResponse(
        requirements=updated,
        is_complete=not missing,
        missing=missing,
        status=conversation_status(updated),
        changed_fields=changed_fields(body.requirements, updated),
        pending_budget_per_head=pending,
    )


# ── Recommendation endpoints ─────────────────────────────────────────────


@app.post("/recommendations", response_model=RankingResult)
def recommendations(body: RankRequest) -> RankingResult:
    return rank(body)


@app.post("/rooms/resolve", response_model=ResolveResponse)
def resolve_room(body: ResolveRequest) -> ResolveResponse:
    match = lookup_restaurant(body.query)
    if match is None:
        return ResolveResponse(found=False)
    return ResolveResponse(
        found=True,
        name=match.restaurant_name or None,
        address=match.address,
        lat=match.lat,
        lng=match.lng,
    )
