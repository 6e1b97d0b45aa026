from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Sequence

from pydantic import ValidationError

from ..errors import ExtractionMalformed, InvalidRequirements
from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..llm.groq_client import request_extraction
from .models import (
    ChatMessage,
    ConversationStatus,
    ExtractionResult,
    Requirements,
    attribute_name,
    format_number,
    wire_name,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS: tuple[str, ...] = (
    "areaLabel",
    "headcount",
    "budgetTotal",
    "dateNeeded",
    "timeNeeded",
)

FALLBACK_MESSAGE = (
    "I had trouble extracting the details. Could you confirm the location, "
    "headcount, budget, date, and time?"
)

# ---------------------------------------------------------------------------
# Number parsing
# ---------------------------------------------------------------------------

_NUMBER_RE = re.compile(r"(\d+(?:\.\d+)?)")
_PER_PERSON_AMOUNT_RE = re.compile(
    r"(\d+(?:\.\d+)?)\s*(?:per\s*(?:person|head|guest)|pp)\b",
    re.IGNORECASE,
)
_PER_PERSON_RE = re.compile(r"\bper\s*(?:person|head|guest)\b|\d\s*pp\b|\bpp\b", re.IGNORECASE)


def parse_number(value: str | None) -> float | None:
    """Return the first number in ``value`` ("$1,200" gives 1200, "12 guests" gives 12)."""
    if not value:
        return None
    match = _NUMBER_RE.search(value.replace(",", ""))
    if not match:
        return None
    return float(match.group(1))


def mentions_per_person(text: str) -> bool:
    return bool(_PER_PERSON_RE.search(text or ""))


def extract_per_person_amount(text: str) -> float | None:
    match = _PER_PERSON_AMOUNT_RE.search((text or "").replace(",", ""))
    if not match:
        return None
    return float(match.group(1))


# ---------------------------------------------------------------------------
# Requirements operations
# ---------------------------------------------------------------------------


def parse_requirements(data: dict[str, Any] | None) -> Requirements:
    """Validate boundary input, raising ``InvalidRequirements`` on bad shapes."""
    try:
        return Requirements.model_validate(data or {})
    except ValidationError as exc:
        raise InvalidRequirements(str(exc)) from exc


def _is_unset(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def merge_requirements(current: Requirements, incoming: Requirements | None) -> Requirements:
    """Fold ``incoming`` into ``current`` without ever clearing a slot.

    Returns a new snapshot; ``current`` is left as it was.
    """
    if incoming is None:
        return current

    updates: dict[str, Any] = {}
    for name in Requirements.model_fields:
        value = getattr(incoming, name)
        if _is_unset(value):
            continue
        updates[name] = value
    return current.model_copy(update=updates)


def missing_required(
    requirements: Requirements,
    required: Sequence[str] = REQUIRED_FIELDS,
) -> list[str]:
    return [
        field
        for field in required
        if _is_unset(getattr(requirements, attribute_name(field)))
    ]


def conversation_status(
    requirements: Requirements,
    required: Sequence[str] = REQUIRED_FIELDS,
) -> ConversationStatus:
    if missing_required(requirements, required):
        return ConversationStatus.collecting
    return ConversationStatus.ready


def changed_fields(old: Requirements, new: Requirements) -> list[str]:
    """Slot names whose values differ between two snapshots, in schema order."""
    return [
        wire_name(name)
        for name in Requirements.model_fields
        if getattr(old, name) != getattr(new, name)
    ]


def _per_head_total(per_head: float, headcount: str | None) -> str | None:
    """Total budget at ``per_head`` per guest, or ``None`` while the headcount is unknown."""
    guests = parse_number(headcount)
    if guests is None:
        return None
    return format_number(round(per_head * guests))


def edit_requirement(
    requirements: Requirements,
    field: str,
    value: Any,
    per_head: bool = False,
    pending_per_head: float | None = None,
) -> tuple[Requirements, float | None]:
    """Apply an explicit user edit to one slot.

    Unlike a merge, a blank value clears the slot. A per-head budget edit is
    converted to a total when the headcount is known; otherwise the budget
    is left as it was and the per-head figure is returned as pending. A
    pending figure is converted as soon as an edit makes the headcount known.
    """
    try:
        name = attribute_name(field)
    except KeyError as exc:
        raise InvalidRequirements(f"Unknown requirement field: {field}") from exc

    coerced = getattr(parse_requirements({name: value}), name)

    if name == "budget_total":
        amount = parse_number(coerced) if per_head else None
        if amount is None:
            # An explicit total (or a cleared budget) replaces any pending figure
            return requirements.model_copy(update={name: coerced}), None
        pending_per_head = amount
        updated = requirements
    else:
        updated = requirements.model_copy(update={name: coerced})

    if pending_per_head is None:
        return updated, None

    total = _per_head_total(pending_per_head, updated.headcount)
    if total is None:
        return updated, pending_per_head
    return updated.model_copy(update={"budget_total": total}), None


def resolve_per_head_budget(
    current: Requirements,
    incoming: Requirements | None,
    message: str,
    pending_per_head: float | None = None,
) -> tuple[Requirements | None, float | None]:
    """Rewrite a per-head budget in an extractor guess as a total, before merging.

    Only a turn where the extractor reports a budget can start a per-head
    figure; the message decides whether that budget is per person. Turns
    without a budget only convert an already pending figure.

    Returns the guess to merge and the per-head figure still waiting for a
    headcount, if any.
    """
    incoming_budget = incoming.budget_total if incoming is not None else None

    if incoming_budget is not None:
        if not mentions_per_person(message):
            return incoming, None
        per_head = extract_per_person_amount(message)
        if per_head is None:
            per_head = parse_number(incoming_budget)
    else:
        per_head = pending_per_head

    if per_head is None:
        return incoming, None

    headcount = merge_requirements(current, incoming).headcount
    total = _per_head_total(per_head, headcount)
    guess = incoming if incoming is not None else Requirements()
    adjusted = guess.model_copy(update={"budget_total": total})
    return adjusted, (per_head if total is None else None)


# ---------------------------------------------------------------------------
# Conversation round-trip
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConversationOutcome:
    assistant_message: str
    requirements: Requirements
    is_complete: bool
    missing: list[str]
    status: ConversationStatus
    changed_fields: list[str]
    pending_budget_per_head: float | None = None


def parse_extraction(content: str | None) -> ExtractionResult:
    if not content:
        raise ExtractionMalformed("extractor returned no content")
    try:
        payload = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ExtractionMalformed("extractor returned invalid JSON") from exc
    if not isinstance(payload, dict):
        raise ExtractionMalformed("extractor returned a non-object payload")
    try:
        return ExtractionResult.model_validate(payload)
    except ValidationError as exc:
        raise ExtractionMalformed(str(exc)) from exc


def _requirements_guess(result: ExtractionResult) -> Requirements | None:
    """Validate the extractor's requirements, dropping keys we do not know."""
    if not result.requirements:
        return None

    known: dict[str, Any] = {}
    for key, value in result.requirements.items():
        try:
            known[attribute_name(key)] = value
        except KeyError:
            logger.debug("Ignoring unknown requirement key from extractor: %s", key)

    try:
        return Requirements.model_validate(known)
    except ValidationError:
        logger.warning("Extractor requirements failed validation, skipping merge", exc_info=True)
        return None


def _latest_user_message(history: Sequence[ChatMessage]) -> str:
    for message in reversed(history):
        if message.role == "user":
            return message.content
    return ""


def _outcome(
    message: str,
    previous: Requirements,
    requirements: Requirements,
    pending_per_head: float | None,
) -> ConversationOutcome:
    missing = missing_required(requirements)
    return ConversationOutcome(
        assistant_message=message,
        requirements=requirements,
        is_complete=not missing,
        missing=missing,
        status=conversation_status(requirements),
        changed_fields=changed_fields(previous, requirements),
        pending_budget_per_head=pending_per_head,
    )


def advance_conversation(
    history: Sequence[ChatMessage],
    current: Requirements | None = None,
    pending_budget_per_head: float | None = None,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> ConversationOutcome:
    """Run one extractor round-trip and fold its guess into ``current``.

    Never raises for extractor problems: a malformed or missing reply leaves
    the snapshot untouched and asks the guest to confirm the basics.
    """
    current = current or Requirements()

    content = request_extraction(
        [message.model_dump() for message in history],
        current.model_dump(by_alias=True, exclude_none=True),
        config=config,
    )

    try:
        result = parse_extraction(content)
    except ExtractionMalformed:
        logger.warning("Extraction malformed, keeping previous requirements", exc_info=True)
        return _outcome(FALLBACK_MESSAGE, current, current, pending_budget_per_head)

    guess, pending = resolve_per_head_budget(
        current,
        _requirements_guess(result),
        _latest_user_message(history),
        pending_budget_per_head,
    )
    merged = merge_requirements(current, guess)

    return _outcome(result.assistant_message, current, merged, pending)
