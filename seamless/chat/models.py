from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

_TRUE_WORDS = {"true", "yes", "y", "1"}
_FALSE_WORDS = {"false", "no", "n", "0"}


def format_number(value: float) -> str:
    """Render a number the way a guest would type it: ``10`` not ``10.0``."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _coerce_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, str):
        trimmed = value.strip()
        return trimmed or None
    raise ValueError("expected a string, number or boolean")


def _coerce_flag(value: Any) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        normalized = value.strip().lower()
        if not normalized:
            return None
        if normalized in _TRUE_WORDS:
            return True
        if normalized in _FALSE_WORDS:
            return False
    raise ValueError("expected a boolean")


class Requirements(BaseModel):
    """Event requirements collected over a conversation.

    Every slot is optional. Blank strings are normalised to ``None`` on the
    way in so an unset slot and an empty answer are indistinguishable.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    area_label: str | None = Field(default=None, alias="areaLabel")
    radius_miles: str | None = Field(default=None, alias="radiusMiles")
    headcount: str | None = Field(default=None, alias="headcount")
    budget_total: str | None = Field(default=None, alias="budgetTotal")
    needs_av: bool | None = Field(default=None, alias="needsAV")
    event_type: str | None = Field(default=None, alias="eventType")
    date_needed: str | None = Field(default=None, alias="dateNeeded")
    time_needed: str | None = Field(default=None, alias="timeNeeded")
    privacy_level: str | None = Field(default=None, alias="privacyLevel")
    noise_level: str | None = Field(default=None, alias="noiseLevel")
    vibe: str | None = Field(default=None, alias="vibe")
    restaurant_query: str | None = Field(default=None, alias="restaurantQuery")
    max_cake_fee: str | None = Field(default=None, alias="maxCakeFee")
    max_corkage_fee: str | None = Field(default=None, alias="maxCorkageFee")

    @field_validator(
        "area_label",
        "radius_miles",
        "headcount",
        "budget_total",
        "event_type",
        "date_needed",
        "time_needed",
        "privacy_level",
        "noise_level",
        "vibe",
        "restaurant_query",
        "max_cake_fee",
        "max_corkage_fee",
        mode="before",
    )
    @classmethod
    def _text_slot(cls, value: Any) -> str | None:
        return _coerce_text(value)

    @field_validator("needs_av", mode="before")
    @classmethod
    def _flag_slot(cls, value: Any) -> bool | None:
        return _coerce_flag(value)


def wire_name(field_name: str) -> str:
    """Map a python attribute name to its camelCase slot name."""
    return Requirements.model_fields[field_name].alias or field_name


def attribute_name(slot: str) -> str:
    """Map a camelCase slot name (or attribute name) to the attribute name."""
    for name, info in Requirements.model_fields.items():
        if slot in (name, info.alias):
            return name
    raise KeyError(slot)


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(..., min_length=1, max_length=4000)


class ChatRequest(BaseModel):
    messages: list[ChatMessage] = Field(..., min_length=1, max_length=40)
    current: Requirements | None = None
    pending_budget_per_head: float | None = Field(default=None, ge=0)


class ConversationStatus(str, Enum):
    collecting = "collecting"
    ready = "ready"


class ChatResponse(BaseModel):
    assistant_message: str
    requirements: Requirements
    is_complete: bool
    missing: list[str] = Field(default_factory=list)
    status: ConversationStatus
    changed_fields: list[str] = Field(default_factory=list)
    pending_budget_per_head: float | None = None


class ExtractionResult(BaseModel):
    """Envelope the conversation extractor is asked to return."""

    model_config = ConfigDict(populate_by_name=True)

    assistant_message: str = Field(..., min_length=1, alias="assistantMessage")
    requirements: dict[str, Any] | None = None
    is_complete: bool | None = Field(default=None, alias="isComplete")
    missing: list[str] | None = None


class EditRequest(BaseModel):
    requirements: Requirements = Field(default_factory=Requirements)
    slot: str = Field(..., min_length=1)
    value: Any = None
    per_head: bool = False
    pending_budget_per_head: float | None = Field(default=None, ge=0)


class EditResponse(BaseModel):
    requirements: Requirements
    is_complete: bool
    missing: list[str] = Field(default_factory=list)
    status: ConversationStatus
    changed_fields: list[str] = Field(default_factory=list)
    pending_budget_per_head: float | None = None
