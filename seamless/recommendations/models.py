from __future__ import annotations

from dataclasses import dataclass
from typing import NewType

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..chat.intake import parse_number
from ..chat.models import Requirements

RestaurantKey = NewType("RestaurantKey", str)


class RoomRecord(BaseModel):
    """One bookable private-dining space, as stored in the room table."""

    model_config = ConfigDict(frozen=True)

    id: int
    restaurant_name: str = ""
    room_name: str | None = None
    restaurant_des: str | None = None
    room_desc: str | None = None
    address: str | None = None
    event_type: str | None = None
    lat: float | None = None
    lng: float | None = None
    seated_capacity: int | None = None
    standing_capacity: int | None = None
    privacy_level: str | None = None
    noise_level: str | None = None
    primary_vibe: str | None = None
    vibe_tags: str | None = None
    cuisine: str | None = None
    a_v: str | None = None
    min_spend_estimate: float | None = None
    menu_link: str | None = None
    contact_email: str | None = None
    room_photo_link: str | None = None
    image_paths: list[str] = Field(default_factory=list)
    cake_fee: str | None = None
    corkage_fee: str | None = None
    notes: str | None = None


class RankRequest(Requirements):
    """Requirements plus the resolved search point and an optional question."""

    lat: float | None = Field(default=None, ge=-90, le=90)
    lng: float | None = Field(default=None, ge=-180, le=180)
    question: str | None = Field(default=None, max_length=500)

    @field_validator("question", mode="before")
    @classmethod
    def _blank_question(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


@dataclass(frozen=True)
class SearchInput:
    """Numeric view of a rank request used by the filter and the scorer."""

    lat: float | None = None
    lng: float | None = None
    radius_miles: float | None = None
    area_label: str | None = None
    headcount: float | None = None
    budget_total: float | None = None
    needs_av: bool = False
    privacy_level: str | None = None
    noise_level: str | None = None
    vibe: str | None = None
    event_type: str | None = None
    question: str | None = None

    @classmethod
    def from_request(cls, request: RankRequest) -> SearchInput:
        return cls(
            lat=request.lat,
            lng=request.lng,
            radius_miles=parse_number(request.radius_miles),
            area_label=request.area_label,
            headcount=parse_number(request.headcount),
            budget_total=parse_number(request.budget_total),
            needs_av=bool(request.needs_av),
            privacy_level=request.privacy_level,
            noise_level=request.noise_level,
            vibe=request.vibe,
            event_type=request.event_type,
            question=request.question,
        )


@dataclass(frozen=True)
class StructuralPredicates:
    """Filters the room store can apply without embeddings. ``None`` means unset."""

    city_token: str | None = None
    min_capacity: float | None = None
    max_spend: float | None = None
    privacy_level: str | None = None
    noise_level: str | None = None
    event_type: str | None = None
    needs_av: bool = False


class RetrievedNote(BaseModel):
    room_id: int
    distance: float
    restaurant_name: str = ""
    room_name: str | None = None
    notes: str | None = None


class ScoredRoom(BaseModel):
    room: RoomRecord
    score: float
    priority_score: float = 0.0
    secondary_score: float = 0.0
    reasons: list[str] = Field(default_factory=list)
    distance_miles: float | None = None
    within_radius: bool | None = None


class RestaurantGroup(BaseModel):
    restaurant_name: str
    best_room: ScoredRoom
    all_rooms: list[ScoredRoom]
    rooms_preview: list[str] = Field(default_factory=list)


class RankingResult(BaseModel):
    top: list[RestaurantGroup] = Field(default_factory=list)
    others: list[RestaurantGroup] = Field(default_factory=list)
    total_restaurants: int = 0
    total_rooms: int = 0
    notes: list[RetrievedNote] = Field(default_factory=list)
    retrieval_degraded: bool = False


class ResolveRequest(BaseModel):
    query: str = Field(..., min_length=2, max_length=200)


class ResolveResponse(BaseModel):
    found: bool
    name: str | None = None
    address: str | None = None
    lat: float | None = None
    lng: float | None = None
