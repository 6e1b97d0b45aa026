"""
Deterministic room scoring.

Each rule adds to the score and appends a reason only when it fires. Rules
are independent and additive; the reason order follows the rule order below
(distance, address, capacity, privacy, noise, vibe, A/V, budget).

Scores are unbounded and only meaningful relative to each other.
"""
from __future__ import annotations

import math

from ..chat.models import format_number
from .models import RoomRecord, ScoredRoom, SearchInput
from .normalize import city_token, has_av_indicator, normalize_text

EARTH_RADIUS_MILES = 3958.8

OUTSIDE_RADIUS_NOTE = " (outside radius)"

PRIVACY_BONUS = 6
NOISE_BONUS = 5
VIBE_BONUS = 6
AV_BONUS = 15
AV_PENALTY = 10


def distance_miles(a_lat: float, a_lng: float, b_lat: float, b_lng: float) -> float:
    """Great-circle distance between two points (haversine)."""
    d_lat = math.radians(b_lat - a_lat)
    d_lng = math.radians(b_lng - a_lng)
    lat1 = math.radians(a_lat)
    lat2 = math.radians(b_lat)

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    return 2 * EARTH_RADIUS_MILES * math.asin(math.sqrt(h))


def _contains(haystack: str | None, needle: str | None) -> bool:
    if not needle or not haystack:
        return False
    return needle.lower() in haystack.lower()


def score_room(room: RoomRecord, search: SearchInput) -> ScoredRoom:
    priority = 0.0
    secondary = 0.0
    reasons: list[str] = []
    distance: float | None = None
    within_radius: bool | None = None

    # Distance
    if None not in (search.lat, search.lng, room.lat, room.lng):
        distance = distance_miles(search.lat, search.lng, room.lat, room.lng)
        if search.radius_miles is not None:
            within_radius = distance <= search.radius_miles
            if within_radius:
                priority += max(0.0, 60 - distance * 5)
                reasons.append(f"{distance:.1f} miles away")
            else:
                priority -= 80
                reasons.append(f"{distance:.1f} miles away{OUTSIDE_RADIUS_NOTE}")
        else:
            # Without a radius, distance only nudges the score
            within_radius = True
            priority += max(0.0, 30 - distance * 2)
            reasons.append(f"{distance:.1f} miles away")

    # Area label
    raw_city, token = city_token(search.area_label)
    if token and room.address:
        if token in normalize_text(room.address):
            priority += 30
            reasons.append(f"Address match: {raw_city}")
        else:
            priority -= 20

    # Capacity
    if search.headcount is not None and room.seated_capacity is not None:
        surplus = room.seated_capacity - search.headcount
        if surplus >= 0:
            priority += 40 + max(0.0, 40 - surplus * 3)
            if surplus == 0:
                reasons.append(f"Seated cap {room.seated_capacity} (exact fit)")
            else:
                reasons.append(f"Seated cap {room.seated_capacity}")
        else:
            priority -= 90 + abs(surplus) * 4
            reasons.append(f"Too small for {format_number(search.headcount)}")

    # Privacy / noise / vibe
    if _contains(room.privacy_level, search.privacy_level):
        secondary += PRIVACY_BONUS
        reasons.append(f"Privacy: {room.privacy_level}")
    if _contains(room.noise_level, search.noise_level):
        secondary += NOISE_BONUS
        reasons.append(f"Noise: {room.noise_level}")
    vibe_hay = f"{room.primary_vibe or ''} {room.vibe_tags or ''}"
    if _contains(vibe_hay, search.vibe):
        secondary += VIBE_BONUS
        reasons.append(f"Vibe match: {search.vibe}")

    # A/V
    if search.needs_av:
        if has_av_indicator(room.a_v):
            secondary += AV_BONUS
            reasons.append("A/V available")
        else:
            secondary -= AV_PENALTY
            reasons.append("A/V unknown")

    # Budget
    if room.min_spend_estimate is not None:
        spend = format_number(room.min_spend_estimate)
        if search.budget_total is None:
            reasons.append(f"Min spend ~${spend}")
        elif room.min_spend_estimate <= search.budget_total:
            priority += 35
            reasons.append(f"Min spend ~${spend}")
        else:
            priority -= 40
            reasons.append("Min spend may exceed budget")

    return ScoredRoom(
        room=room,
        score=priority + secondary,
        priority_score=priority,
        secondary_score=secondary,
        reasons=reasons,
        distance_miles=distance,
        within_radius=within_radius,
    )
