from __future__ import annotations

import math

import numpy as np
import pytest

from seamless.embeddings.index import RoomVectorIndex
from seamless.recommendations.data_store import RoomRepository

SF_LAT, SF_LNG = 37.7749, -122.4194
MILES_PER_DEGREE_LAT = 2 * math.pi * 3958.8 / 360


def north_of_sf(miles: float) -> tuple[float, float]:
    """A point ``miles`` due north of the San Francisco search point."""
    return SF_LAT + miles / MILES_PER_DEGREE_LAT, SF_LNG


SAMPLE_ROOMS = [
    {
        "id": 1,
        "restaurant_name": "Harbor House",
        "room_name": "Wine Cellar",
        "address": "12 Pier St, San Francisco, CA",
        "lat": SF_LAT,
        "lng": SF_LNG,
        "seated_capacity": 12,
        "privacy_level": "Fully private",
        "noise_level": "Quiet",
        "primary_vibe": "Elegant",
        "vibe_tags": "romantic, candlelit",
        "a_v": "Projector and mic",
        "min_spend_estimate": 1500,
        "event_type": "Birthday, corporate dinner",
        "notes": "Sommelier-led pairing available.   Street parking only.",
    },
    {
        "id": 2,
        "restaurant_name": "Harbor House",
        "room_name": "Loft",
        "address": "12 Pier St, San Francisco, CA",
        "lat": SF_LAT,
        "lng": SF_LNG,
        "seated_capacity": 40,
        "privacy_level": "Semi-private",
        "noise_level": "Lively",
        "a_v": "No",
        "min_spend_estimate": 4000,
        "event_type": "Cocktail reception",
        "notes": "",
    },
    {
        "id": 3,
        "restaurant_name": "Golden Gate Grill",
        "room_name": "Garden Room",
        "address": "800 Lombard St, SF, CA",
        "lat": 37.8024,
        "lng": -122.4058,
        "seated_capacity": 20,
        "privacy_level": "Semi-private",
        "noise_level": "Moderate",
        "primary_vibe": "Casual",
        "a_v": "Yes - TV screen",
        "min_spend_estimate": 2500,
        "event_type": "Rehearsal dinner",
        "notes": "Heated patio with string lights; dogs welcome.",
    },
    {
        "id": 4,
        "restaurant_name": "Oakland Social",
        "room_name": "Mezzanine",
        "address": "55 Broadway, Oakland, CA",
        "lat": 37.8044,
        "lng": -122.2712,
        "seated_capacity": 30,
        "min_spend_estimate": 2000,
        "notes": "Live jazz on Fridays.",
    },
    {
        "id": 5,
        "restaurant_name": "  ",
        "room_name": "Unnamed",
        "address": "1 Nowhere Rd",
        "seated_capacity": 10,
    },
]


@pytest.fixture
def repository() -> RoomRepository:
    return RoomRepository.from_records(SAMPLE_ROOMS)


@pytest.fixture
def note_index() -> RoomVectorIndex:
    """Rooms 1-4 on orthogonal axes so a query axis picks exactly one room."""
    return RoomVectorIndex(
        room_ids=[1, 2, 3, 4],
        vectors=np.eye(4, dtype=np.float32),
        text_hashes=["h1", "h2", "h3", "h4"],
    )


def axis(position: int) -> np.ndarray:
    vector = np.zeros(4, dtype=np.float32)
    vector[position] = 1.0
    return vector
