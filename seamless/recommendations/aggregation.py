from __future__ import annotations

from typing import Sequence

from .config import DEFAULT_RANKING_CONFIG, RankingConfig
from .models import RankingResult, RestaurantGroup, RestaurantKey, ScoredRoom, SearchInput
from .normalize import address_matches_city, city_initials, city_token
from .scoring import OUTSIDE_RADIUS_NOTE


def _strip_radius_note(item: ScoredRoom) -> ScoredRoom:
    reasons = [reason.replace(OUTSIDE_RADIUS_NOTE, "") for reason in item.reasons]
    return item.model_copy(update={"reasons": reasons})


def group_by_restaurant(scored_rooms: Sequence[ScoredRoom]) -> list[RestaurantGroup]:
    """Group rooms under their restaurant, best restaurants first.

    Rooms are visited in score order (ties keep input order) and rooms with a
    blank restaurant name are dropped. The first room seen at the top score
    is the group's best room.
    """
    ordered = sorted(scored_rooms, key=lambda item: item.score, reverse=True)

    best: dict[RestaurantKey, ScoredRoom] = {}
    rooms: dict[RestaurantKey, list[ScoredRoom]] = {}
    for item in ordered:
        name = (item.room.restaurant_name or "").strip()
        if not name:
            continue
        key = RestaurantKey(name)
        if key not in best:
            best[key] = item
            rooms[key] = [item]
            continue
        rooms[key].append(item)
        if item.score > best[key].score:
            best[key] = item

    groups = [
        RestaurantGroup(
            restaurant_name=key,
            best_room=best[key],
            all_rooms=rooms[key],
            rooms_preview=[r.room.room_name for r in rooms[key][:3] if r.room.room_name],
        )
        for key in best
    ]
    return sorted(groups, key=lambda group: group.best_room.score, reverse=True)


def is_eligible(group: RestaurantGroup, search: SearchInput) -> bool:
    """Whether a restaurant may appear among the top picks."""
    if search.radius_miles is not None:
        distance = group.best_room.distance_miles
        return distance is not None and distance <= search.radius_miles

    _, token = city_token(search.area_label)
    if token:
        return address_matches_city(group.best_room.room.address, token, city_initials(token))

    return True


def aggregate(
    scored_rooms: Sequence[ScoredRoom],
    search: SearchInput,
    config: RankingConfig = DEFAULT_RANKING_CONFIG,
) -> RankingResult:
    items = list(scored_rooms)
    if search.radius_miles is None:
        items = [_strip_radius_note(item) for item in items]

    restaurants = group_by_restaurant(items)

    eligible = [group for group in restaurants if is_eligible(group, search)]
    # Never leave the top picks empty while there are restaurants to show
    top = (eligible or restaurants)[: config.top_size]

    placed = {group.restaurant_name for group in top}
    others = [group for group in restaurants if group.restaurant_name not in placed]

    return RankingResult(
        top=top,
        others=others[: config.others_size],
        total_restaurants=len(restaurants),
        total_rooms=len(items),
    )
