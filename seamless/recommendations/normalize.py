from __future__ import annotations

import re

_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_WHITESPACE_RE = re.compile(r"\s+")

AV_TOKENS: tuple[str, ...] = ("yes", "av", "projector", "mic")


def normalize_text(value: str | None) -> str:
    """Lowercase, turn punctuation into spaces and collapse whitespace."""
    if not value:
        return ""
    lowered = _NON_ALNUM_RE.sub(" ", value.lower())
    return _WHITESPACE_RE.sub(" ", lowered).strip()


def city_token(area_label: str | None) -> tuple[str, str]:
    """Return the raw city part of an area label and its normalised form.

    "San Francisco, CA" gives ("San Francisco", "san francisco").
    """
    raw = (area_label or "").split(",")[0].strip()
    return raw, normalize_text(raw)


def city_initials(token: str) -> str:
    """Initials of a multi-word city token ("san francisco" -> "sf")."""
    words = token.split()
    if len(words) < 2:
        return ""
    return "".join(word[0] for word in words)


def address_matches_city(address: str | None, token: str, initials: str = "") -> bool:
    if not address or not token:
        return False
    normalized = normalize_text(address)
    if token in normalized:
        return True
    return bool(initials) and initials in normalized.split()


def has_av_indicator(a_v: str | None) -> bool:
    lowered = (a_v or "").lower()
    return any(token in lowered for token in AV_TOKENS)
