from __future__ import annotations

import json
import logging
from typing import Any, Sequence

from groq import Groq

from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an intake concierge for private dining events.\n"
    "Your job is to extract structured requirements from the conversation.\n"
    "Ask at most ONE focused follow-up question only if critical info is missing.\n"
    "Do NOT ask about cake fees or corkage fees unless the user explicitly brings them up.\n"
    "If vibe is missing, ask about it as a secondary, optional preference "
    "(but do not block completion on it).\n"
    "If enough info is available, confirm briefly and say you are ready to recommend venues.\n"
    "Return a single JSON object with keys: assistantMessage, requirements, isComplete, missing.\n"
    "Requirements must only include these keys:\n"
    "areaLabel, radiusMiles, headcount, budgetTotal, needsAV, eventType, dateNeeded, "
    "timeNeeded, privacyLevel, noiseLevel, vibe, restaurantQuery, maxCakeFee, maxCorkageFee.\n"
    "Use strings for all text/number fields and boolean for needsAV.\n"
    "Missing should be an array of required field names."
)


def _build_messages(
    history: Sequence[dict[str, str]],
    current: dict[str, Any],
) -> list[dict[str, str]]:
    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "system", "content": f"Current requirements: {json.dumps(current)}"},
    ]
    for turn in history:
        messages.append({"role": turn["role"], "content": turn["content"]})
    return messages


def request_extraction(
    history: Sequence[dict[str, str]],
    current: dict[str, Any],
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> str | None:
    """
    Ask the Groq LLM for a structured reading of the conversation.

    Returns the raw JSON text of the reply, unvalidated.
    Returns ``None`` when the LLM is disabled, unconfigured or the call fails.
    """
    if not config.enabled or not config.api_key:
        return None

    try:
        client = Groq(api_key=config.api_key, timeout=config.timeout)
        response = client.chat.completions.create(
            model=config.model,
            messages=_build_messages(history, current),
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            response_format={"type": "json_object"},
        )
        return response.choices[0].message.content or ""

    except Exception:
        logger.warning("Groq extraction call failed, falling back to clarification", exc_info=True)
        return None
