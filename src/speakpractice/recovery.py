"""Recovery of structured values from free-form model output.

Models asked for a JSON object often wrap it in a markdown fence, add
commentary, or return a plain list instead. Recovery runs in two tiers:
a strict JSON parse validated with pydantic, then a line-based fallback.
Only when both tiers fail is a RecoveryFailure raised.
"""

import json
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from speakpractice.exceptions import RecoveryFailure
from speakpractice.logger import get_logger
from speakpractice.schemas.generation import SUGGESTION_COUNT, SuggestionSet

logger = get_logger(__name__)

SAMPLE_LENGTH = 200

_OPENING_FENCE = re.compile(r"^```[A-Za-z0-9_+-]*\s*")
_CLOSING_FENCE = re.compile(r"\s*```$")


class _SuggestionsPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    suggestions: list[Any]


def strip_markdown_fence(text: str) -> str:
    """Remove a surrounding markdown code fence, if any.

    Args:
        text: Raw model output.

    Returns:
        Trimmed text without the leading ```` ```lang ```` and trailing
        ```` ``` ```` markers.
    """
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _OPENING_FENCE.sub("", cleaned, count=1)
        cleaned = _CLOSING_FENCE.sub("", cleaned, count=1)
    return cleaned


def _parse_strict(text: str, count: int) -> list[str]:
    payload = _SuggestionsPayload.model_validate(json.loads(strip_markdown_fence(text)))

    if len(payload.suggestions) < count:
        raise ValueError(f"Expected {count} suggestions, got {len(payload.suggestions)}")

    # Only the kept entries have to be strings.
    kept = payload.suggestions[:count]
    items = [s.strip() for s in kept if isinstance(s, str) and s.strip()]
    if len(items) < count:
        raise ValueError("Not enough valid suggestions after filtering")
    return items


def _parse_lines(text: str, count: int) -> list[str]:
    # Fence markers are dropped with JSON brackets so a broken fenced block
    # does not yield "```json" as a suggestion.
    lines = (line.strip() for line in text.split("\n"))
    return [
        line for line in lines if line and not line.startswith(("{", "[", "```"))
    ][:count]


def recover_suggestions(text: str) -> SuggestionSet:
    """Recover exactly three suggestions from model output.

    Args:
        text: Raw model output, expected to hold ``{"suggestions": [...]}``.

    Returns:
        Validated suggestion set.

    Raises:
        RecoveryFailure: If neither tier yields enough suggestions.
    """
    count = SUGGESTION_COUNT
    try:
        items = _parse_strict(text, count)
        logger.debug("Suggestions parsed from JSON: count=%d", len(items))
        return SuggestionSet(suggestions=items)
    except (json.JSONDecodeError, ValidationError, ValueError) as e:
        logger.warning("Failed to parse suggestions as JSON: %s", e)
        logger.debug("Unparseable suggestion output: %s", text[:SAMPLE_LENGTH])

    items = _parse_lines(text, count)
    if len(items) < count:
        sample = text[:SAMPLE_LENGTH]
        logger.error(
            "Suggestion recovery failed: recovered=%d, required=%d, sample=%r",
            len(items),
            count,
            sample,
        )
        raise RecoveryFailure(
            "Failed to parse response suggestions from LLM output", sample=sample
        )

    logger.warning("Used fallback parsing for suggestions")
    return SuggestionSet(suggestions=items)
