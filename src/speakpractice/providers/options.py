"""Model-family gating for outbound request parameters.

Reasoning models reject sampling parameters, so ``temperature`` and
``top_p`` are left out of the request entirely for them. Every builder in
this module returns a plain dict that only contains keys the target model
accepts.
"""

from collections.abc import Sequence
from typing import Any

from speakpractice.logger import get_logger
from speakpractice.schemas.generation import GenerationOptions

logger = get_logger(__name__)


def is_reasoning_model(model: str, prefixes: Sequence[str]) -> bool:
    """Check whether a model belongs to a reasoning family.

    Args:
        model: Model identifier (e.g., "gpt-5-nano-2025-08-07").
        prefixes: Reasoning family name prefixes.

    Returns:
        True if the identifier starts with any prefix (case-insensitive).
    """
    normalized = model.strip().lower()
    return any(normalized.startswith(prefix.lower()) for prefix in prefixes)


def sampling_params(
    model: str,
    options: GenerationOptions,
    prefixes: Sequence[str],
    default_temperature: float | None = None,
) -> dict[str, Any]:
    """Build the sampling parameters accepted by a model.

    Caller values win over the configured default temperature. For a
    reasoning model nothing is returned; caller-supplied values that get
    dropped are logged.

    Args:
        model: Target model identifier.
        options: Caller options.
        prefixes: Reasoning family name prefixes.
        default_temperature: Configured temperature used when the caller
            supplied none.

    Returns:
        Dictionary with ``temperature`` and/or ``top_p``, possibly empty.
    """
    if is_reasoning_model(model, prefixes):
        dropped = [
            name
            for name, value in (("temperature", options.temperature), ("top_p", options.top_p))
            if value is not None
        ]
        if dropped:
            logger.warning(
                "Sampling parameters dropped for reasoning model: model=%s, params=%s",
                model,
                dropped,
            )
        return {}

    params: dict[str, Any] = {}
    temperature = (
        options.temperature if options.temperature is not None else default_temperature
    )
    if temperature is not None:
        params["temperature"] = temperature
    if options.top_p is not None:
        params["top_p"] = options.top_p
    return params


def storage_params(options: GenerationOptions, default_store: bool) -> dict[str, Any]:
    """Build the ``store`` and ``include`` parameters of a responses call.

    ``include`` is only present when the caller asked for at least one
    extra field.
    """
    params: dict[str, Any] = {
        "store": options.store if options.store is not None else default_store
    }
    if options.include:
        params["include"] = list(options.include)
    return params
