"""Schema helpers for crop session options."""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Mapping

from jsonschema import Draft202012Validator

from ..config import DEFAULT_FILL, LOCAL_ORIGIN, MARQUEE_RECTANGLE
from ..errors import ConfigurationError

OPTIONS_SCHEMA: dict[str, Any] = {
    "$id": "canvascrop/options.schema.json",
    "type": "object",
    "properties": {
        # The marquee type is deliberately not an enum: an unknown value is
        # reported at session start and degrades to a no-op draw.
        "marqueeType": {"type": "string"},
        "constrainRatio": {"type": "boolean"},
        "imageSource": {"type": "string"},
        "rawDataOutput": {"type": "boolean"},
        "fill": {"type": "string", "minLength": 1},
        "origin": {"type": "string"},
    },
    "additionalProperties": False,
}

DEFAULT_OPTIONS: dict[str, Any] = {
    "marqueeType": MARQUEE_RECTANGLE,
    "constrainRatio": True,
    "imageSource": "",
    "rawDataOutput": False,
    "fill": DEFAULT_FILL,
    "origin": LOCAL_ORIGIN,
}

# Older option names, rewritten to their current spelling before validation.
LEGACY_ALIASES: dict[str, str] = {
    "constrain": "constrainRatio",
    "src": "imageSource",
    "enableRawDataOutput": "rawDataOutput",
}

_validator = Draft202012Validator(OPTIONS_SCHEMA)


def _apply_aliases(data: Mapping[str, Any]) -> dict[str, Any]:
    resolved: dict[str, Any] = {}
    for key, value in data.items():
        target = LEGACY_ALIASES.get(key, key)
        if target != key and target in data:
            # The current spelling wins when both are present.
            continue
        resolved[target] = value
    return resolved


def merge_with_defaults(data: Mapping[str, Any] | None) -> dict[str, Any]:
    """Return a validated copy of *data* layered over :data:`DEFAULT_OPTIONS`.

    Raises
    ------
    ConfigurationError
        If any supplied option has the wrong type or is not recognised.
    """

    supplied = _apply_aliases(data or {})
    errors = sorted(_validator.iter_errors(supplied), key=lambda err: list(err.path))
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.path) or "<options>"
        raise ConfigurationError(f"Invalid option {location}: {first.message}")
    merged = deepcopy(DEFAULT_OPTIONS)
    merged.update(supplied)
    return merged
