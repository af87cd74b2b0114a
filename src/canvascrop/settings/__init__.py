"""Session option handling."""

from .options import CropOptions
from .schema import DEFAULT_OPTIONS, LEGACY_ALIASES, OPTIONS_SCHEMA, merge_with_defaults

__all__ = [
    "CropOptions",
    "DEFAULT_OPTIONS",
    "LEGACY_ALIASES",
    "OPTIONS_SCHEMA",
    "merge_with_defaults",
]
