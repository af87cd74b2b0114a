"""
Interaction strategies for the marquee.

This package implements the Strategy pattern for the two gestures a marquee
supports (reposition vs resize), keeping their constraint logic apart.
"""

from .abstract import InteractionStrategy
from .reposition_strategy import RepositionStrategy
from .resize_strategy import ResizeStrategy

__all__ = [
    "InteractionStrategy",
    "RepositionStrategy",
    "ResizeStrategy",
]
