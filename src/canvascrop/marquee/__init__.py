"""
Marquee interaction module.

This package provides the crop marquee state machine, implementing Strategy
and State patterns for the resize and reposition gestures.
"""

from .controller import MarqueeController
from .state import (
    IDLE,
    Idle,
    InteractionMode,
    InteractionState,
    Repositioning,
    Resizing,
)
from .utils import clamp_extent, constrain_square, cursor_for_hover

__all__ = [
    "IDLE",
    "Idle",
    "InteractionMode",
    "InteractionState",
    "MarqueeController",
    "Repositioning",
    "Resizing",
    "clamp_extent",
    "constrain_square",
    "cursor_for_hover",
]
