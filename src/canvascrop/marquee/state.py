"""Interaction state of the marquee controller.

Each mode is its own variant carrying only the data that mode needs, so a
controller can never be resizing and repositioning at once.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union

from PySide6.QtCore import QPointF


class InteractionMode(enum.Enum):
    IDLE = "idle"
    RESIZING = "resizing"
    REPOSITIONING = "repositioning"


@dataclass(frozen=True)
class Idle:
    mode = InteractionMode.IDLE


@dataclass(frozen=True)
class Resizing:
    """Drawing a new marquee; ``anchor`` is the corner that stays fixed."""

    anchor: QPointF

    mode = InteractionMode.RESIZING


@dataclass(frozen=True)
class Repositioning:
    """Translating the marquee; ``offset`` is pointer minus marquee origin."""

    offset: QPointF

    mode = InteractionMode.REPOSITIONING


InteractionState = Union[Idle, Resizing, Repositioning]

IDLE = Idle()
