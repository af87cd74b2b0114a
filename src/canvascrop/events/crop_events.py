"""Lifecycle notifications published by :class:`~canvascrop.session.CropSession`."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from .bus import Event

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..session import CropData, CropRectangle


class CropEventName(str, enum.Enum):
    """Names under which crop notifications are reported to collaborators."""

    REPOSITION = "reposition"
    RESIZE = "resize"
    FINISH = "finish"
    DATA = "data"


@dataclass(kw_only=True)
class CropEvent(Event):
    """Common base carrying the floored crop rectangle in image pixels."""

    coordinates: Optional["CropRectangle"] = None

    name = CropEventName.FINISH


@dataclass(kw_only=True)
class CropRepositioned(CropEvent):
    """Published on every pointer move while the marquee is being translated."""

    name = CropEventName.REPOSITION


@dataclass(kw_only=True)
class CropResized(CropEvent):
    """Published on every pointer move while the marquee is being resized."""

    name = CropEventName.RESIZE


@dataclass(kw_only=True)
class CropFinished(CropEvent):
    """Published once when a gesture is released."""

    name = CropEventName.FINISH


@dataclass(kw_only=True)
class CropDataReady(CropEvent):
    """Published after :class:`CropFinished` when raw data output is enabled."""

    raw_data: Optional["CropData"] = None

    name = CropEventName.DATA


__all__ = [
    "CropDataReady",
    "CropEvent",
    "CropEventName",
    "CropFinished",
    "CropRepositioned",
    "CropResized",
]
