"""
Reposition strategy: translate the marquee without resizing it.
"""

from __future__ import annotations

from PySide6.QtCore import QPointF

from ...geometry import SurfaceDimensions
from ...shapes import Shape
from ..state import Repositioning
from ..utils import clamp
from .abstract import InteractionStrategy


class RepositionStrategy(InteractionStrategy):
    """Strategy for dragging the whole marquee across the image."""

    def __init__(self, *, shape: Shape, state: Repositioning) -> None:
        """Initialize reposition strategy.

        Parameters
        ----------
        shape:
            Marquee as it was when the gesture started.
        state:
            Interaction state holding the pointer offset from the marquee
            origin.
        """
        self._shape = shape
        self._state = state

    def on_drag(
        self,
        point: QPointF,
        dims: SurfaceDimensions,
        shift_held: bool,
    ) -> Shape | None:
        """Move the marquee origin to follow the pointer inside the image."""
        del shift_held  # translation never changes the aspect ratio
        shape = self._shape
        offset = self._state.offset

        # A marquee larger than the placement is cut down to fit it first.
        w = min(shape.w, dims.w)
        h = min(shape.h, dims.h)
        x = clamp(point.x() - offset.x(), dims.x, dims.x2 - w)
        y = clamp(point.y() - offset.y(), dims.y, dims.y2 - h)

        if (w, h) != (shape.w, shape.h):
            self._shape = shape.with_bounds(x, y, w, h)
        else:
            self._shape = shape.with_origin(x, y)
        return self._shape

    def on_end(self) -> None:
        """Handle end of reposition interaction."""
        # No special cleanup needed
