"""
Resize strategy: draw a marquee out from a fixed anchor corner.
"""

from __future__ import annotations

from PySide6.QtCore import QPointF

from ...geometry import SurfaceDimensions
from ...shapes import MarqueeType, Shape, create_shape
from ..state import Resizing
from ..utils import clamp_extent, constrain_square
from .abstract import InteractionStrategy


class ResizeStrategy(InteractionStrategy):
    """Strategy for sizing the marquee between the anchor and the pointer."""

    def __init__(
        self,
        *,
        state: Resizing,
        marquee_type: MarqueeType | str,
        fill: str,
        constrain_ratio: bool,
    ) -> None:
        """Initialize resize strategy.

        Parameters
        ----------
        state:
            Interaction state holding the fixed anchor corner.
        marquee_type:
            Shape variant to build on every frame.
        fill:
            Fill style passed to the shape.
        constrain_ratio:
            Force a 1:1 aspect ratio regardless of the modifier state.
        """
        self._state = state
        self._marquee_type = marquee_type
        self._fill = fill
        self._constrain_ratio = bool(constrain_ratio)

    @property
    def anchor(self) -> QPointF:
        return QPointF(self._state.anchor)

    def on_drag(
        self,
        point: QPointF,
        dims: SurfaceDimensions,
        shift_held: bool,
    ) -> Shape | None:
        """Handle resize drag movement in any of the four quadrants."""
        # The marquee cannot start outside the placed image.
        anchor = dims.clamp(self._state.anchor)
        x, y = anchor.x(), anchor.y()

        w = clamp_extent(point.x() - x, dims.x - x, dims.x2 - x)
        h = clamp_extent(point.y() - y, dims.y - y, dims.y2 - y)

        if self._constrain_ratio or shift_held:
            w, h = constrain_square(w, h)

        return create_shape(self._marquee_type, x, y, w, h, self._fill)

    def on_end(self) -> None:
        """Handle end of resize interaction."""
        # No special cleanup needed
