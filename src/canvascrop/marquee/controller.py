"""
Marquee interaction controller.

Owns the current marquee shape and the idle/resizing/repositioning state
machine, delegating the per-mode geometry to interaction strategies.
"""

from __future__ import annotations

import logging

from PySide6.QtCore import QPointF, Qt

from ..config import DEFAULT_FILL, MARQUEE_RECTANGLE
from ..geometry import SurfaceDimensions
from ..shapes import MarqueeType, Shape
from .state import IDLE, Idle, InteractionMode, InteractionState, Repositioning, Resizing
from .strategies import InteractionStrategy, RepositionStrategy, ResizeStrategy
from .utils import cursor_for_hover

_LOGGER = logging.getLogger(__name__)


class MarqueeController:
    """Turns pointer positions into a new marquee shape on every frame."""

    def __init__(
        self,
        *,
        marquee_type: MarqueeType | str = MARQUEE_RECTANGLE,
        constrain_ratio: bool = True,
        fill: str = DEFAULT_FILL,
    ) -> None:
        """Initialize the marquee controller.

        Parameters
        ----------
        marquee_type:
            Shape variant built while resizing.  Unknown values leave the
            controller unable to create a marquee.
        constrain_ratio:
            Force a 1:1 aspect ratio on every resize frame.
        fill:
            Fill style of the marquee.
        """
        self._marquee_type = marquee_type
        self._constrain_ratio = bool(constrain_ratio)
        self._fill = fill

        self._shape: Shape | None = None
        self._state: InteractionState = IDLE
        self._strategy: InteractionStrategy | None = None
        self._shift_held: bool = False

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def shape(self) -> Shape | None:
        """Return the current marquee, or ``None`` before the first drag."""
        return self._shape

    @property
    def state(self) -> InteractionState:
        return self._state

    @property
    def mode(self) -> InteractionMode:
        return self._state.mode

    @property
    def shift_held(self) -> bool:
        return self._shift_held

    def set_shift_held(self, held: bool) -> None:
        """Record the aspect-ratio modifier state."""
        self._shift_held = bool(held)

    def is_active(self) -> bool:
        """Return True while a gesture is in progress."""
        return not isinstance(self._state, Idle)

    def begin(self, point: QPointF) -> bool:
        """Start a gesture at *point*.

        Returns ``False`` when a gesture is already running; the new trigger is
        ignored until that gesture ends.
        """
        if self.is_active():
            _LOGGER.debug("Ignoring gesture start while %s", self.mode.value)
            return False

        shape = self._shape
        if shape is not None and shape.contains(point.x(), point.y()):
            state = Repositioning(offset=QPointF(point.x() - shape.x, point.y() - shape.y))
            self._state = state
            self._strategy = RepositionStrategy(shape=shape, state=state)
        else:
            state = Resizing(anchor=QPointF(point))
            self._state = state
            self._strategy = ResizeStrategy(
                state=state,
                marquee_type=self._marquee_type,
                fill=self._fill,
                constrain_ratio=self._constrain_ratio,
            )
        _LOGGER.debug("Gesture started: %s at (%s, %s)", self.mode.value, point.x(), point.y())
        return True

    def drag(self, point: QPointF, dims: SurfaceDimensions) -> bool:
        """Update the marquee for the pointer at *point*.

        Returns ``True`` when the marquee was replaced.  Idle moves never touch
        the shape.
        """
        if self._strategy is None:
            return False
        shape = self._strategy.on_drag(point, dims, self._shift_held)
        if shape is None:
            return False
        self._shape = shape
        return True

    def end(self) -> bool:
        """Finish the current gesture; return whether one was active."""
        if not self.is_active():
            return False
        if self._strategy is not None:
            self._strategy.on_end()
        _LOGGER.debug("Gesture finished: %s", self.mode.value)
        self._strategy = None
        self._state = IDLE
        return True

    def hover_cursor(self, point: QPointF) -> Qt.CursorShape:
        """Return the cursor affordance for an idle pointer at *point*."""
        shape = self._shape
        inside = shape is not None and shape.contains(point.x(), point.y())
        return cursor_for_hover(inside)

    def replace_shape(self, shape: Shape | None) -> None:
        """Swap in *shape*, for example after the placement was re-fitted.

        A running reposition continues from the new shape.
        """
        self._shape = shape
        if isinstance(self._state, Repositioning) and shape is not None:
            self._strategy = RepositionStrategy(shape=shape, state=self._state)

    def clear(self) -> None:
        """Drop the marquee and return to idle."""
        self._shape = None
        self._strategy = None
        self._state = IDLE
