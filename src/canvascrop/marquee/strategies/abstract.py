"""
Abstract base class for marquee interaction strategies.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from PySide6.QtCore import QPointF

from ...geometry import SurfaceDimensions
from ...shapes import Shape


class InteractionStrategy(ABC):
    """Base class for marquee gestures (reposition, resize)."""

    @abstractmethod
    def on_drag(
        self,
        point: QPointF,
        dims: SurfaceDimensions,
        shift_held: bool,
    ) -> Shape | None:
        """Return the marquee for the pointer at *point*.

        Parameters
        ----------
        point:
            Pointer position in surface coordinates.
        dims:
            Current placement of the image on the surface.
        shift_held:
            Whether the aspect-ratio modifier is held.

        Returns
        -------
        Shape | None:
            The replacement marquee, or ``None`` when no shape can be built.
        """

    @abstractmethod
    def on_end(self) -> None:
        """Handle end of interaction (pointer release)."""
