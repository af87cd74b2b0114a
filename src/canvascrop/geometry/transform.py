"""Fit-to-surface placement of an image and the transforms around it.

Every function here is pure: the results depend only on the arguments, so the
placement can be recomputed on each redraw without caching.
"""

from __future__ import annotations

from dataclasses import dataclass

from PySide6.QtCore import QPointF, QRectF


@dataclass(frozen=True)
class SurfaceDimensions:
    """Centered, scaled placement of the image on the drawing surface."""

    x: float
    y: float
    x2: float
    y2: float
    w: float
    h: float

    def to_rect(self) -> QRectF:
        """Return the placement as a :class:`QRectF` for drawing."""
        return QRectF(self.x, self.y, self.w, self.h)

    def contains(self, point: QPointF) -> bool:
        """Return ``True`` when *point* lies inside the placement, edges included."""
        return self.x <= point.x() <= self.x2 and self.y <= point.y() <= self.y2

    def clamp(self, point: QPointF) -> QPointF:
        """Saturate *point* to the placement rectangle."""
        return QPointF(
            min(max(point.x(), self.x), self.x2),
            min(max(point.y(), self.y), self.y2),
        )


def scaling_factor(
    image_width: float,
    image_height: float,
    surface_width: float,
    surface_height: float,
) -> float:
    """Return the uniform shrink ratio fitting the image inside the surface.

    The ratio never exceeds ``1.0``: images smaller than the surface are drawn
    at their natural size and centered instead of being upscaled.
    """

    if image_width <= 0 or image_height <= 0:
        return 1.0
    x_scale = float(surface_width) / float(image_width)
    y_scale = float(surface_height) / float(image_height)
    return min(x_scale, y_scale, 1.0)


def scaled_dimensions(
    image_width: float,
    image_height: float,
    surface_width: float,
    surface_height: float,
) -> SurfaceDimensions:
    """Return the placement of the image centered on the surface."""

    factor = scaling_factor(image_width, image_height, surface_width, surface_height)
    w = float(image_width) * factor
    h = float(image_height) * factor
    x = (float(surface_width) - w) / 2.0
    y = (float(surface_height) - h) / 2.0
    return SurfaceDimensions(x=x, y=y, x2=x + w, y2=y + h, w=w, h=h)


def to_image_space(point: QPointF, dims: SurfaceDimensions, factor: float) -> QPointF:
    """Map a surface point into unscaled image pixels.

    Callers clamp *point* into *dims* beforehand; the result is then
    non-negative on both axes.
    """

    return QPointF((point.x() - dims.x) / factor, (point.y() - dims.y) / factor)


def to_surface_space(point: QPointF, dims: SurfaceDimensions, factor: float) -> QPointF:
    """Inverse of :func:`to_image_space`."""

    return QPointF(dims.x + point.x() * factor, dims.y + point.y() * factor)
