"""Marquee shapes drawn over the image.

Shapes are small immutable value objects.  The interaction controller builds a
fresh instance for every frame of a gesture instead of mutating the previous
one, so a shape can be handed to collaborators without defensive copies.
"""

from __future__ import annotations

import enum
import re
from typing import Union

from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import QColor, QPainter, QPainterPath

from .config import DEFAULT_FILL, ELLIPSE_KAPPA

_CSS_RGB = re.compile(
    r"^rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+)\s*)?\)$",
    re.IGNORECASE,
)


class MarqueeType(str, enum.Enum):
    """Tag identifying the shape variant used for the marquee."""

    RECTANGLE = "rectangle"
    ELLIPSE = "ellipse"


def parse_fill(token: str) -> QColor:
    """Return a :class:`QColor` for a CSS style colour *token*.

    ``rgb()``/``rgba()`` notations are parsed here because Qt only understands
    hex and SVG colour names.  Unparseable tokens yield an invalid colour.
    """

    match = _CSS_RGB.match(token.strip())
    if match is None:
        return QColor(token.strip())
    red, green, blue, alpha = match.groups()
    colour = QColor(
        max(0, min(255, int(float(red)))),
        max(0, min(255, int(float(green)))),
        max(0, min(255, int(float(blue)))),
    )
    if alpha is not None:
        colour.setAlphaF(max(0.0, min(1.0, float(alpha))))
    return colour


class Shape:
    """Normalised bounding box with a fill style.

    Construction folds negative extents into the origin, so ``(x, y)`` is always
    the top-left corner and ``w``/``h`` are never negative, whichever direction
    the gesture was dragged in.
    """

    kind: MarqueeType | None = None

    __slots__ = ("_x", "_y", "_w", "_h", "_fill")

    def __init__(self, x: float, y: float, w: float, h: float, fill: str | None = None) -> None:
        x, y, w, h = float(x), float(y), float(w), float(h)
        self._x = x + w if w < 0 else x
        self._y = y + h if h < 0 else y
        self._w = abs(w)
        self._h = abs(h)
        self._fill = fill or DEFAULT_FILL

    @property
    def x(self) -> float:
        return self._x

    @property
    def y(self) -> float:
        return self._y

    @property
    def w(self) -> float:
        return self._w

    @property
    def h(self) -> float:
        return self._h

    @property
    def fill(self) -> str:
        return self._fill

    @property
    def origin(self) -> QPointF:
        return QPointF(self._x, self._y)

    def bounding_rect(self) -> QRectF:
        return QRectF(self._x, self._y, self._w, self._h)

    def with_origin(self, x: float, y: float) -> "Shape":
        """Return a copy of this shape translated to ``(x, y)``."""
        return type(self)(x, y, self._w, self._h, self._fill)

    def with_bounds(self, x: float, y: float, w: float, h: float) -> "Shape":
        """Return a shape of the same variant and fill with new bounds."""
        return type(self)(x, y, w, h, self._fill)

    def draw(self, painter: QPainter) -> None:
        raise NotImplementedError(
            f'Method "draw" must be implemented on {type(self).__name__}.'
        )

    def contains(self, px: float, py: float) -> bool:
        raise NotImplementedError(
            f'Method "contains" must be implemented on {type(self).__name__}.'
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Shape):
            return NotImplemented
        return (
            type(self) is type(other)
            and (self._x, self._y, self._w, self._h, self._fill)
            == (other._x, other._y, other._w, other._h, other._fill)
        )

    def __hash__(self) -> int:
        return hash((type(self), self._x, self._y, self._w, self._h, self._fill))

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(x={self._x:g}, y={self._y:g}, "
            f"w={self._w:g}, h={self._h:g}, fill={self._fill!r})"
        )


class RectangleShape(Shape):
    """Axis-aligned rectangular marquee."""

    kind = MarqueeType.RECTANGLE

    __slots__ = ()

    def draw(self, painter: QPainter) -> None:
        painter.fillRect(self.bounding_rect(), parse_fill(self.fill))

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px <= self.x + self.w and self.y <= py <= self.y + self.h


class EllipseShape(Shape):
    """Elliptical marquee inscribed in the bounding box.

    The outline is approximated by four cubic Bezier segments whose control
    points sit ``kappa`` of the radius away from each axis end point.
    """

    kind = MarqueeType.ELLIPSE

    __slots__ = ("kappa", "ox", "oy", "xe", "ye", "xm", "ym", "xr", "yr")

    def __init__(self, x: float, y: float, w: float, h: float, fill: str | None = None) -> None:
        super().__init__(x, y, w, h, fill)
        self.kappa = ELLIPSE_KAPPA
        self.ox = (self.w / 2.0) * self.kappa  # control point offset horizontal
        self.oy = (self.h / 2.0) * self.kappa  # control point offset vertical
        self.xe = self.x + self.w
        self.ye = self.y + self.h
        self.xm = self.x + self.w / 2.0
        self.ym = self.y + self.h / 2.0
        self.xr = self.w / 2.0
        self.yr = self.h / 2.0

    @property
    def center(self) -> QPointF:
        return QPointF(self.xm, self.ym)

    def path(self) -> QPainterPath:
        """Return the closed Bezier outline of the ellipse."""
        x, y = self.x, self.y
        ox, oy = self.ox, self.oy
        xe, ye = self.xe, self.ye
        xm, ym = self.xm, self.ym

        path = QPainterPath(QPointF(x, ym))
        path.cubicTo(x, ym - oy, xm - ox, y, xm, y)
        path.cubicTo(xm + ox, y, xe, ym - oy, xe, ym)
        path.cubicTo(xe, ym + oy, xm + ox, ye, xm, ye)
        path.cubicTo(xm - ox, ye, x, ym + oy, x, ym)
        path.closeSubpath()
        return path

    def draw(self, painter: QPainter) -> None:
        painter.save()
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(parse_fill(self.fill))
        painter.drawPath(self.path())
        painter.restore()

    def contains(self, px: float, py: float) -> bool:
        # A flat ellipse has no interior.
        if self.xr <= 0.0 or self.yr <= 0.0:
            return False
        dx = (px - self.xm) / self.xr
        dy = (py - self.ym) / self.yr
        return dx * dx + dy * dy <= 1.0


MarqueeShape = Union[RectangleShape, EllipseShape]

SHAPE_TYPES: dict[MarqueeType, type[Shape]] = {
    MarqueeType.RECTANGLE: RectangleShape,
    MarqueeType.ELLIPSE: EllipseShape,
}


def resolve_marquee_type(value: str | MarqueeType) -> MarqueeType | None:
    """Return the :class:`MarqueeType` for *value*, or ``None`` if unknown."""
    try:
        return MarqueeType(value)
    except ValueError:
        return None


def create_shape(
    kind: str | MarqueeType,
    x: float,
    y: float,
    w: float,
    h: float,
    fill: str | None = None,
) -> Shape | None:
    """Build the shape variant tagged *kind*; unknown kinds produce ``None``."""

    marquee_type = resolve_marquee_type(kind)
    if marquee_type is None:
        return None
    return SHAPE_TYPES[marquee_type](x, y, w, h, fill)
