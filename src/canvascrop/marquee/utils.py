"""
Pure helpers for marquee interaction.

Nothing here touches Qt event handling; the functions only do arithmetic on
coordinates and map hover results onto cursor shapes.
"""

from __future__ import annotations

from PySide6.QtCore import Qt


def cursor_for_hover(inside_marquee: bool) -> Qt.CursorShape:
    """Return the cursor hinting what a press at the hover position will do."""
    if inside_marquee:
        return Qt.CursorShape.SizeAllCursor
    return Qt.CursorShape.CrossCursor


def clamp(value: float, lower: float, upper: float) -> float:
    """Saturate *value* to ``[lower, upper]``; *upper* wins if the range is empty."""
    return min(max(value, lower), upper)


def clamp_extent(delta: float, low_limit: float, high_limit: float) -> float:
    """Clamp a signed drag extent measured from the anchor.

    *low_limit* is the (non-positive) distance to the near image edge and
    *high_limit* the (non-negative) distance to the far edge.  Extents pinned
    against an edge collapse to zero rather than to a minimum size.
    """
    if delta < 0:
        return max(delta, low_limit)
    return min(max(delta, 0.0), high_limit)


def constrain_square(w: float, h: float) -> tuple[float, float]:
    """Apply ``min(|w|, |h|)`` to both extents while keeping the drag direction."""
    side = min(abs(w), abs(h))
    return (-side if w < 0 else side, -side if h < 0 else side)
