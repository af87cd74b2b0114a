"""Default configuration values for canvascrop."""

from __future__ import annotations

from typing import Final

# Marquee fill used when no explicit style is supplied.  The alpha channel keeps
# the underlying image visible while a selection is being drawn.
DEFAULT_FILL: Final[str] = "rgba(0, 255, 255, .3)"

# Control point distance for approximating a quarter ellipse with a single cubic
# Bezier segment: 4 * (sqrt(2) - 1) / 3.
ELLIPSE_KAPPA: Final[float] = 0.5522848

# ``MarqueeType`` values understood by the shape factory.
MARQUEE_RECTANGLE: Final[str] = "rectangle"
MARQUEE_ELLIPSE: Final[str] = "ellipse"

# Images decoded from the local filesystem share this origin.  Pixel export is
# only permitted when the image origin matches the session origin.
LOCAL_ORIGIN: Final[str] = "file://"

# ---------------------------------------------------------------------------
# Pixel export
# ---------------------------------------------------------------------------

EXPORT_FORMAT: Final[str] = "PNG"
EXPORT_MIME_TYPE: Final[str] = "image/png"
# Browsers serialise an empty canvas to this literal; zero-area crops match it.
EMPTY_DATA_URL: Final[str] = "data:,"

# Initial window size of the interactive ``view`` command.
VIEW_WINDOW_DEFAULT_SIZE: Final[tuple[int, int]] = (800, 600)
