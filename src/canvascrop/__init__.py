"""Interactive rectangle and ellipse cropping over a scaled image."""

from .errors import (
    CanvasCropError,
    ConfigurationError,
    CrossOriginExportError,
    ImageLoadError,
    PixelExportError,
)
from .geometry import (
    SurfaceDimensions,
    scaled_dimensions,
    scaling_factor,
    to_image_space,
    to_surface_space,
)
from .marquee import MarqueeController
from .session import CropData, CropRectangle, CropSession, PointerEvent, SurfaceChrome
from .settings import CropOptions
from .shapes import EllipseShape, MarqueeType, RectangleShape, Shape, create_shape

__all__ = [
    "CanvasCropError",
    "ConfigurationError",
    "CropData",
    "CropOptions",
    "CropRectangle",
    "CropSession",
    "CrossOriginExportError",
    "EllipseShape",
    "ImageLoadError",
    "MarqueeController",
    "MarqueeType",
    "PixelExportError",
    "PointerEvent",
    "RectangleShape",
    "Shape",
    "SurfaceChrome",
    "SurfaceDimensions",
    "create_shape",
    "scaled_dimensions",
    "scaling_factor",
    "to_image_space",
    "to_surface_space",
]
