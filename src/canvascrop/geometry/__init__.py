"""Scale transform between surface and image space."""

from .transform import (
    SurfaceDimensions,
    scaled_dimensions,
    scaling_factor,
    to_image_space,
    to_surface_space,
)

__all__ = [
    "SurfaceDimensions",
    "scaled_dimensions",
    "scaling_factor",
    "to_image_space",
    "to_surface_space",
]
