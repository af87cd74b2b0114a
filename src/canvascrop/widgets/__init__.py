"""Qt widgets hosting crop sessions."""

from .crop_canvas import CropCanvas

__all__ = ["CropCanvas"]
