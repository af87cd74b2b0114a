"""Custom exception hierarchy for canvascrop."""

from __future__ import annotations


class CanvasCropError(Exception):
    """Base class for all custom errors raised by canvascrop."""


class ConfigurationError(CanvasCropError):
    """Raised when session options are malformed or name an unknown marquee type."""


class ImageLoadError(CanvasCropError):
    """Raised when the image source cannot be reached or decoded."""

    def __init__(self, source: str, reason: str = "") -> None:
        self.source = source
        self.reason = reason
        message = f"Failed to load image from {source!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class PixelExportError(CanvasCropError):
    """Raised when the cropped pixels cannot be encoded."""


class CrossOriginExportError(PixelExportError):
    """Raised when the image origin forbids reading back its pixels."""

    def __init__(self, image_origin: str, session_origin: str) -> None:
        self.image_origin = image_origin
        self.session_origin = session_origin
        super().__init__(
            f"Image from origin {image_origin!r} is not readable from {session_origin!r}"
        )


__all__ = [
    "CanvasCropError",
    "ConfigurationError",
    "CrossOriginExportError",
    "ImageLoadError",
    "PixelExportError",
]
