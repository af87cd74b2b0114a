"""Pixel export of the cropped region."""

from __future__ import annotations

import logging

from PySide6.QtCore import QBuffer, QByteArray, QIODevice, QRect
from PySide6.QtGui import QImage

from .config import EMPTY_DATA_URL, EXPORT_FORMAT, EXPORT_MIME_TYPE
from .errors import CrossOriginExportError, PixelExportError
from .utils.image_loader import LoadedImage

_LOGGER = logging.getLogger(__name__)


def ensure_readable(loaded: LoadedImage, session_origin: str) -> None:
    """Raise :class:`CrossOriginExportError` unless *loaded* may be read back.

    Images without an origin were decoded by the caller and are always
    readable; everything else must share the session origin.
    """

    if loaded.origin and loaded.origin != session_origin:
        raise CrossOriginExportError(loaded.origin, session_origin)


def render_region(image: QImage, x: int, y: int, w: int, h: int) -> QImage:
    """Return a ``w`` x ``h`` buffer holding the ``(x, y, w, h)`` region of *image*.

    Pixels are copied unchanged.  Parts of the region outside *image* stay
    transparent.
    """

    if w <= 0 or h <= 0:
        return QImage()
    if not image.hasAlphaChannel():
        # Out-of-image pixels are zero-filled; they need an alpha channel to
        # read as transparent.
        image = image.convertToFormat(QImage.Format.Format_ARGB32)
    return image.copy(QRect(x, y, w, h))


def encode_data_url(image: QImage) -> str:
    """Serialise *image* as a base64 PNG ``data:`` URL.

    Raises
    ------
    PixelExportError
        If Qt fails to encode the buffer.
    """

    if image.isNull() or image.width() == 0 or image.height() == 0:
        return EMPTY_DATA_URL
    payload = QByteArray()
    device = QBuffer(payload)
    device.open(QIODevice.OpenModeFlag.WriteOnly)
    try:
        if not image.save(device, EXPORT_FORMAT):
            raise PixelExportError(f"Failed to encode {image.width()}x{image.height()} region")
    finally:
        device.close()
    encoded = bytes(payload.toBase64()).decode("ascii")
    _LOGGER.debug("Encoded %d bytes of %s data", payload.size(), EXPORT_FORMAT)
    return f"data:{EXPORT_MIME_TYPE};base64,{encoded}"
