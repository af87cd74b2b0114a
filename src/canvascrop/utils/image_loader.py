"""Helpers for decoding the crop background with a Pillow fallback."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import logging

from PIL import Image, ImageOps
from PIL.ImageQt import ImageQt
from PySide6.QtCore import QUrl
from PySide6.QtGui import QImage, QImageReader

from ..config import LOCAL_ORIGIN
from ..errors import ImageLoadError

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedImage:
    """Decoded image together with where it came from.

    ``origin`` decides whether the pixels may be read back for export.  An empty
    origin marks an image handed over already decoded, which is always
    readable.
    """

    image: QImage
    source: str = ""
    origin: str = ""

    @property
    def width(self) -> int:
        return self.image.width()

    @property
    def height(self) -> int:
        return self.image.height()


def origin_of(source: str) -> str:
    """Return the ``scheme://host[:port]`` origin of an image reference."""

    url = QUrl(source)
    scheme = url.scheme().lower()
    # Bare paths have no scheme; Windows drive letters parse as one-letter schemes.
    if not scheme or scheme == "file" or len(scheme) == 1:
        return LOCAL_ORIGIN
    origin = f"{scheme}://{url.host().lower()}"
    if url.port() != -1:
        origin = f"{origin}:{url.port()}"
    return origin


def local_path(source: str) -> Optional[Path]:
    """Return the filesystem path named by *source*, or ``None`` for remote URLs."""

    url = QUrl(source)
    scheme = url.scheme().lower()
    if scheme == "file":
        return Path(url.toLocalFile())
    if not scheme or len(scheme) == 1:
        return Path(source)
    return None


def load_qimage(source: Path) -> Optional[QImage]:
    """Return a :class:`QImage` for *source*, or ``None`` if it cannot be decoded."""

    reader = QImageReader(str(source))
    # Qt keeps a process-wide image cache; a crop session holds its own copy.
    disable_cache = getattr(reader, "setCacheEnabled", None)
    if callable(disable_cache):
        disable_cache(False)
    reader.setAutoTransform(True)
    image = reader.read()
    if not image.isNull():
        return image
    _LOGGER.debug("QImageReader failed for %s: %s", source, reader.errorString())
    return _load_with_pillow(source)


def _load_with_pillow(source: Path) -> Optional[QImage]:
    try:
        with Image.open(source) as img:
            img = ImageOps.exif_transpose(img)
            qt_image = ImageQt(img.convert("RGBA"))
    except Exception:
        _LOGGER.exception("Pillow failed to load image from %s", source)
        return None
    # ``ImageQt`` shares its buffer with the Pillow image; detach it.
    return QImage(qt_image).copy()


def load_image(source: str | Path) -> LoadedImage:
    """Decode *source* into a :class:`LoadedImage`.

    Raises
    ------
    ImageLoadError
        If the reference is not a local file or the file cannot be decoded.
    """

    reference = str(source)
    if not reference:
        raise ImageLoadError(reference, "no image source given")
    path = local_path(reference)
    if path is None:
        raise ImageLoadError(reference, f"unsupported scheme {QUrl(reference).scheme()!r}")
    if not path.is_file():
        raise ImageLoadError(reference, "file not found")
    image = load_qimage(path)
    if image is None or image.isNull():
        raise ImageLoadError(reference, "image could not be decoded")
    _LOGGER.info("Loaded %s (%dx%d)", reference, image.width(), image.height())
    return LoadedImage(image=image, source=reference, origin=origin_of(reference))
