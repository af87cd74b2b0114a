"""
Crop session orchestrator.

Wires pointer events from a host toolkit to the marquee controller, redraws
the surface after every change and reports the selection in image pixels
through the event bus.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Union

from PySide6.QtCore import QPointF, Qt
from PySide6.QtGui import QImage, QPainter

from .errors import ConfigurationError, ImageLoadError, PixelExportError
from .errors.handler import ErrorHandler, ErrorSeverity
from .events import (
    CropDataReady,
    CropFinished,
    CropRepositioned,
    CropResized,
    EventBus,
    Subscription,
)
from .export import encode_data_url, ensure_readable, render_region
from .geometry import (
    SurfaceDimensions,
    scaled_dimensions,
    scaling_factor,
    to_image_space,
    to_surface_space,
)
from .marquee import InteractionMode, MarqueeController
from .marquee.utils import clamp
from .settings import CropOptions
from .shapes import Shape, resolve_marquee_type
from .tasks import ImageLoader, ThreadPoolImageLoader
from .utils.image_loader import LoadedImage

_LOGGER = logging.getLogger(__name__)

ImageInput = Union[QImage, LoadedImage, str, Path, None]


@dataclass(frozen=True)
class PointerEvent:
    """Pointer position in page (viewport) coordinates.

    ``shift`` carries the modifier state when the host knows it; ``None``
    leaves the last state reported through ``handle_modifiers`` untouched.
    """

    page_x: float
    page_y: float
    shift: Optional[bool] = None


@dataclass(frozen=True)
class SurfaceChrome:
    """Visual chrome between the page origin and the drawable area."""

    offset_left: float = 0.0
    offset_top: float = 0.0
    border_left: float = 0.0
    border_top: float = 0.0
    padding_left: float = 0.0
    padding_top: float = 0.0


@dataclass(frozen=True)
class CropRectangle:
    """Selected region in image pixels."""

    x: float
    y: float
    w: float
    h: float

    def as_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}


@dataclass(frozen=True)
class CropData:
    """Payload of the ``data`` notification."""

    x: int
    y: int
    w: int
    h: int
    image_width: int
    image_height: int
    data: Optional[str] = None
    error: Optional[Exception] = None

    def as_dict(self) -> dict[str, Any]:
        packed: dict[str, Any] = {
            "x": self.x,
            "y": self.y,
            "w": self.w,
            "h": self.h,
            "image": {"w": self.image_width, "h": self.image_height},
            "data": self.data,
        }
        if self.error is not None:
            packed["exception"] = str(self.error)
        return packed


class CropSession:
    """Interactive crop over a single image on a raster surface."""

    def __init__(
        self,
        *,
        event_bus: EventBus | None = None,
        error_handler: ErrorHandler | None = None,
        loader: ImageLoader | None = None,
        on_cursor_change: Callable[[Qt.CursorShape], None] | None = None,
        on_request_update: Callable[[], None] | None = None,
    ) -> None:
        """Initialize the crop session.

        Parameters
        ----------
        event_bus:
            Channel receiving ``reposition``/``resize``/``finish``/``data``
            notifications.  A private bus is created when omitted.
        error_handler:
            Sink for recoverable failures (image load, pixel export).
        loader:
            Resolves image references passed to :meth:`start`.  Defaults to a
            :class:`~canvascrop.tasks.ThreadPoolImageLoader`.
        on_cursor_change:
            Callback receiving the hover cursor hint.
        on_request_update:
            Callback invoked after the surface was redrawn.
        """
        self._events = event_bus or EventBus()
        self._errors = error_handler or ErrorHandler(_LOGGER, self._events)
        self._loader = loader
        self._on_cursor_change = on_cursor_change
        self._on_request_update = on_request_update

        self._options = CropOptions()
        self._controller = MarqueeController()
        self._surface: QImage | None = None
        self._chrome = SurfaceChrome()
        self._image: LoadedImage | None = None
        self._load_error: ImageLoadError | None = None
        self._load_generation = 0
        self._cursor = Qt.CursorShape.CrossCursor

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def events(self) -> EventBus:
        return self._events

    @property
    def options(self) -> CropOptions:
        return self._options

    @property
    def image(self) -> LoadedImage | None:
        return self._image

    @property
    def surface(self) -> QImage | None:
        return self._surface

    @property
    def shape(self) -> Shape | None:
        return self._controller.shape

    @property
    def mode(self) -> InteractionMode:
        return self._controller.mode

    @property
    def cursor(self) -> Qt.CursorShape:
        """Return the latest hover cursor hint."""
        return self._cursor

    @property
    def load_error(self) -> ImageLoadError | None:
        return self._load_error

    def subscribe(self, event_type: type, handler: Callable) -> Subscription:
        """Shortcut for ``session.events.subscribe``."""
        return self._events.subscribe(event_type, handler)

    def is_ready(self) -> bool:
        """Return True once an image is available and a surface is attached."""
        return (
            self._image is not None
            and self._surface is not None
            and not self._surface.isNull()
        )

    def start(
        self,
        surface: QImage,
        image: ImageInput = None,
        options: CropOptions | Mapping[str, Any] | None = None,
    ) -> None:
        """Begin a session drawing on *surface*.

        *image* may be decoded already (``QImage``/``LoadedImage``) or be a
        reference that is loaded asynchronously; when omitted the
        ``imageSource`` option is used.  The background is drawn once the image
        is available.

        Raises
        ------
        ConfigurationError
            If *options* contains unknown keys or values of the wrong type.
        """
        if isinstance(options, CropOptions):
            resolved = options
        else:
            resolved = CropOptions.from_mapping(options)
        self._options = resolved

        if resolve_marquee_type(resolved.marquee_type) is None:
            self._errors.handle(
                ConfigurationError(f"Unrecognised marquee type {resolved.marquee_type!r}"),
                ErrorSeverity.WARNING,
                {"marqueeType": resolved.marquee_type},
            )

        self._controller = MarqueeController(
            marquee_type=resolved.marquee_type,
            constrain_ratio=resolved.constrain_ratio,
            fill=resolved.fill,
        )
        self._surface = surface
        self._image = None
        self._load_error = None
        self._load_generation += 1

        if isinstance(image, LoadedImage):
            self._on_image_loaded(image, self._load_generation)
            return
        if isinstance(image, QImage):
            self._on_image_loaded(LoadedImage(image=image), self._load_generation)
            return

        source = str(image) if image is not None else resolved.image_source
        if not source:
            self._on_image_failed(ImageLoadError("", "no image source given"), self._load_generation)
            return

        generation = self._load_generation
        loader = self._loader or ThreadPoolImageLoader()
        self._loader = loader
        loader.load(
            source,
            lambda loaded: self._on_image_loaded(loaded, generation),
            lambda error: self._on_image_failed(error, generation),
        )

    def set_surface(self, surface: QImage) -> None:
        """Attach a new surface (for example after a resize) and redraw.

        The marquee keeps covering the same image pixels: it is mapped through
        image space from the old placement into the new one.
        """
        old_dims, old_factor = self.dimensions(), self.scale()
        self._surface = surface
        shape = self._controller.shape
        new_dims = self.dimensions()
        if shape is not None and old_dims is not None and new_dims is not None:
            self._controller.replace_shape(
                self._refit(shape, old_dims, old_factor, new_dims, self.scale())
            )
        self.redraw()

    def set_chrome(self, chrome: SurfaceChrome) -> None:
        """Update the surface offset, border and padding used for pointer mapping."""
        self._chrome = chrome

    def surface_point(self, event: PointerEvent) -> QPointF:
        """Translate a page position into surface coordinates."""
        chrome = self._chrome
        return QPointF(
            event.page_x - chrome.offset_left - chrome.padding_left - chrome.border_left,
            event.page_y - chrome.offset_top - chrome.padding_top - chrome.border_top,
        )

    def scale(self) -> float:
        """Return the current fit-to-surface scaling factor."""
        if not self.is_ready():
            return 1.0
        return scaling_factor(
            self._image.width, self._image.height, self._surface.width(), self._surface.height()
        )

    def dimensions(self) -> SurfaceDimensions | None:
        """Return the current placement of the image on the surface."""
        if not self.is_ready():
            return None
        return scaled_dimensions(
            self._image.width, self._image.height, self._surface.width(), self._surface.height()
        )

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------
    def handle_modifiers(self, shift: bool) -> None:
        """Record the Shift state reported by key events at window level."""
        self._controller.set_shift_held(shift)

    def handle_pointer_down(self, event: PointerEvent) -> None:
        """Start a resize or reposition gesture."""
        if not self.is_ready():
            return
        self._apply_modifiers(event)
        self._controller.begin(self.surface_point(event))

    def handle_pointer_move(self, event: PointerEvent) -> None:
        """Update the marquee while a gesture runs, else refresh the cursor hint."""
        if not self.is_ready():
            return
        self._apply_modifiers(event)
        point = self.surface_point(event)

        if not self._controller.is_active():
            self._set_cursor(self._controller.hover_cursor(point))
            return

        mode = self._controller.mode
        dims = self.dimensions()
        if self._controller.drag(point, dims):
            self.redraw()

        coordinates = self.crop_rectangle(floor=True)
        if mode is InteractionMode.REPOSITIONING:
            self._events.publish(CropRepositioned(coordinates=coordinates))
        else:
            self._events.publish(CropResized(coordinates=coordinates))

    def handle_pointer_up(self, event: PointerEvent | None = None) -> None:
        """Finish the gesture and report the final selection.

        Hosts deliver releases from anywhere in the window, not only over the
        surface, so a started gesture always returns to idle.
        """
        del event  # position of the release does not matter
        if not self._controller.end():
            return

        coordinates = self.crop_rectangle(floor=True)
        self._events.publish(CropFinished(coordinates=coordinates))
        if self._options.raw_data_output:
            self._events.publish(
                CropDataReady(coordinates=coordinates, raw_data=self.extract_pixels())
            )

    # ------------------------------------------------------------------
    # Crop results
    # ------------------------------------------------------------------
    def crop_rectangle(self, floor: bool = False) -> CropRectangle | None:
        """Return the selection in image pixels, or ``None`` without a marquee.

        With *floor* every field is truncated independently.
        """
        shape = self._controller.shape
        dims = self.dimensions()
        if shape is None or dims is None:
            return None
        factor = self.scale()
        origin = to_image_space(QPointF(shape.x, shape.y), dims, factor)
        x, y = origin.x(), origin.y()
        w = shape.w / factor
        h = shape.h / factor
        if floor:
            return CropRectangle(
                x=math.floor(x), y=math.floor(y), w=math.floor(w), h=math.floor(h)
            )
        return CropRectangle(x=x, y=y, w=w, h=h)

    def extract_pixels(self) -> CropData | None:
        """Export the selected pixels as a PNG data URL.

        Only available with ``raw_data_output``.  Export failures are reported
        through the error handler and yield ``data=None`` with ``error`` set;
        the rectangle fields are populated either way.
        """
        if not self._options.raw_data_output:
            _LOGGER.debug("Pixel export requested with raw data output disabled")
            return None
        coords = self.crop_rectangle(floor=True)
        if coords is None or self._image is None:
            return None

        x, y, w, h = int(coords.x), int(coords.y), int(coords.w), int(coords.h)
        data: str | None = None
        error: Exception | None = None
        try:
            ensure_readable(self._image, self._options.origin)
            data = encode_data_url(render_region(self._image.image, x, y, w, h))
        except PixelExportError as exc:
            error = exc
            self._errors.handle(
                exc, ErrorSeverity.WARNING, {"source": self._image.source, "rect": coords.as_dict()}
            )

        return CropData(
            x=x,
            y=y,
            w=w,
            h=h,
            image_width=self._image.width,
            image_height=self._image.height,
            data=data,
            error=error,
        )

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------
    def redraw(self) -> None:
        """Clear the surface and draw the background and the marquee."""
        surface = self._surface
        if surface is None or surface.isNull():
            return
        surface.fill(Qt.GlobalColor.transparent)
        painter = QPainter(surface)
        try:
            painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
            painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, True)
            dims = self.dimensions()
            if dims is not None:
                painter.drawImage(dims.to_rect(), self._image.image)
            shape = self._controller.shape
            if shape is not None:
                shape.draw(painter)
        finally:
            painter.end()
        if self._on_request_update is not None:
            self._on_request_update()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _apply_modifiers(self, event: PointerEvent) -> None:
        if event.shift is not None:
            self._controller.set_shift_held(event.shift)

    @staticmethod
    def _refit(
        shape: Shape,
        old_dims: SurfaceDimensions,
        old_factor: float,
        new_dims: SurfaceDimensions,
        new_factor: float,
    ) -> Shape:
        image_origin = to_image_space(QPointF(shape.x, shape.y), old_dims, old_factor)
        origin = to_surface_space(image_origin, new_dims, new_factor)
        ratio = new_factor / old_factor
        # Rounding must not push the marquee past the new placement.
        w = min(shape.w * ratio, new_dims.w)
        h = min(shape.h * ratio, new_dims.h)
        x = clamp(origin.x(), new_dims.x, new_dims.x2 - w)
        y = clamp(origin.y(), new_dims.y, new_dims.y2 - h)
        return shape.with_bounds(x, y, w, h)

    def _set_cursor(self, cursor: Qt.CursorShape) -> None:
        if cursor == self._cursor:
            return
        self._cursor = cursor
        if self._on_cursor_change is not None:
            self._on_cursor_change(cursor)

    def _on_image_loaded(self, loaded: LoadedImage, generation: int) -> None:
        if generation != self._load_generation:
            _LOGGER.debug("Discarding stale image load for %s", loaded.source)
            return
        if loaded.image.isNull() or loaded.width <= 0 or loaded.height <= 0:
            self._on_image_failed(ImageLoadError(loaded.source, "image is empty"), generation)
            return
        self._image = loaded
        self._load_error = None
        self.redraw()

    def _on_image_failed(self, error: ImageLoadError, generation: int) -> None:
        if generation != self._load_generation:
            return
        self._image = None
        self._load_error = error
        self._errors.handle(error, ErrorSeverity.ERROR, {"source": error.source})
