"""Qt widget hosting a :class:`~canvascrop.session.CropSession`."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from PySide6.QtCore import QPoint, QRect, QSize, Qt, Signal
from PySide6.QtGui import (
    QColor,
    QImage,
    QKeyEvent,
    QMouseEvent,
    QPainter,
    QPaintEvent,
    QPen,
    QResizeEvent,
)
from PySide6.QtWidgets import QWidget

from ..errors import ImageLoadError
from ..errors.handler import ErrorOccurredEvent
from ..events import CropDataReady, CropFinished, CropRepositioned, CropResized, EventBus
from ..session import CropSession, ImageInput, PointerEvent, SurfaceChrome
from ..settings import CropOptions
from ..tasks import ImageLoader

_LOGGER = logging.getLogger(__name__)


class CropCanvas(QWidget):
    """Drawing surface that forwards mouse and key input to a crop session.

    The widget owns the raster surface the session paints into and blits it
    during ``paintEvent``.  Contents margins act as padding and the optional
    border is drawn around the surface; both are excluded from the surface
    coordinate space.
    """

    cropRepositioned = Signal(object)
    """Emitted with the floored :class:`CropRectangle` while moving the marquee."""

    cropResized = Signal(object)
    """Emitted with the floored :class:`CropRectangle` while resizing the marquee."""

    cropFinished = Signal(object)
    """Emitted once per gesture with the final rectangle (or ``None``)."""

    cropData = Signal(object)
    """Emitted with the :class:`CropData` payload when raw data output is on."""

    imageLoadFailed = Signal(str)
    """Emitted with a readable message when the background cannot be loaded."""

    def __init__(
        self,
        parent: QWidget | None = None,
        *,
        loader: ImageLoader | None = None,
        border_width: int = 0,
        border_color: QColor | None = None,
    ) -> None:
        super().__init__(parent)
        self._border_width = max(0, int(border_width))
        self._border_color = QColor(border_color or QColor("#8a8a8a"))
        self._events = EventBus()
        self._session = CropSession(
            event_bus=self._events,
            loader=loader,
            on_cursor_change=self.setCursor,
            on_request_update=self.update,
        )
        self._events.subscribe(CropRepositioned, lambda e: self.cropRepositioned.emit(e.coordinates))
        self._events.subscribe(CropResized, lambda e: self.cropResized.emit(e.coordinates))
        self._events.subscribe(CropFinished, lambda e: self.cropFinished.emit(e.coordinates))
        self._events.subscribe(CropDataReady, lambda e: self.cropData.emit(e.raw_data))
        self._events.subscribe(ErrorOccurredEvent, self._on_error)

        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setCursor(Qt.CursorShape.CrossCursor)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def session(self) -> CropSession:
        return self._session

    @property
    def events(self) -> EventBus:
        return self._events

    def start(
        self,
        image: ImageInput = None,
        options: CropOptions | Mapping[str, Any] | None = None,
    ) -> None:
        """Start cropping *image* (or the ``imageSource`` option)."""
        surface = self._create_surface()
        _LOGGER.debug("Starting crop session on a %dx%d surface", surface.width(), surface.height())
        self._session.start(surface, image, options)

    def surface_rect(self) -> QRect:
        """Return the widget-local rectangle covered by the drawing surface."""
        b = self._border_width
        return self.contentsRect().adjusted(b, b, -b, -b)

    def sizeHint(self) -> QSize:  # noqa: N802 - Qt API
        return QSize(640, 480)

    # ------------------------------------------------------------------
    # Qt event handlers
    # ------------------------------------------------------------------
    def resizeEvent(self, event: QResizeEvent) -> None:  # noqa: N802 - Qt API
        super().resizeEvent(event)
        if self._session.surface is not None:
            self._session.set_surface(self._create_surface())

    def paintEvent(self, event: QPaintEvent) -> None:  # noqa: N802 - Qt API
        del event
        painter = QPainter(self)
        try:
            rect = self.surface_rect()
            if self._border_width:
                pen = QPen(self._border_color)
                pen.setWidth(self._border_width)
                pen.setJoinStyle(Qt.PenJoinStyle.MiterJoin)
                painter.setPen(pen)
                half = self._border_width / 2.0
                painter.drawRect(
                    rect.toRectF().adjusted(-half, -half, half, half)
                )
            surface = self._session.surface
            if surface is not None and not surface.isNull():
                painter.drawImage(rect.topLeft(), surface)
        finally:
            painter.end()

    def mousePressEvent(self, event: QMouseEvent) -> None:  # noqa: N802 - Qt API
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return
        self._session.handle_pointer_down(self._pointer_event(event))
        event.accept()

    def mouseMoveEvent(self, event: QMouseEvent) -> None:  # noqa: N802 - Qt API
        self._session.handle_pointer_move(self._pointer_event(event))
        event.accept()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:  # noqa: N802 - Qt API
        # Qt grabs the mouse for the pressed widget, so releases outside the
        # surface still arrive here.
        if event.button() != Qt.MouseButton.LeftButton:
            super().mouseReleaseEvent(event)
            return
        self._session.handle_pointer_up(self._pointer_event(event))
        event.accept()

    def keyPressEvent(self, event: QKeyEvent) -> None:  # noqa: N802 - Qt API
        self._session.handle_modifiers(self._shift_from(event))
        super().keyPressEvent(event)

    def keyReleaseEvent(self, event: QKeyEvent) -> None:  # noqa: N802 - Qt API
        self._session.handle_modifiers(self._shift_from(event))
        super().keyReleaseEvent(event)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _create_surface(self) -> QImage:
        size = self.surface_rect().size()
        surface = QImage(
            max(1, size.width()),
            max(1, size.height()),
            QImage.Format.Format_ARGB32_Premultiplied,
        )
        surface.fill(Qt.GlobalColor.transparent)
        return surface

    def _pointer_event(self, event: QMouseEvent) -> PointerEvent:
        self._session.set_chrome(self._chrome())
        page = event.globalPosition()
        return PointerEvent(
            page_x=page.x(),
            page_y=page.y(),
            shift=bool(event.modifiers() & Qt.KeyboardModifier.ShiftModifier),
        )

    def _chrome(self) -> SurfaceChrome:
        offset = self.mapToGlobal(QPoint(0, 0))
        margins = self.contentsMargins()
        return SurfaceChrome(
            offset_left=offset.x(),
            offset_top=offset.y(),
            border_left=self._border_width,
            border_top=self._border_width,
            padding_left=margins.left(),
            padding_top=margins.top(),
        )

    @staticmethod
    def _shift_from(event: QKeyEvent) -> bool:
        return bool(event.modifiers() & Qt.KeyboardModifier.ShiftModifier)

    def _on_error(self, event: ErrorOccurredEvent) -> None:
        if isinstance(event.error, ImageLoadError):
            self.imageLoadFailed.emit(str(event.error))
