"""Tests for the error handler."""

import logging

from canvascrop.errors import ImageLoadError, PixelExportError
from canvascrop.errors.handler import ErrorHandler, ErrorOccurredEvent, ErrorSeverity
from canvascrop.events import EventBus


def _handler():
    bus = EventBus()
    published = []
    bus.subscribe(ErrorOccurredEvent, published.append)
    return ErrorHandler(logging.getLogger("canvascrop.test"), bus), published


def test_handle_logs_and_publishes(caplog):
    handler, published = _handler()
    error = ImageLoadError("photo.png", "file not found")

    with caplog.at_level(logging.WARNING, logger="canvascrop.test"):
        handler.handle(error, ErrorSeverity.WARNING, {"source": "photo.png"})

    assert "ImageLoadError" in caplog.text
    assert caplog.records[0].levelno == logging.WARNING
    assert caplog.records[0].context == {"source": "photo.png"}
    assert len(published) == 1
    assert published[0].error is error
    assert published[0].severity is ErrorSeverity.WARNING


def test_ui_callback_only_for_serious_errors():
    handler, _ = _handler()
    calls = []
    handler.register_ui_callback(lambda message, severity: calls.append((message, severity)))

    handler.handle(PixelExportError("tainted"), ErrorSeverity.WARNING)
    handler.handle(PixelExportError("broken"), ErrorSeverity.ERROR)

    assert calls == [("broken", ErrorSeverity.ERROR)]


def test_image_load_error_message():
    error = ImageLoadError("a.png", "file not found")
    assert error.source == "a.png"
    assert str(error) == "Failed to load image from 'a.png': file not found"
    assert str(ImageLoadError("b.png")) == "Failed to load image from 'b.png'"
