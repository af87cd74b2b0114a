"""Tests for the crop session orchestrator."""

import base64

import pytest
from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QImage

from canvascrop.errors import (
    ConfigurationError,
    CrossOriginExportError,
    ImageLoadError,
)
from canvascrop.errors.handler import ErrorOccurredEvent, ErrorSeverity
from canvascrop.events import (
    CropDataReady,
    CropEventName,
    CropFinished,
    CropRepositioned,
    CropResized,
)
from canvascrop.marquee import InteractionMode
from canvascrop.session import CropRectangle, CropSession, PointerEvent, SurfaceChrome
from canvascrop.shapes import EllipseShape, RectangleShape
from canvascrop.tasks import SynchronousImageLoader
from canvascrop.utils.image_loader import LoadedImage

ALL_EVENTS = (CropRepositioned, CropResized, CropFinished, CropDataReady, ErrorOccurredEvent)


def _gesture(session, start, *moves):
    session.handle_pointer_down(PointerEvent(*start))
    for point in moves:
        session.handle_pointer_move(PointerEvent(*point))
    session.handle_pointer_up(PointerEvent(*(moves[-1] if moves else start)))


@pytest.fixture
def started(session, make_image, make_surface):
    """Session over an 800x600 image on a 400x300 surface (factor 0.5)."""
    session.start(make_surface(400, 300), make_image(800, 600), {"constrainRatio": False})
    return session


def test_start_with_decoded_image_draws_background(started):
    assert started.is_ready()
    assert started.scale() == pytest.approx(0.5)
    assert started.surface.pixelColor(200, 150).getRgb() == (200, 40, 40, 255)
    assert started.shape is None


def test_resize_scenario_reports_image_pixels(started, record):
    recorder = record(started.events, *ALL_EVENTS)

    started.handle_pointer_down(PointerEvent(50, 50))
    started.handle_pointer_move(PointerEvent(150, 150))

    assert started.mode is InteractionMode.RESIZING
    assert isinstance(started.shape, RectangleShape)
    assert (started.shape.x, started.shape.y, started.shape.w, started.shape.h) == (50, 50, 100, 100)
    assert started.crop_rectangle(floor=True) == CropRectangle(100, 100, 200, 200)

    resized = recorder.of_type(CropResized)
    assert len(resized) == 1
    assert resized[0].name is CropEventName.RESIZE
    assert resized[0].coordinates.as_dict() == {"x": 100, "y": 100, "w": 200, "h": 200}

    started.handle_pointer_up(PointerEvent(150, 150))
    finished = recorder.of_type(CropFinished)
    assert [event.coordinates for event in finished] == [CropRectangle(100, 100, 200, 200)]
    # Raw data output is off by default.
    assert recorder.of_type(CropDataReady) == []
    assert started.mode is InteractionMode.IDLE


def test_crop_rectangle_fields_are_floored_independently(session, make_image, make_surface):
    session.start(make_surface(300, 300), make_image(700, 700), {"constrainRatio": False})
    _gesture(session, (10, 10), (41, 77))

    exact = session.crop_rectangle()
    floored = session.crop_rectangle(floor=True)
    assert exact.x == pytest.approx(10 * 7 / 3)
    assert floored.x == 23 and floored.y == 23
    assert floored.w == 72
    assert floored.h == 156


def test_reposition_publishes_reposition_events(started, record):
    _gesture(started, (50, 50), (150, 150))
    recorder = record(started.events, *ALL_EVENTS)

    started.handle_pointer_down(PointerEvent(100, 100))
    assert started.mode is InteractionMode.REPOSITIONING
    started.handle_pointer_move(PointerEvent(120, 120))
    started.handle_pointer_up(PointerEvent(120, 120))

    repositioned = recorder.of_type(CropRepositioned)
    assert len(repositioned) == 1
    assert repositioned[0].name is CropEventName.REPOSITION
    assert repositioned[0].coordinates == CropRectangle(140, 140, 200, 200)
    assert recorder.of_type(CropResized) == []
    assert recorder.of_type(CropFinished)[0].coordinates == CropRectangle(140, 140, 200, 200)


def test_idle_moves_publish_nothing_and_update_cursor(make_image, make_surface, record):
    cursors = []
    session = CropSession(loader=SynchronousImageLoader(), on_cursor_change=cursors.append)
    session.start(make_surface(400, 300), make_image(800, 600), {"constrainRatio": False})
    _gesture(session, (50, 50), (150, 150))
    recorder = record(session.events, *ALL_EVENTS)

    session.handle_pointer_move(PointerEvent(100, 100))
    session.handle_pointer_move(PointerEvent(300, 250))

    assert recorder.events == []
    assert cursors == [Qt.CursorShape.SizeAllCursor, Qt.CursorShape.CrossCursor]
    assert session.cursor == Qt.CursorShape.CrossCursor


def test_release_without_gesture_is_ignored(started, record):
    recorder = record(started.events, *ALL_EVENTS)
    started.handle_pointer_up(PointerEvent(10, 10))
    started.handle_pointer_up()
    assert recorder.events == []


def test_click_without_move_before_any_marquee(session, make_image, make_surface, record):
    session.start(make_surface(400, 300), make_image(800, 600), {"rawDataOutput": True})
    recorder = record(session.events, *ALL_EVENTS)

    _gesture(session, (50, 50))

    assert session.shape is None
    assert [type(event) for event in recorder.events] == [CropFinished, CropDataReady]
    assert recorder.events[0].coordinates is None
    assert recorder.events[1].raw_data is None


def test_click_without_move_keeps_existing_marquee(started, record):
    _gesture(started, (50, 50), (150, 150))
    recorder = record(started.events, *ALL_EVENTS)

    _gesture(started, (300, 250))

    assert (started.shape.x, started.shape.y) == (50, 50)
    assert [event.coordinates for event in recorder.events] == [CropRectangle(100, 100, 200, 200)]


def test_pointer_positions_are_translated_through_chrome(started):
    started.set_chrome(
        SurfaceChrome(
            offset_left=10,
            offset_top=20,
            border_left=2,
            border_top=2,
            padding_left=3,
            padding_top=3,
        )
    )
    _gesture(started, (65, 75), (165, 175))
    assert (started.shape.x, started.shape.y, started.shape.w, started.shape.h) == (50, 50, 100, 100)


def test_shift_modifier_squares_the_marquee(started):
    started.handle_modifiers(True)
    _gesture(started, (50, 50), (250, 100))
    assert started.shape.w == started.shape.h == 50

    started.handle_modifiers(False)
    started.handle_pointer_down(PointerEvent(300, 10))
    started.handle_pointer_move(PointerEvent(350, 30, shift=True))
    assert started.shape.w == started.shape.h == 20


def test_ellipse_marquee_from_options(session, make_image, make_surface):
    session.start(make_surface(400, 300), make_image(800, 600), {"marqueeType": "ellipse"})
    _gesture(session, (100, 100), (200, 160))
    assert isinstance(session.shape, EllipseShape)
    # constrainRatio defaults to true.
    assert session.shape.w == session.shape.h == 60


def test_legacy_option_names_are_honoured(session, make_image, make_surface):
    session.start(make_surface(400, 300), make_image(800, 600), {"constrain": False})
    assert session.options.constrain_ratio is False


def test_invalid_options_raise(session, make_image, make_surface):
    with pytest.raises(ConfigurationError):
        session.start(make_surface(400, 300), make_image(800, 600), {"constrainRatio": "yes"})
    with pytest.raises(ConfigurationError):
        session.start(make_surface(400, 300), make_image(800, 600), {"borderWidth": 3})


def test_unknown_marquee_type_is_reported_and_draws_nothing(session, make_image, make_surface, record):
    recorder = record(session.events, *ALL_EVENTS)
    session.start(make_surface(400, 300), make_image(800, 600), {"marqueeType": "hexagon"})

    errors = recorder.of_type(ErrorOccurredEvent)
    assert len(errors) == 1
    assert isinstance(errors[0].error, ConfigurationError)
    assert errors[0].severity is ErrorSeverity.WARNING

    _gesture(session, (50, 50), (150, 150))
    assert session.shape is None
    assert recorder.of_type(CropResized)[0].coordinates is None
    assert recorder.of_type(CropFinished)[0].coordinates is None


def test_raw_data_output_emits_png_data_url(session, make_image, make_surface, record):
    session.start(
        make_surface(400, 300),
        make_image(800, 600, QColor(10, 200, 30)),
        {"constrainRatio": False, "rawDataOutput": True},
    )
    recorder = record(session.events, *ALL_EVENTS)

    _gesture(session, (50, 50), (150, 100))

    assert [type(event) for event in recorder.events] == [CropResized, CropFinished, CropDataReady]
    raw = recorder.events[-1].raw_data
    assert (raw.x, raw.y, raw.w, raw.h) == (100, 100, 200, 100)
    assert (raw.image_width, raw.image_height) == (800, 600)
    assert raw.error is None
    assert raw.data.startswith("data:image/png;base64,")

    decoded = QImage()
    assert decoded.loadFromData(base64.b64decode(raw.data.split(",", 1)[1]), "PNG")
    assert (decoded.width(), decoded.height()) == (200, 100)
    assert decoded.pixelColor(100, 50).getRgb() == (10, 200, 30, 255)

    packed = raw.as_dict()
    assert packed["image"] == {"w": 800, "h": 600}
    assert "exception" not in packed


def test_zero_size_selection_yields_empty_data_url(session, make_image, make_surface):
    session.start(
        make_surface(400, 300), make_image(800, 600), {"constrainRatio": False, "rawDataOutput": True}
    )
    _gesture(session, (400, 300), (500, 400))
    raw = session.extract_pixels()
    assert (raw.w, raw.h) == (0, 0)
    assert raw.data == "data:,"


def test_cross_origin_image_reports_export_failure(session, make_image, make_surface, record):
    remote = LoadedImage(
        image=make_image(800, 600),
        source="https://cdn.example.com/photo.png",
        origin="https://cdn.example.com",
    )
    session.start(make_surface(400, 300), remote, {"constrainRatio": False, "rawDataOutput": True})
    recorder = record(session.events, *ALL_EVENTS)

    _gesture(session, (50, 50), (150, 150))

    raw = recorder.of_type(CropDataReady)[0].raw_data
    assert raw.data is None
    assert isinstance(raw.error, CrossOriginExportError)
    assert (raw.x, raw.y, raw.w, raw.h) == (100, 100, 200, 200)
    assert "exception" in raw.as_dict()

    errors = recorder.of_type(ErrorOccurredEvent)
    assert len(errors) == 1
    assert errors[0].severity is ErrorSeverity.WARNING
    # The session keeps working after the failed export.
    _gesture(session, (100, 100), (110, 110))
    assert len(recorder.of_type(CropFinished)) == 2


def test_extract_pixels_requires_raw_data_output(started):
    _gesture(started, (50, 50), (150, 150))
    assert started.extract_pixels() is None


def test_start_loads_local_file(session, make_image, make_surface, tmp_path):
    path = tmp_path / "photo.png"
    assert make_image(80, 60).save(str(path), "PNG")

    session.start(make_surface(40, 30), str(path), {"rawDataOutput": True})

    assert session.is_ready()
    assert session.image.origin == "file://"
    assert session.scale() == pytest.approx(0.5)
    _gesture(session, (0, 0), (20, 20))
    assert session.extract_pixels().data.startswith("data:image/png;base64,")


def test_start_uses_image_source_option(session, make_image, make_surface, tmp_path):
    path = tmp_path / "from-options.png"
    assert make_image(20, 10).save(str(path), "PNG")
    session.start(make_surface(100, 100), options={"src": str(path)})
    assert session.image.source == str(path)
    assert session.dimensions().to_rect().width() == 20


def test_missing_image_leaves_session_inert(session, make_surface, tmp_path, record):
    recorder = record(session.events, *ALL_EVENTS)
    session.start(make_surface(400, 300), str(tmp_path / "missing.png"))

    assert not session.is_ready()
    assert isinstance(session.load_error, ImageLoadError)
    errors = recorder.of_type(ErrorOccurredEvent)
    assert len(errors) == 1 and errors[0].severity is ErrorSeverity.ERROR

    _gesture(session, (50, 50), (150, 150))
    assert session.shape is None
    assert recorder.of_type(CropFinished) == []


def test_start_without_any_source_fails_to_load(session, make_surface):
    session.start(make_surface(100, 100))
    assert session.load_error is not None
    assert session.dimensions() is None


class _DeferredLoader:
    def __init__(self):
        self.calls = []

    def load(self, source, on_loaded, on_failed):
        self.calls.append((source, on_loaded, on_failed))


def test_stale_image_loads_are_discarded(qapp, make_image, make_surface):
    loader = _DeferredLoader()
    session = CropSession(loader=loader)
    session.start(make_surface(100, 100), "first.png")
    session.start(make_surface(100, 100), "second.png")
    assert not session.is_ready()

    loader.calls[0][1](LoadedImage(image=make_image(10, 10), source="first.png"))
    assert session.image is None

    loader.calls[1][1](LoadedImage(image=make_image(30, 30), source="second.png"))
    assert session.image.source == "second.png"


def test_set_surface_redraws_at_new_scale(make_image, make_surface):
    updates = []
    started = CropSession(
        loader=SynchronousImageLoader(), on_request_update=lambda: updates.append(1)
    )
    started.start(make_surface(400, 300), make_image(800, 600), {"constrainRatio": False})
    _gesture(started, (50, 50), (150, 150))
    updates.clear()

    bigger = QImage(800, 600, QImage.Format.Format_ARGB32_Premultiplied)
    started.set_surface(bigger)

    assert updates == [1]
    assert started.scale() == pytest.approx(1.0)
    assert started.surface.pixelColor(700, 500).getRgb() == (200, 40, 40, 255)
    # The marquee still covers the same image pixels.
    assert (started.shape.x, started.shape.y, started.shape.w, started.shape.h) == (100, 100, 200, 200)
    assert started.crop_rectangle(floor=True) == CropRectangle(100, 100, 200, 200)


def test_shrinking_surface_keeps_marquee_inside_image(started):
    _gesture(started, (0, 0), (300, 300))
    assert started.crop_rectangle(floor=True) == CropRectangle(0, 0, 600, 600)

    started.set_surface(QImage(200, 150, QImage.Format.Format_ARGB32_Premultiplied))

    dims = started.dimensions()
    shape = started.shape
    assert (shape.x, shape.y, shape.w, shape.h) == (0, 0, 150, 150)
    assert started.crop_rectangle(floor=True) == CropRectangle(0, 0, 600, 600)

    _gesture(started, (75, 75), (500, 500))

    shape = started.shape
    assert shape.x >= dims.x and shape.y >= dims.y
    assert shape.x + shape.w <= dims.x2 and shape.y + shape.h <= dims.y2
    assert started.crop_rectangle(floor=True) == CropRectangle(200, 0, 600, 600)


def test_surface_resize_during_reposition_continues_from_refitted_marquee(started):
    _gesture(started, (100, 100), (200, 200))
    started.handle_pointer_down(PointerEvent(150, 150))
    assert started.mode is InteractionMode.REPOSITIONING

    started.set_surface(QImage(200, 150, QImage.Format.Format_ARGB32_Premultiplied))
    started.handle_pointer_move(PointerEvent(1000, 1000))
    started.handle_pointer_up()

    assert (started.shape.x, started.shape.y, started.shape.w, started.shape.h) == (150, 100, 50, 50)
    assert started.crop_rectangle(floor=True) == CropRectangle(600, 400, 200, 200)
