import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Ensure the project sources are importable without an editable install.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Headless runs must never try to reach a display server.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtCore import Qt  # noqa: E402
from PySide6.QtGui import QColor, QImage  # noqa: E402
from PySide6.QtWidgets import QApplication  # noqa: E402

from canvascrop.events import EventBus  # noqa: E402
from canvascrop.session import CropSession  # noqa: E402
from canvascrop.tasks import SynchronousImageLoader  # noqa: E402


@pytest.fixture(scope="session")
def qapp() -> QApplication:
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


def solid_image(width: int, height: int, color: QColor | None = None) -> QImage:
    image = QImage(width, height, QImage.Format.Format_ARGB32)
    image.fill(color or QColor(200, 40, 40))
    return image


def blank_surface(width: int, height: int) -> QImage:
    surface = QImage(width, height, QImage.Format.Format_ARGB32_Premultiplied)
    surface.fill(Qt.GlobalColor.transparent)
    return surface


class EventRecorder:
    """Collect every event published for the subscribed types."""

    def __init__(self, bus: EventBus, *event_types: type) -> None:
        self.events: list = []
        for event_type in event_types:
            bus.subscribe(event_type, self.events.append)

    def of_type(self, event_type: type) -> list:
        return [event for event in self.events if isinstance(event, event_type)]


@pytest.fixture
def session(qapp) -> CropSession:
    return CropSession(loader=SynchronousImageLoader())


@pytest.fixture
def make_image(qapp):
    return solid_image


@pytest.fixture
def make_surface(qapp):
    return blank_surface


@pytest.fixture
def record():
    return EventRecorder
