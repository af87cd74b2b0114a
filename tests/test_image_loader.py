"""Tests for image decoding and origin resolution."""

from pathlib import Path

import pytest
from PIL import Image
from PySide6.QtGui import QColor

from canvascrop.errors import ImageLoadError
from canvascrop.tasks import SynchronousImageLoader
from canvascrop.utils.image_loader import load_image, load_qimage, local_path, origin_of


@pytest.mark.parametrize(
    "source, expected",
    [
        ("photo.png", "file://"),
        ("/tmp/photo.png", "file://"),
        ("file:///tmp/photo.png", "file://"),
        ("C:/pictures/photo.png", "file://"),
        ("https://CDN.example.com/a/b.png", "https://cdn.example.com"),
        ("http://example.com:8080/a.png", "http://example.com:8080"),
    ],
)
def test_origin_of(source, expected):
    assert origin_of(source) == expected


def test_local_path():
    assert local_path("file:///tmp/photo.png") == Path("/tmp/photo.png")
    assert local_path("relative/photo.png") == Path("relative/photo.png")
    assert local_path("https://example.com/photo.png") is None


def test_load_image_from_png(qapp, tmp_path, make_image):
    path = tmp_path / "red.png"
    assert make_image(30, 20, QColor(255, 0, 0)).save(str(path), "PNG")

    loaded = load_image(path)

    assert (loaded.width, loaded.height) == (30, 20)
    assert loaded.source == str(path)
    assert loaded.origin == "file://"
    assert loaded.image.pixelColor(5, 5).getRgb() == (255, 0, 0, 255)


def test_load_qimage_reads_pillow_written_file(qapp, tmp_path):
    path = tmp_path / "pillow.png"
    Image.new("RGB", (12, 7), (0, 0, 255)).save(path)
    image = load_qimage(path)
    assert image is not None
    assert (image.width(), image.height()) == (12, 7)


def test_load_qimage_returns_none_for_garbage(qapp, tmp_path):
    path = tmp_path / "garbage.png"
    path.write_bytes(b"definitely not an image")
    assert load_qimage(path) is None


@pytest.mark.parametrize("source", ["", "https://example.com/a.png"])
def test_load_image_rejects_unusable_references(qapp, source):
    with pytest.raises(ImageLoadError):
        load_image(source)


def test_load_image_missing_file(qapp, tmp_path):
    with pytest.raises(ImageLoadError, match="file not found"):
        load_image(tmp_path / "nope.png")


def test_synchronous_loader_reports_through_callbacks(qapp, tmp_path, make_image):
    path = tmp_path / "ok.png"
    assert make_image(4, 4).save(str(path), "PNG")
    loaded, failed = [], []
    loader = SynchronousImageLoader()

    loader.load(str(path), loaded.append, failed.append)
    loader.load(str(tmp_path / "missing.png"), loaded.append, failed.append)

    assert len(loaded) == 1 and loaded[0].width == 4
    assert len(failed) == 1 and isinstance(failed[0], ImageLoadError)


def test_thread_pool_loader_delivers_result(qtbot, tmp_path, make_image):
    from canvascrop.tasks import ThreadPoolImageLoader

    path = tmp_path / "async.png"
    assert make_image(6, 3).save(str(path), "PNG")
    loaded, failed = [], []

    ThreadPoolImageLoader().load(str(path), loaded.append, failed.append)

    qtbot.waitUntil(lambda: len(loaded) + len(failed) == 1, timeout=5000)
    assert failed == []
    assert (loaded[0].width, loaded[0].height) == (6, 3)
