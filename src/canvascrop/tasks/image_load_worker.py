"""Worker that loads the crop background off the UI thread."""

from __future__ import annotations

import logging
from typing import Callable, Protocol

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal

from ..errors import ImageLoadError
from ..utils import image_loader
from ..utils.image_loader import LoadedImage

_LOGGER = logging.getLogger(__name__)

LoadedCallback = Callable[[LoadedImage], None]
FailedCallback = Callable[[ImageLoadError], None]


class ImageLoader(Protocol):
    """Something that resolves an image reference and reports back once."""

    def load(self, source: str, on_loaded: LoadedCallback, on_failed: FailedCallback) -> None:
        ...


class ImageLoadWorkerSignals(QObject):
    """Signals exposed by :class:`ImageLoadWorker`.

    The signal container is kept separate from the runnable so slots execute
    on the thread that created it, regardless of which pool thread ran the job.
    """

    imageLoaded = Signal(object)
    """Emitted with the :class:`LoadedImage` once decoding succeeded."""

    loadFailed = Signal(object)
    """Emitted with the :class:`ImageLoadError` describing the failure."""


class ImageLoadWorker(QRunnable):
    """Decode the crop background without blocking the UI."""

    def __init__(self, source: str) -> None:
        super().__init__()
        self._source = source
        self.signals = ImageLoadWorkerSignals()

    @property
    def source(self) -> str:
        """Return the reference this worker will attempt to load."""

        return self._source

    def run(self) -> None:  # type: ignore[override]
        """Execute the file I/O and decoding work on a background thread."""

        try:
            loaded = image_loader.load_image(self._source)
        except ImageLoadError as exc:
            self.signals.loadFailed.emit(exc)
            return
        except Exception as exc:  # pragma: no cover - best effort propagation
            # Unexpected decoder failures still have to end the pending load,
            # otherwise the session would wait for an image forever.
            self.signals.loadFailed.emit(ImageLoadError(self._source, str(exc)))
            return
        self.signals.imageLoaded.emit(loaded)


class ThreadPoolImageLoader:
    """Run :class:`ImageLoadWorker` jobs on a :class:`QThreadPool`."""

    def __init__(self, pool: QThreadPool | None = None) -> None:
        self._pool = pool or QThreadPool.globalInstance()
        # Signal containers must outlive the job until a result is delivered.
        self._pending: set[ImageLoadWorkerSignals] = set()

    def load(self, source: str, on_loaded: LoadedCallback, on_failed: FailedCallback) -> None:
        worker = ImageLoadWorker(source)
        signals = worker.signals
        self._pending.add(signals)

        def _finished_ok(loaded: LoadedImage) -> None:
            self._pending.discard(signals)
            on_loaded(loaded)

        def _finished_error(error: ImageLoadError) -> None:
            self._pending.discard(signals)
            on_failed(error)

        signals.imageLoaded.connect(_finished_ok)
        signals.loadFailed.connect(_finished_error)
        _LOGGER.debug("Queued image load for %s", source)
        self._pool.start(worker)


class SynchronousImageLoader:
    """Decode on the calling thread; used by headless tools and tests."""

    def load(self, source: str, on_loaded: LoadedCallback, on_failed: FailedCallback) -> None:
        try:
            loaded = image_loader.load_image(source)
        except ImageLoadError as exc:
            on_failed(exc)
            return
        on_loaded(loaded)


__all__ = [
    "ImageLoadWorker",
    "ImageLoadWorkerSignals",
    "ImageLoader",
    "SynchronousImageLoader",
    "ThreadPoolImageLoader",
]
