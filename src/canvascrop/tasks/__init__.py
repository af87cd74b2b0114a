"""Background tasks used by the crop session."""

from .image_load_worker import (
    ImageLoader,
    ImageLoadWorker,
    ImageLoadWorkerSignals,
    SynchronousImageLoader,
    ThreadPoolImageLoader,
)

__all__ = [
    "ImageLoadWorker",
    "ImageLoadWorkerSignals",
    "ImageLoader",
    "SynchronousImageLoader",
    "ThreadPoolImageLoader",
]
