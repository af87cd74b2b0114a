from .bus import Event, EventBus, Subscription
from .crop_events import (
    CropDataReady,
    CropEvent,
    CropEventName,
    CropFinished,
    CropRepositioned,
    CropResized,
)

__all__ = [
    "CropDataReady",
    "CropEvent",
    "CropEventName",
    "CropFinished",
    "CropRepositioned",
    "CropResized",
    "Event",
    "EventBus",
    "Subscription",
]
