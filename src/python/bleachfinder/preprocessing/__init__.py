"""Image preprocessing for bleachfinder."""

from bleachfinder.preprocessing.morphology import (
    clean_event_mask,
    close_events,
    dilate_regions,
    remove_speckles,
)
from bleachfinder.preprocessing.threshold import (
    build_foreground_mask,
    otsu_threshold,
    to_uint16,
)

__all__ = [
    "to_uint16",
    "otsu_threshold",
    "build_foreground_mask",
    "close_events",
    "remove_speckles",
    "clean_event_mask",
    "dilate_regions",
]
