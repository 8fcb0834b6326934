"""Per-pixel traces and bleaching event detection."""

from bleachfinder.events.detection import (
    detect_bleaching_event,
    detect_bleaching_events,
    ema_alpha,
    score_threshold,
)
from bleachfinder.events.trace import TraceExtractor

__all__ = [
    "TraceExtractor",
    "ema_alpha",
    "score_threshold",
    "detect_bleaching_event",
    "detect_bleaching_events",
]
