"""Bleached region extraction and time-series reporting."""

from bleachfinder.regions.extraction import REGION_LIMIT, Region, extract_regions
from bleachfinder.regions.summary import (
    NO_DATA,
    TimeSeries,
    build_label_map,
    summarize,
)

__all__ = [
    "REGION_LIMIT",
    "Region",
    "extract_regions",
    "NO_DATA",
    "TimeSeries",
    "build_label_map",
    "summarize",
]
