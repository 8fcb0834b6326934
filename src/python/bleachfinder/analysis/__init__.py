"""Analysis orchestration layer: configuration, data model and pipeline."""

from bleachfinder.analysis.config import MAX_BORDER, BleachConfig, SettingsStore
from bleachfinder.analysis.logging import log_step, setup_logging
from bleachfinder.analysis.pipeline import BleachAnalysis, analyze_stack
from bleachfinder.analysis.sink import MemorySink, ReportSink
from bleachfinder.analysis.types import (
    CropWindow,
    EventStack,
    Mask,
    PixelType,
    Shift2D,
    Stack,
)

__all__ = [
    "BleachAnalysis",
    "analyze_stack",
    "BleachConfig",
    "SettingsStore",
    "MAX_BORDER",
    "ReportSink",
    "MemorySink",
    "Stack",
    "PixelType",
    "CropWindow",
    "Shift2D",
    "Mask",
    "EventStack",
    "log_step",
    "setup_logging",
]
