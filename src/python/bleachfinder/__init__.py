"""bleachfinder: photobleaching event detection in time-lapse microscopy."""

from bleachfinder import events, kinetics, preprocessing, regions, registration
from bleachfinder.analysis import (
    BleachAnalysis,
    BleachConfig,
    CropWindow,
    SettingsStore,
    Stack,
    analyze_stack,
)
from bleachfinder.errors import (
    AlignmentError,
    AnalysisCancelled,
    BleachfinderError,
    ConfigError,
    PreconditionError,
    TooManyRegionsError,
    UnsupportedPixelTypeError,
)
from bleachfinder.events import detect_bleaching_event, detect_bleaching_events
from bleachfinder.io import load_stack, save_stack, save_time_series
from bleachfinder.preprocessing import build_foreground_mask
from bleachfinder.regions import extract_regions, summarize
from bleachfinder.registration import phase_correlate, register_stack
from bleachfinder.utils import make_projection

__version__ = "0.1.0"

__all__ = [
    # Pipeline
    "BleachAnalysis",
    "analyze_stack",
    "BleachConfig",
    "SettingsStore",
    "Stack",
    "CropWindow",
    # I/O functions
    "load_stack",
    "save_stack",
    "save_time_series",
    # Pipeline steps
    "registration",
    "register_stack",
    "phase_correlate",
    "preprocessing",
    "build_foreground_mask",
    "events",
    "detect_bleaching_event",
    "detect_bleaching_events",
    "regions",
    "extract_regions",
    "summarize",
    "kinetics",
    # Errors
    "BleachfinderError",
    "PreconditionError",
    "ConfigError",
    "UnsupportedPixelTypeError",
    "AlignmentError",
    "TooManyRegionsError",
    "AnalysisCancelled",
    # Utilities
    "make_projection",
    # Package metadata
    "__version__",
]
