"""I/O utilities for image stacks and analysis results."""

from bleachfinder.io.results import load_time_series, results_prefix, save_time_series
from bleachfinder.io.tiff import load_stack, save_stack

__all__ = [
    "load_stack",
    "save_stack",
    "load_time_series",
    "results_prefix",
    "save_time_series",
]
