"""Report sinks receiving intermediate images and the final time series."""

from __future__ import annotations

from typing import Protocol

import numpy as np
import pandas as pd


class ReportSink(Protocol):
    """Receiver of analysis artifacts for display or reporting.

    Implementations must not modify what they receive.
    """

    def show_stack(self, title: str, data: np.ndarray) -> None:
        """Present a (T, Y, X) or (Y, X) image."""

    def show_series(self, title: str, table: pd.DataFrame) -> None:
        """Present named series indexed by frame."""


class MemorySink:
    """Sink that keeps everything it is given, keyed by title."""

    def __init__(self):
        self.stacks: dict[str, np.ndarray] = {}
        self.series: dict[str, pd.DataFrame] = {}

    def show_stack(self, title: str, data: np.ndarray) -> None:
        self.stacks[title] = data

    def show_series(self, title: str, table: pd.DataFrame) -> None:
        self.series[title] = table
