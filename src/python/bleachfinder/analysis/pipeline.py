"""BleachAnalysis: per-stack photobleach analysis with fluent API."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np

from bleachfinder.analysis.config import BleachConfig
from bleachfinder.analysis.logging import log_step
from bleachfinder.analysis.sink import ReportSink
from bleachfinder.analysis.types import CropWindow, EventStack, Mask, Stack
from bleachfinder.errors import PreconditionError

if TYPE_CHECKING:
    from bleachfinder.kinetics import FitResult
    from bleachfinder.regions import Region, TimeSeries
    from bleachfinder.registration import StackAlignment

logger = logging.getLogger(__name__)


@dataclass
class BleachAnalysis:
    """Photobleach analysis of one time-lapse stack.

    Mutable. NOT thread-safe (detection itself may use worker threads).
    Inputs are validated on construction, before any step runs. All
    processing methods return ``self`` for fluent chaining::

        analysis = (
            BleachAnalysis(stack, config)
            .align()
            .build_mask()
            .detect_events()
            .extract_regions()
            .summarize()
            .fit_kinetics()
        )
    """

    stack: Stack
    config: BleachConfig = field(default_factory=BleachConfig)
    name: str = "stack"
    roi: CropWindow | None = None
    sink: ReportSink | None = None
    cancel: threading.Event | None = None

    # Results, filled step by step
    alignment: StackAlignment | None = None
    mask: Mask | None = None
    events: EventStack | None = None
    regions: list[Region] | None = None
    series: TimeSeries | None = None
    foreground_fit: FitResult | None = None
    recovery_fits: dict[int, FitResult | None] = field(default_factory=dict)

    def __post_init__(self):
        if self.stack is None:
            raise PreconditionError("No image stack")
        if not isinstance(self.stack, Stack):
            self.stack = Stack(np.asarray(self.stack))
        if self.stack.n_frames < 2:
            raise PreconditionError(
                f"Require a stack with at least 2 frames, got {self.stack.n_frames}"
            )
        if self.roi is not None:
            if self.roi.is_empty:
                raise PreconditionError(f"ROI has no area: {self.roi}")
            if not self.stack.bounds.contains(self.roi):
                raise PreconditionError(
                    f"ROI {self.roi} outside the {self.stack.height}x"
                    f"{self.stack.width} frame"
                )
        self.config.validate()
        if self.config.alignment_slice > self.stack.n_frames:
            raise PreconditionError(
                f"alignment_slice {self.config.alignment_slice} exceeds the "
                f"{self.stack.n_frames} frames"
            )

    # --- State helpers ---

    def _require(self, attr: str, step: str):
        value = getattr(self, attr)
        if value is None:
            raise ValueError(f"No {attr} yet; run {step}() first.")
        return value

    @property
    def aligned(self) -> Stack:
        return self._require("alignment", "align").aligned

    @property
    def origin(self) -> tuple[int, int]:
        """(y, x) of the aligned frame's corner in the input image."""
        crop = self._require("alignment", "align").crop
        roi_y, roi_x = self.roi.origin if self.roi is not None else (0, 0)
        return (roi_y + crop.y_start, roi_x + crop.x_start)

    def _show(self, enabled: bool, title: str, data: np.ndarray) -> None:
        if enabled and self.sink is not None:
            self.sink.show_stack(title, data)

    # --- Pipeline steps ---

    @log_step
    def align(self) -> BleachAnalysis:
        """Drift-correct the (ROI of the) stack and crop to the common region."""
        from bleachfinder.registration import (
            phase_correlate,
            phase_correlate_skimage,
            register_stack,
        )

        working = self.stack.crop(self.roi) if self.roi is not None else self.stack
        reference = None
        if self.config.alignment_slice > 0:
            reference = working.frames[self.config.alignment_slice - 1]
        aligner = (
            phase_correlate_skimage
            if self.config.aligner == "skimage"
            else phase_correlate
        )

        self.alignment = register_stack(
            working,
            self.config.max_shift,
            reference=reference,
            apply_translation=self.config.apply_translation,
            aligner=aligner,
            show_offsets=self.config.show_alignment_offsets,
            cancel=self.cancel,
        )
        self._show(self.config.show_aligned_image, "Aligned", self.aligned.frames)
        return self

    @log_step
    def build_mask(self) -> BleachAnalysis:
        """Otsu foreground mask of the aligned average projection."""
        from bleachfinder.preprocessing import build_foreground_mask

        self.mask = build_foreground_mask(self.aligned)
        logger.debug(f"[{self.name}] Mask has {int(self.mask.sum())} pixels")
        return self

    @log_step
    def detect_events(self) -> BleachAnalysis:
        """Per-pixel bleaching events of the foreground."""
        from bleachfinder.events import (
            detect_bleaching_events,
            ema_alpha,
            score_threshold,
        )

        mask = self._require("mask", "build_mask")
        self.events = detect_bleaching_events(
            self.aligned,
            mask,
            ema_alpha(self.config.ema_window_size),
            self.config.ema_window_size,
            score_threshold(self.config.significance),
            n_workers=self.config.n_workers,
            chunk_size=self.config.chunk_size,
            cancel=self.cancel,
        )
        self._show(
            self.config.show_bleaching_events,
            "Events",
            self.events.astype(np.uint8) * 255,
        )
        return self

    @log_step
    def extract_regions(self) -> BleachAnalysis:
        """Connected bleached regions of every event frame."""
        from bleachfinder.regions import extract_regions

        events = self._require("events", "detect_events")
        self.regions = extract_regions(
            events, self.config.min_region_size, origin=self.origin
        )
        if not self.regions:
            logger.info(f"[{self.name}] No bleached regions")
        return self

    @log_step
    def summarize(self) -> BleachAnalysis:
        """Mean intensity per frame of each region and the foreground."""
        from bleachfinder.regions import summarize

        regions = self._require("regions", "extract_regions")
        self.series = summarize(
            self.aligned, self.mask, regions, self.config.bleached_border
        )
        self._show(
            self.config.show_bleached_regions,
            "Regions",
            self.series.label_map,
        )
        if self.sink is not None:
            self.sink.show_series(self.name, self.series.to_frame())
        return self

    @log_step
    def fit_kinetics(self) -> BleachAnalysis:
        """Fit foreground bleaching, then the recovery of each region."""
        from bleachfinder.kinetics import fit_bleaching, fit_recovery

        series = self._require("series", "summarize")
        self.foreground_fit = fit_bleaching(series.foreground)
        if self.foreground_fit is None:
            logger.warning(f"[{self.name}] No foreground bleaching fit")
            return self

        y0, b, tau = self.foreground_fit.params
        logger.info(
            f"Foreground decay: f(t) = {y0:.4g} + {b:.4g} * exp(-{tau:.4g} t); "
            f"Half-life = {self.foreground_fit.half_lives[0]:.4g}"
        )

        for region, y in zip(self.regions, series.regions):
            fit = fit_recovery(
                y, region.frame, tau, nested=self.config.nested_models
            )
            self.recovery_fits[region.label] = fit
            if fit is not None:
                half_lives = ", ".join(f"{h:.4g}" for h in fit.half_lives)
                logger.info(
                    f"Region [{region.label}] {fit.name}: params = "
                    f"{np.array2string(fit.params, precision=4)}; "
                    f"Half-life = {half_lives}"
                )
        return self

    def run(self) -> BleachAnalysis:
        """All steps, then CSV export when ``results_dir`` is set."""
        self.align().build_mask().detect_events().extract_regions()
        self.summarize().fit_kinetics()
        if self.config.results_dir:
            self.save_results()
        return self

    # --- Output ---

    @log_step
    def save_results(self, results_dir: Path | str | None = None) -> list[Path]:
        """Write the time series as CSV files (see ``save_time_series``)."""
        from bleachfinder.io import results_prefix, save_time_series

        series = self._require("series", "summarize")
        results_dir = results_dir or self.config.results_dir
        if not results_dir:
            raise ValueError("No results directory given")
        return save_time_series(series, results_dir, results_prefix(self.name))


def analyze_stack(
    frames: Stack | np.ndarray,
    config: BleachConfig | None = None,
    roi: CropWindow | None = None,
    *,
    name: str = "stack",
    sink: ReportSink | None = None,
    cancel: threading.Event | None = None,
) -> BleachAnalysis:
    """Run the complete analysis of one stack and return its state."""
    analysis = BleachAnalysis(
        stack=frames,
        config=config if config is not None else BleachConfig(),
        name=name,
        roi=roi,
        sink=sink,
        cancel=cancel,
    )
    return analysis.run()
