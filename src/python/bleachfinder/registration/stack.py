"""Drift correction of a time-lapse stack against a fixed reference."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable

import numpy as np

from bleachfinder.analysis.types import CropWindow, Shift2D, Stack
from bleachfinder.errors import AlignmentError, AnalysisCancelled
from bleachfinder.registration.phase_correlation import apply_shift, phase_correlate
from bleachfinder.utils import make_projection

logger = logging.getLogger(__name__)

# (reference, moving, max_shift) -> (dy, dx)
Aligner = Callable[[np.ndarray, np.ndarray, int], Shift2D]


@dataclass
class StackAlignment:
    """Result of register_stack.

    ``crop`` is the intersect rectangle in the coordinates of the input
    stack; ``aligned`` holds every frame cropped to it.
    """

    aligned: Stack
    shifts: list[Shift2D]
    crop: CropWindow
    limit_reached: bool = False


def register_stack(
    stack: Stack,
    max_shift: int = 0,
    *,
    reference: np.ndarray | None = None,
    apply_translation: bool = True,
    aligner: Aligner = phase_correlate,
    show_offsets: bool = False,
    cancel: threading.Event | None = None,
) -> StackAlignment:
    """Align every frame to a reference and crop to the common valid region.

    Parameters
    ----------
    stack : Stack
        Input frames (T, Y, X).
    max_shift : int
        Admissible shift on each axis; 0 = unrestricted.
    reference : np.ndarray, optional
        Reference frame (Y, X). Defaults to the average-intensity projection.
    apply_translation : bool
        If True (default) each frame is translated by its integer shift
        before cropping; if False frames are only cropped.
    aligner : callable
        Shift estimator, ``phase_correlate`` by default.
    show_offsets : bool
        Log the (x, y) offset of every frame.
    cancel : threading.Event, optional
        Checked between frames; raises AnalysisCancelled with the shifts
        computed so far.

    Returns
    -------
    StackAlignment
        Aligned stack, per-frame shifts, intersect window.

    Raises
    ------
    AlignmentError
        If the shifts leave no overlapping region.
    """
    if reference is None:
        reference = make_projection(stack.frames, method="mean")

    # Extremes of the translations; the reference itself sits at (0, 0)
    min_dy = max_dy = min_dx = max_dx = 0
    frames = []
    shifts: list[Shift2D] = []

    for t in range(stack.n_frames):
        if cancel is not None and cancel.is_set():
            raise AnalysisCancelled("Alignment cancelled", partial=shifts)

        frame = stack.frames[t]
        dy, dx = aligner(reference, frame, max_shift)
        dy, dx = int(dy), int(dx)
        if show_offsets:
            logger.info(f"  [{t + 1}] {dx},{dy}")

        frames.append(apply_shift(frame, (dy, dx)) if apply_translation else frame)
        shifts.append((dy, dx))

        min_dy = min(min_dy, dy)
        max_dy = max(max_dy, dy)
        min_dx = min(min_dx, dx)
        max_dx = max(max_dx, dx)

    limit_reached = max_shift > 0 and max(max_dy, max_dx, -min_dy, -min_dx) == max_shift
    if limit_reached:
        logger.warning(
            f"Maximum shift limit reached: {min_dx},{min_dy} to {max_dx},{max_dy}"
        )

    crop = CropWindow.from_shift_extrema(
        stack.height, stack.width, (min_dy, min_dx), (max_dy, max_dx)
    )
    if crop.is_empty:
        raise AlignmentError(
            f"No overlapping region after alignment: shifts span "
            f"dy [{min_dy}, {max_dy}], dx [{min_dx}, {max_dx}] "
            f"for {stack.height}x{stack.width} frames"
        )

    aligned = Stack(np.stack(frames)).crop(crop)
    return StackAlignment(
        aligned=aligned, shifts=shifts, crop=crop, limit_reached=limit_reached
    )
