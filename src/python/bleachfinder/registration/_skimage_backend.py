"""scikit-image based phase correlation (alternative aligner)."""

from __future__ import annotations

import logging

import numpy as np
from skimage.registration import phase_cross_correlation

from bleachfinder.analysis.types import Shift2D

logger = logging.getLogger(__name__)


def phase_correlate_skimage(
    reference: np.ndarray,
    moving: np.ndarray,
    max_shift: int = 0,
) -> Shift2D:
    """
    Compute shift using scikit-image phase_cross_correlation.

    skimage has no bounded peak search, so a shift outside
    [-max_shift, max_shift] is clipped to the bound.

    Args:
        reference: Reference frame with shape (Y, X).
        moving: Frame to align with shape (Y, X).
        max_shift: If > 0, the admissible shift on each axis.

    Returns:
        Tuple of integer (dy, dx) to translate ``moving`` by.
    """
    shift, _error, _diffphase = phase_cross_correlation(
        np.asarray(reference, dtype=np.float32),
        np.asarray(moving, dtype=np.float32),
    )
    # Same convention as phase_correlate: shift to apply to moving
    dy, dx = (int(round(float(s))) for s in shift)
    if max_shift > 0 and max(abs(dy), abs(dx)) > max_shift:
        logger.warning(
            f"Shift ({dy}, {dx}) exceeds max_shift={max_shift}; clipping"
        )
        dy = int(np.clip(dy, -max_shift, max_shift))
        dx = int(np.clip(dx, -max_shift, max_shift))
    return (dy, dx)
