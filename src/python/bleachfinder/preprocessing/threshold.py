"""Global thresholding of the average projection into a foreground mask."""

import numpy as np
from skimage.filters import threshold_otsu

from bleachfinder.analysis.types import Mask, Stack
from bleachfinder.utils import make_projection

UINT16_LEVELS = 65536


def to_uint16(image: np.ndarray) -> np.ndarray:
    """Rescale an image linearly so [min, max] maps to [0, 65535].

    Matches ImageJ ``convertToShortProcessor`` with scaling. A constant
    image maps to all zeros.
    """
    data = np.asarray(image, dtype=np.float64)
    data_min = float(data.min())
    data_max = float(data.max())
    if not data_max > data_min:
        return np.zeros(data.shape, dtype=np.uint16)
    scaled = (data - data_min) * ((UINT16_LEVELS - 1) / (data_max - data_min)) + 0.5
    return np.clip(scaled, 0, UINT16_LEVELS - 1).astype(np.uint16)


def otsu_threshold(histogram: np.ndarray) -> int:
    """Otsu threshold of an integer-level histogram.

    Parameters
    ----------
    histogram : np.ndarray
        Pixel counts per level; index = level.

    Returns
    -------
    int
        Lowest level of the upper (foreground) class: pixels ``>=`` the
        returned value are foreground. A histogram with a single occupied
        level returns that level.
    """
    counts = np.asarray(histogram, dtype=np.float64)
    occupied = np.flatnonzero(counts)
    if occupied.size == 0:
        raise ValueError("Histogram is empty")
    if occupied.size == 1:
        return int(occupied[0])
    # skimage returns the last level of the lower class
    return int(threshold_otsu(hist=counts)) + 1


def build_foreground_mask(stack: Stack) -> Mask:
    """Threshold the average-intensity projection with Otsu's method.

    Parameters
    ----------
    stack : Stack
        Aligned stack (T, Y, X).

    Returns
    -------
    np.ndarray
        Read-only boolean mask (Y, X); True = foreground.
    """
    projection = to_uint16(make_projection(stack.frames, method="mean"))
    histogram = np.bincount(projection.ravel(), minlength=UINT16_LEVELS)
    threshold = otsu_threshold(histogram)
    mask = projection >= threshold
    mask.flags.writeable = False
    return mask
