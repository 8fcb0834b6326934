"""Binary morphology for event masks.

Mirrors the ImageJ binary commands used on the event frames: ``dilate``
and ``erode`` with a count of 1 (close), and ``erode`` with a count of 8
(remove isolated pixels). Pixels outside the image count as background.
"""

import numpy as np
from scipy import ndimage
from skimage.morphology import dilation, erosion, footprint_rectangle

# 8-neighbourhood including the centre
SQUARE_3X3 = footprint_rectangle((3, 3))
# 8-neighbourhood excluding the centre
NEIGHBOURS_3X3 = np.array([[1, 1, 1], [1, 0, 1], [1, 1, 1]], dtype=np.uint8)


def _binary_dilate(mask: np.ndarray) -> np.ndarray:
    return dilation(mask.astype(np.uint8), SQUARE_3X3, mode="constant", cval=0) > 0


def _binary_erode(mask: np.ndarray) -> np.ndarray:
    return erosion(mask.astype(np.uint8), SQUARE_3X3, mode="constant", cval=0) > 0


def close_events(mask: np.ndarray) -> np.ndarray:
    """Dilate then erode once to join adjacent event pixels.

    Parameters
    ----------
    mask : np.ndarray
        Boolean image (Y, X).

    Returns
    -------
    np.ndarray
        Closed boolean image, same shape.
    """
    return _binary_erode(_binary_dilate(mask))


def remove_speckles(mask: np.ndarray) -> np.ndarray:
    """Remove foreground pixels that have no foreground 8-neighbour."""
    mask = np.asarray(mask, dtype=bool)
    neighbours = ndimage.convolve(
        mask.astype(np.uint8), NEIGHBOURS_3X3, mode="constant", cval=0
    )
    return mask & (neighbours > 0)


def clean_event_mask(mask: np.ndarray) -> np.ndarray:
    """Close then despeckle one event frame."""
    return remove_speckles(close_events(mask))


def dilate_regions(mask: np.ndarray, iterations: int) -> np.ndarray:
    """Grow a boolean mask by ``iterations`` pixels (3x3 maximum filter)."""
    result = np.asarray(mask, dtype=bool)
    for _ in range(iterations):
        result = _binary_dilate(result)
    return result
