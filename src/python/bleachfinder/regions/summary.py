"""Per-region mean intensity time series."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from bleachfinder.analysis.config import MAX_BORDER
from bleachfinder.analysis.types import Mask, Stack
from bleachfinder.errors import TooManyRegionsError
from bleachfinder.preprocessing.morphology import dilate_regions
from bleachfinder.regions.extraction import REGION_LIMIT, Region

logger = logging.getLogger(__name__)

# Mean reported for a label with no pixels
NO_DATA = np.nan


def build_label_map(
    mask: Mask,
    regions: list[Region],
    bleached_border: int = 0,
) -> np.ndarray:
    """Assign every pixel to background, a region, or the remaining foreground.

    Parameters
    ----------
    mask : np.ndarray
        Boolean foreground mask (Y, X).
    regions : list[Region]
        Regions labelled 1..N.
    bleached_border : int
        Foreground pixels within this many pixels of a region (capped at
        ``MAX_BORDER``) are moved to background.

    Returns
    -------
    np.ndarray
        uint8 label map: 0 background, 1..N regions, N+1 foreground.
    """
    if len(regions) >= REGION_LIMIT:
        raise TooManyRegionsError(len(regions))

    mask = np.asarray(mask, dtype=bool)
    foreground = len(regions) + 1
    labels = np.zeros(mask.shape, dtype=np.uint8)
    labels[mask] = foreground
    for region in regions:
        labels[region.coords[:, 0], region.coords[:, 1]] = region.label

    if bleached_border > 0 and regions:
        bleached = (labels != 0) & (labels != foreground)
        near = dilate_regions(bleached, min(MAX_BORDER, bleached_border))
        labels[near & (labels == foreground)] = 0

    return labels


@dataclass
class TimeSeries:
    """Mean intensity per frame of each region and the remaining foreground.

    Row ``i`` of ``means`` belongs to label ``i + 1``; the last row is the
    unattributed foreground. Labels without pixels hold ``NO_DATA``.
    """

    means: np.ndarray  # (N+1, T)
    counts: np.ndarray  # (N+1,)
    label_map: np.ndarray = field(repr=False)

    @property
    def n_regions(self) -> int:
        return self.means.shape[0] - 1

    @property
    def n_frames(self) -> int:
        return self.means.shape[1]

    @property
    def has_data(self) -> np.ndarray:
        return self.counts > 0

    @property
    def foreground(self) -> np.ndarray:
        return self.means[-1]

    @property
    def regions(self) -> np.ndarray:
        return self.means[:-1]

    def to_frame(self) -> pd.DataFrame:
        """Table indexed by 1-based frame, one column per series."""
        columns = [f"region{i}" for i in range(1, self.n_regions + 1)]
        columns.append("foreground")
        index = pd.RangeIndex(1, self.n_frames + 1, name="Frame")
        return pd.DataFrame(self.means.T, index=index, columns=columns)


def summarize(
    stack: Stack,
    mask: Mask,
    regions: list[Region],
    bleached_border: int = 0,
) -> TimeSeries:
    """Mean of every label in every frame of the aligned stack."""
    labels = build_label_map(mask, regions, bleached_border)
    if labels.shape != (stack.height, stack.width):
        raise ValueError(
            f"Mask shape {labels.shape} does not match frame shape "
            f"{(stack.height, stack.width)}"
        )

    n_labels = len(regions) + 2
    flat_labels = labels.ravel()
    counts = np.bincount(flat_labels, minlength=n_labels)[1:]

    means = np.empty((n_labels - 1, stack.n_frames), dtype=np.float64)
    pixels = stack.frames.reshape(stack.n_frames, -1)
    has_data = counts > 0
    for t in range(stack.n_frames):
        sums = np.bincount(
            flat_labels, weights=pixels[t].astype(np.float64), minlength=n_labels
        )[1:]
        means[has_data, t] = sums[has_data] / counts[has_data]
    means[~has_data] = NO_DATA

    for i in np.flatnonzero(~has_data):
        name = "Foreground" if i == n_labels - 2 else f"Region {i + 1}"
        logger.warning(f"{name} has no pixels; mean reported as no data")
    logger.info(f"Foreground = {int(counts[-1])} pixels")

    return TimeSeries(means=means, counts=counts, label_map=labels)
