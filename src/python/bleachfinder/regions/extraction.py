"""Bleached region extraction from per-frame event masks."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np
from skimage.measure import find_contours, label, regionprops

from bleachfinder.analysis.types import EventStack
from bleachfinder.errors import TooManyRegionsError
from bleachfinder.preprocessing.morphology import clean_event_mask

logger = logging.getLogger(__name__)

# Labels 1..254 plus the foreground label must fit in uint8
REGION_LIMIT = 255


@dataclass(eq=False)
class Region:
    """Connected bleached region found on a single event frame.

    Coordinates are (y, x) in the aligned (cropped) frame.
    """

    label: int  # 1-based, unique across the run
    frame: int  # 0-based index of the bleaching event
    area: int
    centroid: tuple[float, float]
    outline: np.ndarray = field(repr=False)  # (K, 2) polygon vertices
    coords: np.ndarray = field(repr=False)  # (area, 2) pixel coordinates

    def centroid_in(self, origin: tuple[int, int]) -> tuple[float, float]:
        """Centroid offset by ``origin`` (e.g. the crop window corner)."""
        return (self.centroid[0] + origin[0], self.centroid[1] + origin[1])


def _outline(region_image: np.ndarray, bbox: tuple[int, ...]) -> np.ndarray:
    # Pad so contours close around regions touching the bounding box
    padded = np.pad(region_image.astype(np.uint8), 1)
    contours = find_contours(padded, 0.5)
    longest = max(contours, key=len)
    return longest + np.array([bbox[0] - 1, bbox[1] - 1], dtype=np.float64)


def extract_regions(
    events: EventStack,
    min_region_size: int,
    *,
    origin: tuple[int, int] = (0, 0),
) -> list[Region]:
    """Clean each event frame and collect its connected regions.

    Parameters
    ----------
    events : np.ndarray
        Boolean event stack (T, Y, X).
    min_region_size : int
        Smallest region (pixels, after cleaning) to keep.
    origin : tuple[int, int]
        (y, x) added to centroids in log messages, to report positions in
        the coordinates of the original image.

    Returns
    -------
    list[Region]
        Regions labelled 1..N in frame order, then raster order within a
        frame. Components are 4-connected.

    Raises
    ------
    TooManyRegionsError
        If 255 or more regions are found.
    """
    events = np.asarray(events, dtype=bool)
    if events.ndim != 3:
        raise ValueError(f"Expected (T, Y, X) event stack, got {events.ndim}D")

    regions: list[Region] = []
    for t in range(events.shape[0]):
        if not events[t].any():
            continue

        labels = label(clean_event_mask(events[t]), connectivity=1)
        found = [p for p in regionprops(labels) if p.area >= min_region_size]
        if not found:
            continue

        logger.info(f"Detected {len(found)} region(s) on frame {t + 1}:")
        for j, props in enumerate(found, start=1):
            region = Region(
                label=len(regions) + 1,
                frame=t,
                area=int(props.area),
                centroid=(float(props.centroid[0]), float(props.centroid[1])),
                outline=_outline(props.image, props.bbox),
                coords=np.asarray(props.coords),
            )
            cy, cx = region.centroid_in(origin)
            logger.info(f"  [{j}] ({cx:.2f},{cy:.2f}) = {region.area} pixels")
            regions.append(region)

        if len(regions) >= REGION_LIMIT:
            raise TooManyRegionsError(len(regions))

    return regions
