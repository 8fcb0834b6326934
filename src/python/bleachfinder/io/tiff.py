"""TIFF time-lapse stack I/O using tifffile."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import tifffile

from bleachfinder.analysis.types import Stack

logger = logging.getLogger(__name__)

# Axes used as the time dimension, in order of preference
TIME_AXES = "TZIQ"
CHANNEL_AXES = "CS"


def load_stack(path: Path | str, channel: int = 0) -> Stack:
    """
    Load a time-lapse stack from a TIFF file.

    ImageJ hyperstacks and OME-TIFFs are read through their axes metadata:
    the time axis is T (or Z when the stack has no T axis), one channel is
    selected, and any other axis is reduced to its first index. Plain
    multi-page TIFFs are read page by page.

    Args:
        path: Path to TIFF file.
        channel: Channel index for multi-channel files.

    Returns:
        Stack with shape (T, Y, X); a single image gives T = 1.

    Raises:
        FileNotFoundError: If the file does not exist.
        IndexError: If ``channel`` is out of range.
        UnsupportedPixelTypeError: If the pixel type is not uint8, uint16
            or float32.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"TIFF file not found: {path}")

    with tifffile.TiffFile(path) as tif:
        series = tif.series[0]
        axes = series.axes
        data = series.asarray()

    time_axis = next((a for a in TIME_AXES if a in axes), None)
    index: list[int | slice] = []
    for axis, size in zip(axes, data.shape):
        if axis in "YX" or axis == time_axis:
            index.append(slice(None))
        elif axis in CHANNEL_AXES:
            if not 0 <= channel < size:
                raise IndexError(f"Channel {channel} out of range [0, {size})")
            index.append(channel)
        else:
            logger.debug(f"Using first index of axis {axis} (size {size})")
            index.append(0)
    data = data[tuple(index)]

    if time_axis is None:
        data = data[np.newaxis, ...]

    logger.debug(f"Loaded {path} axes={axes} -> {data.shape} {data.dtype}")
    return Stack(data)


def save_stack(
    stack: Stack | np.ndarray,
    path: Path | str,
    compress: bool = False,
) -> None:
    """
    Save a (T, Y, X) stack as an ImageJ-compatible TIFF.

    Args:
        stack: Stack or array with shape (T, Y, X).
        path: Output path.
        compress: If True, use compression.

    Notes:
        Overwrites existing file if present.
    """
    data = stack.frames if isinstance(stack, Stack) else np.asarray(stack)
    if data.ndim != 3:
        raise ValueError(f"Expected (T, Y, X) array, got {data.ndim}D")

    path = Path(path)
    if path.exists():
        path.unlink()
    path.parent.mkdir(parents=True, exist_ok=True)

    compression = "zlib" if compress else None
    tifffile.imwrite(
        path,
        data,
        imagej=True,
        metadata={"axes": "TYX"},
        compression=compression,
    )
