"""Per-pixel intensity traces over time."""

from __future__ import annotations

import numpy as np

from bleachfinder.analysis.types import PixelType, Stack


class TraceExtractor:
    """Uniform float64 access to pixel traces of a stack.

    The pixel type is resolved once on construction; unsigned 8/16-bit
    values are zero-extended (65535 stays 65535.0).

    Example:
        >>> extractor = TraceExtractor(stack)
        >>> extractor.trace(index)  # shape (T,)
    """

    def __init__(self, stack: Stack | np.ndarray):
        frames = stack.frames if isinstance(stack, Stack) else np.asarray(stack)
        self.pixel_type = PixelType.from_dtype(frames.dtype)
        self.n_frames = frames.shape[0]
        # (T, Y*X) view; no copy for contiguous stacks
        self._pixels = frames.reshape(self.n_frames, -1)

    @property
    def pixel_count(self) -> int:
        return self._pixels.shape[1]

    def trace(self, index: int) -> np.ndarray:
        """Intensity of pixel ``index`` (row-major) in every frame."""
        if not 0 <= index < self.pixel_count:
            raise IndexError(
                f"Pixel index {index} out of range [0, {self.pixel_count})"
            )
        return self._pixels[:, index].astype(np.float64)

    def traces(self, indices: np.ndarray) -> np.ndarray:
        """Traces of several pixels as a (T, n) float64 array."""
        indices = np.asarray(indices, dtype=np.intp)
        if indices.size and (indices.min() < 0 or indices.max() >= self.pixel_count):
            raise IndexError(f"Pixel indices out of range [0, {self.pixel_count})")
        return self._pixels[:, indices].astype(np.float64)
