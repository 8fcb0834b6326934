"""Type definitions for the analysis layer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TypeAlias

import numpy as np

from bleachfinder.errors import PreconditionError, UnsupportedPixelTypeError

# Type aliases
Shift2D: TypeAlias = tuple[int, int]  # (dy, dx)
Mask: TypeAlias = np.ndarray  # bool, shape (Y, X)
EventStack: TypeAlias = np.ndarray  # bool, shape (T, Y, X)


class PixelType(Enum):
    """Closed set of supported pixel element types."""

    UINT8 = np.dtype(np.uint8)
    UINT16 = np.dtype(np.uint16)
    FLOAT32 = np.dtype(np.float32)

    @classmethod
    def from_dtype(cls, dtype) -> PixelType:
        """Resolve a numpy dtype. Raises UnsupportedPixelTypeError otherwise."""
        dtype = np.dtype(dtype)
        for member in cls:
            if member.value == dtype:
                return member
        raise UnsupportedPixelTypeError(
            f"Unsupported pixel type {dtype}; expected uint8, uint16 or float32"
        )


@dataclass(frozen=True)
class CropWindow:
    """Immutable 2D rectangle (Y/X only; T kept whole).

    All coordinates are 0-based with exclusive end (Python slice convention).
    A window with non-positive height or width is degenerate (``is_empty``).
    """

    y_start: int
    y_end: int  # exclusive
    x_start: int
    x_end: int  # exclusive

    @classmethod
    def full(cls, height: int, width: int) -> CropWindow:
        return cls(0, height, 0, width)

    @classmethod
    def from_shift_extrema(
        cls,
        height: int,
        width: int,
        min_shift: Shift2D,
        max_shift: Shift2D,
    ) -> CropWindow:
        """Region left valid by every translation between the two extremes.

        Intersection of the frame with itself translated by ``min_shift``
        and by ``max_shift`` (both ``(dy, dx)``).
        """
        full = cls.full(height, width)
        return full.intersection(full.offset(*min_shift)).intersection(
            full.offset(*max_shift)
        )

    @property
    def height(self) -> int:
        return self.y_end - self.y_start

    @property
    def width(self) -> int:
        return self.x_end - self.x_start

    @property
    def is_empty(self) -> bool:
        return self.height <= 0 or self.width <= 0

    @property
    def origin(self) -> tuple[int, int]:
        """(y, x) of the top-left corner."""
        return (self.y_start, self.x_start)

    def offset(self, dy: int, dx: int) -> CropWindow:
        """Return the window translated by (dy, dx)."""
        return CropWindow(
            self.y_start + dy, self.y_end + dy, self.x_start + dx, self.x_end + dx
        )

    def intersection(self, other: CropWindow) -> CropWindow:
        return CropWindow(
            max(self.y_start, other.y_start),
            min(self.y_end, other.y_end),
            max(self.x_start, other.x_start),
            min(self.x_end, other.x_end),
        )

    def contains(self, other: CropWindow) -> bool:
        return (
            self.y_start <= other.y_start
            and other.y_end <= self.y_end
            and self.x_start <= other.x_start
            and other.x_end <= self.x_end
        )

    def to_slice(self) -> tuple[slice, slice]:
        """Return (slice_y, slice_x) for array indexing."""
        return (
            slice(self.y_start, self.y_end),
            slice(self.x_start, self.x_end),
        )


@dataclass(frozen=True)
class Stack:
    """Read-only time series of 2D frames with shape (T, Y, X).

    All frames share one shape and one pixel type; the pixel type is
    resolved once on construction.
    """

    frames: np.ndarray

    def __post_init__(self):
        frames = np.asarray(self.frames)
        if frames.ndim != 3:
            raise PreconditionError(
                f"Expected (T, Y, X) stack, got {frames.ndim}D array"
            )
        if frames.shape[0] == 0 or frames.shape[1] == 0 or frames.shape[2] == 0:
            raise PreconditionError(f"Empty stack with shape {frames.shape}")
        pixel_type = PixelType.from_dtype(frames.dtype)
        view = frames.view()
        view.flags.writeable = False
        object.__setattr__(self, "frames", view)
        object.__setattr__(self, "_pixel_type", pixel_type)

    @property
    def pixel_type(self) -> PixelType:
        return self._pixel_type

    @property
    def n_frames(self) -> int:
        return self.frames.shape[0]

    @property
    def height(self) -> int:
        return self.frames.shape[1]

    @property
    def width(self) -> int:
        return self.frames.shape[2]

    @property
    def pixel_count(self) -> int:
        return self.height * self.width

    @property
    def bounds(self) -> CropWindow:
        return CropWindow.full(self.height, self.width)

    def crop(self, window: CropWindow) -> Stack:
        """Crop every frame to ``window`` (must lie inside the frame)."""
        if window.is_empty or not self.bounds.contains(window):
            raise PreconditionError(
                f"Crop window {window} is empty or outside frame {self.bounds}"
            )
        sy, sx = window.to_slice()
        return Stack(self.frames[:, sy, sx])
