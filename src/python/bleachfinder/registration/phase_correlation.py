"""DFT-based cross-correlation registration of 2D frames using NumPy/SciPy."""

from __future__ import annotations

import numpy as np

from bleachfinder.analysis.types import Shift2D

# Fraction of each axis tapered by the Tukey window
TUKEY_ALPHA = 0.5


def _tukey_window(shape: tuple[int, int], alpha: float = TUKEY_ALPHA) -> np.ndarray:
    from scipy.signal.windows import tukey

    return np.outer(tukey(shape[0], alpha), tukey(shape[1], alpha)).astype(np.float32)


def _prepare(frame: np.ndarray, window: bool) -> np.ndarray:
    # Cast to float32 for faster FFT (complex64 vs complex128)
    data = np.asarray(frame, dtype=np.float32)
    data = data - data.mean()
    if window:
        data *= _tukey_window(data.shape)
    return data


def phase_correlate(
    reference: np.ndarray,
    moving: np.ndarray,
    max_shift: int = 0,
    window: bool = True,
) -> Shift2D:
    """
    Compute the translation that aligns ``moving`` to ``reference``.

    Both frames are mean-subtracted and Tukey-windowed to suppress edge
    artifacts, then cross-correlated in the frequency domain.

    Args:
        reference: Reference frame with shape (Y, X).
        moving: Frame to align with shape (Y, X).
        max_shift: If > 0, only shifts within [-max_shift, max_shift] on
            each axis are considered.
        window: Apply the Tukey window (default True).

    Returns:
        Tuple of integer (dy, dx) to translate ``moving`` by.
    """
    from scipy.fft import fft2, ifft2

    if reference.shape != moving.shape:
        raise ValueError(
            f"Frame shapes differ: {reference.shape} vs {moving.shape}"
        )

    ref = _prepare(reference, window)
    mov = _prepare(moving, window)
    ny, nx = mov.shape

    cc = ifft2(fft2(ref) * np.conj(fft2(mov))).real

    # Signed offset represented by each correlation bin (handles wrap-around)
    offsets_y = np.rint(np.fft.fftfreq(ny, 1.0 / ny)).astype(int)
    offsets_x = np.rint(np.fft.fftfreq(nx, 1.0 / nx)).astype(int)

    if max_shift > 0:
        allowed = (np.abs(offsets_y)[:, None] <= max_shift) & (
            np.abs(offsets_x)[None, :] <= max_shift
        )
        cc = np.where(allowed, cc, -np.inf)

    iy, ix = np.unravel_index(np.argmax(cc), cc.shape)
    return (int(offsets_y[iy]), int(offsets_x[ix]))


def apply_shift(frame: np.ndarray, shift: Shift2D) -> np.ndarray:
    """
    Translate a frame by an integer shift, filling uncovered pixels with 0.

    Args:
        frame: Frame with shape (Y, X).
        shift: Tuple of (dy, dx); values are rounded to integers.

    Returns:
        Shifted frame with same shape and dtype.
    """
    dy, dx = (int(round(s)) for s in shift)
    ny, nx = frame.shape
    result = np.zeros_like(frame)
    if abs(dy) >= ny or abs(dx) >= nx:
        return result

    src_y = slice(max(0, -dy), ny - max(0, dy))
    src_x = slice(max(0, -dx), nx - max(0, dx))
    dst_y = slice(max(0, dy), ny - max(0, -dy))
    dst_x = slice(max(0, dx), nx - max(0, -dx))

    result[dst_y, dst_x] = frame[src_y, src_x]
    return result
