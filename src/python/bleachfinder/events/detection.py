"""Bleaching event detection with a reverse-time exponential moving average.

Each foreground pixel trace is scanned from the last frame backwards. An
exponential moving average (EMA) and a rolling variance summarise the
recent (in scan order) intensity; after a spin-up of ``k`` steps, the first
sample that exceeds the EMA by more than ``significance`` standard
deviations marks a bleaching event: going forward in time, the intensity
dropped at the following frame.

The standard score is compared in squared form and without division::

    (x - ema)^2 > significance^2 * var

While ``var`` is still zero, any positive deviation counts as significant
(the limit of ``delta^2 / var`` is +inf). Steps with non-finite samples
neither trigger nor update the statistics.
"""

from __future__ import annotations

import logging
import math
import threading
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from bleachfinder.analysis.types import EventStack, Mask, Stack
from bleachfinder.errors import AnalysisCancelled
from bleachfinder.events.trace import TraceExtractor

logger = logging.getLogger(__name__)

# Cumulative EMA weight carried by the last k observations
WINDOW_WEIGHT = 0.999


def ema_alpha(window_size: int) -> float:
    """EMA weight giving the last ``window_size`` observations 99.9% of the total."""
    if window_size < 1:
        raise ValueError(f"window_size must be >= 1, got {window_size}")
    return 1.0 - math.exp(math.log(1.0 - WINDOW_WEIGHT) / window_size)


def score_threshold(significance: float) -> float:
    """Squared number of standard deviations for a significant jump."""
    return significance * significance


def detect_bleaching_event(
    trace: np.ndarray,
    alpha: float,
    k: int,
    threshold: float,
) -> int | None:
    """Find the frame at which a single trace drops significantly.

    Parameters
    ----------
    trace : np.ndarray
        Intensity per frame, shape (T,).
    alpha : float
        EMA update weight, see ``ema_alpha``.
    k : int
        Spin-up steps during which no event can trigger.
    threshold : float
        Squared standard-score threshold, see ``score_threshold``.

    Returns
    -------
    int or None
        0-based index of the first frame after the drop, or None. The
        index is never greater than ``T - 1 - k``.
    """
    trace = np.asarray(trace, dtype=np.float64)
    end = trace.size - 1
    eps = 1.0 - alpha

    ema = float(trace[end]) if end >= 0 else 0.0
    var = 0.0
    for i in range(1, end + 1):
        delta = float(trace[end - i]) - ema
        if not math.isfinite(delta):
            continue
        delta2 = delta * delta
        if i > k and delta > 0 and (var <= 0.0 or delta2 > threshold * var):
            return end - i + 1
        ema += alpha * delta
        var = eps * (var + alpha * delta2)

    return None


def _detect_chunk(
    traces: np.ndarray,
    alpha: float,
    k: int,
    threshold: float,
) -> np.ndarray:
    """Vectorised detect_bleaching_event over (T, n) traces; -1 = no event."""
    end = traces.shape[0] - 1
    eps = 1.0 - alpha
    n = traces.shape[1]

    events = np.full(n, -1, dtype=np.intp)
    active = np.ones(n, dtype=bool)
    ema = traces[end].copy()
    var = np.zeros(n)

    with np.errstate(invalid="ignore", over="ignore"):
        for i in range(1, end + 1):
            delta = traces[end - i] - ema
            finite = np.isfinite(delta)
            delta2 = delta * delta
            if i > k:
                hit = (
                    active
                    & finite
                    & (delta > 0)
                    & ((var <= 0.0) | (delta2 > threshold * var))
                )
                events[hit] = end - i + 1
                active &= ~hit
                if not active.any():
                    break
            update = active & finite
            ema = np.where(update, ema + alpha * delta, ema)
            var = np.where(update, eps * (var + alpha * delta2), var)

    return events


def detect_bleaching_events(
    stack: Stack,
    mask: Mask,
    alpha: float,
    k: int,
    threshold: float,
    *,
    n_workers: int = 1,
    chunk_size: int = 4096,
    cancel: threading.Event | None = None,
) -> EventStack:
    """Detect the bleaching event of every foreground pixel.

    Foreground pixels are split into chunks processed independently (on a
    thread pool when ``n_workers > 1``); each chunk writes only its own
    pixels of the output.

    Args:
        stack: Aligned stack (T, Y, X).
        mask: Boolean foreground mask (Y, X); background is skipped.
        alpha: EMA update weight.
        k: Spin-up steps.
        threshold: Squared standard-score threshold.
        n_workers: Number of worker threads.
        chunk_size: Pixels per work unit.
        cancel: Checked before each chunk.

    Returns:
        Boolean event stack (T, Y, X) with at most one True per pixel.

    Raises:
        AnalysisCancelled: If ``cancel`` was set before all chunks ran;
            ``partial`` holds the events of the completed chunks.
    """
    mask = np.asarray(mask, dtype=bool)
    if mask.shape != (stack.height, stack.width):
        raise ValueError(
            f"Mask shape {mask.shape} does not match frame shape "
            f"{(stack.height, stack.width)}"
        )

    extractor = TraceExtractor(stack)
    indices = np.flatnonzero(mask)
    events = np.zeros((stack.n_frames, stack.height, stack.width), dtype=bool)
    flat_events = events.reshape(stack.n_frames, -1)

    chunks = [indices[i : i + chunk_size] for i in range(0, indices.size, chunk_size)]

    def run_chunk(chunk: np.ndarray) -> bool:
        if cancel is not None and cancel.is_set():
            return False
        found = _detect_chunk(extractor.traces(chunk), alpha, k, threshold)
        hit = found >= 0
        flat_events[found[hit], chunk[hit]] = True
        return True

    if n_workers > 1 and len(chunks) > 1:
        with ThreadPoolExecutor(max_workers=n_workers) as ex:
            completed = list(ex.map(run_chunk, chunks))
    else:
        completed = []
        for chunk in chunks:
            completed.append(run_chunk(chunk))
            if not completed[-1]:
                break

    if len(completed) < len(chunks) or not all(completed):
        raise AnalysisCancelled("Event detection cancelled", partial=events)

    logger.debug(
        f"Detected {int(events.sum())} bleaching events in {indices.size} "
        f"foreground pixels"
    )
    return events
