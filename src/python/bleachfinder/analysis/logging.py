"""Logging setup and step timing for the photobleach analysis."""

import logging
from functools import wraps
from time import perf_counter

from bleachfinder.errors import AnalysisCancelled

logger = logging.getLogger("bleachfinder")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(verbose: bool = False) -> None:
    """Route package log records to stderr (DEBUG when verbose)."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT
    )


def log_step(func):
    """Time an analysis step and stop early once cancelled.

    The wrapped method's instance must have ``name`` and ``cancel``
    (a ``threading.Event`` or None). A set event raises
    ``AnalysisCancelled`` before the step starts; results of completed
    steps stay on the instance.
    """

    @wraps(func)
    def wrapper(self, *args, **kwargs):
        step = func.__name__
        if self.cancel is not None and self.cancel.is_set():
            logger.warning(f"[{self.name}] Cancelled before {step}")
            raise AnalysisCancelled(f"Cancelled before {step}")

        logger.info(f"[{self.name}] {step}...")
        start = perf_counter()
        try:
            result = func(self, *args, **kwargs)
        except AnalysisCancelled:
            logger.warning(f"[{self.name}] Cancelled during {step}")
            raise
        except Exception as e:
            logger.error(f"[{self.name}] {step} failed: {e}")
            raise
        logger.info(f"[{self.name}] Completed {step} in {perf_counter() - start:.2f}s")
        return result

    return wrapper
