"""Least-squares fits of bleaching and recovery curves."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from scipy import stats
from scipy.optimize import least_squares

from bleachfinder.kinetics.models import (
    DECAY,
    RECOVERY,
    RECOVERY_B,
    SIMPLE_RECOVERY,
    Model,
)

logger = logging.getLogger(__name__)

LN2 = np.log(2)
MAX_ITERATIONS = 3000
# Nested model accepted below this F-test p-value
NESTED_P_VALUE = 0.01
# Smallest allowed parameter value; avoids sub-normal rates
MIN_PARAM = np.finfo(np.float64).tiny


@dataclass
class FitResult:
    """Parameters and residual sum of squares of one fitted model."""

    model: Model
    params: np.ndarray
    rss: float
    n_points: int

    @property
    def name(self) -> str:
        return self.model.name

    @property
    def half_lives(self) -> tuple[float, ...]:
        """ln(2) / rate for each rate parameter, in frames."""
        return tuple(float(LN2 / self.params[i]) for i in self.model.rate_indices)

    def predict(self, n_points: int | None = None) -> np.ndarray:
        """Fitted curve at t = 0, 1, ... (default: the fitted length)."""
        t = np.arange(self.n_points if n_points is None else n_points, dtype=float)
        return self.model.function(self.params, t)


def f_test(
    rss1: float, n_params1: int, rss2: float, n_params2: int, n_points: int
) -> tuple[float, float]:
    """Extra sum-of-squares F-test of a nested model 2 against model 1.

    Returns:
        (F statistic, p-value). A worse nested fit gives (0, 1).
    """
    if rss1 < rss2:
        return 0.0, 1.0
    dof = n_points - n_params2
    extra = n_params2 - n_params1
    if dof <= 0 or extra <= 0:
        raise ValueError("Nested model must add parameters and leave residual dof")
    if rss2 <= 0:
        return np.inf, 0.0
    f = ((rss1 - rss2) / extra) / (rss2 / dof)
    return float(f), float(stats.f.sf(f, extra, dof))


def _fit(model: Model, y: np.ndarray, x0: list[float]) -> FitResult | None:
    t = np.arange(y.size, dtype=float)
    start = np.maximum(np.asarray(x0, dtype=float), MIN_PARAM)
    if not np.all(np.isfinite(start)):
        logger.warning(f"Cannot fit {model.name}: invalid initial estimate {x0}")
        return None

    try:
        result = least_squares(
            lambda p: model.function(p, t) - y,
            start,
            jac=lambda p: model.jacobian(p, t),
            bounds=(MIN_PARAM, np.inf),
            ftol=1e-6,
            max_nfev=MAX_ITERATIONS,
        )
    except (ValueError, np.linalg.LinAlgError) as exc:
        logger.warning(f"Failed to fit {model.name} curve: {exc}")
        return None

    if result.status <= 0:
        logger.warning(f"Failed to fit {model.name} curve: {result.message}")
        return None

    residuals = result.fun
    return FitResult(
        model=model,
        params=result.x,
        rss=float(residuals @ residuals),
        n_points=y.size,
    )


def _usable(y: np.ndarray, n_params: int, what: str) -> bool:
    if y.size <= n_params:
        logger.warning(f"Cannot fit {what}: {y.size} points")
        return False
    if not np.all(np.isfinite(y)):
        logger.warning(f"Cannot fit {what}: no data")
        return False
    return True


def fit_bleaching(y: np.ndarray) -> FitResult | None:
    """Fit ``y0 + B exp(-tau t)`` to a bleaching curve.

    The initial rate comes from the first frame where the curve falls to
    half-way between its extremes.
    """
    y = np.asarray(y, dtype=np.float64)
    if not _usable(y, DECAY.n_params, "bleaching curve"):
        return None

    y_min = float(y.min())
    half = y_min + (float(y.max()) - y_min) / 2
    t = 1
    while t < y.size and y[t] > half:
        t += 1
    tau = LN2 / t
    b = (half - y_min) / np.exp(-tau * t)

    return _fit(DECAY, y, [y_min, b, tau])


def fit_recovery(
    y: np.ndarray,
    event: int,
    tau2: float,
    nested: bool = False,
) -> FitResult | None:
    """Fit the recovery of a bleached region after its bleaching event.

    Parameters
    ----------
    y : np.ndarray
        Mean intensity of the region per frame.
    event : int
        0-based frame of the bleaching event; the curve from this frame on
        is fitted.
    tau2 : float
        Initial estimate of the general bleaching rate (from the
        foreground fit), used by the nested models.
    nested : bool
        Also fit ``recovery`` and ``recovery_b`` and keep each one that
        improves the fit with F-test p < 0.01.

    Returns
    -------
    FitResult or None
        Best accepted fit; None if the simple fit fails.
    """
    y = np.asarray(y, dtype=np.float64)
    if not 0 <= event < y.size:
        raise ValueError(f"Event frame {event} outside [0, {y.size})")
    curve = y[event:]
    if not _usable(curve, SIMPLE_RECOVERY.n_params, "recovery curve"):
        return None

    y0 = float(curve[0])
    a = float(curve[-1]) - y0
    half = y0 + a / 2
    t = 1
    while t < curve.size and curve[t] < half:
        t += 1
    tau1 = LN2 / t

    best = _fit(SIMPLE_RECOVERY, curve, [y0, a, tau1])
    if best is None or not nested:
        return best

    y0, a, tau1 = best.params
    b = y0 / 100
    candidates = [
        (RECOVERY, [y0, a, tau1, tau2]),
        (RECOVERY_B, [y0 - b, a, tau1, b, tau2]),
    ]
    for model, x0 in candidates:
        if curve.size <= model.n_params:
            break
        fit = _fit(model, curve, x0)
        if fit is None:
            continue
        f, p = f_test(
            best.rss, best.model.n_params, fit.rss, model.n_params, curve.size
        )
        logger.info(
            f"  {model.name}: rss1={best.rss:.4g}, rss2={fit.rss:.4g}, "
            f"p(F-Test={f:.4g}) = {p:.4g}"
        )
        if p < NESTED_P_VALUE:
            best = fit

    return best
