"""Exponential bleaching and recovery models with analytic Jacobians.

Time ``t`` is in frames from the start of the fitted curve. All parameters
are non-negative; rates are per frame.
"""

from __future__ import annotations

from typing import Callable, NamedTuple

import numpy as np


def decay(params: np.ndarray, t: np.ndarray) -> np.ndarray:
    """``f(t) = y0 + B exp(-tau t)``; params ``(y0, B, tau)``."""
    y0, b, tau = params
    return y0 + b * np.exp(-tau * t)


def decay_jac(params: np.ndarray, t: np.ndarray) -> np.ndarray:
    _, b, tau = params
    x = np.exp(-tau * t)
    return np.column_stack([np.ones_like(t), x, -b * t * x])


def simple_recovery(params: np.ndarray, t: np.ndarray) -> np.ndarray:
    """``f(t) = y0 + A (1 - exp(-tau t))``; params ``(y0, A, tau)``."""
    y0, a, tau = params
    return y0 + a * (1 - np.exp(-tau * t))


def simple_recovery_jac(params: np.ndarray, t: np.ndarray) -> np.ndarray:
    _, a, tau = params
    x = np.exp(-tau * t)
    return np.column_stack([np.ones_like(t), 1 - x, a * t * x])


def recovery(params: np.ndarray, t: np.ndarray) -> np.ndarray:
    """Recovery with decay of the recovered signal.

    ``f(t) = y0 + A (1 - exp(-tau1 t)) exp(-tau2 t)``; params
    ``(y0, A, tau1, tau2)``.
    """
    y0, a, tau1, tau2 = params
    return y0 + a * (1 - np.exp(-tau1 * t)) * np.exp(-tau2 * t)


def recovery_jac(params: np.ndarray, t: np.ndarray) -> np.ndarray:
    _, a, tau1, tau2 = params
    x1 = np.exp(-tau1 * t)
    x2 = np.exp(-tau2 * t)
    ut = a * (1 - x1)
    return np.column_stack(
        [np.ones_like(t), (1 - x1) * x2, a * t * x1 * x2, -ut * t * x2]
    )


def recovery_b(params: np.ndarray, t: np.ndarray) -> np.ndarray:
    """Recovery with decay of the recovered and the unbleached signal.

    ``f(t) = y0 + A (1 - exp(-tau1 t)) exp(-tau2 t) + B exp(-tau2 t)``;
    params ``(y0, A, tau1, B, tau2)``.
    """
    y0, a, tau1, b, tau2 = params
    x2 = np.exp(-tau2 * t)
    return y0 + a * (1 - np.exp(-tau1 * t)) * x2 + b * x2


def recovery_b_jac(params: np.ndarray, t: np.ndarray) -> np.ndarray:
    _, a, tau1, b, tau2 = params
    x1 = np.exp(-tau1 * t)
    x2 = np.exp(-tau2 * t)
    ut = a * (1 - x1)
    return np.column_stack(
        [
            np.ones_like(t),
            (1 - x1) * x2,
            a * t * x1 * x2,
            x2,
            -ut * t * x2 - b * t * x2,
        ]
    )


class Model(NamedTuple):
    name: str
    function: Callable[[np.ndarray, np.ndarray], np.ndarray]
    jacobian: Callable[[np.ndarray, np.ndarray], np.ndarray]
    n_params: int
    rate_indices: tuple[int, ...]  # params that are rates (for half-lives)


DECAY = Model("decay", decay, decay_jac, 3, (2,))
SIMPLE_RECOVERY = Model(
    "simple_recovery", simple_recovery, simple_recovery_jac, 3, (2,)
)
RECOVERY = Model("recovery", recovery, recovery_jac, 4, (2, 3))
RECOVERY_B = Model("recovery_b", recovery_b, recovery_b_jac, 5, (2, 4))

MODELS = {m.name: m for m in (DECAY, SIMPLE_RECOVERY, RECOVERY, RECOVERY_B)}
