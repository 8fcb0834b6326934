"""Bleaching and recovery kinetics of the reported time series."""

from bleachfinder.kinetics.fitting import (
    FitResult,
    f_test,
    fit_bleaching,
    fit_recovery,
)
from bleachfinder.kinetics.models import (
    DECAY,
    MODELS,
    RECOVERY,
    RECOVERY_B,
    SIMPLE_RECOVERY,
    Model,
    decay,
    recovery,
    recovery_b,
    simple_recovery,
)

__all__ = [
    "FitResult",
    "f_test",
    "fit_bleaching",
    "fit_recovery",
    "Model",
    "MODELS",
    "DECAY",
    "SIMPLE_RECOVERY",
    "RECOVERY",
    "RECOVERY_B",
    "decay",
    "simple_recovery",
    "recovery",
    "recovery_b",
]
