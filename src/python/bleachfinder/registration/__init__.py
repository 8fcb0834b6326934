"""Registration module for stack drift correction."""

from bleachfinder.registration._skimage_backend import phase_correlate_skimage
from bleachfinder.registration.phase_correlation import apply_shift, phase_correlate
from bleachfinder.registration.stack import Aligner, StackAlignment, register_stack

__all__ = [
    # Shift estimation
    "phase_correlate",
    "phase_correlate_skimage",
    "apply_shift",
    # Stack alignment
    "register_stack",
    "StackAlignment",
    "Aligner",
]
