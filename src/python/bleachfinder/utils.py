"""General-purpose utilities for bleachfinder."""

import numpy as np


def make_projection(stack: np.ndarray, method: str = "mean") -> np.ndarray:
    """Project a (T, Y, X) stack along the time axis (axis 0).

    Parameters
    ----------
    stack : np.ndarray
        Input stack with shape (T, Y, X).
    method : str
        Projection method: "mean" (average intensity, float64, matching
        ImageJ's AVG projection) or "max" (maximum intensity, input dtype).

    Returns
    -------
    np.ndarray
        Projected image with shape (Y, X).
    """
    if method == "mean":
        return np.mean(stack, axis=0, dtype=np.float64)
    elif method == "max":
        return np.max(stack, axis=0)
    else:
        raise ValueError(f"Unknown projection method: {method!r}. Use 'mean' or 'max'.")
