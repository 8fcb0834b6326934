"""Tests for bleachfinder.utils module."""

import numpy as np
import pytest

from bleachfinder.utils import make_projection


class TestMakeProjection:
    """Tests for make_projection."""

    def test_mean(self):
        stack = np.array([[[0, 2]], [[4, 6]]], dtype=np.uint8)
        result = make_projection(stack, method="mean")
        assert result.dtype == np.float64
        np.testing.assert_array_equal(result, [[2.0, 4.0]])

    def test_mean_no_overflow(self):
        """uint8 frames are averaged without wrap-around."""
        stack = np.full((3, 2, 2), 250, dtype=np.uint8)
        assert np.all(make_projection(stack) == 250.0)

    def test_max(self):
        stack = np.array([[[1, 9]], [[5, 3]]], dtype=np.uint16)
        result = make_projection(stack, method="max")
        assert result.dtype == np.uint16
        np.testing.assert_array_equal(result, [[5, 9]])

    def test_invalid_method(self):
        with pytest.raises(ValueError, match="Unknown projection method"):
            make_projection(np.zeros((2, 2, 2)), method="median")
