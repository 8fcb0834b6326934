"""Pytest fixtures for bleachfinder tests."""

import json
from pathlib import Path

import numpy as np
import pytest

from bleachfinder.analysis import BleachConfig


@pytest.fixture(scope="session")
def mini_dataset(tmp_path_factory) -> Path:
    """Path to a generated mini synthetic dataset (stack.tif + ground truth)."""
    from bleachfinder.testdata import generate_synthetic_dataset

    path = tmp_path_factory.mktemp("synthetic") / "mini"
    generate_synthetic_dataset(path, preset="mini")
    return path


@pytest.fixture(scope="session")
def mini_ground_truth(mini_dataset: Path) -> dict:
    """Load ground truth metadata for mini dataset."""
    with open(mini_dataset / "ground_truth.json") as f:
        return json.load(f)


@pytest.fixture(scope="session")
def mini_stack():
    """In-memory mini stack and ground truth: one spot bleached at frame 10."""
    from bleachfinder.testdata import create_bleach_stack, get_preset_config

    return create_bleach_stack(get_preset_config("mini"))


@pytest.fixture
def mini_config() -> BleachConfig:
    """Analysis settings suited to the mini stack."""
    return BleachConfig(
        max_shift=0,
        ema_window_size=10,
        significance=10.0,
        min_region_size=20,
        bleached_border=1,
    )


@pytest.fixture
def block_stack() -> np.ndarray:
    """10-frame 20x20 uint8 stack: 5x5 block drops from 200 to 50 at frame 6.

    Background is 10 so that the block stays brighter than the background
    in the average projection (block mean 125).
    """
    frames = np.full((10, 20, 20), 10, dtype=np.uint8)
    frames[:5, 8:13, 8:13] = 200
    frames[5:, 8:13, 8:13] = 50
    return frames


@pytest.fixture
def block_config() -> BleachConfig:
    return BleachConfig(
        max_shift=0,
        ema_window_size=2,
        significance=5.0,
        min_region_size=4,
    )


@pytest.fixture(scope="session")
def blob_image() -> np.ndarray:
    """64x64 float image with well separated Gaussian blobs."""
    rng = np.random.RandomState(42)
    yy, xx = np.mgrid[:64, :64]
    image = np.zeros((64, 64))
    for _ in range(12):
        y, x = rng.randint(12, 52, size=2)
        sigma = rng.uniform(1.5, 3.0)
        image += rng.uniform(50, 200) * np.exp(
            -((yy - y) ** 2 + (xx - x) ** 2) / (2 * sigma**2)
        )
    return image


@pytest.fixture(scope="session")
def e2e_result(mini_dataset: Path, mini_ground_truth: dict):
    """Run the full analysis once on the mini dataset loaded from disk."""
    from bleachfinder.analysis import analyze_stack
    from bleachfinder.io import load_stack

    config = BleachConfig(
        max_shift=3,
        ema_window_size=10,
        significance=10.0,
        min_region_size=20,
        bleached_border=1,
    )
    stack = load_stack(mini_dataset / "stack.tif")
    analysis = analyze_stack(stack, config, name="stack.tif")
    return analysis, mini_ground_truth
