"""Synthetic photobleaching stacks for bleachfinder testing.

This module generates time-lapse stacks of a single bright cell with
bleached spots, optional recovery, global photobleaching and stage drift,
together with the ground truth needed to check the analysis.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Literal
import json

import numpy as np


@dataclass
class SyntheticBleachConfig:
    """Configuration for synthetic bleaching stack generation."""

    # Image dimensions
    height: int = 48
    width: int = 48
    n_frames: int = 30

    # Cell: a uniform disc in the image centre
    cell_radius: int = 18
    cell_intensity: float = 150.0

    # Bleached spots
    n_spots: int = 1
    spot_radius: int = 5
    bleach_frame: int = 10  # 0-based, first frame after the drop
    bleach_depth: float = 0.4  # fraction of the signal removed
    recovery_rate: float = 0.0  # per frame; 0 = no recovery

    # Global photobleaching of the whole cell, per frame
    bleaching_rate: float = 0.0

    # Noise and background
    background: float = 20.0
    noise_std: float = 2.0
    add_noise: bool = True

    # Stage drift per frame (frame 0 is never shifted)
    max_drift: int = 0

    # Output dtype
    dtype: Literal["uint8", "uint16", "float32"] = "uint16"

    # Random seed for reproducibility
    seed: int = 42


def get_preset_config(preset: Literal["mini", "standard"]) -> SyntheticBleachConfig:
    """Get predefined configuration for a preset.

    Parameters
    ----------
    preset : {"mini", "standard"}
        - "mini": 48x48x30, one permanently bleached spot (fast unit tests)
        - "standard": 128x128x60, 3 recovering spots, global bleaching and
          drift (integration tests)

    Returns
    -------
    SyntheticBleachConfig
        Configuration for the specified preset
    """
    presets = {
        "mini": SyntheticBleachConfig(seed=42),
        "standard": SyntheticBleachConfig(
            height=128,
            width=128,
            n_frames=60,
            cell_radius=48,
            n_spots=3,
            spot_radius=7,
            bleach_frame=15,
            bleach_depth=0.6,
            recovery_rate=0.1,
            bleaching_rate=0.005,
            max_drift=3,
            seed=42,
        ),
    }
    if preset not in presets:
        raise ValueError(f"Unknown preset: {preset}. Choose from: {list(presets.keys())}")
    return presets[preset]


def _disc(shape: tuple[int, int], center: tuple[int, int], radius: int) -> np.ndarray:
    yy, xx = np.ogrid[: shape[0], : shape[1]]
    return (yy - center[0]) ** 2 + (xx - center[1]) ** 2 <= radius**2


def _place_spots(
    config: SyntheticBleachConfig, rng: np.random.Generator
) -> list[tuple[int, int]]:
    """Random non-overlapping spot centres inside the cell."""
    cy, cx = config.height // 2, config.width // 2
    reach = config.cell_radius - config.spot_radius - 2
    min_distance = 2 * config.spot_radius + 3
    if reach < 0:
        raise ValueError("Spots do not fit inside the cell")

    centers: list[tuple[int, int]] = []
    for _ in range(1000 * max(1, config.n_spots)):
        if len(centers) == config.n_spots:
            break
        dy, dx = rng.integers(-reach, reach + 1, size=2)
        if dy * dy + dx * dx > reach * reach:
            continue
        candidate = (int(cy + dy), int(cx + dx))
        if all(
            (candidate[0] - y) ** 2 + (candidate[1] - x) ** 2 >= min_distance**2
            for y, x in centers
        ):
            centers.append(candidate)
    if len(centers) < config.n_spots:
        raise ValueError(f"Could not place {config.n_spots} separate spots")
    return centers


def create_shifted_stack(
    base_stack: np.ndarray,
    shift: tuple[int, ...],
) -> np.ndarray:
    """Create a shifted version of an image for registration testing.

    Parameters
    ----------
    base_stack : np.ndarray
        Original 2D frame or 3D stack
    shift : tuple[int, ...]
        Integer shift per axis, e.g. (dy, dx) or (dt, dy, dx)

    Returns
    -------
    np.ndarray
        Shifted image (same dtype as input), zero-filled
    """
    if len(shift) != base_stack.ndim:
        raise ValueError(f"Shift {shift} does not match {base_stack.ndim}D input")
    result = np.zeros_like(base_stack)

    src = []
    dst = []
    for d, n in zip(shift, base_stack.shape):
        if abs(d) >= n:
            return result
        src.append(slice(max(0, -d), min(n, n - d)))
        dst.append(slice(max(0, d), min(n, n + d)))

    result[tuple(dst)] = base_stack[tuple(src)]
    return result


def create_bleach_stack(
    config: SyntheticBleachConfig | None = None,
) -> tuple[np.ndarray, dict]:
    """Create a time-lapse stack with bleached spots and its ground truth.

    Returns
    -------
    tuple[np.ndarray, dict]
        Stack (T, Y, X) of ``config.dtype`` and ground truth with the spot
        centres, bleach frame and per-frame drift ``(dy, dx)``.
    """
    if config is None:
        config = SyntheticBleachConfig()
    if not 0 < config.bleach_frame < config.n_frames:
        raise ValueError(f"bleach_frame must be in [1, {config.n_frames})")

    rng = np.random.default_rng(config.seed)
    shape = (config.height, config.width)
    cell = _disc(shape, (config.height // 2, config.width // 2), config.cell_radius)
    centers = _place_spots(config, rng)
    spots = [_disc(shape, c, config.spot_radius) for c in centers]

    shifts = [(0, 0)]
    for _ in range(1, config.n_frames):
        dy, dx = rng.integers(-config.max_drift, config.max_drift + 1, size=2)
        shifts.append((int(dy), int(dx)))

    frames = np.empty((config.n_frames,) + shape, dtype=np.float64)
    for t in range(config.n_frames):
        signal = np.full(shape, config.cell_intensity)
        if t >= config.bleach_frame:
            elapsed = t - config.bleach_frame
            remaining = 1 - config.bleach_depth * np.exp(-config.recovery_rate * elapsed)
            for spot in spots:
                signal[spot] *= remaining
        signal *= np.exp(-config.bleaching_rate * t)

        frame = np.where(cell, signal, 0.0) + config.background
        frames[t] = create_shifted_stack(frame, shifts[t])
        # Background shows through the zero fill at the edges
        frames[t][frames[t] == 0] = config.background

    if config.add_noise and config.noise_std > 0:
        frames += rng.normal(0, config.noise_std, frames.shape)

    if config.dtype == "uint8":
        stack = np.clip(np.round(frames), 0, 255).astype(np.uint8)
    elif config.dtype == "uint16":
        stack = np.clip(np.round(frames), 0, 65535).astype(np.uint16)
    else:
        stack = frames.astype(np.float32)

    ground_truth = {
        "version": "1.0",
        "seed": config.seed,
        "shape": [config.n_frames, config.height, config.width],
        "bleach_frame": config.bleach_frame,
        "spots": [
            {"id": i + 1, "center": [y, x], "radius": config.spot_radius}
            for i, (y, x) in enumerate(centers)
        ],
        "shifts": [list(s) for s in shifts],
    }
    return stack, ground_truth


def generate_synthetic_dataset(
    output_dir: Path,
    config: SyntheticBleachConfig | None = None,
    preset: Literal["mini", "standard"] = "mini",
) -> dict:
    """Write a synthetic stack and its ground truth to ``output_dir``.

    Creates ``stack.tif`` (ImageJ TIFF, axes TYX) and ``ground_truth.json``.

    Returns
    -------
    dict
        Ground truth metadata
    """
    from bleachfinder.io import save_stack

    custom = config is not None
    if config is None:
        config = get_preset_config(preset)

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    stack, ground_truth = create_bleach_stack(config)
    ground_truth["preset"] = "custom" if custom else preset

    save_stack(stack, output_dir / "stack.tif")
    with open(output_dir / "ground_truth.json", "w") as f:
        json.dump(ground_truth, f, indent=2)

    return ground_truth
