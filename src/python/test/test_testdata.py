"""Tests for synthetic bleaching stack generation."""

import json
from dataclasses import replace

import numpy as np
import pytest

from bleachfinder.io import load_stack
from bleachfinder.testdata import (
    SyntheticBleachConfig,
    create_bleach_stack,
    create_shifted_stack,
    generate_synthetic_dataset,
    get_preset_config,
)


class TestCreateBleachStack:
    """Tests for create_bleach_stack."""

    def test_mini_shape(self, mini_stack):
        stack, gt = mini_stack
        assert stack.shape == (30, 48, 48)
        assert stack.dtype == np.uint16
        assert gt["shape"] == [30, 48, 48]
        assert gt["bleach_frame"] == 10
        assert len(gt["spots"]) == 1
        assert gt["shifts"] == [[0, 0]] * 30

    def test_exact_values_without_noise(self):
        config = replace(get_preset_config("mini"), add_noise=False)
        stack, gt = create_bleach_stack(config)
        cy, cx = gt["spots"][0]["center"]

        assert stack[0, cy, cx] == 170
        assert stack[9, cy, cx] == 170
        assert stack[10, cy, cx] == 110
        assert stack[29, cy, cx] == 110
        assert stack[0, 0, 0] == 20
        assert stack[15, 24, 24 - 17] in (110, 170)

    def test_recovery(self):
        config = SyntheticBleachConfig(
            add_noise=False, recovery_rate=0.1, dtype="float32"
        )
        stack, gt = create_bleach_stack(config)
        cy, cx = gt["spots"][0]["center"]

        expected = 150 * (1 - 0.4 * np.exp(-1.0)) + 20
        assert stack[20, cy, cx] == pytest.approx(expected, rel=1e-5)
        assert stack.dtype == np.float32

    def test_global_bleaching(self):
        config = SyntheticBleachConfig(
            add_noise=False, bleaching_rate=0.01, dtype="float32"
        )
        stack, _ = create_bleach_stack(config)
        assert stack[5, 24, 10] == pytest.approx(150 * np.exp(-0.05) + 20, rel=1e-5)

    def test_drift(self):
        config = SyntheticBleachConfig(max_drift=2, add_noise=False)
        stack, gt = create_bleach_stack(config)
        shifts = np.array(gt["shifts"])

        assert tuple(shifts[0]) == (0, 0)
        assert np.abs(shifts).max() <= 2
        dy, dx = gt["shifts"][3]
        np.testing.assert_array_equal(
            stack[3, 10:38, 10:38], stack[0, 10 - dy : 38 - dy, 10 - dx : 38 - dx]
        )

    def test_spots_inside_cell(self):
        config = replace(get_preset_config("standard"), add_noise=False)
        _, gt = create_bleach_stack(config)
        assert len(gt["spots"]) == 3
        for spot in gt["spots"]:
            cy, cx = spot["center"]
            distance = np.hypot(cy - 64, cx - 64)
            assert distance + spot["radius"] <= config.cell_radius

    def test_deterministic(self):
        first, _ = create_bleach_stack(get_preset_config("mini"))
        second, _ = create_bleach_stack(get_preset_config("mini"))
        np.testing.assert_array_equal(first, second)

    def test_invalid_bleach_frame(self):
        with pytest.raises(ValueError, match="bleach_frame"):
            create_bleach_stack(SyntheticBleachConfig(bleach_frame=0))

    def test_unknown_preset(self):
        with pytest.raises(ValueError, match="Unknown preset"):
            get_preset_config("huge")


class TestCreateShiftedStack:
    """Tests for create_shifted_stack."""

    def test_2d(self):
        base = np.arange(16, dtype=np.uint8).reshape(4, 4)
        shifted = create_shifted_stack(base, (1, -1))
        assert shifted[1, 0] == base[0, 1]
        assert np.all(shifted[0] == 0)
        assert np.all(shifted[:, -1] == 0)

    def test_large_shift(self):
        base = np.ones((4, 4))
        assert not create_shifted_stack(base, (0, 4)).any()

    def test_mismatched_shift(self):
        with pytest.raises(ValueError):
            create_shifted_stack(np.ones((4, 4)), (1, 1, 1))


class TestGenerateSyntheticDataset:
    """Tests for generate_synthetic_dataset."""

    def test_files(self, mini_dataset, mini_ground_truth):
        assert (mini_dataset / "stack.tif").exists()
        assert (mini_dataset / "ground_truth.json").exists()
        assert mini_ground_truth["preset"] == "mini"
        assert mini_ground_truth["version"] == "1.0"

    def test_stack_matches_memory(self, mini_dataset, mini_stack):
        stack, _ = mini_stack
        np.testing.assert_array_equal(load_stack(mini_dataset / "stack.tif").frames, stack)

    def test_custom_config(self, tmp_path):
        config = SyntheticBleachConfig(n_frames=8, bleach_frame=4, dtype="uint8")
        gt = generate_synthetic_dataset(tmp_path / "custom", config=config)

        assert gt["preset"] == "custom"
        with open(tmp_path / "custom" / "ground_truth.json") as f:
            assert json.load(f) == gt
        assert load_stack(tmp_path / "custom" / "stack.tif").n_frames == 8


class TestGeneratorCli:
    """Tests for python -m bleachfinder.testdata."""

    def test_overrides(self, tmp_path, capsys):
        from bleachfinder.testdata.__main__ import main

        output = tmp_path / "cli"
        code = main(
            ["--output", str(output), "--frames", "12", "--bleach-frame", "6",
             "--dtype", "uint8", "--no-noise"]
        )
        assert code == 0

        with open(output / "ground_truth.json") as f:
            gt = json.load(f)
        assert gt["shape"][0] == 12
        assert gt["bleach_frame"] == 6
        stack = load_stack(output / "stack.tif")
        assert stack.frames.dtype == np.uint8
        assert "bleach at frame 7" in capsys.readouterr().out
