"""Analysis configuration and last-used settings persistence."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Literal

from bleachfinder.errors import ConfigError

logger = logging.getLogger(__name__)

# Largest foreground border removed around bleached regions
MAX_BORDER = 5


@dataclass
class BleachConfig:
    """Parameters of one photobleach analysis run.

    Passed explicitly into every step; nothing here is process-wide state.
    Defaults match the ImageJ photobleach analysis dialog.
    """

    # Alignment
    alignment_slice: int = 0  # 0 = average projection, else 1-based frame
    max_shift: int = 40  # 0 = unrestricted
    apply_translation: bool = True
    aligner: Literal["fft", "skimage"] = "fft"

    # Event detection
    ema_window_size: int = 10
    significance: float = 10.0

    # Regions
    min_region_size: int = 100
    bleached_border: int = 1

    # Kinetics
    nested_models: bool = False

    # Intermediate outputs
    show_alignment_offsets: bool = False
    show_aligned_image: bool = False
    show_bleaching_events: bool = False
    show_bleached_regions: bool = False

    results_dir: str = ""

    # Execution
    n_workers: int = 1
    chunk_size: int = 4096

    def validate(self) -> None:
        """Check value ranges. Raises ConfigError if violated."""
        if self.alignment_slice < 0:
            raise ConfigError(
                f"alignment_slice must be >= 0, got {self.alignment_slice}"
            )
        if self.max_shift < 0:
            raise ConfigError(f"max_shift must be >= 0, got {self.max_shift}")
        if self.aligner not in ("fft", "skimage"):
            raise ConfigError(
                f"aligner must be 'fft' or 'skimage', got {self.aligner!r}"
            )
        if self.ema_window_size < 1:
            raise ConfigError(
                f"ema_window_size must be >= 1, got {self.ema_window_size}"
            )
        if not self.significance > 0:
            raise ConfigError(f"significance must be > 0, got {self.significance}")
        if self.min_region_size < 1:
            raise ConfigError(
                f"min_region_size must be >= 1, got {self.min_region_size}"
            )
        if not 0 <= self.bleached_border <= MAX_BORDER:
            raise ConfigError(
                f"bleached_border must be in [0, {MAX_BORDER}], "
                f"got {self.bleached_border}"
            )
        if self.n_workers < 1:
            raise ConfigError(f"n_workers must be >= 1, got {self.n_workers}")
        if self.chunk_size < 1:
            raise ConfigError(f"chunk_size must be >= 1, got {self.chunk_size}")

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, config: dict) -> BleachConfig:
        """Create a validated config; unknown keys are ignored."""
        names = {f.name for f in fields(cls)}
        unknown = set(config) - names
        if unknown:
            logger.debug(f"Ignoring unknown settings: {sorted(unknown)}")
        result = cls(**{k: v for k, v in config.items() if k in names})
        result.validate()
        return result


class SettingsStore:
    """JSON file holding the last used BleachConfig."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def load(self) -> BleachConfig:
        """Load saved settings, or defaults if nothing was saved yet."""
        if not self.path.exists():
            return BleachConfig()
        with open(self.path) as f:
            return BleachConfig.from_dict(json.load(f))

    def save(self, config: BleachConfig) -> None:
        config.validate()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w") as f:
            json.dump(config.to_dict(), f, indent=2)
        tmp.replace(self.path)
