"""CSV export of region time series."""

from __future__ import annotations

import logging
import re
from pathlib import Path

import pandas as pd

from bleachfinder.regions.summary import TimeSeries

logger = logging.getLogger(__name__)

_SIZE_HEADER = re.compile(r"#\s*Size\s*=\s*(\d+)")


def results_prefix(name: str) -> str:
    """File prefix from an image name: extension removed, spaces to '_'."""
    return Path(name).stem.replace(" ", "_")


def save_time_series(
    series: TimeSeries,
    results_dir: Path | str,
    prefix: str,
) -> list[Path]:
    """
    Write one CSV per region and one for the remaining foreground.

    Files are ``{prefix}_region{i}.csv`` (i = 1..N) and
    ``{prefix}_foreground.csv``. Each starts with a ``# Size = n`` comment
    holding the pixel count, followed by ``Frame,Mean`` rows with 1-based
    frames. Labels without pixels are written as NaN.

    Returns:
        Paths of the written files, in label order.
    """
    results_dir = Path(results_dir)
    results_dir.mkdir(parents=True, exist_ok=True)

    table = series.to_frame()
    paths = []
    for column, count in zip(table.columns, series.counts):
        path = results_dir / f"{prefix}_{column}.csv"
        with open(path, "w", newline="") as handle:
            handle.write(f"# Size = {int(count)}\n")
            table[column].rename("Mean").to_csv(
                handle, header=True, na_rep="NaN", lineterminator="\n"
            )
        paths.append(path)

    logger.info(f"Saved {len(paths)} time series to {results_dir}")
    return paths


def load_time_series(path: Path | str) -> tuple[int, pd.Series]:
    """
    Read a CSV written by ``save_time_series``.

    Returns:
        (pixel count, mean intensity indexed by 1-based frame).
    """
    path = Path(path)
    with open(path) as handle:
        match = _SIZE_HEADER.match(handle.readline())
    if match is None:
        raise ValueError(f"Missing '# Size = n' header in {path}")

    table = pd.read_csv(path, comment="#", index_col="Frame")
    return int(match.group(1)), table["Mean"]
