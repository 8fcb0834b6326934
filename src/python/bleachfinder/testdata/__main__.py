"""Write a synthetic photobleaching stack and its ground truth.

Usage:
    python -m bleachfinder.testdata --preset mini --output fixtures/mini
    python -m bleachfinder.testdata --preset standard --drift 2 --output fixtures/drift
"""

import argparse
from pathlib import Path

from .synthetic import generate_synthetic_dataset, get_preset_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m bleachfinder.testdata",
        description="Generate a synthetic photobleaching time-lapse stack",
    )
    parser.add_argument("--output", type=Path, required=True)
    parser.add_argument(
        "--preset", choices=["mini", "standard"], default="mini"
    )
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--frames", dest="n_frames", type=int, default=None)
    parser.add_argument("--bleach-frame", type=int, default=None,
                        help="0-based first frame after the bleach")
    parser.add_argument("--depth", dest="bleach_depth", type=float, default=None)
    parser.add_argument("--recovery-rate", type=float, default=None)
    parser.add_argument("--bleaching-rate", type=float, default=None)
    parser.add_argument("--drift", dest="max_drift", type=int, default=None,
                        help="Largest per-frame stage drift in pixels")
    parser.add_argument("--no-noise", action="store_true")
    parser.add_argument(
        "--dtype", choices=["uint8", "uint16", "float32"], default=None
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    config = get_preset_config(args.preset)
    for key in (
        "seed",
        "n_frames",
        "bleach_frame",
        "bleach_depth",
        "recovery_rate",
        "bleaching_rate",
        "max_drift",
        "dtype",
    ):
        value = getattr(args, key)
        if value is not None:
            setattr(config, key, value)
    if args.no_noise:
        config.add_noise = False

    ground_truth = generate_synthetic_dataset(args.output, config=config)

    t, y, x = ground_truth["shape"]
    print(f"{t} frames of {y}x{x}, bleach at frame {ground_truth['bleach_frame'] + 1}")
    for spot in ground_truth["spots"]:
        cy, cx = spot["center"]
        print(f"  spot {spot['id']}: ({cx},{cy}) r={spot['radius']}")
    print(f"Wrote {args.output / 'stack.tif'}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
