"""Command-line photobleach analysis of a TIFF stack.

Usage:
    python -m bleachfinder stack.tif --results-dir results/
    python -m bleachfinder stack.tif --settings ~/.bleachfinder.json --save-settings
"""

import argparse
import logging
import sys
from pathlib import Path

from bleachfinder.analysis import BleachConfig, CropWindow, SettingsStore, analyze_stack
from bleachfinder.analysis.logging import setup_logging
from bleachfinder.errors import BleachfinderError
from bleachfinder.io import load_stack


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bleachfinder",
        description="Detect photobleaching events in a time-lapse TIFF stack",
    )
    parser.add_argument("image", type=Path, help="Input TIFF stack")
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="JSON file with the last used settings (defaults if missing)",
    )
    parser.add_argument(
        "--save-settings",
        action="store_true",
        help="Write the effective settings back to --settings",
    )
    parser.add_argument("--channel", type=int, default=0, help="Channel index")
    parser.add_argument(
        "--roi",
        type=int,
        nargs=4,
        metavar=("Y", "X", "HEIGHT", "WIDTH"),
        default=None,
        help="Restrict analysis to a rectangle",
    )

    group = parser.add_argument_group("analysis options (override settings)")
    group.add_argument("--alignment-slice", type=int)
    group.add_argument("--max-shift", type=int)
    group.add_argument(
        "--no-translation",
        dest="apply_translation",
        action="store_false",
        default=None,
        help="Only crop to the common region; do not translate frames",
    )
    group.add_argument("--aligner", choices=["fft", "skimage"])
    group.add_argument("--ema-window-size", type=int)
    group.add_argument("--significance", type=float)
    group.add_argument("--min-region-size", type=int)
    group.add_argument("--bleached-border", type=int)
    group.add_argument(
        "--nested-models", action="store_true", default=None,
        help="Fit the nested recovery models",
    )
    group.add_argument(
        "--show-alignment-offsets", action="store_true", default=None
    )
    group.add_argument("--results-dir", type=str)
    group.add_argument("--workers", dest="n_workers", type=int)

    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Debug logging"
    )
    return parser


def resolve_config(args: argparse.Namespace) -> BleachConfig:
    """Saved settings (or defaults) updated with command-line overrides."""
    config = (
        SettingsStore(args.settings).load() if args.settings else BleachConfig()
    ).to_dict()
    for key in config:
        value = getattr(args, key, None)
        if value is not None:
            config[key] = value
    return BleachConfig.from_dict(config)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    logger = logging.getLogger("bleachfinder")

    try:
        config = resolve_config(args)
        if args.save_settings and args.settings:
            SettingsStore(args.settings).save(config)

        roi = None
        if args.roi is not None:
            y, x, height, width = args.roi
            roi = CropWindow(y, y + height, x, x + width)

        stack = load_stack(args.image, channel=args.channel)
        analysis = analyze_stack(stack, config, roi, name=args.image.name)
    except (BleachfinderError, FileNotFoundError, IndexError) as exc:
        logger.error(str(exc))
        return 1

    n_regions = len(analysis.regions)
    print(f"{args.image.name}: {n_regions} bleached region(s)")
    for region in analysis.regions:
        y, x = region.centroid_in(analysis.origin)
        print(
            f"  [{region.label}] frame {region.frame + 1} "
            f"({x:.1f},{y:.1f}) = {region.area} pixels"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
