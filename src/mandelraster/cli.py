from __future__ import annotations

import argparse
import re
import sys
from dataclasses import replace
from pathlib import Path

from .config import (
    DEFAULT_THREADS,
    LIMIT,
    THRESHOLD,
    RenderConfig,
    load_named_sweep_configs,
    parse_complex,
    parse_mode,
    parse_pair,
)
from .execution import run_single_render, run_sweep

USAGE_EXAMPLE = "mandel.png 1000x750 -1.20,0.35 -1,0.20 1"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mandelraster",
        description="Render the Mandelbrot set to a grayscale image.",
        epilog=f"Example: %(prog)s {USAGE_EXAMPLE}",
    )
    parser.add_argument("file", nargs="?", metavar="FILE", help="Output image path")
    parser.add_argument("pixels", nargs="?", metavar="PIXELS", help="Image size as WIDTHxHEIGHT")
    parser.add_argument("upper_left", nargs="?", metavar="UPPERLEFT", help="Upper-left corner as RE,IM")
    parser.add_argument("lower_right", nargs="?", metavar="LOWERRIGHT", help="Lower-right corner as RE,IM")
    parser.add_argument("mode", nargs="?", metavar="MODE", help="0 for sequential, 1 for parallel")

    parser.add_argument("--threads", type=int, default=DEFAULT_THREADS, help="Number of row-bands in parallel mode")
    parser.add_argument("--limit", type=int, default=LIMIT, help="Iteration budget per pixel")
    parser.add_argument("--threshold", type=float, default=THRESHOLD, help="Escape threshold on |z|^2")
    parser.add_argument("--track", action="store_true", help="Log the run to MLflow")

    parser.add_argument("--sweep", type=str, help="Path to sweep YAML file")
    parser.add_argument("--suite", type=str, help="Name of suite/experiment within sweep file")
    parser.add_argument("--list-suites", action="store_true", help="List suites in sweep file")
    parser.add_argument("--task-id", type=int, help="Run specific config index within a suite")
    parser.add_argument("--output-dir", type=str, help="Write sweep images into this directory")
    # Corners such as "-1.20,0.35" or "-.5,-1e-1" are values, not options.
    # argparse has no public hook for this; relies on the private matcher
    # present in Python 3.10 through 3.13. "--" before the positionals also works.
    parser._negative_number_matcher = re.compile(r"^-\.?\d")
    return parser


def _usage_error(parser: argparse.ArgumentParser) -> int:
    parser.print_usage(sys.stderr)
    print(f"Example: {parser.prog} {USAGE_EXAMPLE}", file=sys.stderr)
    return 1


def _run_sweep_command(args: argparse.Namespace) -> int:
    sweep_path = Path(args.sweep)

    if args.list_suites:
        for name, configs in load_named_sweep_configs(sweep_path):
            print(f"{name or sweep_path.stem}: {len(configs)} configurations")
        return 0

    if args.task_id is not None and args.suite is None:
        sys.exit("ERROR: --task-id requires --suite")

    suites = load_named_sweep_configs(sweep_path, args.suite)

    exit_code = 0
    for suite_name, configs in suites:
        if args.output_dir:
            configs = [
                replace(cfg, output=str(Path(args.output_dir) / Path(cfg.output).name))
                for cfg in configs
            ]
        if args.task_id is not None:
            if args.task_id < 0 or args.task_id >= len(configs):
                print(f"ERROR: task-id {args.task_id} out of range [0, {len(configs) - 1}]", file=sys.stderr)
                return 1
            configs = [configs[args.task_id]]
        descriptor = f"{sweep_path}::{suite_name}" if suite_name else str(sweep_path)
        rc = run_sweep(configs, descriptor, suite_name, args.track)
        exit_code = exit_code or rc
    return exit_code


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.sweep:
        return _run_sweep_command(args)

    positional = [args.file, args.pixels, args.upper_left, args.lower_right, args.mode]
    if any(value is None for value in positional):
        return _usage_error(parser)

    bounds = parse_pair(args.pixels, "x", int)
    if bounds is None:
        sys.exit(f"ERROR: error parsing image dimensions: {args.pixels!r}")
    upper_left = parse_complex(args.upper_left)
    if upper_left is None:
        sys.exit(f"ERROR: error parsing upper left corner point: {args.upper_left!r}")
    lower_right = parse_complex(args.lower_right)
    if lower_right is None:
        sys.exit(f"ERROR: error parsing lower right corner point: {args.lower_right!r}")
    parallel = parse_mode(args.mode)
    if parallel is None:
        sys.exit(f"ERROR: error parsing <SEQUENTIAL:0|PARALLEL:1>: {args.mode!r}")

    try:
        config = RenderConfig(
            width=bounds[0],
            height=bounds[1],
            upper_left=upper_left,
            lower_right=lower_right,
            parallel=parallel,
            threads=args.threads,
            limit=args.limit,
            threshold=args.threshold,
            output=args.file,
        )
    except ValueError as exc:
        sys.exit(f"ERROR: {exc}")

    try:
        run_single_render(config, track=args.track)
    except OSError as exc:
        sys.exit(f"ERROR: error writing image file: {exc}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
