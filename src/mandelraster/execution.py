"""Execution helpers for Mandelbrot render workflows."""

from __future__ import annotations

import os
import sys
import time
from pathlib import Path
from typing import List, Optional, Tuple

from .computation import allocate_pixels, render
from .config import DEFAULT_THREADS, LIMIT, THRESHOLD, RenderConfig
from .parallel import run_parallel_render
from .report import RenderReport, aggregate_timing, band_record
from .sink import write_image


def _render_pixels_sequential(
    bounds: Tuple[int, int],
    upper_left: complex,
    lower_right: complex,
    limit: int,
    threshold: float,
) -> RenderReport:
    pixels = allocate_pixels(bounds)
    start_time = time.perf_counter()
    render(pixels, bounds, upper_left, lower_right, limit=limit, threshold=threshold)
    comp_time = time.perf_counter() - start_time
    records = [band_record(0, 0, bounds[1], upper_left, lower_right, comp_time)]
    return RenderReport(pixels, aggregate_timing(records, comp_time), records)


def _render_pixels_parallel(
    bounds: Tuple[int, int],
    upper_left: complex,
    lower_right: complex,
    thread_count: int,
    limit: int,
    threshold: float,
) -> RenderReport:
    pixels = allocate_pixels(bounds)
    timing, records = run_parallel_render(
        pixels,
        bounds,
        upper_left,
        lower_right,
        thread_count,
        limit=limit,
        threshold=threshold,
    )
    return RenderReport(pixels, timing, records)


def render_sequential(
    path: str | Path,
    bounds: Tuple[int, int],
    upper_left: complex,
    lower_right: complex,
    *,
    limit: int = LIMIT,
    threshold: float = THRESHOLD,
) -> RenderReport:
    """Render on the calling thread and write the image to ``path``."""
    report = _render_pixels_sequential(bounds, upper_left, lower_right, limit, threshold)
    write_image(path, report.pixels, bounds)
    return report


def render_parallel(
    path: str | Path,
    bounds: Tuple[int, int],
    upper_left: complex,
    lower_right: complex,
    thread_count: int = DEFAULT_THREADS,
    *,
    limit: int = LIMIT,
    threshold: float = THRESHOLD,
) -> RenderReport:
    """Render ``thread_count`` row-bands concurrently and write the image to ``path``."""
    report = _render_pixels_parallel(bounds, upper_left, lower_right, thread_count, limit, threshold)
    write_image(path, report.pixels, bounds)
    return report


def compute_pixels(config: RenderConfig) -> RenderReport:
    """Render ``config`` into memory without writing an image."""
    if config.parallel:
        return _render_pixels_parallel(
            config.bounds,
            config.upper_left,
            config.lower_right,
            config.threads,
            config.limit,
            config.threshold,
        )
    return _render_pixels_sequential(
        config.bounds,
        config.upper_left,
        config.lower_right,
        config.limit,
        config.threshold,
    )


def run_single_render(
    config: RenderConfig,
    suite_name: Optional[str] = None,
    track: bool = False,
) -> RenderReport:
    """Render a single configuration, write its image and optionally track it."""
    print(
        f"[Run] Starting render '{config.run_name}' "
        f"(mode={config.mode}, bands={config.total_bands}, "
        f"size={config.image_size}, limit={config.limit})",
        flush=True,
    )

    report = compute_pixels(config)
    output_path = write_image(config.output, report.pixels, config.bounds)
    print(f"[Run] Wrote {output_path}", flush=True)

    if track:
        from .tracking import log_to_mlflow

        suite = suite_name or os.environ.get("MANDELRASTER_SUITE") or "default"
        log_to_mlflow(config, report, suite)

    wall_time = report.timing.get("wall_time", 0.0)
    print(f"[Timing] Total: {wall_time:.4f}s")
    return report


def run_sweep(
    configs: List[RenderConfig],
    descriptor: str = "sweep",
    suite_name: Optional[str] = None,
    track: bool = False,
) -> int:
    """Render every configuration of a sweep and print a summary."""
    if not configs:
        print("ERROR: No configurations found in sweep", file=sys.stderr)
        return 1

    print("=" * 70)
    print(f"Running {len(configs)} configurations from {descriptor}")
    print("=" * 70)

    successes = 0
    failures: list[tuple[int, str]] = []

    for idx, cfg in enumerate(configs):
        print(f"\n[{idx + 1}/{len(configs)}] {cfg.run_name}")
        try:
            run_single_render(cfg, suite_name, track)
        except OSError as exc:
            print(f"    ✗ FAILED: {exc}", file=sys.stderr)
            failures.append((idx, cfg.run_name))
            continue
        successes += 1
        print("    ✓ Completed")

    print("\n" + "=" * 70)
    print("Summary")
    print("=" * 70)
    print(f"Total:      {len(configs)}")
    print(f"Successful: {successes}")
    print(f"Failed:     {len(failures)}")

    if failures:
        print("\nFailed configurations:")
        for idx, name in failures:
            print(f"  [{idx}] {name}")
        return 1

    return 0
