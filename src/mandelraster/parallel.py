"""Fork-join rendering of disjoint row-bands on a thread pool."""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Tuple

import numpy as np

from .computation import render_band
from .config import DEFAULT_THREADS, LIMIT, THRESHOLD
from .partition import Band, partition_bands
from .report import aggregate_timing, band_record

__all__ = ["run_parallel_render"]


def _band_log(index: int, message: str) -> None:
    """Emit a progress message for a given band."""
    print(f"[Band {index}] {message}", flush=True)


def _render_band_timed(
    band: Band,
    bounds: Tuple[int, int],
    upper_left: complex,
    lower_right: complex,
    limit: int,
    threshold: float,
) -> Dict[str, Any]:
    """Render a band and return its record with the elapsed time."""
    comp_start = time.perf_counter()
    render_band(band, bounds, upper_left, lower_right, limit=limit, threshold=threshold)
    comp_time = time.perf_counter() - comp_start
    _band_log(band.index, f"Rendering rows {band.top}:{band.end} took {comp_time:.4f}s")
    return band_record(band.index, band.top, band.rows, band.upper_left, band.lower_right, comp_time)


def run_parallel_render(
    pixels: np.ndarray,
    bounds: Tuple[int, int],
    upper_left: complex,
    lower_right: complex,
    thread_count: int = DEFAULT_THREADS,
    *,
    limit: int = LIMIT,
    threshold: float = THRESHOLD,
) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
    """Render ``pixels`` with one task per band and block until every band is done.

    The buffer is split into views before any task starts, so workers never
    touch each other's rows. The first exception raised by a band is re-raised
    here once the pool has shut down.
    """
    start_time = time.perf_counter()
    bands = partition_bands(pixels, bounds, upper_left, lower_right, thread_count)

    with ThreadPoolExecutor(max_workers=thread_count, thread_name_prefix="band") as executor:
        futures = [
            executor.submit(
                _render_band_timed, band, bounds, upper_left, lower_right, limit, threshold
            )
            for band in bands
        ]
        records = [future.result() for future in futures]

    total_time = time.perf_counter() - start_time
    return aggregate_timing(records, total_time), records
