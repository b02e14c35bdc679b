"""Structured results returned from a render."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class RenderReport:
    """Container for outputs produced by the sequential and parallel renderers."""

    pixels: np.ndarray
    timing: Dict[str, Any]
    bands: Optional[List[Dict[str, Any]]]

    def copy_bands(self) -> Optional[List[Dict[str, Any]]]:
        if self.bands is None:
            return None
        return [record.copy() for record in self.bands]

    def image(self, bounds: Tuple[int, int]) -> np.ndarray:
        """Return the buffer as a ``(height, width)`` array."""
        width, height = bounds
        return self.pixels.reshape(height, width)


def band_record(
    index: int,
    top: int,
    rows: int,
    upper_left: complex,
    lower_right: complex,
    comp_time: float,
) -> Dict[str, Any]:
    """Create a uniform band metadata record."""
    return {
        "band": int(index),
        "top_row": int(top),
        "end_row": int(top + rows),
        "rows": int(rows),
        "comp_time": comp_time,
        "upper_left_re": upper_left.real,
        "upper_left_im": upper_left.imag,
        "lower_right_re": lower_right.real,
        "lower_right_im": lower_right.imag,
    }


def aggregate_timing(records: List[Dict[str, Any]], wall_time: float) -> Dict[str, Any]:
    """Aggregate wall-clock timing plus per-band statistics."""
    comp_times = [float(record["comp_time"]) for record in records]
    comp_total = sum(comp_times)
    return {
        "wall_time": float(wall_time),
        "comp_total": comp_total,
        "comp_max": max(comp_times, default=0.0),
        "total_bands": len(records),
    }
