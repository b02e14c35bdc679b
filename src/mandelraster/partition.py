"""Row-band partitioning of a pixel buffer for concurrent rendering."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from .computation import pixel_to_point


@dataclass(frozen=True)
class Band:
    """A contiguous run of rows owned by exactly one worker.

    ``pixels`` is a view into the full buffer, never a copy, so writing to it
    fills the final image directly.
    """

    index: int
    top: int
    rows: int
    width: int
    pixels: np.ndarray
    upper_left: complex
    lower_right: complex

    @property
    def end(self) -> int:
        return self.top + self.rows

    @property
    def bounds(self) -> Tuple[int, int]:
        return self.width, self.rows


def rows_per_band(height: int, thread_count: int) -> int:
    if thread_count < 1:
        raise ValueError(f"thread_count must be at least 1, got {thread_count}")
    return -(-height // thread_count)


def partition_bands(
    pixels: np.ndarray,
    bounds: Tuple[int, int],
    upper_left: complex,
    lower_right: complex,
    thread_count: int,
) -> List[Band]:
    """Split ``pixels`` into ``thread_count`` disjoint row-bands.

    Every band but the last non-empty one holds ``ceil(height / thread_count)``
    rows; that one takes whatever is left and any bands past the bottom of the
    image are empty.
    """
    width, height = bounds
    if pixels.size != width * height:
        raise ValueError(
            f"Pixel buffer holds {pixels.size} samples but bounds {width}x{height} "
            f"need {width * height}"
        )
    band_height = rows_per_band(height, thread_count)

    bands: List[Band] = []
    for index in range(thread_count):
        top = min(index * band_height, height)
        rows = min(band_height, height - top)
        bands.append(
            Band(
                index=index,
                top=top,
                rows=rows,
                width=width,
                pixels=pixels[top * width:(top + rows) * width],
                upper_left=pixel_to_point(bounds, (0, top), upper_left, lower_right),
                lower_right=pixel_to_point(bounds, (width, top + rows), upper_left, lower_right),
            )
        )
    return bands
