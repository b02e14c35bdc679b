from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Tuple

import numpy as np
from numba import njit

from .config import LIMIT, THRESHOLD

if TYPE_CHECKING:
    from .partition import Band

__all__ = [
    "allocate_pixels",
    "escape_time",
    "pixel_to_point",
    "render",
    "render_band",
]

MAX_INTENSITY = 255


@njit(nogil=True)
def _pixel_to_point(
    width: int,
    height: int,
    column: int,
    row: int,
    upper_left_re: float,
    upper_left_im: float,
    lower_right_re: float,
    lower_right_im: float,
) -> Tuple[float, float]:
    span_re = lower_right_re - upper_left_re
    span_im = upper_left_im - lower_right_im
    re = upper_left_re + column * (span_re / width)
    im = upper_left_im - row * (span_im / height)
    return re, im


@njit(nogil=True)
def _escape_count(c_re: float, c_im: float, limit: int, threshold: float) -> int:
    # ``limit`` itself marks a point that never escaped.
    z_re = 0.0
    z_im = 0.0
    for i in range(limit):
        z_re, z_im = z_re * z_re - z_im * z_im + c_re, 2.0 * z_re * z_im + c_im
        if z_re * z_re + z_im * z_im > threshold:
            return i
    return limit


@njit(nogil=True)
def _render_rows(
    pixels: np.ndarray,
    width: int,
    height: int,
    upper_left_re: float,
    upper_left_im: float,
    lower_right_re: float,
    lower_right_im: float,
    row_offset: int,
    rows: int,
    limit: int,
    threshold: float,
) -> None:
    for local_row in range(rows):
        row = row_offset + local_row
        for column in range(width):
            c_re, c_im = _pixel_to_point(
                width, height, column, row,
                upper_left_re, upper_left_im, lower_right_re, lower_right_im,
            )
            count = _escape_count(c_re, c_im, limit, threshold)
            if count >= limit:
                pixels[local_row * width + column] = 0
            else:
                pixels[local_row * width + column] = MAX_INTENSITY - min(count, MAX_INTENSITY)


def allocate_pixels(bounds: Tuple[int, int]) -> np.ndarray:
    width, height = bounds
    return np.zeros(width * height, dtype=np.uint8)


def pixel_to_point(
    bounds: Tuple[int, int],
    pixel: Tuple[int, int],
    upper_left: complex,
    lower_right: complex,
) -> complex:
    """Map a ``(column, row)`` pixel onto the plane rectangle by linear interpolation."""
    re, im = _pixel_to_point(
        bounds[0], bounds[1], pixel[0], pixel[1],
        upper_left.real, upper_left.imag, lower_right.real, lower_right.imag,
    )
    return complex(re, im)


def escape_time(c: complex, limit: int = LIMIT, threshold: float = THRESHOLD) -> Optional[int]:
    """Return the 0-based iteration at which ``|z|**2`` first exceeds ``threshold``.

    ``None`` means the point did not escape within ``limit`` iterations and is
    presumed to belong to the Mandelbrot set.
    """
    count = _escape_count(c.real, c.imag, limit, threshold)
    if count >= limit:
        return None
    return count


def render(
    pixels: np.ndarray,
    bounds: Tuple[int, int],
    upper_left: complex,
    lower_right: complex,
    *,
    limit: int = LIMIT,
    threshold: float = THRESHOLD,
) -> None:
    """Fill ``pixels`` row by row with the grayscale escape-time image."""
    width, height = bounds
    if pixels.size != width * height:
        raise ValueError(
            f"Pixel buffer holds {pixels.size} samples but bounds {width}x{height} "
            f"need {width * height}"
        )
    _render_rows(
        pixels, width, height,
        upper_left.real, upper_left.imag, lower_right.real, lower_right.imag,
        0, height, limit, threshold,
    )


def render_band(
    band: Band,
    bounds: Tuple[int, int],
    upper_left: complex,
    lower_right: complex,
    *,
    limit: int = LIMIT,
    threshold: float = THRESHOLD,
) -> None:
    """Render one band in place.

    Rows are addressed by their index in the full image so that every band
    computes exactly the points the sequential renderer would.
    """
    width, height = bounds
    if band.pixels.size != band.rows * width:
        raise ValueError(
            f"Band {band.index} holds {band.pixels.size} samples but needs {band.rows * width}"
        )
    _render_rows(
        band.pixels, width, height,
        upper_left.real, upper_left.imag, lower_right.real, lower_right.imag,
        band.top, band.rows, limit, threshold,
    )
