"""Baseline Mandelbrot implementation."""

from __future__ import annotations

from typing import Tuple

import numpy as np

from .config import LIMIT, THRESHOLD


def compute_mandelbrot(
    bounds: Tuple[int, int],
    upper_left: complex,
    lower_right: complex,
    limit: int = LIMIT,
    threshold: float = THRESHOLD,
) -> np.ndarray:
    """Compute the grayscale Mandelbrot buffer for provided bounds in plain Python."""
    width, height = bounds
    pixels = np.zeros(width * height, dtype=np.uint8)

    xconst = (lower_right.real - upper_left.real) / width
    yconst = (upper_left.imag - lower_right.imag) / height

    for row in range(height):
        c_im = upper_left.imag - row * yconst
        for column in range(width):
            c_re = upper_left.real + column * xconst
            z_re = z_im = 0.0
            for i in range(limit):
                z_re, z_im = z_re * z_re - z_im * z_im + c_re, 2.0 * z_re * z_im + c_im
                if z_re * z_re + z_im * z_im > threshold:
                    pixels[row * width + column] = 255 - min(i, 255)
                    break

    return pixels
