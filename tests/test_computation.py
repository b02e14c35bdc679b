"""Coordinate mapping, escape time and the sequential renderer."""

import numpy as np
import pytest

from mandelraster.computation import allocate_pixels, escape_time, pixel_to_point, render

BOUNDS = (100, 200)
UPPER_LEFT = complex(-1.0, 1.0)
LOWER_RIGHT = complex(1.0, -1.0)


def test_pixel_to_point_example():
    assert pixel_to_point(BOUNDS, (25, 175), UPPER_LEFT, LOWER_RIGHT) == complex(-0.5, -0.75)


@pytest.mark.parametrize(
    "pixel",
    [(0, 0), (100, 0), (0, 200), (100, 200), (50, 100), (0, 100), (99, 199)],
    ids=str,
)
def test_pixel_to_point_matches_linear_interpolation(pixel):
    """Border, corner and centre pixels follow the closed form."""
    column, row = pixel
    expected_re = UPPER_LEFT.real + column * (LOWER_RIGHT.real - UPPER_LEFT.real) / BOUNDS[0]
    expected_im = UPPER_LEFT.imag - row * (UPPER_LEFT.imag - LOWER_RIGHT.imag) / BOUNDS[1]

    point = pixel_to_point(BOUNDS, pixel, UPPER_LEFT, LOWER_RIGHT)

    assert point.real == pytest.approx(expected_re, abs=1e-15)
    assert point.imag == pytest.approx(expected_im, abs=1e-15)


def test_pixel_to_point_corners():
    assert pixel_to_point(BOUNDS, (0, 0), UPPER_LEFT, LOWER_RIGHT) == UPPER_LEFT
    assert pixel_to_point(BOUNDS, BOUNDS, UPPER_LEFT, LOWER_RIGHT) == LOWER_RIGHT
    assert pixel_to_point(BOUNDS, (50, 100), UPPER_LEFT, LOWER_RIGHT) == 0j


@pytest.mark.parametrize("limit", [1, 2, 10, 255, 1000])
def test_origin_never_escapes(limit):
    assert escape_time(0j, limit) is None


def test_far_point_escapes_immediately():
    assert escape_time(complex(5.0, 5.0), 255) == 0


def test_escape_index_is_zero_based():
    # z: 1, 2 (|z|^2 == 4 is not past the threshold), 5
    assert escape_time(complex(1.0, 0.0), 255) == 2


def test_boundary_point_stays_bounded():
    # z settles on 2 with |z|^2 == 4 exactly, which never exceeds the threshold
    assert escape_time(complex(-2.0, 0.0), 255) is None


def test_limit_bounds_the_work():
    assert escape_time(complex(1.0, 0.0), 2) is None
    assert escape_time(complex(1.0, 0.0), 3) == 2


def test_threshold_is_configurable():
    assert escape_time(complex(1.0, 0.0), 255, threshold=30.0) == 3
    assert escape_time(complex(1.0, 0.0), 255, threshold=0.5) == 0


def test_render_intensities():
    """Escaped points get 255 - count, bounded points stay black."""
    bounds = (2, 1)
    pixels = allocate_pixels(bounds)
    # pixel (0, 0) -> 0j, pixel (1, 0) -> 5+0j
    render(pixels, bounds, complex(0.0, 0.0), complex(10.0, -1.0))

    assert pixels.dtype == np.uint8
    assert pixels[0] == 0
    assert pixels[1] == 255


def test_render_is_idempotent():
    first = allocate_pixels(BOUNDS)
    second = allocate_pixels(BOUNDS)

    render(first, BOUNDS, UPPER_LEFT, LOWER_RIGHT)
    render(second, BOUNDS, UPPER_LEFT, LOWER_RIGHT)

    np.testing.assert_array_equal(first, second)


def test_render_single_pixel():
    pixels = allocate_pixels((1, 1))
    render(pixels, (1, 1), complex(-0.5, 0.5), complex(0.5, -0.5))
    # the only sample maps to the upper-left corner
    expected = escape_time(complex(-0.5, 0.5))
    assert pixels[0] == (0 if expected is None else 255 - expected)


def test_render_rejects_mismatched_buffer():
    pixels = np.zeros(10, dtype=np.uint8)
    with pytest.raises(ValueError, match="need 12"):
        render(pixels, (3, 4), UPPER_LEFT, LOWER_RIGHT)
    assert not pixels.any()


def test_large_limit_does_not_wrap():
    """Escape counts past 255 clamp to the darkest escaped shade."""
    c = complex(0.25 + 5e-5, 0.0)
    count = escape_time(c, 5000)
    assert count is not None and count > 255

    pixels = allocate_pixels((1, 1))
    render(pixels, (1, 1), c, c + complex(1.0, -1.0), limit=5000)
    assert pixels[0] == 0
