"""Test numerical correctness of the compiled renderers against the plain-Python baseline."""

from pathlib import Path

import numpy as np
import pytest

from mandelraster.baseline import compute_mandelbrot
from mandelraster.config import load_sweep_configs
from mandelraster.execution import compute_pixels

TEST_CONFIGS = load_sweep_configs(Path(__file__).with_name("test_configs.yaml"))


@pytest.mark.parametrize("config", TEST_CONFIGS, ids=lambda c: c.run_name)
def test_render_matches_baseline(config):
    """Render in memory and compare to baseline."""

    report = compute_pixels(config)

    baseline = compute_mandelbrot(
        config.bounds, config.upper_left, config.lower_right, config.limit, config.threshold
    )

    np.testing.assert_array_equal(report.pixels, baseline, err_msg=f"Mismatch: {config.run_name}")
    assert report.timing["total_bands"] == config.total_bands


def test_sweep_covers_both_modes():
    modes = {config.mode for config in TEST_CONFIGS}
    assert modes == {"sequential", "parallel"}
