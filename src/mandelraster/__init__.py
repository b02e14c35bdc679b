"""Mandelbrot raster rendering with sequential and row-band parallel renderers."""

__version__ = "1.0.0"

# Core computation and config - lightweight, no tracking stack
from .computation import escape_time, pixel_to_point, render, render_band
from .config import RenderConfig, default_render_config
from .execution import compute_pixels, render_parallel, render_sequential
from .partition import Band, partition_bands
from .report import RenderReport


# Conditional imports - only loaded when needed
def __getattr__(name):
    """Lazy loading of heavy modules."""
    if name == "log_to_mlflow":
        from .tracking import log_to_mlflow

        return log_to_mlflow
    elif name == "load_sweep_configs":
        from .config import load_sweep_configs

        return load_sweep_configs
    elif name == "get_config_by_index":
        from .config import get_config_by_index

        return get_config_by_index
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "Band",
    "RenderConfig",
    "RenderReport",
    "compute_pixels",
    "default_render_config",
    "escape_time",
    "get_config_by_index",
    "load_sweep_configs",
    "log_to_mlflow",
    "partition_bands",
    "pixel_to_point",
    "render",
    "render_band",
    "render_parallel",
    "render_sequential",
]
