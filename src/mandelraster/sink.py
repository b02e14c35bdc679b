"""Grayscale image output."""

from __future__ import annotations

from pathlib import Path
from typing import Tuple

import numpy as np
import PIL.Image

DEFAULT_FORMAT = "png"


def _pil_format_name(ext: str) -> str:
    upper = ext.upper()
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def write_image(path: str | Path, pixels: np.ndarray, bounds: Tuple[int, int]) -> Path:
    """Write ``pixels`` as a single-channel 8-bit image of ``bounds`` to ``path``.

    The format follows the file extension and defaults to PNG. Failures to
    create or write the file surface as ``OSError``.
    """
    width, height = bounds
    if pixels.size != width * height:
        raise ValueError(
            f"Pixel buffer holds {pixels.size} samples but bounds {width}x{height} "
            f"need {width * height}"
        )

    output_path = Path(path).expanduser()
    image_format = output_path.suffix.lstrip(".") or DEFAULT_FORMAT
    raster = np.ascontiguousarray(pixels, dtype=np.uint8).reshape(height, width)
    image = PIL.Image.fromarray(raster)

    pil_format = _pil_format_name(image_format)
    if pil_format not in PIL.Image.registered_extensions().values():
        raise ValueError(f"Unsupported image format: {image_format!r}")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(str(output_path), format=pil_format)
    return output_path
