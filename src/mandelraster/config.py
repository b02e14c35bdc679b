"""Configuration objects, argument parsers and YAML sweep loading."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from itertools import product
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Tuple, TypeVar

import yaml

T = TypeVar("T")

LIMIT = 255
THRESHOLD = 4.0
DEFAULT_THREADS = 8
COMPLEX_SEPARATOR = ","
SIZE_SEPARATOR = "x"


@dataclass(frozen=True)
class RenderConfig:
    """Runtime configuration for a single Mandelbrot render."""

    width: int
    height: int
    upper_left: complex = complex(-1.20, 0.35)
    lower_right: complex = complex(-1.0, 0.20)
    parallel: bool = False
    threads: int = DEFAULT_THREADS
    limit: int = LIMIT
    threshold: float = THRESHOLD
    output: str = "mandel.png"

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image bounds must be positive, got {self.width}x{self.height}")
        if self.threads <= 0:
            raise ValueError(f"threads must be positive, got {self.threads}")
        if self.limit <= 0:
            raise ValueError(f"limit must be positive, got {self.limit}")
        if self.threshold <= 0:
            raise ValueError(f"threshold must be positive, got {self.threshold}")

    @property
    def bounds(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def mode(self) -> str:
        return "parallel" if self.parallel else "sequential"

    @property
    def total_bands(self) -> int:
        return self.threads if self.parallel else 1

    @property
    def run_name(self) -> str:
        """Generate unique run name embedding all parameters."""
        return (
            f"{self.mode}_t{self.total_bands}_l{self.limit}_"
            f"{self.width}x{self.height}_"
            f"{_format_complex(self.upper_left)}_{_format_complex(self.lower_right)}"
        )

    @property
    def image_size(self) -> str:
        return f"{self.width}{SIZE_SEPARATOR}{self.height}"

    def to_dict(self) -> dict:
        """Convert to a flat dictionary for MLflow logging."""
        data = asdict(self)
        for key in ("upper_left", "lower_right"):
            point = data.pop(key)
            data[f"{key}_re"] = point.real
            data[f"{key}_im"] = point.imag
        data["mode"] = self.mode
        return data


DEFAULT_RENDER_CONFIG = RenderConfig(width=1000, height=750)


def default_render_config(**overrides: object) -> RenderConfig:
    """Return the canonical default config optionally overridden with kwargs."""
    return replace(DEFAULT_RENDER_CONFIG, **_coerce_fields(overrides))


def parse_pair(s: str, separator: str, kind: Callable[[str], T] = int) -> Optional[Tuple[T, T]]:
    """Split ``s`` at the first ``separator`` and convert both halves with ``kind``.

    Returns ``None`` when the separator is absent or either half does not
    convert, e.g. ``parse_pair("45*50", "*") == (45, 50)``. Halves padded
    with whitespace or written with ``_`` digit separators are rejected even
    though ``int`` and ``float`` would accept them.
    """
    index = s.find(separator)
    if index == -1:
        return None
    halves = s[:index], s[index + len(separator):]
    if any(half != half.strip() or "_" in half for half in halves):
        return None
    try:
        return kind(halves[0]), kind(halves[1])
    except ValueError:
        return None


def parse_complex(s: str) -> Optional[complex]:
    """Parse ``"RE,IM"`` into a complex number, or ``None``."""
    pair = parse_pair(s, COMPLEX_SEPARATOR, float)
    if pair is None:
        return None
    re, im = pair
    return complex(re, im)


def parse_mode(s: str) -> Optional[bool]:
    """``"0"`` selects the sequential renderer, ``"1"`` the parallel one."""
    return {"0": False, "1": True}.get(s)


def parse_image_size(value: str) -> Tuple[int, int]:
    pair = parse_pair(value.lower().strip(), SIZE_SEPARATOR, int)
    if pair is None:
        raise ValueError(f"Image size must look like WIDTHxHEIGHT, got {value!r}")
    return pair


def load_sweep_configs(yaml_path: str | Path) -> List[RenderConfig]:
    """Load a sweep file and return every render it describes, suite after suite.

    The file holds either a single top-level ``sweep`` block or a list of
    named ``experiments``, each with its own ``defaults`` and ``sweep``.
    """
    cfg = _read_sweep_file(yaml_path)
    return [
        config
        for _, defaults, sweep in _sweep_blocks(cfg, yaml_path)
        for config in _expand_sweep(defaults, sweep)
    ]


def get_config_by_index(yaml_path: str | Path, index: int) -> RenderConfig:
    """Get a specific config by index from sweep."""
    configs = load_sweep_configs(yaml_path)
    if index < 0 or index >= len(configs):
        raise ValueError(f"Config index {index} out of range [0, {len(configs) - 1}]")
    return configs[index]


def load_named_sweep_configs(
    yaml_path: str | Path,
    suite: str | None = None,
) -> List[Tuple[str, List[RenderConfig]]]:
    """Return ``(suite name, configs)`` pairs, optionally only for ``suite``."""
    cfg = _read_sweep_file(yaml_path)
    results = [
        (name, _expand_sweep(defaults, sweep))
        for name, defaults, sweep in _sweep_blocks(cfg, yaml_path)
        if suite is None or name == suite
    ]
    if suite is not None and not results:
        raise ValueError(f"Suite '{suite}' not found in {yaml_path}")
    return results


def _read_sweep_file(yaml_path: str | Path) -> Dict[str, object]:
    with open(yaml_path) as f:
        return yaml.safe_load(f) or {}


def _sweep_blocks(
    cfg: Dict[str, object],
    yaml_path: str | Path,
) -> Iterator[Tuple[str, Dict[str, object], Dict[str, object]]]:
    """Yield ``(name, merged defaults, sweep)`` for each suite in a sweep file."""
    defaults = cfg.get("defaults") or {}
    if "experiments" not in cfg:
        name = cfg.get("name") or Path(yaml_path).stem
        yield name, defaults, cfg.get("sweep") or {}
        return
    for position, experiment in enumerate(cfg.get("experiments") or []):
        name = experiment.get("name") or f"experiment_{position}"
        merged = {**defaults, **(experiment.get("defaults") or {})}
        yield name, merged, experiment.get("sweep") or {}


def _build_render_config(raw_data: Dict[str, object]) -> RenderConfig:
    data = _coerce_fields(raw_data)
    output_dir = data.pop("output_dir", None)
    config = RenderConfig(**data)  # type: ignore[arg-type]
    if output_dir is not None and "output" not in data:
        config = replace(config, output=str(Path(str(output_dir)) / f"{config.run_name}.png"))
    return config


def _expand_sweep(defaults: Dict[str, object], sweep: Dict[str, object]) -> List[RenderConfig]:
    """Expand a sweep block into the cartesian product of its axes.

    ``domains`` varies slowest and ``image_shape`` fastest. Every other key
    lists values for the ``RenderConfig`` field of the same name; a scalar is
    a one-value axis. A block with no axes yields a single config built from
    ``defaults``.
    """
    axes: List[List[Dict[str, object]]] = []
    if sweep.get("domains"):
        axes.append([_domain_fields(domain) for domain in sweep["domains"]])
    for key, values in sweep.items():
        if key in ("domains", "image_shape"):
            continue
        if not isinstance(values, (list, tuple)):
            values = [values]
        axes.append([{key: value} for value in values])
    if sweep.get("image_shape"):
        axes.append(_shape_fields(sweep["image_shape"]))

    configs = []
    for combo in product(*axes):
        data = dict(defaults)
        for fields in combo:
            data.update(fields)
        configs.append(_build_render_config(data))
    return configs


def _domain_fields(domain: object) -> Dict[str, object]:
    if not isinstance(domain, (list, tuple)) or len(domain) != 2:
        raise ValueError(f"Domain must be [upper_left, lower_right], got {domain!r}")
    upper_left, lower_right = domain
    return {"upper_left": upper_left, "lower_right": lower_right}


def _shape_fields(shapes: object) -> List[Dict[str, object]]:
    entries = shapes if isinstance(shapes, list) else [shapes]
    fields = []
    for entry in entries:
        width, height = _coerce_shape(entry)
        fields.append({"width": width, "height": height})
    return fields


def _coerce_fields(data: Dict[str, object]) -> Dict[str, object]:
    result = dict(data)
    image = result.pop("image_size", None)
    if image is not None:
        width, height = _coerce_shape(image)
        result.setdefault("width", width)
        result.setdefault("height", height)
    shape = result.pop("image_shape", None)
    if shape is not None:
        width, height = _coerce_shape(shape)
        result.setdefault("width", width)
        result.setdefault("height", height)
    for key in ("width", "height", "threads", "limit"):
        if key in result:
            result[key] = int(result[key])
    if "threshold" in result:
        result["threshold"] = float(result["threshold"])
    if "parallel" in result:
        result["parallel"] = _coerce_mode(result["parallel"])
    for key in ("upper_left", "lower_right"):
        if key in result:
            result[key] = _coerce_point(result[key])
    return result


def _coerce_mode(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        if value.lower() in {"parallel", "sequential"}:
            return value.lower() == "parallel"
        parsed = parse_mode(value)
        if parsed is not None:
            return parsed
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    raise ValueError(f"Unsupported render mode: {value!r}")


def _coerce_point(value: object) -> complex:
    if isinstance(value, complex):
        return value
    if isinstance(value, str):
        point = parse_complex(value)
        if point is None:
            raise ValueError(f"Complex point must look like RE,IM, got {value!r}")
        return point
    if isinstance(value, (list, tuple)) and len(value) == 2:
        return complex(float(value[0]), float(value[1]))
    raise ValueError(f"Unsupported complex point specification: {value!r}")


def _coerce_shape(value: object) -> Tuple[int, int]:
    """Accept ``"WxH"``, ``[W, H]`` or ``{width: W, height: H}``."""
    if isinstance(value, str):
        return parse_image_size(value)
    if isinstance(value, dict):
        try:
            return int(value["width"]), int(value["height"])
        except KeyError as exc:
            raise ValueError(f"image_shape mapping is missing {exc.args[0]!r}") from exc
    if isinstance(value, (list, tuple)) and len(value) == 2:
        width, height = value
        return int(width), int(height)
    raise ValueError(f"Unsupported image shape specification: {value!r}")


def _format_complex(point: complex) -> str:
    return f"{point.real:g},{point.imag:g}"
