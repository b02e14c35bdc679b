"""MLflow logging for Mandelbrot renders."""

from __future__ import annotations

import os
from typing import Any, Dict, List, Sequence

import mlflow
import pandas as pd

from .config import RenderConfig
from .report import RenderReport

DEFAULT_EXPERIMENT_NAME = "mandelraster"


def log_to_mlflow(
    config: RenderConfig,
    report: RenderReport,
    suite_name: str = "default",
) -> None:
    """Log a render to MLflow with its image and raw band metrics.

    If MLFLOW_RUN_ID is set in the environment the existing run is
    continued, otherwise a new run named after the config is created.

    Args:
        config: Render configuration
        report: Combined outputs (pixels, timing stats, band table)
        suite_name: Name of the sweep suite, used for tagging/filtering
    """
    if os.environ.get("SKIP_MLFLOW"):
        return

    tracking_uri = _resolve_tracking_uri()
    if tracking_uri:
        mlflow.set_tracking_uri(tracking_uri)
    mlflow.set_experiment(_resolve_experiment_name())

    existing_run_id = os.environ.get("MLFLOW_RUN_ID")
    if existing_run_id:
        run_context = mlflow.start_run(run_id=existing_run_id)
    else:
        run_context = mlflow.start_run(run_name=config.run_name)

    with run_context as run:
        mlflow.set_tags(
            {
                "node_name": os.uname().nodename,
                "suite": suite_name,
            }
        )

        band_records = report.copy_bands()
        if band_records:
            mlflow.log_table(_records_to_table(band_records), "bands.json")

        mlflow.log_params(config.to_dict())

        timing_stats = report.timing or {}
        metrics = {
            "wall_time": float(timing_stats.get("wall_time", 0.0)),
            "comp_total": float(timing_stats.get("comp_total", 0.0)),
            "comp_max": float(timing_stats.get("comp_max", 0.0)),
            "total_bands": float(timing_stats.get("total_bands", 0)),
        }
        mlflow.log_metrics(metrics)

        import matplotlib

        matplotlib.use("Agg")
        from matplotlib import pyplot as plt

        fig, ax = plt.subplots(figsize=(6, 6))
        extent = (
            config.upper_left.real,
            config.lower_right.real,
            config.lower_right.imag,
            config.upper_left.imag,
        )
        ax.imshow(report.image(config.bounds), cmap="gray", vmin=0, vmax=255, extent=extent)
        ax.set_xlabel("Re(c)")
        ax.set_ylabel("Im(c)")
        mlflow.log_figure(fig, "figures/mandelbrot.png")
        plt.close(fig)

        print(f"[MLflow] Logged run: {config.run_name} (suite: {suite_name})")
        print(f"[MLflow] Run ID: {run.info.run_id}")


def _records_to_table(band_records: Sequence[Dict[str, Any]]) -> Dict[str, List[Any]]:
    """Convert row-wise band records into MLflow table format."""

    frame = pd.DataFrame.from_records(band_records)
    return frame.to_dict(orient="list")


def _resolve_tracking_uri() -> str | None:
    return os.environ.get("MLFLOW_TRACKING_URI")


def _resolve_experiment_name() -> str:
    return os.environ.get("MANDELRASTER_EXPERIMENT") or DEFAULT_EXPERIMENT_NAME
