"""MLflow tracking helpers."""

import mlflow
import pytest

from mandelraster import tracking
from mandelraster.config import RenderConfig
from mandelraster.execution import compute_pixels


@pytest.fixture
def report():
    config = RenderConfig(width=8, height=6, parallel=True, threads=3)
    return config, compute_pixels(config)


def test_records_to_table(report):
    _, result = report

    table = tracking._records_to_table(result.copy_bands())

    assert table["band"] == [0, 1, 2]
    assert table["rows"] == [2, 2, 2]
    assert table["top_row"] == [0, 2, 4]
    assert table["end_row"] == [2, 4, 6]
    assert len(table["comp_time"]) == 3


def test_copy_bands_is_detached(report):
    _, result = report

    copied = result.copy_bands()
    copied[0]["rows"] = 99

    assert result.bands[0]["rows"] == 2


def test_skip_mlflow(monkeypatch, report):
    config, result = report
    monkeypatch.setenv("SKIP_MLFLOW", "1")

    def fail(*args, **kwargs):
        raise AssertionError("MLflow must not be touched")

    monkeypatch.setattr(tracking.mlflow, "start_run", fail)
    monkeypatch.setattr(tracking.mlflow, "set_experiment", fail)

    assert tracking.log_to_mlflow(config, result) is None


def test_experiment_name_from_environment(monkeypatch):
    monkeypatch.delenv("MANDELRASTER_EXPERIMENT", raising=False)
    assert tracking._resolve_experiment_name() == "mandelraster"

    monkeypatch.setenv("MANDELRASTER_EXPERIMENT", "bands")
    assert tracking._resolve_experiment_name() == "bands"


def test_log_to_mlflow_records_run(monkeypatch, tmp_path, report, capsys):
    """A tracked run carries its tags, params, metrics, band table and figure."""
    config, result = report
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SKIP_MLFLOW", raising=False)
    monkeypatch.delenv("MLFLOW_RUN_ID", raising=False)
    monkeypatch.setenv("MLFLOW_TRACKING_URI", f"sqlite:///{tmp_path / 'm.db'}")
    monkeypatch.setenv("MANDELRASTER_EXPERIMENT", "tracking-test")

    tracking.log_to_mlflow(config, result, suite_name="bands")

    out = capsys.readouterr().out
    assert f"[MLflow] Logged run: {config.run_name} (suite: bands)" in out
    run_id = out.split("[MLflow] Run ID: ")[1].split()[0]
    run = mlflow.get_run(run_id)

    assert run.info.run_name == config.run_name
    assert run.data.tags["suite"] == "bands"
    assert run.data.tags["node_name"]

    params = run.data.params
    assert params["width"] == "8"
    assert params["height"] == "6"
    assert params["threads"] == "3"
    assert params["mode"] == "parallel"
    assert params["upper_left_re"] == str(config.upper_left.real)

    metrics = run.data.metrics
    assert metrics["total_bands"] == 3.0
    assert metrics["wall_time"] == pytest.approx(result.timing["wall_time"])
    assert metrics["comp_total"] == pytest.approx(result.timing["comp_total"])

    client = mlflow.MlflowClient()
    artifacts = {info.path for info in client.list_artifacts(run_id)}
    figures = {info.path for info in client.list_artifacts(run_id, "figures")}
    assert "bands.json" in artifacts
    assert "figures/mandelbrot.png" in figures
