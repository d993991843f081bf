"""Tests for run visualization."""

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pytest

from mecanum_control.config import COLOR_LIMITED, COLOR_REQUESTED, WHEEL_COLORS
from mecanum_control.data_collector import DRIVE_HEADERS, DataCollector
from mecanum_control.plot_results import find_latest_run
from mecanum_control.visualization import (
    load_drive_csv,
    parse_drive_data,
    plot_body_velocity,
    plot_run_summary,
    plot_wheel_velocities,
)


@pytest.fixture
def run_dir(tmp_path):
    run = tmp_path / "results" / "run_20261017_120000"
    with DataCollector(run_dir=str(run)) as collector:
        for step in range(5):
            diagnostics = {key: float(step) for key in DRIVE_HEADERS[1:]}
            diagnostics["braking"] = 1.0 if step > 2 else 0.0
            collector.log_drive_cycle(100.0 + 0.02 * step, diagnostics)
    return run


def test_parse_drive_data_starts_at_zero(run_dir):
    data = parse_drive_data(run_dir / "drive_data.csv")
    assert list(data.keys()) == DRIVE_HEADERS
    assert data["timestamp"][0] == 0.0
    assert data["w3"][-1] == 4.0


def test_parse_rejects_unexpected_headers(tmp_path):
    path = tmp_path / "drive_data.csv"
    path.write_text("timestamp,x\n0,1\n")
    with pytest.raises(ValueError, match="headers"):
        parse_drive_data(path)


def test_plot_run_summary_saves_figures(run_dir):
    plot_run_summary(run_dir, save_plots=True, show_plots=False)
    assert (run_dir / "body_velocity.png").exists()
    assert (run_dir / "wheel_velocities.png").exists()


def test_load_drive_csv_marks_bad_cells_as_nan(tmp_path):
    path = tmp_path / "drive_data.csv"
    path.write_text("timestamp,w0\n0.0,1.5\n0.02,\n")
    data = load_drive_csv(path)
    assert data["w0"][0] == 1.5
    assert np.isnan(data["w0"][1])


def test_plots_use_drive_palette(run_dir):
    data = parse_drive_data(run_dir / "drive_data.csv")

    body_fig = plot_body_velocity(data)
    requested, limited = body_fig.axes[0].get_lines()
    assert requested.get_color() == COLOR_REQUESTED
    assert limited.get_color() == COLOR_LIMITED

    wheel_fig = plot_wheel_velocities(data)
    assert [line.get_color() for line in wheel_fig.axes[0].get_lines()] == WHEEL_COLORS

    plt.close(body_fig)
    plt.close(wheel_fig)


def test_missing_run_data(tmp_path):
    with pytest.raises(FileNotFoundError):
        plot_run_summary(tmp_path, show_plots=False)


def test_find_latest_run(run_dir, tmp_path):
    (tmp_path / "results" / "run_20261016_090000").mkdir()
    assert find_latest_run(tmp_path / "results") == run_dir
