"""
Visualization utilities for mecanum drive runs.

This module loads the drive cycle CSV written by the data collector and plots
the requested versus limited body velocity on each axis and the resulting
wheel velocities. Stale-command braking is shaded on the wheel plot.
"""

import csv
from pathlib import Path
from typing import Dict, List, Optional

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from .config import (
    COLOR_BACKGROUND,
    COLOR_BRAKING,
    COLOR_EDGE,
    COLOR_FOREGROUND,
    COLOR_LIMITED,
    COLOR_REQUESTED,
    WHEEL_COLORS,
)
from .data_collector import DRIVE_HEADERS

AXIS_PLOTS = [
    ("v_x", "Forward velocity", "m/s"),
    ("v_y", "Lateral velocity", "m/s"),
    ("w_z", "Angular velocity", "rad/s"),
]


def load_drive_csv(csv_path: Path) -> Dict[str, np.ndarray]:
    """Load a drive CSV into one float array per column.

    Empty or non-numeric cells become NaN.

    Raises:
        FileNotFoundError: If the CSV file does not exist.
    """
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    with open(csv_path, newline="") as f:
        reader = csv.DictReader(f)
        columns: Dict[str, List[float]] = {name: [] for name in reader.fieldnames or []}
        for row in reader:
            for name, cell in row.items():
                try:
                    columns[name].append(float(cell))
                except (ValueError, TypeError):
                    columns[name].append(np.nan)

    return {name: np.array(values) for name, values in columns.items()}


def parse_drive_data(filepath: Path) -> Dict[str, np.ndarray]:
    """Parse drive cycle CSV data into numpy arrays.

    Timestamps are shifted so the run starts at zero.

    Args:
        filepath: Path to drive_data.csv.

    Returns:
        Dictionary with one numpy array per column of DRIVE_HEADERS.

    Raises:
        FileNotFoundError: If the CSV file does not exist.
        ValueError: If CSV headers are unexpected.
    """
    data = load_drive_csv(filepath)

    if list(data.keys()) != DRIVE_HEADERS:
        raise ValueError(f"Unexpected drive CSV headers: {list(data.keys())}")

    valid_mask = ~np.isnan(data["timestamp"])
    data = {key: values[valid_mask] for key, values in data.items()}

    if len(data["timestamp"]) > 0:
        data["timestamp"] = data["timestamp"] - data["timestamp"][0]

    return data


def _finish_axis(ax: Axes, title: str = "", xlabel: str = "", ylabel: str = "",
                 dark_mode: bool = True) -> None:
    """Label an axis, add grid and legend, and apply dark colors if requested."""
    text = {"color": COLOR_FOREGROUND} if dark_mode else {}
    if title:
        ax.set_title(title, fontweight="bold", **text)
    if xlabel:
        ax.set_xlabel(xlabel, **text)
    if ylabel:
        ax.set_ylabel(ylabel, **text)
    ax.grid(True, alpha=0.3, linestyle="--", linewidth=0.5)

    legend = {"loc": "upper right", "framealpha": 0.9, "edgecolor": COLOR_EDGE}
    if dark_mode:
        ax.set_facecolor(COLOR_BACKGROUND)
        ax.tick_params(colors=COLOR_FOREGROUND)
        for spine in ax.spines.values():
            spine.set_edgecolor(COLOR_EDGE)
        legend.update(facecolor=COLOR_BACKGROUND, labelcolor=COLOR_FOREGROUND)
    if ax.get_legend_handles_labels()[0]:
        ax.legend(**legend)


def plot_body_velocity(
    drive_data: Dict[str, np.ndarray],
    title: str = "Body Velocity",
    save_path: Optional[Path] = None,
    dark_mode: bool = True,
) -> Figure:
    """Plot requested and limited body velocity for each axis.

    Args:
        drive_data: Dictionary from parse_drive_data.
        title: Plot title prefix.
        save_path: Optional path to save the figure.
        dark_mode: Whether to use dark mode styling.

    Returns:
        Matplotlib figure object.
    """
    facecolor = COLOR_BACKGROUND if dark_mode else None
    fig, axes = plt.subplots(len(AXIS_PLOTS), 1, figsize=(12, 9), sharex=True, facecolor=facecolor)

    t = drive_data["timestamp"]
    for index, (ax, (prefix, label, unit)) in enumerate(zip(axes, AXIS_PLOTS)):
        ax.plot(t, drive_data[f"{prefix}_ref"], label="Requested", alpha=0.7,
                color=COLOR_REQUESTED, linestyle="--")
        ax.plot(t, drive_data[f"{prefix}_cmd"], label="Limited", color=COLOR_LIMITED)
        _finish_axis(
            ax,
            title=f"{title} - {label}",
            xlabel="Time (s)" if index == len(AXIS_PLOTS) - 1 else "",
            ylabel=f"{label} ({unit})",
            dark_mode=dark_mode,
        )

    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")

    return fig


def plot_wheel_velocities(
    drive_data: Dict[str, np.ndarray],
    title: str = "Wheel Velocities",
    save_path: Optional[Path] = None,
    dark_mode: bool = True,
) -> Figure:
    """Plot the four wheel angular velocities over time.

    Args:
        drive_data: Dictionary from parse_drive_data.
        title: Plot title.
        save_path: Optional path to save the figure.
        dark_mode: Whether to use dark mode styling.

    Returns:
        Matplotlib figure object.
    """
    facecolor = COLOR_BACKGROUND if dark_mode else None
    fig, ax = plt.subplots(figsize=(12, 6), facecolor=facecolor)

    t = drive_data["timestamp"]
    for index, color in enumerate(WHEEL_COLORS):
        ax.plot(t, drive_data[f"w{index}"], label=f"w{index}", color=color)

    braking = drive_data["braking"] > 0.5
    if np.any(braking):
        ax.fill_between(t, 0, 1, where=braking, transform=ax.get_xaxis_transform(),
                        color=COLOR_BRAKING, alpha=0.15, label="Braking")

    _finish_axis(ax, title=title, xlabel="Time (s)", ylabel="Angular velocity (rad/s)",
                 dark_mode=dark_mode)
    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")

    return fig


def plot_run_summary(run_dir: Path, save_plots: bool = False, show_plots: bool = True) -> None:
    """Generate summary plots for a complete run.

    Args:
        run_dir: Directory containing drive_data.csv.
        save_plots: If True, save plots to run directory.
        show_plots: If True, display plots interactively.

    Raises:
        FileNotFoundError: If required CSV files are not found.
    """
    drive_data = parse_drive_data(run_dir / "drive_data.csv")
    run_name = run_dir.name

    body_fig = plot_body_velocity(
        drive_data,
        title=run_name,
        save_path=run_dir / "body_velocity.png" if save_plots else None,
    )
    wheel_fig = plot_wheel_velocities(
        drive_data,
        title=f"{run_name} - Wheel Velocities",
        save_path=run_dir / "wheel_velocities.png" if save_plots else None,
    )

    if show_plots:
        plt.show()
    else:
        plt.close(body_fig)
        plt.close(wheel_fig)
