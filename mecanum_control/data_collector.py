"""Data collection and CSV logging for mecanum drive commands.

This module provides CSV data logging for:
- Body velocity commands received from the command source
- Drive cycles (requested command, limited command, wheel velocities)
- Run configuration (geometry and limits used)
"""

import csv
import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, TextIO

from .config import TERM_BLUE, TERM_RESET

COMMAND_HEADERS = ["timestamp", "linear_x", "linear_y", "angular_z"]
DRIVE_HEADERS = [
    "timestamp",
    "v_x_ref",
    "v_y_ref",
    "w_z_ref",
    "v_x_cmd",
    "v_y_cmd",
    "w_z_cmd",
    "braking",
    "w0",
    "w1",
    "w2",
    "w3",
]


class DataCollector:
    """Manages CSV file creation and logging for drive data.

    Attributes:
        run_dir: Directory path for this run's output files.
        command_csv_file: File handle for received commands CSV.
        drive_csv_file: File handle for drive cycle CSV.
        config_output_path: Path for the run configuration JSON file.
    """

    def __init__(self, output_dir: str = ".", run_dir: Optional[str] = None) -> None:
        """Initialize the data collector.

        Args:
            output_dir: Base directory for output files (default: current directory).
            run_dir: Optional specific run directory. If None, creates timestamped
                directory. Can also be set via RUN_DIR environment variable.

        Raises:
            ValueError: If output_dir is not a valid directory.
        """
        output_path = Path(output_dir)
        if output_path.exists() and not output_path.is_dir():
            raise ValueError(f"Output path exists but is not a directory: {output_dir}")

        # CSV file handles
        self.command_csv_file: Optional[TextIO] = None
        self.command_csv_writer: Any = None
        self.drive_csv_file: Optional[TextIO] = None
        self.drive_csv_writer: Any = None

        # Determine run directory
        if run_dir:
            self.run_dir: Path = Path(run_dir)
        elif env_run_dir := os.environ.get("RUN_DIR"):
            self.run_dir = Path(env_run_dir)
        else:
            # Create timestamped directory: results/run_YYYYMMDD_HHMMSS/
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.run_dir = output_path / "results" / f"run_{timestamp}"

        self.run_dir.mkdir(parents=True, exist_ok=True)

        self.command_output_path: Path = self.run_dir / "command_data.csv"
        self.drive_output_path: Path = self.run_dir / "drive_data.csv"
        self.config_output_path: Path = self.run_dir / "config.json"

    def setup(self) -> None:
        """Initialize CSV files with headers.

        Must be called before writing data.
        """
        self.command_csv_file = open(self.command_output_path, "w", newline="")
        self.command_csv_writer = csv.writer(self.command_csv_file)
        self.command_csv_writer.writerow(COMMAND_HEADERS)
        self.command_csv_file.flush()

        self.drive_csv_file = open(self.drive_output_path, "w", newline="")
        self.drive_csv_writer = csv.writer(self.drive_csv_file)
        self.drive_csv_writer.writerow(DRIVE_HEADERS)
        self.drive_csv_file.flush()

        print(
            f"{TERM_BLUE}✓ Initialized data collection to results/{self.run_dir.name}/{TERM_RESET}"
        )

    def log_command(
        self, timestamp: float, linear_x: float, linear_y: float, angular_z: float
    ) -> None:
        """Log a received body velocity command to CSV.

        Args:
            timestamp: Receive time (seconds).
            linear_x: Forward velocity (m/s).
            linear_y: Lateral velocity (m/s).
            angular_z: Angular velocity (rad/s).
        """
        self.command_csv_writer.writerow([timestamp, linear_x, linear_y, angular_z])
        if self.command_csv_file:
            self.command_csv_file.flush()

    def log_drive_cycle(self, timestamp: float, diagnostics: Dict[str, float]) -> None:
        """Log one drive cycle to CSV.

        Args:
            timestamp: Current time (seconds).
            diagnostics: Dictionary from MecanumDriveController.get_diagnostics
                with keys matching DRIVE_HEADERS (except 'timestamp').
        """
        self.drive_csv_writer.writerow(
            [timestamp] + [diagnostics[key] for key in DRIVE_HEADERS[1:]]
        )
        if self.drive_csv_file:
            self.drive_csv_file.flush()

    def log_config(self, config: Dict[str, Any]) -> None:
        """Save the run configuration to a JSON file.

        Args:
            config: Configuration dictionary (e.g. DriveConfig.to_dict()).
        """
        with open(self.config_output_path, "w") as f:
            json.dump(config, f, indent=2)

    def cleanup(self) -> None:
        """Close all CSV files and log final output location."""
        if self.command_csv_file:
            self.command_csv_file.close()
        if self.drive_csv_file:
            self.drive_csv_file.close()

        print(f"{TERM_BLUE}✓ Saved drive data to results/{self.run_dir.name}/{TERM_RESET}")

    def __enter__(self) -> "DataCollector":
        """Context manager entry point.

        Returns:
            Self reference for use in with statement.
        """
        self.setup()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit point - ensures cleanup is called.

        Args:
            exc_type: Exception type if an exception occurred.
            exc_val: Exception value if an exception occurred.
            exc_tb: Exception traceback if an exception occurred.
        """
        self.cleanup()
