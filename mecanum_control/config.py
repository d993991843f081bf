"""Configuration parameters for the mecanum drive control system.

This module centralizes all configuration parameters including:
- Physical robot geometry
- Per-axis velocity and acceleration limits
- Control loop timing
- Visualization settings
- WebSocket connection parameters

The module-level constants are the defaults. DriveConfig bundles the
parameters the drive controller needs, can be overridden from a JSON file,
and is validated once at load time. Nothing is validated per control cycle.
"""

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

# ============================================================================
# Physical Robot Parameters
# ============================================================================

WHEEL_RADIUS = 0.0759
"""Main wheel radius (meters). Must be strictly positive."""

WHEEL_OFFSET_A = 0.319
"""Distance from robot center to wheel center along the x axis (meters)."""

WHEEL_OFFSET_B = 0.2755
"""Distance from robot center to wheel center along the y axis (meters)."""

WHEEL_ORIENTATION = "normal"
"""Wheel mounting: "normal" (rotation axis along y) or "flipped" (along x)."""


# ============================================================================
# Speed Limits (per axis)
# ============================================================================

# Forward (x) axis
LINEAR_X_HAS_VELOCITY_LIMITS = True
LINEAR_X_MIN_VELOCITY = -1.1
"""Minimum forward velocity (m/s). Signed: negative allows reversing."""
LINEAR_X_MAX_VELOCITY = 1.1
"""Maximum forward velocity (m/s)."""
LINEAR_X_HAS_ACCELERATION_LIMITS = True
LINEAR_X_MIN_ACCELERATION = -2.5
"""Minimum forward acceleration (m/s²). Negative = allowed deceleration."""
LINEAR_X_MAX_ACCELERATION = 2.5
"""Maximum forward acceleration (m/s²)."""

# Lateral (y) axis
LINEAR_Y_HAS_VELOCITY_LIMITS = True
LINEAR_Y_MIN_VELOCITY = -1.1
LINEAR_Y_MAX_VELOCITY = 1.1
LINEAR_Y_HAS_ACCELERATION_LIMITS = True
LINEAR_Y_MIN_ACCELERATION = -2.5
LINEAR_Y_MAX_ACCELERATION = 2.5

# Angular (z) axis
ANGULAR_Z_HAS_VELOCITY_LIMITS = True
ANGULAR_Z_MIN_VELOCITY = -2.0
"""Minimum angular velocity (rad/s)."""
ANGULAR_Z_MAX_VELOCITY = 2.0
"""Maximum angular velocity (rad/s)."""
ANGULAR_Z_HAS_ACCELERATION_LIMITS = True
ANGULAR_Z_MIN_ACCELERATION = -1.0
"""Minimum angular acceleration (rad/s²)."""
ANGULAR_Z_MAX_ACCELERATION = 1.0
"""Maximum angular acceleration (rad/s²)."""


# ============================================================================
# Control Loop Parameters
# ============================================================================

CONTROL_DT = 0.02
"""Control cycle period (seconds). 50 Hz."""

CMD_VEL_TIMEOUT = 0.25
"""Age after which a body velocity command is stale (seconds).

When no command newer than this has arrived, the controller brakes by
commanding zero velocity on every axis (still subject to the limits)."""


# ============================================================================
# Drive Plot Colors
# ============================================================================

COLOR_REQUESTED = "#d95f02"
"""Requested (unlimited) body velocity traces."""

COLOR_LIMITED = "#1b9e77"
"""Limited body velocity traces."""

COLOR_BRAKING = "#e7298a"
"""Shading of cycles where a stale command forced a brake."""

COLOR_BACKGROUND = "#1e1e1e"
"""Axes and figure background in dark mode."""

COLOR_FOREGROUND = "#e0e0e0"
"""Text, ticks and legend labels in dark mode."""

COLOR_EDGE = "#7f7f7f"
"""Spines and legend frame."""

WHEEL_COLORS = ["#1b9e77", "#d95f02", "#7570b3", "#66a61e"]
"""Line colors for wheels w0..w3."""

# Terminal color codes
TERM_BLUE = "\033[38;2;35;116;247m"
"""Blue terminal text."""

TERM_RESET = "\033[0m"
"""Reset terminal color."""


# ============================================================================
# WebSocket Configuration
# ============================================================================

WS_URI = "ws://localhost:8765"
"""Actuator/command server URI."""

WS_RETRY_DELAY_SECONDS = 1
"""Initial reconnect delay (seconds), doubled after each failure."""

WS_MAX_RETRY_DELAY_SECONDS = 60
"""Upper bound on the reconnect delay (seconds)."""


# ============================================================================
# Validation
# ============================================================================


def validate_geometry(wheel_radius: float, offset_a: float, offset_b: float) -> None:
    """Validate robot geometry.

    Args:
        wheel_radius: Main wheel radius (m).
        offset_a: Center-to-wheel offset along x (m).
        offset_b: Center-to-wheel offset along y (m).

    Raises:
        ValueError: If the radius is not strictly positive or an offset is negative.
    """
    if not wheel_radius > 0.0:
        raise ValueError(f"Wheel radius must be positive, got {wheel_radius}")
    if offset_a < 0.0:
        raise ValueError(f"Wheel offset a must be non-negative, got {offset_a}")
    if offset_b < 0.0:
        raise ValueError(f"Wheel offset b must be non-negative, got {offset_b}")


def validate_limits(
    name: str,
    has_velocity_limits: bool,
    min_velocity: float,
    max_velocity: float,
    has_acceleration_limits: bool,
    min_acceleration: float,
    max_acceleration: float,
) -> None:
    """Validate the bounds of one axis. Disabled limits are not checked.

    Args:
        name: Axis name used in the error message.

    Raises:
        ValueError: If an enabled minimum exceeds its maximum.
    """
    if has_velocity_limits and min_velocity > max_velocity:
        raise ValueError(
            f"{name}: min_velocity ({min_velocity}) exceeds max_velocity ({max_velocity})"
        )
    if has_acceleration_limits and min_acceleration > max_acceleration:
        raise ValueError(
            f"{name}: min_acceleration ({min_acceleration}) exceeds "
            f"max_acceleration ({max_acceleration})"
        )


AXES = ("linear_x", "linear_y", "angular_z")
"""Names of the commanded body axes, in (v_x, v_y, w_z) order."""


@dataclass
class AxisLimits:
    """Velocity and acceleration limits of one axis."""

    has_velocity_limits: bool = False
    min_velocity: float = 0.0
    max_velocity: float = 0.0
    has_acceleration_limits: bool = False
    min_acceleration: float = 0.0
    max_acceleration: float = 0.0


def _default_limits(prefix: str) -> AxisLimits:
    """Build AxisLimits from the module constants with the given prefix."""
    values = globals()
    return AxisLimits(
        has_velocity_limits=values[f"{prefix}_HAS_VELOCITY_LIMITS"],
        min_velocity=values[f"{prefix}_MIN_VELOCITY"],
        max_velocity=values[f"{prefix}_MAX_VELOCITY"],
        has_acceleration_limits=values[f"{prefix}_HAS_ACCELERATION_LIMITS"],
        min_acceleration=values[f"{prefix}_MIN_ACCELERATION"],
        max_acceleration=values[f"{prefix}_MAX_ACCELERATION"],
    )


@dataclass
class DriveConfig:
    """Parameters of the mecanum drive controller.

    Defaults come from the module constants above.
    """

    wheel_radius: float = WHEEL_RADIUS
    wheel_offset_a: float = WHEEL_OFFSET_A
    wheel_offset_b: float = WHEEL_OFFSET_B
    wheel_orientation: str = WHEEL_ORIENTATION
    linear_x: Optional[AxisLimits] = None
    linear_y: Optional[AxisLimits] = None
    angular_z: Optional[AxisLimits] = None
    control_dt: float = CONTROL_DT
    cmd_vel_timeout: float = CMD_VEL_TIMEOUT

    def __post_init__(self):
        for axis in AXES:
            value = getattr(self, axis)
            if value is None:
                setattr(self, axis, _default_limits(axis.upper()))
            elif isinstance(value, dict):
                setattr(self, axis, AxisLimits(**value))

    def validate(self) -> None:
        """Check the whole configuration.

        Raises:
            ValueError: On invalid geometry, orientation, limits or timing.
        """
        validate_geometry(self.wheel_radius, self.wheel_offset_a, self.wheel_offset_b)

        if self.wheel_orientation not in ("normal", "flipped"):
            raise ValueError(
                f"Wheel orientation must be 'normal' or 'flipped', got {self.wheel_orientation!r}"
            )

        for axis in AXES:
            limits = getattr(self, axis)
            validate_limits(
                axis,
                limits.has_velocity_limits,
                limits.min_velocity,
                limits.max_velocity,
                limits.has_acceleration_limits,
                limits.min_acceleration,
                limits.max_acceleration,
            )

        if not self.control_dt > 0.0:
            raise ValueError(f"Control period must be positive, got {self.control_dt}")
        if not self.cmd_vel_timeout > 0.0:
            raise ValueError(f"Command timeout must be positive, got {self.cmd_vel_timeout}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DriveConfig":
        """Build and validate a configuration from a dictionary.

        Keys that are absent keep their defaults. Per-axis entries may set a
        subset of their fields.

        Raises:
            ValueError: On unknown keys or invalid values.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")

        kwargs = dict(data)
        for axis in AXES:
            if axis in kwargs:
                overrides = kwargs[axis]
                if not isinstance(overrides, dict):
                    raise ValueError(f"{axis} must be a mapping, got {type(overrides).__name__}")
                unknown_limits = set(overrides) - {f.name for f in fields(AxisLimits)}
                if unknown_limits:
                    raise ValueError(f"Unknown {axis} keys: {sorted(unknown_limits)}")
                limits = asdict(_default_limits(axis.upper()))
                limits.update(overrides)
                kwargs[axis] = AxisLimits(**limits)

        try:
            config = cls(**kwargs)
            config.validate()
        except TypeError as e:
            raise ValueError(f"Invalid configuration value: {e}") from e
        return config


def load_drive_config(path: Union[str, Path, None] = None) -> DriveConfig:
    """Load the drive configuration.

    Args:
        path: JSON file with DriveConfig overrides. If None, the defaults
            are used.

    Returns:
        Validated DriveConfig.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not valid JSON or the values are invalid.
    """
    if path is None:
        config = DriveConfig()
        config.validate()
        return config

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Configuration root must be an object in {config_path}")

    return DriveConfig.from_dict(data)
