"""Mecanum drive controller.

This module ties the per-axis speed limiters to the inverse kinematics. Each
control cycle it takes the latest body velocity command, brakes if that
command is stale, bounds each axis against the previously accepted command,
and converts the bounded command into wheel velocities.
"""

import logging
from typing import Dict, Optional

from .component_modes import ComponentMode
from .config import AXES, DriveConfig
from .kinematics import (
    BodyVelocity,
    WheelOrientation,
    WheelVelocities,
    select_inverse_kinematics,
)
from .speed_limiter import SpeedLimiter


class MecanumDriveController:
    """Speed-limited inverse kinematics for a four-wheel mecanum base.

    The controller owns the per-axis history the limiters need: the command
    accepted in the previous cycle. The inverse kinematics function is chosen
    once from the configured wheel orientation.

    Attributes:
        config: Validated drive configuration.
        orientation: Wheel mounting in use.
        limiters: SpeedLimiter per axis ("linear_x", "linear_y", "angular_z").
        target: Most recent requested body velocity.
        target_stamp: Time the target was received (seconds), None if never.
        last_cmd: Body velocity accepted in the previous cycle.
        use_timeout: Whether a stale target is replaced by a brake command.
    """

    def __init__(
        self,
        config: Optional[DriveConfig] = None,
        component_mode: Optional[ComponentMode] = None,
    ):
        """Initialize the drive controller.

        Args:
            config: Drive configuration. Defaults to DriveConfig().
            component_mode: Which limits are active and an optional
                orientation override. Defaults to everything enabled.

        Raises:
            ValueError: If the configuration is invalid.
        """
        if config is None:
            config = DriveConfig()
        if component_mode is None:
            component_mode = ComponentMode()

        config.validate()
        self.config = config

        self.orientation = WheelOrientation(component_mode.orientation or config.wheel_orientation)
        self._inverse_kinematics = select_inverse_kinematics(self.orientation)

        self.limiters: Dict[str, SpeedLimiter] = {}
        for axis in AXES:
            limits = getattr(config, axis)
            self.limiters[axis] = SpeedLimiter(
                has_velocity_limits=limits.has_velocity_limits and component_mode.use_velocity_limits,
                has_acceleration_limits=(
                    limits.has_acceleration_limits and component_mode.use_acceleration_limits
                ),
                min_velocity=limits.min_velocity,
                max_velocity=limits.max_velocity,
                min_acceleration=limits.min_acceleration,
                max_acceleration=limits.max_acceleration,
            )

        self.use_timeout = component_mode.use_timeout

        self.target = BodyVelocity(0.0, 0.0, 0.0)
        self.target_stamp: Optional[float] = None
        self.last_cmd = BodyVelocity(0.0, 0.0, 0.0)
        self._braking = False

        logging.debug(
            f"Drive controller: orientation={self.orientation.value}, "
            f"r={config.wheel_radius}, a={config.wheel_offset_a}, b={config.wheel_offset_b}"
        )

    def set_command(self, v_x: float, v_y: float, w_z: float, timestamp: float) -> None:
        """Store a new requested body velocity.

        Args:
            v_x: Forward velocity (m/s)
            v_y: Lateral velocity (m/s)
            w_z: Angular velocity (rad/s)
            timestamp: Time the command was received (seconds)
        """
        self.target = BodyVelocity(float(v_x), float(v_y), float(w_z))
        self.target_stamp = timestamp

    def is_stale(self, now: float) -> bool:
        """Whether the current target is older than the command timeout."""
        if self.target_stamp is None:
            return True
        return (now - self.target_stamp) > self.config.cmd_vel_timeout

    def limit_command(self, command: BodyVelocity, dt: float) -> BodyVelocity:
        """Bound each axis of a body velocity against the previous command.

        When dt is not positive (first cycle, or a clock that went backwards)
        the nominal control period is used, so the acceleration limits always
        apply.

        Args:
            command: Requested body velocity.
            dt: Time since the previous cycle (seconds).

        Returns:
            The limited body velocity.
        """
        if not dt > 0:
            dt = self.config.control_dt

        return BodyVelocity(
            *(
                self.limiters[axis].limit(current, previous, dt)
                for axis, current, previous in zip(AXES, command, self.last_cmd)
            )
        )

    def compute_wheel_velocities(self, command: BodyVelocity) -> WheelVelocities:
        """Convert a body velocity into wheel angular velocities (rad/s)."""
        return self._inverse_kinematics(
            command.v_x,
            command.v_y,
            command.w_z,
            self.config.wheel_radius,
            self.config.wheel_offset_a,
            self.config.wheel_offset_b,
        )

    def update(self, now: float, dt: float) -> WheelVelocities:
        """Run one control cycle.

        Args:
            now: Current time (seconds), used for the command timeout.
            dt: Time since the previous cycle (seconds).

        Returns:
            Wheel velocities for this cycle.
        """
        command = self.target
        if self.use_timeout and self.is_stale(now):
            if not self._braking and self.target_stamp is not None:
                logging.warning(
                    f"Command timed out after {self.config.cmd_vel_timeout:.2f}s, braking"
                )
            self._braking = True
            command = BodyVelocity(0.0, 0.0, 0.0)
        else:
            self._braking = False

        limited = self.limit_command(command, dt)
        self.last_cmd = limited

        return self.compute_wheel_velocities(limited)

    def reset(self) -> None:
        """Clear the target and the previous accepted command.

        Call this when starting a new control session.
        """
        self.target = BodyVelocity(0.0, 0.0, 0.0)
        self.target_stamp = None
        self.last_cmd = BodyVelocity(0.0, 0.0, 0.0)
        self._braking = False

    def get_diagnostics(
        self, command: BodyVelocity, wheels: WheelVelocities
    ) -> Dict[str, float]:
        """Get diagnostic information for logging and debugging.

        Args:
            command: Requested body velocity for the cycle.
            wheels: Wheel velocities produced for the cycle.

        Returns:
            Dictionary containing all diagnostic values
        """
        diagnostics = {
            "v_x_ref": command.v_x,
            "v_y_ref": command.v_y,
            "w_z_ref": command.w_z,
            "v_x_cmd": self.last_cmd.v_x,
            "v_y_cmd": self.last_cmd.v_y,
            "w_z_cmd": self.last_cmd.w_z,
            "braking": float(self._braking),
        }
        diagnostics.update(wheels.to_dict())
        return diagnostics
