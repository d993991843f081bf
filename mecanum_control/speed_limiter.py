"""Velocity and acceleration limiting for scalar motion commands.

One SpeedLimiter is used per axis (forward, lateral, angular). The limiter
holds only its configuration; the caller supplies the previously accepted
command on every call.
"""


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp value into [lower, upper]."""
    return max(lower, min(upper, value))


class SpeedLimiter:
    """Two-sided velocity and acceleration limits for a scalar command.

    Bounds are signed and two-sided: a positive minimum acts as a floor, so
    small requests are raised to it rather than passed through.

    Attributes:
        has_velocity_limits: Whether velocity clamping is applied.
        has_acceleration_limits: Whether acceleration clamping is applied.
        min_velocity: Lower velocity bound (unit/s).
        max_velocity: Upper velocity bound (unit/s).
        min_acceleration: Lower acceleration bound (unit/s²).
        max_acceleration: Upper acceleration bound (unit/s²).
    """

    def __init__(
        self,
        has_velocity_limits: bool = False,
        has_acceleration_limits: bool = False,
        min_velocity: float = 0.0,
        max_velocity: float = 0.0,
        min_acceleration: float = 0.0,
        max_acceleration: float = 0.0,
    ):
        """Initialize the speed limiter.

        With the defaults no limits are enabled and every operation returns
        its input unchanged. Bounds are not validated here; see
        config.validate_limits.

        Args:
            has_velocity_limits: Enable velocity clamping.
            has_acceleration_limits: Enable acceleration clamping.
            min_velocity: Minimum velocity, used only with velocity limits.
            max_velocity: Maximum velocity, used only with velocity limits.
            min_acceleration: Minimum acceleration, used only with
                acceleration limits.
            max_acceleration: Maximum acceleration, used only with
                acceleration limits.
        """
        self.has_velocity_limits = has_velocity_limits
        self.has_acceleration_limits = has_acceleration_limits

        self.min_velocity = min_velocity
        self.max_velocity = max_velocity

        self.min_acceleration = min_acceleration
        self.max_acceleration = max_acceleration

    def limit(self, current: float, previous: float, dt: float) -> float:
        """Apply the velocity limit, then the acceleration limit.

        Args:
            current: Requested command for this cycle.
            previous: Command accepted in the previous cycle.
            dt: Time since the previous cycle (s), must be positive.

        Returns:
            The limited command.
        """
        current = self.limit_velocity(current)
        return self.limit_acceleration(current, previous, dt)

    def limit_velocity(self, velocity: float) -> float:
        """Clamp velocity into [min_velocity, max_velocity] if enabled."""
        if not self.has_velocity_limits:
            return velocity
        return clamp(velocity, self.min_velocity, self.max_velocity)

    def limit_acceleration(self, current: float, previous: float, dt: float) -> float:
        """Bound the change from previous to current by the acceleration limits.

        The implied acceleration (current - previous) / dt is clamped into
        [min_acceleration, max_acceleration] and the command is rebuilt from
        previous. dt must be positive.

        Args:
            current: Requested command for this cycle.
            previous: Command accepted in the previous cycle.
            dt: Time since the previous cycle (s).

        Returns:
            The limited command.
        """
        if not self.has_acceleration_limits:
            return current

        acceleration = (current - previous) / dt
        acceleration = clamp(acceleration, self.min_acceleration, self.max_acceleration)
        return previous + acceleration * dt

    def __repr__(self) -> str:
        return (
            f"SpeedLimiter(has_velocity_limits={self.has_velocity_limits}, "
            f"has_acceleration_limits={self.has_acceleration_limits}, "
            f"min_velocity={self.min_velocity}, max_velocity={self.max_velocity}, "
            f"min_acceleration={self.min_acceleration}, "
            f"max_acceleration={self.max_acceleration})"
        )
