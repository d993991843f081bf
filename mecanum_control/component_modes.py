"""
Component isolation modes for modular testing.

This module defines which stages of the drive pipeline are active/bypassed
so the effect of each limit and of the wheel mounting can be evaluated.
"""

from dataclasses import dataclass
import argparse
import sys
from typing import Optional


@dataclass
class ComponentMode:
    """Configuration for which control components are active."""

    # Speed limiting
    use_velocity_limits: bool = True  # If False, velocity limits are ignored on every axis
    use_acceleration_limits: bool = True  # If False, acceleration limits are ignored

    # Command handling
    use_timeout: bool = True  # If False, a stale command is held instead of braking

    # Kinematics
    orientation: Optional[str] = None  # Overrides the configured wheel mounting if set

    def __str__(self):
        """Human-readable description of active components."""
        components = []

        limits = []
        if self.use_velocity_limits:
            limits.append("V")
        if self.use_acceleration_limits:
            limits.append("A")
        if limits:
            components.append(f"Limiter({'+'.join(limits)})")
        else:
            components.append("Limiter(Bypass)")

        if self.use_timeout:
            components.append("Timeout")

        components.append(f"IK({self.orientation or 'configured'})")

        return " → ".join(components)

    def to_dict(self):
        """Convert to dictionary for logging."""
        return {
            'use_velocity_limits': self.use_velocity_limits,
            'use_acceleration_limits': self.use_acceleration_limits,
            'use_timeout': self.use_timeout,
            'orientation': self.orientation,
        }


def parse_component_flags(args=None):
    """
    Parse command-line flags to determine which components are active.

    Args:
        args: List of command-line arguments (default: sys.argv[1:])

    Returns:
        tuple: (ComponentMode, remaining_args)
            - ComponentMode with appropriate settings
            - List of remaining arguments not consumed
    """
    parser = argparse.ArgumentParser(add_help=False)

    parser.add_argument('--no-velocity-limits', action='store_true',
                        help='Disable velocity limits on all axes')
    parser.add_argument('--no-acceleration-limits', action='store_true',
                        help='Disable acceleration limits on all axes')
    parser.add_argument('--no-timeout', action='store_true',
                        help='Hold the last command instead of braking when it goes stale')
    parser.add_argument('--orientation', choices=['normal', 'flipped'], default=None,
                        help='Override the configured wheel mounting')

    if args is None:
        args = sys.argv[1:]

    known_args, remaining_args = parser.parse_known_args(args)

    mode = ComponentMode(
        use_velocity_limits=not known_args.no_velocity_limits,
        use_acceleration_limits=not known_args.no_acceleration_limits,
        use_timeout=not known_args.no_timeout,
        orientation=known_args.orientation,
    )

    return mode, remaining_args
