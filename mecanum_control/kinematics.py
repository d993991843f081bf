"""
Mecanum drive inverse kinematics.

This module converts a desired body velocity (forward, lateral and angular)
into the angular velocity of each of the four mecanum wheels.

Two wheel mountings are supported:
- Normal: the wheel's main rotation axis is aligned with the robot's y axis
- Flipped: the wheel's main rotation axis is aligned with the robot's x axis

Geometry:
    r: main wheel radius (meters)
    a: distance from robot center to wheel center along one body axis (meters)
    b: distance from robot center to wheel center along the other axis (meters)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, NamedTuple, Tuple, Union


class BodyVelocity(NamedTuple):
    """Body-frame velocity command for one control cycle."""

    v_x: float  # Forward velocity (m/s)
    v_y: float  # Lateral velocity (m/s)
    w_z: float  # Angular velocity about the vertical axis (rad/s)


@dataclass(frozen=True)
class WheelVelocities:
    """Angular velocity of each wheel (rad/s), indexed w0..w3."""

    w0: float
    w1: float
    w2: float
    w3: float

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.w0, self.w1, self.w2, self.w3)

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary for logging and transmission."""
        return {"w0": self.w0, "w1": self.w1, "w2": self.w2, "w3": self.w3}


class WheelOrientation(Enum):
    """Mounting of the wheel rotation axis relative to the body axes."""

    NORMAL = "normal"
    FLIPPED = "flipped"


def calculate_ik_normal(
    v_x: float, v_y: float, w_z: float, r: float, a: float, b: float
) -> WheelVelocities:
    """
    Compute wheel velocities for the normal wheel mounting.

    The rollers couple lateral motion into each wheel with alternating sign,
    and rotation about the center contributes (a + b) * w_z at every wheel:
        w0 = (v_x - v_y - w_z * (a + b)) / r
        w1 = (v_x + v_y - w_z * (a + b)) / r
        w2 = (v_x - v_y + w_z * (a + b)) / r
        w3 = (v_x + v_y + w_z * (a + b)) / r

    Args:
        v_x: Desired forward velocity (m/s)
        v_y: Desired lateral velocity (m/s)
        w_z: Desired angular velocity (rad/s), positive counter-clockwise
        r: Wheel radius (m), must be non-zero
        a: Center-to-wheel offset along the x axis (m)
        b: Center-to-wheel offset along the y axis (m)

    Returns:
        WheelVelocities: wheel angular velocities in rad/s

    Example:
        >>> calculate_ik_normal(1.0, 0.0, 0.0, r=0.1, a=1.0, b=0.5).as_tuple()
        (10.0, 10.0, 10.0, 10.0)
    """
    k = a + b
    return WheelVelocities(
        w0=(v_x - v_y - w_z * k) / r,
        w1=(v_x + v_y - w_z * k) / r,
        w2=(v_x - v_y + w_z * k) / r,
        w3=(v_x + v_y + w_z * k) / r,
    )


def calculate_ik_flipped(
    v_x: float, v_y: float, w_z: float, r: float, a: float, b: float
) -> WheelVelocities:
    """
    Compute wheel velocities for the flipped wheel mounting.

    With the rotation axis along x, the wheels drive along y and the rollers
    couple forward motion in. The rotation term reduces to (b - a) * w_z:
        w0 = ( v_x - v_y + w_z * (b - a)) / r
        w1 = (-v_x - v_y + w_z * (b - a)) / r
        w2 = (-v_x + v_y + w_z * (b - a)) / r
        w3 = ( v_x + v_y + w_z * (b - a)) / r

    Args:
        v_x: Desired forward velocity (m/s)
        v_y: Desired lateral velocity (m/s)
        w_z: Desired angular velocity (rad/s), positive counter-clockwise
        r: Wheel radius (m), must be non-zero
        a: Center-to-wheel offset along the x axis (m)
        b: Center-to-wheel offset along the y axis (m)

    Returns:
        WheelVelocities: wheel angular velocities in rad/s
    """
    k = b - a
    return WheelVelocities(
        w0=(v_x - v_y + w_z * k) / r,
        w1=(-v_x - v_y + w_z * k) / r,
        w2=(-v_x + v_y + w_z * k) / r,
        w3=(v_x + v_y + w_z * k) / r,
    )


InverseKinematics = Callable[[float, float, float, float, float, float], WheelVelocities]

_IK_BY_ORIENTATION: Dict[WheelOrientation, InverseKinematics] = {
    WheelOrientation.NORMAL: calculate_ik_normal,
    WheelOrientation.FLIPPED: calculate_ik_flipped,
}


def select_inverse_kinematics(orientation: Union[WheelOrientation, str]) -> InverseKinematics:
    """Return the inverse kinematics function for a wheel mounting.

    Args:
        orientation: WheelOrientation or its string value ("normal"/"flipped").

    Raises:
        ValueError: If the orientation is unknown.
    """
    return _IK_BY_ORIENTATION[WheelOrientation(orientation)]
