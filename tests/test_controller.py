"""Tests for the mecanum drive controller."""

import pytest

from mecanum_control.component_modes import ComponentMode
from mecanum_control.config import AxisLimits, DriveConfig
from mecanum_control.controller import MecanumDriveController
from mecanum_control.kinematics import BodyVelocity, WheelOrientation


def unlimited_config(**overrides) -> DriveConfig:
    params = dict(
        wheel_radius=0.1,
        wheel_offset_a=1.0,
        wheel_offset_b=0.5,
        linear_x=AxisLimits(),
        linear_y=AxisLimits(),
        angular_z=AxisLimits(),
        cmd_vel_timeout=0.5,
    )
    params.update(overrides)
    return DriveConfig(**params)


def limited_config() -> DriveConfig:
    limits = AxisLimits(True, -1.0, 1.0, True, -2.0, 2.0)
    return unlimited_config(linear_x=limits, linear_y=limits, angular_z=limits)


def test_passes_command_through_kinematics_without_limits():
    controller = MecanumDriveController(unlimited_config())
    controller.set_command(1.0, 0.0, 0.0, timestamp=0.0)

    wheels = controller.update(now=0.1, dt=0.02)

    assert wheels.as_tuple() == pytest.approx((10, 10, 10, 10))
    assert controller.last_cmd == BodyVelocity(1.0, 0.0, 0.0)


def test_uses_flipped_kinematics_when_configured():
    config = unlimited_config(wheel_offset_a=0.5, wheel_offset_b=1.0, wheel_orientation="flipped")
    controller = MecanumDriveController(config)
    controller.set_command(0.0, 0.0, 1.0, timestamp=0.0)

    wheels = controller.update(now=0.0, dt=0.02)

    assert controller.orientation is WheelOrientation.FLIPPED
    assert wheels.as_tuple() == pytest.approx((5, 5, 5, 5))


def test_component_mode_overrides_orientation():
    controller = MecanumDriveController(
        unlimited_config(), ComponentMode(orientation="flipped")
    )
    assert controller.orientation is WheelOrientation.FLIPPED


def test_limits_each_axis_before_kinematics():
    controller = MecanumDriveController(limited_config())
    controller.set_command(5.0, -5.0, 0.0, timestamp=0.0)

    wheels = controller.update(now=0.0, dt=0.1)

    # Velocity clamp to +/-1, then acceleration clamp to +/-0.2 from rest
    assert controller.last_cmd == pytest.approx((0.2, -0.2, 0.0))
    assert wheels.as_tuple() == pytest.approx((4.0, 0.0, 4.0, 0.0))


def test_ramps_towards_target_across_cycles():
    controller = MecanumDriveController(limited_config())
    velocities = []
    for step in range(1, 8):
        controller.set_command(1.0, 0.0, 0.0, timestamp=step * 0.1)
        controller.update(now=step * 0.1, dt=0.1)
        velocities.append(controller.last_cmd.v_x)

    assert velocities == pytest.approx([0.2, 0.4, 0.6, 0.8, 1.0, 1.0, 1.0])


def test_first_cycle_without_dt_ramps_from_rest():
    controller = MecanumDriveController(limited_config())
    controller.set_command(3.0, 0.0, 0.0, timestamp=0.0)

    controller.update(now=0.0, dt=0.0)

    # Nominal period 0.02 s at 2 m/s^2
    assert controller.last_cmd.v_x == pytest.approx(0.04)


def test_negative_dt_still_bounds_acceleration():
    controller = MecanumDriveController(limited_config())
    controller.set_command(1.0, 0.0, 0.0, timestamp=0.0)
    controller.update(now=0.0, dt=0.1)
    assert controller.last_cmd.v_x == pytest.approx(0.2)

    controller.set_command(-1.0, 0.0, 0.0, timestamp=0.1)
    controller.update(now=0.1, dt=-0.5)

    assert controller.last_cmd.v_x == pytest.approx(0.16)


def test_stale_command_brakes():
    controller = MecanumDriveController(unlimited_config())
    controller.set_command(1.0, 1.0, 1.0, timestamp=0.0)

    controller.update(now=0.4, dt=0.02)
    assert controller.last_cmd == BodyVelocity(1.0, 1.0, 1.0)

    wheels = controller.update(now=0.6, dt=0.02)
    assert controller.last_cmd == BodyVelocity(0.0, 0.0, 0.0)
    assert wheels.as_tuple() == (0.0, 0.0, 0.0, 0.0)


def test_braking_respects_acceleration_limits():
    controller = MecanumDriveController(limited_config())
    controller.last_cmd = BodyVelocity(1.0, 0.0, 0.0)

    controller.update(now=10.0, dt=0.1)

    assert controller.last_cmd.v_x == pytest.approx(0.8)


def test_timeout_can_be_disabled():
    controller = MecanumDriveController(unlimited_config(), ComponentMode(use_timeout=False))
    controller.set_command(0.5, 0.0, 0.0, timestamp=0.0)

    controller.update(now=100.0, dt=0.02)

    assert controller.last_cmd.v_x == 0.5


def test_no_command_yet_is_stale():
    controller = MecanumDriveController(unlimited_config())
    assert controller.is_stale(0.0)


def test_component_mode_disables_limits():
    mode = ComponentMode(use_velocity_limits=False, use_acceleration_limits=False)
    controller = MecanumDriveController(limited_config(), mode)
    controller.set_command(5.0, 0.0, 0.0, timestamp=0.0)

    controller.update(now=0.0, dt=0.1)

    assert controller.last_cmd.v_x == 5.0
    assert not controller.limiters["linear_x"].has_velocity_limits


def test_reset_clears_history():
    controller = MecanumDriveController(unlimited_config())
    controller.set_command(1.0, 0.0, 0.0, timestamp=0.0)
    controller.update(now=0.0, dt=0.02)

    controller.reset()

    assert controller.last_cmd == BodyVelocity(0.0, 0.0, 0.0)
    assert controller.target_stamp is None


def test_invalid_configuration_is_rejected():
    with pytest.raises(ValueError):
        MecanumDriveController(unlimited_config(wheel_radius=0.0))


def test_diagnostics_contain_command_and_wheels():
    controller = MecanumDriveController(unlimited_config())
    controller.set_command(1.0, 0.0, 0.0, timestamp=0.0)
    command = controller.target
    wheels = controller.update(now=0.0, dt=0.02)

    diagnostics = controller.get_diagnostics(command, wheels)

    assert diagnostics["v_x_ref"] == 1.0
    assert diagnostics["v_x_cmd"] == 1.0
    assert diagnostics["braking"] == 0.0
    assert diagnostics["w0"] == pytest.approx(10.0)
