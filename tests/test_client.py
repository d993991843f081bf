"""Tests for the WebSocket client message handling and control cycle."""

import asyncio
import itertools
import json
import logging
import time

import pytest

from mecanum_control.client import CustomFormatter, MecanumClient, build_arg_parser
from mecanum_control.config import AxisLimits, DriveConfig
from mecanum_control.kinematics import WheelVelocities


class FakeWebSocket:
    def __init__(self):
        self.sent = []

    async def send(self, message):
        self.sent.append(message)


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.delenv("RUN_DIR", raising=False)
    config = DriveConfig(
        wheel_radius=0.1,
        wheel_offset_a=1.0,
        wheel_offset_b=0.5,
        linear_x=AxisLimits(True, -1.0, 1.0, False, 0.0, 0.0),
        linear_y=AxisLimits(),
        angular_z=AxisLimits(),
        cmd_vel_timeout=60.0,
    )
    with MecanumClient("ws://localhost:8765", config=config, output_dir=str(tmp_path)) as c:
        yield c


def test_rejects_invalid_uri(tmp_path):
    with pytest.raises(ValueError, match="Invalid WebSocket URI"):
        MecanumClient("http://localhost", output_dir=str(tmp_path))


def test_cmd_vel_message_sets_target(client):
    client.parse_and_route_message(
        json.dumps({"message_type": "cmd_vel", "linear_x": 0.5, "angular_z": -0.2})
    )
    assert client.controller.target == (0.5, 0.0, -0.2)
    assert client.controller.target_stamp is not None


def test_bytes_message_is_decoded(client):
    client.parse_and_route_message(b'{"message_type": "cmd_vel", "linear_y": 0.3}')
    assert client.controller.target.v_y == 0.3


def test_shutdown_message_stops_client(client):
    client.parse_and_route_message('{"message_type": "shutdown"}')
    assert client.should_stop


def test_malformed_messages_are_logged_not_raised(client, caplog):
    with caplog.at_level(logging.ERROR):
        client.parse_and_route_message("{not json")
        client.parse_and_route_message('{"message_type": "cmd_vel", "linear_x": "fast"}')
    assert "Error parsing JSON" in caplog.text
    assert "Error processing message data" in caplog.text
    assert client.controller.target_stamp is None


@pytest.mark.parametrize(
    "message",
    [
        '{"message_type": "cmd_vel", "linear_x": NaN}',
        '{"message_type": "cmd_vel", "linear_y": Infinity}',
        '{"message_type": "cmd_vel", "angular_z": "nan"}',
    ],
)
def test_non_finite_command_is_rejected(client, caplog, message):
    with caplog.at_level(logging.ERROR):
        client.parse_and_route_message(message)
    assert "Error processing message data" in caplog.text
    assert client.controller.target_stamp is None

    client.run_cycle(time.time())
    assert client.controller.last_cmd == (0.0, 0.0, 0.0)


def test_non_finite_command_keeps_previous_target(client):
    client.parse_and_route_message('{"message_type": "cmd_vel", "linear_x": 0.5}')
    client.parse_and_route_message('{"message_type": "cmd_vel", "linear_x": NaN}')

    assert client.controller.target == (0.5, 0.0, 0.0)


def test_run_cycle_measures_dt_on_monotonic_clock(client, monkeypatch):
    client.parse_and_route_message('{"message_type": "cmd_vel", "linear_y": 1.0}')
    client.controller.limiters["linear_y"].has_acceleration_limits = True
    client.controller.limiters["linear_y"].min_acceleration = -2.0
    client.controller.limiters["linear_y"].max_acceleration = 2.0

    ticks = itertools.chain([100.0], itertools.repeat(100.1))
    monkeypatch.setattr(time, "monotonic", lambda: next(ticks))

    # A wall-clock jump between cycles must not widen the step
    client.run_cycle(1000.0)
    first = client.controller.last_cmd.v_y
    client.run_cycle(5000.0)

    assert first == pytest.approx(2.0 * client.config.control_dt)
    assert client.controller.last_cmd.v_y == pytest.approx(first + 0.2)


def test_run_cycle_limits_and_converts(client):
    client.parse_and_route_message('{"message_type": "cmd_vel", "linear_x": 3.0}')

    wheels = client.run_cycle(time.time())

    assert wheels.as_tuple() == pytest.approx((10, 10, 10, 10))
    assert client.cycle_count == 1


def test_send_wheel_velocities(client):
    websocket = FakeWebSocket()
    asyncio.run(client.send_wheel_velocities(websocket, WheelVelocities(1.0, -1.0, 2.0, -2.0)))

    assert json.loads(websocket.sent[0]) == {
        "message_type": "wheel_velocities",
        "w0": 1.0,
        "w1": -1.0,
        "w2": 2.0,
        "w3": -2.0,
    }


def test_custom_formatter_hides_timestamp_for_info():
    formatter = CustomFormatter()
    info = logging.LogRecord("x", logging.INFO, __file__, 1, "hello", None, None)
    warning = logging.LogRecord("x", logging.WARNING, __file__, 1, "careful", None, None)

    assert formatter.format(info) == "hello"
    assert formatter.format(warning).endswith("WARNING - careful")


def test_arg_parser_defaults():
    args = build_arg_parser().parse_args([])
    assert not args.verbose
    assert args.config is None
