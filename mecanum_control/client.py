#!/usr/bin/env python3
"""
WebSocket Client for Mecanum Drive Control

This module provides a WebSocket client that connects to a robot server,
receives body velocity commands, and sends wheel velocity setpoints at a fixed
control rate. Every cycle the latest command is bounded by the per-axis speed
limiters and converted by the inverse kinematics. Commands and drive cycles
are saved to CSV files.

Message formats (JSON):
    received: {"message_type": "cmd_vel", "linear_x": .., "linear_y": .., "angular_z": ..}
    received: {"message_type": "shutdown"}
    sent:     {"message_type": "wheel_velocities", "w0": .., "w1": .., "w2": .., "w3": ..}
"""

import argparse
import asyncio
import json
import logging
import math
import signal
import sys
import time
from typing import Any, Dict, Optional, Union

import websockets

from mecanum_control.component_modes import ComponentMode, parse_component_flags
from mecanum_control.config import (
    TERM_BLUE,
    TERM_RESET,
    WS_MAX_RETRY_DELAY_SECONDS,
    WS_RETRY_DELAY_SECONDS,
    WS_URI,
    DriveConfig,
    load_drive_config,
)
from mecanum_control.controller import MecanumDriveController
from mecanum_control.data_collector import DataCollector
from mecanum_control.kinematics import WheelVelocities


class CustomFormatter(logging.Formatter):
    """Custom logging formatter that removes timestamps from INFO messages.

    This formatter provides clean console output by showing INFO messages without
    timestamps while preserving full context for WARNING, ERROR, and DEBUG messages.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record based on its level.

        Args:
            record: The log record to format.

        Returns:
            Formatted log message string.
        """
        if record.levelno == logging.INFO:
            return record.getMessage()
        else:
            return f"{self.formatTime(record, self.datefmt)} - {record.levelname} - {record.getMessage()}"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level.

    Args:
        verbose: If True, show all levels with timestamps. If False, show INFO
                 without timestamps and WARNING/ERROR with timestamps.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        handler = logging.StreamHandler()
        formatter = CustomFormatter(datefmt="%Y-%m-%d %H:%M:%S")
        handler.setFormatter(formatter)
        logger = logging.getLogger()
        logger.setLevel(logging.INFO)
        logger.addHandler(handler)


class MecanumClient:
    """Mecanum drive control with WebSocket communication and data logging.

    Attributes:
        uri: WebSocket URI to connect to.
        config: Validated drive configuration.
        controller: Speed-limited inverse kinematics controller.
        data_collector: Handles CSV file logging.
        should_stop: Flag indicating whether to stop control loop.
    """

    def __init__(
        self,
        uri: str,
        config: Optional[DriveConfig] = None,
        output_dir: str = ".",
        component_mode: Optional[ComponentMode] = None,
    ) -> None:
        """Initialize the client.

        Args:
            uri: WebSocket URI to connect to (must start with ws:// or wss://).
            config: Drive configuration (default: config.py defaults).
            output_dir: Base directory for output files (default: current directory).
            component_mode: ComponentMode configuration for component isolation testing.

        Raises:
            ValueError: If URI format or configuration is invalid.
        """
        if not uri or not uri.startswith(("ws://", "wss://")):
            raise ValueError(f"Invalid WebSocket URI: {uri}. Must start with 'ws://' or 'wss://'")

        self.uri: str = uri
        self.should_stop: bool = False

        if config is None:
            config = load_drive_config()
        self.config = config

        if component_mode is None:
            component_mode = ComponentMode()
        self.component_mode = component_mode

        logging.info(f"{TERM_BLUE}Component Configuration: {component_mode}{TERM_RESET}")

        self.controller = MecanumDriveController(config, component_mode)
        self.data_collector = DataCollector(output_dir=output_dir)

        self.last_cycle_tick: Optional[float] = None
        self.cycle_count: int = 0

    async def send_wheel_velocities(
        self, websocket: Any, wheels: WheelVelocities, log: bool = False
    ) -> None:
        """Send wheel velocity setpoints to the WebSocket server.

        Args:
            websocket: Active WebSocket connection.
            wheels: Wheel angular velocities (rad/s).
            log: Whether to log the command (default: False for quiet operation).
        """
        command: Dict[str, Any] = {"message_type": "wheel_velocities"}
        command.update(wheels.to_dict())
        await websocket.send(json.dumps(command))
        if log:
            logging.debug(
                "Sent wheels: "
                + ", ".join(f"{name}={value:.3f}" for name, value in wheels.to_dict().items())
            )

    def process_command_message(self, data: Dict[str, Any]) -> None:
        """Store a body velocity command and log it to CSV.

        Missing axes default to zero. The previous command is kept when any
        axis is rejected.

        Args:
            data: Parsed JSON message of type "cmd_vel".

        Raises:
            ValueError: If a velocity field is not numeric or not finite.
            TypeError: If a velocity field has an unsupported type.
        """
        linear_x = float(data.get("linear_x", 0.0))
        linear_y = float(data.get("linear_y", 0.0))
        angular_z = float(data.get("angular_z", 0.0))

        # NaN would pass every limiter comparison unchanged
        if not all(math.isfinite(v) for v in (linear_x, linear_y, angular_z)):
            raise ValueError(
                f"Non-finite velocity in command: linear_x={linear_x}, "
                f"linear_y={linear_y}, angular_z={angular_z}"
            )

        now = time.time()
        self.controller.set_command(linear_x, linear_y, angular_z, now)
        self.data_collector.log_command(now, linear_x, linear_y, angular_z)

    def parse_and_route_message(self, message: Union[str, bytes]) -> None:
        """Parse incoming message and route to appropriate handler.

        Args:
            message: Raw JSON message string or bytes from WebSocket.
        """
        try:
            if isinstance(message, bytes):
                message = message.decode("utf-8")
            data = json.loads(message)

            if not isinstance(data, dict):
                logging.warning(f"Invalid message type: expected object, got {type(data)}")
                return

            message_type = data.get("message_type")

            if message_type == "cmd_vel":
                self.process_command_message(data)
            elif message_type == "shutdown":
                logging.info(f"{TERM_BLUE}→ Shutdown requested by server{TERM_RESET}")
                self.should_stop = True
            else:
                logging.debug(f"\nReceived unknown message: {json.dumps(data, indent=2)}\n")

        except json.JSONDecodeError as e:
            logging.error(f"Error parsing JSON: {e}")
        except (KeyError, TypeError, ValueError) as e:
            logging.error(f"Error processing message data: {e}")

    def run_cycle(self, now: float) -> WheelVelocities:
        """Run one control cycle and log it.

        The cycle period is measured on the monotonic clock; now is only used
        for timestamps and the command timeout.

        Args:
            now: Current wall-clock time (seconds).

        Returns:
            Wheel velocities to send.
        """
        tick = time.monotonic()
        if self.last_cycle_tick is not None:
            dt = tick - self.last_cycle_tick
        else:
            dt = 0.0  # First cycle: controller uses the nominal period
        self.last_cycle_tick = tick

        command = self.controller.target
        wheels = self.controller.update(now, dt)

        diagnostics = self.controller.get_diagnostics(command, wheels)
        self.data_collector.log_drive_cycle(now, diagnostics)
        self.cycle_count += 1

        return wheels

    async def run_control_loop(self) -> None:
        """Connect to WebSocket and run the control loop.

        Messages are handled as they arrive; between them a control cycle runs
        every control_dt seconds. Reconnects with exponential backoff until
        should_stop is set.
        """
        retry_delay = WS_RETRY_DELAY_SECONDS
        max_retry_delay = WS_MAX_RETRY_DELAY_SECONDS
        period = self.config.control_dt

        while not self.should_stop:
            try:
                async with websockets.connect(self.uri) as websocket:
                    logging.info(f"{TERM_BLUE}✓ Connected to server{TERM_RESET}")
                    retry_delay = WS_RETRY_DELAY_SECONDS

                    # Brake from rest on every (re)connection
                    self.controller.reset()
                    self.last_cycle_tick = None

                    control_started = False
                    next_tick = time.monotonic()
                    while not self.should_stop:
                        timeout = max(0.0, next_tick - time.monotonic())
                        try:
                            message = await asyncio.wait_for(websocket.recv(), timeout=timeout)
                            self.parse_and_route_message(message)
                        except asyncio.TimeoutError:
                            pass
                        except websockets.exceptions.ConnectionClosed:
                            logging.warning("Connection closed by server")
                            break

                        if time.monotonic() < next_tick:
                            continue

                        wheels = self.run_cycle(time.time())
                        await self.send_wheel_velocities(websocket, wheels)

                        next_tick += period
                        # Skip missed ticks instead of bursting
                        if next_tick < time.monotonic():
                            next_tick = time.monotonic() + period

                        if not control_started:
                            logging.info(
                                f"{TERM_BLUE}✓ Running mecanum drive control at "
                                f"{1.0 / period:.0f} Hz{TERM_RESET}"
                            )
                            control_started = True

            except Exception as e:
                if self.should_stop:
                    break
                logging.error(f"Connection error: {e}")
                logging.info(f"Retrying in {retry_delay} seconds...")
                await asyncio.sleep(retry_delay)
                retry_delay = min(retry_delay * 2, max_retry_delay)

    def stop(self) -> None:
        """Signal the client to stop."""
        self.should_stop = True

    def __enter__(self) -> "MecanumClient":
        """Context manager entry point.

        Returns:
            Self reference for use in with statement.
        """
        self.data_collector.setup()
        self.data_collector.log_config(self.config.to_dict())
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit point - ensures cleanup is called.

        Args:
            exc_type: Exception type if an exception occurred.
            exc_val: Exception value if an exception occurred.
            exc_tb: Exception traceback if an exception occurred.
        """
        self.data_collector.cleanup()
        logging.info(f"{TERM_BLUE}→ Ran {self.cycle_count} control cycles{TERM_RESET}")


async def main(
    component_mode: Optional[ComponentMode] = None,
    uri: str = WS_URI,
    config_path: Optional[str] = None,
) -> None:
    """Main entry point for the WebSocket client.

    Creates a MecanumClient instance, sets up signal handlers for graceful
    shutdown, and starts the control loop.

    Args:
        component_mode: ComponentMode configuration for component isolation testing.
        uri: WebSocket URI of the robot server.
        config_path: Optional JSON file with DriveConfig overrides.
    """
    config = load_drive_config(config_path)

    with MecanumClient(uri, config=config, component_mode=component_mode) as client:
        loop = asyncio.get_running_loop()

        def signal_handler() -> None:
            """Handle shutdown signals (SIGINT, SIGTERM)."""
            logging.info("\nShutdown signal received...")
            client.stop()

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, signal_handler)

        await client.run_control_loop()


def build_arg_parser() -> argparse.ArgumentParser:
    """Build the command-line parser for the client."""
    parser = argparse.ArgumentParser(
        description="WebSocket client for mecanum drive control and data collection"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging with timestamps"
    )
    parser.add_argument(
        "--uri", type=str, default=WS_URI, help=f"WebSocket server URI (default: {WS_URI})"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="JSON file overriding the drive configuration defaults",
    )
    return parser


def run(args=None) -> None:
    """Parse arguments, configure logging and run the client."""
    # Parse component isolation flags first
    component_mode, remaining_args = parse_component_flags(args)

    args = build_arg_parser().parse_args(remaining_args)

    setup_logging(args.verbose)

    try:
        asyncio.run(main(component_mode=component_mode, uri=args.uri, config_path=args.config))
    except KeyboardInterrupt:
        logging.info("\nExiting...")
        sys.exit(0)
    except (FileNotFoundError, ValueError) as e:
        logging.error(f"Configuration error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run()
