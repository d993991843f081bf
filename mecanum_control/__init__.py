"""Mecanum Control - Speed-Limited Inverse Kinematics for Mecanum-Drive Robots

Computes per-wheel angular velocity commands for a four-wheel mecanum base
from a desired body velocity, after bounding each commanded axis by velocity
and acceleration limits.

## Control Pipeline

Each control cycle:

1. The latest body velocity command (v_x, v_y, w_z) is taken from the command
   source. A command older than the timeout is replaced by a brake command.
2. Each axis passes through its own SpeedLimiter: velocity clamp first, then
   acceleration clamp against the previously accepted command.
3. The bounded command is converted to four wheel velocities (rad/s) by the
   inverse kinematics of the configured wheel mounting (normal or flipped).

## Modules

### Core
- `kinematics.py` - Inverse kinematics (normal and flipped wheel mounting)
- `speed_limiter.py` - Velocity/acceleration limiter for a scalar command
- `controller.py` - Per-axis limiting, command timeout and kinematics per cycle
- `config.py` - Geometry, limits and timing defaults; JSON overrides

### Communication & Data
- `client.py` - WebSocket client and fixed-rate control loop
- `component_modes.py` - Flags to bypass limits or override the mounting
- `data_collector.py` - CSV logging of commands and drive cycles

### Visualization
- `visualization.py` - Drive CSV loading, body and wheel velocity plots of a run
- `plot_results.py` - CLI for visualization tools

## Quick Start

```python
from mecanum_control import calculate_ik_normal, SpeedLimiter

limiter = SpeedLimiter(True, True, -1.0, 1.0, -2.0, 2.0)
v_x = limiter.limit(1.5, previous=0.8, dt=0.02)
wheels = calculate_ik_normal(v_x, 0.0, 0.0, r=0.1, a=0.3, b=0.25)
```

Or run the WebSocket client:
```bash
python -m mecanum_control --uri ws://localhost:8765 --config drive.json
```
"""

__version__ = "0.1.0"

from .config import DriveConfig, load_drive_config
from .controller import MecanumDriveController
from .kinematics import (
    BodyVelocity,
    WheelOrientation,
    WheelVelocities,
    calculate_ik_flipped,
    calculate_ik_normal,
    select_inverse_kinematics,
)
from .speed_limiter import SpeedLimiter

__all__ = [
    "BodyVelocity",
    "WheelVelocities",
    "WheelOrientation",
    "calculate_ik_normal",
    "calculate_ik_flipped",
    "select_inverse_kinematics",
    "SpeedLimiter",
    "MecanumDriveController",
    "DriveConfig",
    "load_drive_config",
]
