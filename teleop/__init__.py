"""
Teleop Core - Joystick samples in, velocity commands out.

This package contains the core logic for driving a mobile robot from a joystick:
- Types: Data classes for samples, axis/scale maps, commands, engine state
- Config: Typed parameter store with immutable snapshots and live updates
- Engine: Mode selection, axis scaling, autorun ramp and dead-man stop
- Interfaces: Protocols for pluggable components (sample source, publisher)
- Node: Host loop wiring a source, the engine and a publisher together
"""

from .types import (
    JoySample,
    AxisMap,
    ScaleMap,
    ScaleGroups,
    Mode,
    Vector3,
    VelocityCommand,
    NodeConfig,
)
from .config import (
    ConfigStore,
    ConfigError,
    TeleopConfig,
    SetParametersResult,
)
from .engine import CommandEngine, get_val
from .interfaces import (
    SampleSource,
    CommandPublisher,
)

__all__ = [
    "JoySample",
    "AxisMap",
    "ScaleMap",
    "ScaleGroups",
    "Mode",
    "Vector3",
    "VelocityCommand",
    "NodeConfig",
    "ConfigStore",
    "ConfigError",
    "TeleopConfig",
    "SetParametersResult",
    "CommandEngine",
    "get_val",
    "SampleSource",
    "CommandPublisher",
]
