"""
Core data types for the teleop system.

All the data structures that flow through the system, fully typed.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional
import time


UNMAPPED = -1  # Axis index / button index meaning "not configured"

LINEAR_CHANNELS = ("x", "y", "z")
ANGULAR_CHANNELS = ("yaw", "pitch", "roll")
CHANNELS = LINEAR_CHANNELS + ANGULAR_CHANNELS


class Mode(Enum):
    """Command generation mode, selected fresh for every sample"""
    DISABLED = "disabled"  # No active control, dead-man stop path
    NORMAL = "normal"      # Enable button held (or not required)
    TURBO = "turbo"        # Turbo button held
    AUTORUN = "autorun"    # Cruise mode toggled on

    @property
    def is_active(self) -> bool:
        """Check if this mode synthesizes a command from the axes"""
        return self is not Mode.DISABLED


@dataclass
class JoySample:
    """
    One joystick readout.

    This is the output of all SampleSource implementations. Arrays are
    variable length; out-of-range access reads as zero.
    """
    axes: List[float] = field(default_factory=list)
    buttons: List[int] = field(default_factory=list)
    timestamp: float = field(default_factory=time.time)

    def axis(self, index: int) -> float:
        """Axis value, or 0.0 if the index is not covered by this sample"""
        if 0 <= index < len(self.axes):
            return self.axes[index]
        return 0.0

    def button(self, index: int) -> int:
        """Button value, or 0 if the index is not covered by this sample"""
        if 0 <= index < len(self.buttons):
            return self.buttons[index]
        return 0

    def has_button(self, index: int) -> bool:
        """Check if a configured button index is covered by this sample"""
        return 0 <= index < len(self.buttons)


@dataclass(frozen=True)
class AxisMap:
    """Axis index per channel (UNMAPPED = no contribution)"""
    x: int = UNMAPPED
    y: int = UNMAPPED
    z: int = UNMAPPED
    yaw: int = UNMAPPED
    pitch: int = UNMAPPED
    roll: int = UNMAPPED

    def index(self, channel: str) -> int:
        """Get axis index for a channel, UNMAPPED for unknown channels"""
        if channel not in CHANNELS:
            return UNMAPPED
        return getattr(self, channel)

    def mapped(self) -> Dict[str, int]:
        """Channels that have an axis assigned"""
        return {name: self.index(name) for name in CHANNELS if self.index(name) != UNMAPPED}


@dataclass(frozen=True)
class ScaleMap:
    """Scale factor per channel for one mode"""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    yaw: float = 0.0
    pitch: float = 0.0
    roll: float = 0.0

    def scale(self, channel: str) -> Optional[float]:
        """Get scale for a channel, None for unknown channels"""
        if channel not in CHANNELS:
            return None
        return getattr(self, channel)


@dataclass(frozen=True)
class ScaleGroups:
    """One ScaleMap per active mode"""
    normal: ScaleMap = ScaleMap(x=0.5, yaw=0.5)
    turbo: ScaleMap = ScaleMap(x=1.0, yaw=1.0)
    autorun: ScaleMap = ScaleMap(x=1.0, yaw=1.0)

    def group(self, name: str) -> ScaleMap:
        """Get a group by mode name, all-zero scales for unknown names"""
        if name not in ("normal", "turbo", "autorun"):
            return ScaleMap()
        return getattr(self, name)


@dataclass
class Vector3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


@dataclass
class VelocityCommand:
    """
    Velocity command handed to the publisher.

    This is the output of the CommandEngine. Angular components follow
    the usual twist convention: x = roll, y = pitch, z = yaw.
    """
    linear: Vector3 = field(default_factory=Vector3)
    angular: Vector3 = field(default_factory=Vector3)
    timestamp: float = field(default_factory=time.time)

    @property
    def is_stop(self) -> bool:
        """Check if this is an all-zero command"""
        return all(value == 0.0 for value in self.as_dict().values())

    @classmethod
    def stop(cls) -> "VelocityCommand":
        """Create a stop command"""
        return cls()

    def as_dict(self) -> Dict[str, float]:
        """Flatten the six velocity fields"""
        return {
            "linear.x": self.linear.x,
            "linear.y": self.linear.y,
            "linear.z": self.linear.z,
            "angular.x": self.angular.x,
            "angular.y": self.angular.y,
            "angular.z": self.angular.z,
        }

    def __str__(self) -> str:
        return (
            f"lin=({self.linear.x:+.3f}, {self.linear.y:+.3f}, {self.linear.z:+.3f}) "
            f"ang=({self.angular.x:+.3f}, {self.angular.y:+.3f}, {self.angular.z:+.3f})"
        )


@dataclass
class AutorunState:
    """Cruise toggle and forward-speed accumulator"""
    enabled: bool = False              # Toggled on rising edge of autorun button
    edge_buffer: int = 0               # Previous value of the autorun button
    ramped_forward_speed: float = 0.0  # Bounded by +/- scale_autorun.x

    def reset(self) -> None:
        self.enabled = False
        self.edge_buffer = 0
        self.ramped_forward_speed = 0.0


@dataclass
class DeadManLatch:
    """Remembers that the stop for the current disabled streak went out"""
    stop_already_sent: bool = False

    def reset(self) -> None:
        self.stop_already_sent = False


@dataclass
class NodeConfig:
    """Configuration for the TeleopNode host loop"""
    loop_interval: float = 0.02             # Poll interval (50Hz)
    input_timeout: Optional[float] = None   # Send stop after this much input silence (None = off)
