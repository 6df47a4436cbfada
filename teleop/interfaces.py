"""
Core interfaces (protocols) for pluggable components.

These define the contracts that all implementations must follow.
Python Protocols are like interfaces in Java/C# - they define
what methods a class must have without forcing inheritance.
"""

from typing import Protocol, Optional
from .types import JoySample, VelocityCommand


class SampleSource(Protocol):
    """
    Interface for joystick sources (gamepad, scripted, network, etc.).

    All sample sources must implement these methods to be usable
    by the TeleopNode.
    """

    async def start(self) -> None:
        """
        Initialize and start the source.

        Called once when the node starts up.
        May open devices, create connections, etc.
        """
        ...

    async def stop(self) -> None:
        """
        Stop and cleanup the source.

        Called when shutting down.
        Must close devices, release resources, etc.
        """
        ...

    async def read_sample(self) -> Optional[JoySample]:
        """
        Read the next joystick sample.

        This should be non-blocking and return immediately.
        Returns None if no new sample is available.

        Returns:
            JoySample with current axes and buttons, or None
        """
        ...


class CommandPublisher(Protocol):
    """
    Interface for the velocity command sink.

    Publishing is fire-and-forget: it must not block and is assumed
    to always accept the command.
    """

    def publish(self, command: VelocityCommand) -> None:
        """
        Hand a command to the outside world.

        Args:
            command: Velocity command to deliver
        """
        ...
