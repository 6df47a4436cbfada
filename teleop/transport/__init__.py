"""
Mock Publisher - For testing without a robot.

Records velocity commands instead of sending them anywhere.
"""

import logging
from typing import List, Optional
from teleop.types import VelocityCommand


logger = logging.getLogger(__name__)


class MockPublisher:
    """
    Mock command sink for testing.

    Logs commands instead of sending them and keeps them for inspection.
    """

    def __init__(self, keep_history: bool = True) -> None:
        """
        Initialize mock publisher.

        Args:
            keep_history: If True, keep every published command in `published`
        """
        self._keep_history = keep_history
        self.published: List[VelocityCommand] = []
        self._last_command: Optional[VelocityCommand] = None
        self._command_count = 0

    def publish(self, command: VelocityCommand) -> None:
        """Log command instead of sending"""
        self._last_command = command
        self._command_count += 1
        if self._keep_history:
            self.published.append(command)

        logger.debug(f"[MOCK] Command #{self._command_count}: {command}")

    def clear(self) -> None:
        """Forget recorded commands"""
        self.published.clear()
        self._last_command = None
        self._command_count = 0

    @property
    def last_command(self) -> Optional[VelocityCommand]:
        """Get last command published (for testing)"""
        return self._last_command

    @property
    def command_count(self) -> int:
        """Get total commands published (for testing)"""
        return self._command_count
