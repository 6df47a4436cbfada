"""
Gamepad Sample Source

Reads raw joystick samples from USB/wireless game controllers via pygame.
Every axis and button is reported; mapping them to motion is the
engine's job.
"""

import logging
from typing import List, Optional

try:
    import pygame
    HAS_PYGAME = True
except ImportError:
    HAS_PYGAME = False

from teleop.types import JoySample


logger = logging.getLogger(__name__)


class GamepadInput:
    """
    Game controller sample source.

    Sample layout:
    - axes: every stick/trigger axis, then two axes per hat
      (horizontal, vertical) so a D-pad can be mapped like a stick
    - buttons: every button as 0/1
    """

    def __init__(self, joystick_index: int = 0, negate_axes: bool = True) -> None:
        """
        Initialize gamepad input.

        Args:
            joystick_index: Which controller to open
            negate_axes: Flip stick axes so up/left are positive
                         (pygame reports up as negative)
        """
        if not HAS_PYGAME:
            raise RuntimeError(
                "pygame not installed. Install with: pip install pygame"
            )

        self._joystick_index = joystick_index
        self._negate_axes = negate_axes
        self._joystick: Optional[pygame.joystick.Joystick] = None
        self._running = False

    async def start(self) -> None:
        """Initialize pygame and connect to controller"""
        if self._running:
            return

        logger.info("Initializing gamepad input...")

        pygame.init()
        pygame.joystick.init()

        joystick_count = pygame.joystick.get_count()
        logger.info(f"Found {joystick_count} game controller(s)")

        if joystick_count <= self._joystick_index:
            raise RuntimeError("No game controllers found")

        self._joystick = pygame.joystick.Joystick(self._joystick_index)
        self._joystick.init()
        logger.info(f"Selected: {self._joystick.get_name()}")
        logger.info(f"Axes: {self._joystick.get_numaxes()}")
        logger.info(f"Buttons: {self._joystick.get_numbuttons()}")
        logger.info(f"Hats: {self._joystick.get_numhats()}")

        self._running = True

    async def stop(self) -> None:
        """Disconnect from controller"""
        logger.info("Stopping gamepad input")
        self._running = False

        if self._joystick:
            self._joystick.quit()
            self._joystick = None

        pygame.joystick.quit()
        pygame.quit()

    async def read_sample(self) -> Optional[JoySample]:
        """Read current controller state"""
        if not self._running or not self._joystick:
            return None

        # Process pygame events (required to update joystick state)
        pygame.event.pump()

        sign = -1.0 if self._negate_axes else 1.0
        axes: List[float] = [
            sign * self._joystick.get_axis(i) for i in range(self._joystick.get_numaxes())
        ]
        for i in range(self._joystick.get_numhats()):
            hat_x, hat_y = self._joystick.get_hat(i)
            # Hat x is right-positive, flip it to match the sticks
            axes.append(float(-hat_x if self._negate_axes else hat_x))
            axes.append(float(hat_y))

        buttons = [
            int(self._joystick.get_button(i)) for i in range(self._joystick.get_numbuttons())
        ]

        pressed = [str(i) for i, value in enumerate(buttons) if value]
        logger.debug(
            f"Axes: [{', '.join(f'{a:+.2f}' for a in axes)}] | "
            f"Buttons: [{', '.join(pressed) if pressed else 'none'}]"
        )

        return JoySample(axes=axes, buttons=buttons)
