"""
Scripted sample source.

Replays a fixed list of joystick samples for testing and demos without
physical hardware.
"""

import logging
from typing import Any, Dict, List, Optional

from teleop.types import JoySample


logger = logging.getLogger(__name__)

# Controller layout used by the built-in scripts
AXIS_COUNT = 6
BUTTON_COUNT = 8
STICK_X_AXIS = 5        # Forward/back (matches default axis_linear.x)
STICK_YAW_AXIS = 2      # Turn (matches default axis_angular.yaw)
ADJUST_YAW_AXIS = 3     # Extra yaw in autorun (matches default axis_angular_adjustment.yaw)
ENABLE_BUTTON = 5
TURBO_BUTTON = 4
AUTORUN_BUTTON = 7


def make_sample(
    x: float = 0.0,
    yaw: float = 0.0,
    adjust_yaw: float = 0.0,
    enable: bool = False,
    turbo: bool = False,
    autorun: bool = False,
) -> JoySample:
    """Build a sample in the script controller layout"""
    axes = [0.0] * AXIS_COUNT
    axes[STICK_X_AXIS] = x
    axes[STICK_YAW_AXIS] = yaw
    axes[ADJUST_YAW_AXIS] = adjust_yaw

    buttons = [0] * BUTTON_COUNT
    buttons[ENABLE_BUTTON] = int(enable)
    buttons[TURBO_BUTTON] = int(turbo)
    buttons[AUTORUN_BUTTON] = int(autorun)
    return JoySample(axes=axes, buttons=buttons)


class ScriptedInput:
    """
    Scripted sample source.

    Returns the scripted samples in order, then None (input silence)
    unless loop is set.
    """

    def __init__(self, samples: Optional[List[JoySample]] = None, loop: bool = False) -> None:
        """
        Initialize scripted input.

        Args:
            samples: Samples to return in sequence
            loop: If True, start over after the last sample
        """
        self._samples = samples or []
        self._loop = loop
        self._index = 0
        self._running = False

    async def start(self) -> None:
        """Start the source"""
        logger.info(f"[SCRIPT INPUT] Started ({len(self._samples)} samples)")
        self._running = True
        self._index = 0

    async def stop(self) -> None:
        """Stop the source"""
        logger.info("[SCRIPT INPUT] Stopped")
        self._running = False

    async def read_sample(self) -> Optional[JoySample]:
        """Return next scripted sample"""
        if not self._running or not self._samples:
            return None

        if self._index >= len(self._samples):
            if not self._loop:
                return None
            self._index = 0

        sample = self._samples[self._index]
        self._index += 1
        return sample

    @property
    def exhausted(self) -> bool:
        """True once every sample has been returned (never when looping)"""
        return not self._loop and self._index >= len(self._samples)

    def reset(self) -> None:
        """Reset to beginning of script"""
        self._index = 0

    def load_script(self, script_name: str) -> None:
        """
        Load a predefined script.

        Args:
            script_name: Name of script to load from Scripts

        Raises:
            KeyError: If the script is unknown
        """
        script_map = {
            "normal_drive": Scripts.normal_drive,
            "turbo_burst": Scripts.turbo_burst,
            "release_stop": Scripts.release_stop,
            "autorun_cruise": Scripts.autorun_cruise,
        }

        if script_name not in script_map:
            raise KeyError(f"Unknown script '{script_name}'")

        self._samples = script_map[script_name]()
        self._index = 0
        logger.info(f"Loaded script '{script_name}' with {len(self._samples)} samples")


class Scripts:
    """Pre-defined scripts for the script controller layout"""

    @staticmethod
    def parameters() -> Dict[str, Any]:
        """Parameter overrides that match the script controller layout"""
        return {
            "enable_button": ENABLE_BUTTON,
            "enable_turbo_button": TURBO_BUTTON,
            "enable_autorun_button": AUTORUN_BUTTON,
        }

    @staticmethod
    def normal_drive() -> List[JoySample]:
        """Hold enable, drive forward, turn, release"""
        return [
            make_sample(),
            make_sample(enable=True),
            make_sample(x=0.5, enable=True),
            make_sample(x=1.0, enable=True),
            make_sample(x=1.0, yaw=0.5, enable=True),
            make_sample(x=0.5, yaw=-0.5, enable=True),
            make_sample(enable=True),
            make_sample(),
        ]

    @staticmethod
    def turbo_burst() -> List[JoySample]:
        """Normal drive, then hold turbo"""
        return [
            make_sample(x=1.0, enable=True),
            make_sample(x=1.0, enable=True, turbo=True),
            make_sample(x=1.0, enable=True, turbo=True),
            make_sample(x=1.0, enable=True),
            make_sample(),
        ]

    @staticmethod
    def release_stop() -> List[JoySample]:
        """Release enable while driving; exactly one stop goes out"""
        return [
            make_sample(x=0.8, enable=True),
            make_sample(x=0.8, enable=True),
            make_sample(x=0.8),
            make_sample(x=0.8),
            make_sample(),
        ]

    @staticmethod
    def autorun_cruise() -> List[JoySample]:
        """Toggle autorun, push the pad to build cruise speed, steer, toggle off"""
        samples = [make_sample(), make_sample(autorun=True)]
        # Pad held forward: speed ramps by 0.1 per sample up to the limit
        samples += [make_sample(x=1.0) for _ in range(12)]
        # Let go: cruise speed holds
        samples += [make_sample() for _ in range(3)]
        # Steer with stick and adjustment axis
        samples += [
            make_sample(yaw=0.6, adjust_yaw=0.3),
            make_sample(yaw=0.6, adjust_yaw=0.6),
        ]
        # Pad back: slow down
        samples += [make_sample(x=-1.0) for _ in range(4)]
        # Toggle off, enable not held: stop
        samples += [make_sample(autorun=True), make_sample(), make_sample()]
        return samples
