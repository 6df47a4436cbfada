"""Joystick sample sources"""

from joy.scripted import ScriptedInput, Scripts, make_sample
from joy.gamepad import GamepadInput, HAS_PYGAME

__all__ = ["ScriptedInput", "Scripts", "make_sample", "GamepadInput", "HAS_PYGAME"]
