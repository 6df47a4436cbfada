"""
Command Engine - Turns joystick samples into velocity commands.

This is safety-critical code. The engine enforces:
- Mode priority: autorun > turbo > normal > disabled
- Per-axis scaling with silent zero for unmapped/out-of-range axes
- Autorun cruise ramp with clamped forward speed and yaw
- A single stop command whenever control is released
"""

import logging
from typing import Optional

from .config import ConfigStore, TeleopConfig
from .interfaces import CommandPublisher
from .types import (
    UNMAPPED,
    AutorunState,
    AxisMap,
    DeadManLatch,
    JoySample,
    Mode,
    ScaleMap,
    Vector3,
    VelocityCommand,
)


logger = logging.getLogger(__name__)

# Autorun adds this fraction of the stick value to the cruise speed per sample
RAMP_DIVISOR = 10.0


def get_val(sample: JoySample, axes: AxisMap, scales: ScaleMap, channel: str) -> float:
    """
    Read one scaled channel from a sample.

    Misconfiguration degrades to "no motion on that axis": an unknown
    channel, an unmapped axis or an axis the sample does not have all
    give 0.0 instead of an error.

    Args:
        sample: Joystick sample
        axes: Axis index per channel
        scales: Scale factor per channel
        channel: Channel name (x, y, z, yaw, pitch, roll)

    Returns:
        sample.axes[index] * scale, or 0.0
    """
    index = axes.index(channel)
    scale = scales.scale(channel)
    if index == UNMAPPED or index < 0 or scale is None or index >= len(sample.axes):
        return 0.0
    return sample.axes[index] * scale


def _clamp(value: float, limit: float) -> float:
    """Clamp to [-limit, +limit], upper bound applied first"""
    value = limit if value > limit else value
    value = -limit if value < -limit else value
    return value


class CommandEngine:
    """
    Converts JoySample into VelocityCommand.

    Owns the only persistent runtime state (autorun toggle, ramp
    accumulator, dead-man latch). process() is the single entry point and
    must not be called concurrently.
    """

    def __init__(self, store: ConfigStore, publisher: Optional[CommandPublisher] = None) -> None:
        """
        Initialize engine.

        Args:
            store: Configuration store, read once per sample
            publisher: Sink for emitted commands (optional)
        """
        self.store = store
        self.publisher = publisher
        self._autorun = AutorunState()
        self._latch = DeadManLatch()
        self._mode = Mode.DISABLED

    def process(self, sample: JoySample) -> Optional[VelocityCommand]:
        """
        Handle one sample: select mode, then synthesize or stop.

        Args:
            sample: Joystick sample from any SampleSource

        Returns:
            The emitted command, or None if nothing was emitted
        """
        config = self.store.snapshot()

        self._update_autorun_toggle(sample, config)

        logger.debug(
            f"Autorun button: {sample.button(config.enable_autorun_button)}, "
            f"flag: {int(self._autorun.enabled)}, "
            f"stop_already_sent: {int(self._latch.stop_already_sent)}"
        )

        # Any future autorun activation starts from rest
        if not self._autorun.enabled:
            self._autorun.ramped_forward_speed = 0.0

        mode = self.select_mode(sample, config)
        if mode != self._mode:
            logger.info(f"Mode: {self._mode.value} -> {mode.value}")
            self._mode = mode

        if mode.is_active:
            return self._emit(self._synthesize(sample, config, mode))

        return self.force_stop()

    def select_mode(self, sample: JoySample, config: TeleopConfig) -> Mode:
        """
        Pick the active mode for a sample (first match wins).

        Uses the current autorun flag; does not touch any state.
        """
        if self._autorun.enabled:
            return Mode.AUTORUN

        if (config.enable_turbo_button >= 0
                and sample.has_button(config.enable_turbo_button)
                and sample.buttons[config.enable_turbo_button]):
            return Mode.TURBO

        if (not config.require_enable_button
                or (sample.has_button(config.enable_button)
                    and sample.buttons[config.enable_button])):
            return Mode.NORMAL

        return Mode.DISABLED

    def force_stop(self) -> Optional[VelocityCommand]:
        """
        Send the dead-man stop unless it already went out.

        Returns:
            The stop command, or None if the latch was already set
        """
        if self._latch.stop_already_sent:
            return None

        command = VelocityCommand.stop()
        if self.publisher is not None:
            self.publisher.publish(command)
        self._latch.stop_already_sent = True
        logger.info("Control released, stop command sent")
        return command

    def reset(self) -> None:
        """Reset engine state (autorun off, ramp and latch cleared)"""
        self._autorun.reset()
        self._latch.reset()
        self._mode = Mode.DISABLED

    def _update_autorun_toggle(self, sample: JoySample, config: TeleopConfig) -> None:
        """Flip autorun on a rising edge of the autorun button"""
        button = config.enable_autorun_button
        if button < 0 or not sample.has_button(button):
            return

        value = sample.buttons[button]
        if value - self._autorun.edge_buffer > 0:
            self._autorun.enabled = not self._autorun.enabled
            logger.info(f"Autorun {'enabled' if self._autorun.enabled else 'disabled'}")
        self._autorun.edge_buffer = value

    def _synthesize(self, sample: JoySample, config: TeleopConfig, mode: Mode) -> VelocityCommand:
        """
        Build the command for an active mode.

        y, z, pitch and roll are always read directly; x and yaw go
        through the ramp in autorun.
        """
        scales = config.scale_for(mode)
        axes = config.axes

        x = get_val(sample, axes, scales, "x")
        yaw = get_val(sample, axes, scales, "yaw")

        if mode == Mode.AUTORUN:
            x = self._ramp_forward(x, scales)
            yaw = self._autorun_yaw(sample, config, yaw, scales)

        return VelocityCommand(
            linear=Vector3(
                x=x,
                y=get_val(sample, axes, scales, "y"),
                z=get_val(sample, axes, scales, "z"),
            ),
            angular=Vector3(
                x=get_val(sample, axes, scales, "roll"),
                y=get_val(sample, axes, scales, "pitch"),
                z=yaw,
            ),
            timestamp=sample.timestamp,
        )

    def _ramp_forward(self, raw_x: float, scales: ScaleMap) -> float:
        """
        Integrate the forward stick into the cruise speed.

        Args:
            raw_x: Scaled x value for this sample
            scales: Autorun scale group (x doubles as the speed limit)

        Returns:
            New cruise speed
        """
        limit = 1.0 * scales.x
        speed = self._autorun.ramped_forward_speed + raw_x / RAMP_DIVISOR
        self._autorun.ramped_forward_speed = _clamp(speed, limit)
        return self._autorun.ramped_forward_speed

    def _autorun_yaw(self, sample: JoySample, config: TeleopConfig,
                     base_yaw: float, scales: ScaleMap) -> float:
        """Primary yaw plus adjustment axis, clamped to the autorun yaw scale"""
        adjust_yaw = get_val(sample, config.adjustment_axes, scales, "yaw")
        return _clamp(base_yaw + adjust_yaw, 1.0 * scales.yaw)

    def _emit(self, command: VelocityCommand) -> VelocityCommand:
        if self.publisher is not None:
            self.publisher.publish(command)
        self._latch.stop_already_sent = False
        return command

    # Public properties for UI/monitoring

    @property
    def mode(self) -> Mode:
        """Mode selected for the last sample"""
        return self._mode

    @property
    def autorun_enabled(self) -> bool:
        return self._autorun.enabled

    @property
    def ramped_forward_speed(self) -> float:
        return self._autorun.ramped_forward_speed

    @property
    def stop_already_sent(self) -> bool:
        return self._latch.stop_already_sent
