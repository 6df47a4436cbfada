"""
TeleopNode - Host loop around the CommandEngine.

The node is the transport plumbing. It:
- Starts and stops the sample source
- Feeds each new sample to the engine, one at a time
- Hands emitted commands to the publisher (through the engine)
- Optionally stops the robot when input goes silent
"""

import asyncio
import logging
import time
from typing import Optional

from .config import ConfigStore, TeleopConfig, log_summary
from .engine import CommandEngine
from .interfaces import CommandPublisher, SampleSource
from .types import NodeConfig


logger = logging.getLogger(__name__)


class TeleopNode:
    """
    Joystick teleop node.

    Polls the source every loop_interval and processes whatever sample
    it returns. Samples are always handled to completion before the next
    one is read.
    """

    def __init__(
        self,
        source: SampleSource,
        publisher: CommandPublisher,
        store: ConfigStore,
        config: Optional[NodeConfig] = None,
    ) -> None:
        """
        Initialize node.

        Args:
            source: Source of joystick samples
            publisher: Sink for velocity commands
            store: Teleop parameters
            config: Loop settings (defaults if omitted)
        """
        self.source = source
        self.publisher = publisher
        self.store = store
        self.config = config or NodeConfig()
        self._engine = CommandEngine(store, publisher)

        self._running = False
        self._last_sample_time: float = 0.0
        self._samples_processed = 0

        store.add_update_callback(self._on_config_update)

    async def run(self) -> None:
        """
        Main loop - runs until stopped.

        Call this from an async context.
        """
        logger.info("Teleop node starting")
        log_summary(self.store.snapshot())
        if self.config.input_timeout is None:
            logger.info("Input watchdog disabled")
        else:
            logger.info(f"Input watchdog: stop after {self.config.input_timeout:.2f}s of silence")

        self._running = True

        try:
            await self.source.start()

            while self._running:
                try:
                    await self._update()
                except Exception as e:
                    logger.error(f"Error in teleop update: {e}", exc_info=True)
                    self._send_stop()
                await asyncio.sleep(self.config.loop_interval)

        finally:
            logger.info("Teleop node stopping")
            await self._cleanup()

    def stop(self) -> None:
        """Stop the node (call from outside async context)"""
        self._running = False

    async def _update(self) -> None:
        """Single iteration of the loop"""
        sample = await self.source.read_sample()
        now = time.time()

        if sample is None:
            self._check_watchdog(now)
            return

        self._last_sample_time = now
        self._samples_processed += 1
        self._engine.process(sample)

    def _send_stop(self) -> None:
        """Force the dead-man stop; a failing publisher must not end the loop"""
        try:
            self._engine.force_stop()
        except Exception as e:
            logger.error(f"Failed to send stop command: {e}", exc_info=True)

    def _check_watchdog(self, now: float) -> None:
        """Send the dead-man stop if input has been silent too long"""
        timeout = self.config.input_timeout
        if timeout is None or self._last_sample_time <= 0:
            return

        if now - self._last_sample_time > timeout:
            if self._engine.force_stop() is not None:
                logger.warning(f"No input for {timeout:.2f}s, robot stopped")

    def _on_config_update(self, old: TeleopConfig, new: TeleopConfig) -> None:
        logger.info(f"Configuration updated (version {self.store.version})")
        log_summary(new)

    async def _cleanup(self) -> None:
        """Cleanup on shutdown"""
        try:
            # Leave the robot stopped
            self._engine.force_stop()
            await self.source.stop()
        except Exception as e:
            logger.error(f"Error during cleanup: {e}", exc_info=True)

    # Public properties for UI/monitoring

    @property
    def engine(self) -> CommandEngine:
        return self._engine

    @property
    def samples_processed(self) -> int:
        return self._samples_processed

    @property
    def is_running(self) -> bool:
        return self._running
