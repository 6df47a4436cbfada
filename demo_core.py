#!/usr/bin/env python3
"""
Teleop Core Demo - Simple example application.

Plays the autorun cruise script through the node and logs every command
that reaches the (mock) publisher.
"""

import asyncio
import logging
import sys

from teleop.config import ConfigStore
from teleop.node import TeleopNode
from teleop.transport import MockPublisher
from teleop.types import NodeConfig, VelocityCommand
from joy import ScriptedInput, Scripts


logger = logging.getLogger(__name__)


class LoggingPublisher(MockPublisher):
    """MockPublisher that also logs each command at info level"""

    def publish(self, command: VelocityCommand) -> None:
        super().publish(command)
        tag = "STOP" if command.is_stop else "CMD "
        logger.info(f"{tag} #{self.command_count:02d}: {command}")


async def run_demo(script: str = "autorun_cruise") -> MockPublisher:
    """Run a script through the node with mock components"""

    logger.info("=" * 60)
    logger.info(f"Teleop Core Demo - script '{script}'")
    logger.info("=" * 60)

    store = ConfigStore.from_parameters(Scripts.parameters())

    source = ScriptedInput()
    source.load_script(script)

    publisher = LoggingPublisher()

    node = TeleopNode(
        source=source,
        publisher=publisher,
        store=store,
        config=NodeConfig(loop_interval=0.05),
    )

    node_task = asyncio.create_task(node.run())

    while not source.exhausted and not node_task.done():
        await asyncio.sleep(0.1)

    node.stop()
    await node_task

    logger.info("-" * 60)
    logger.info(
        f"Processed {node.samples_processed} samples, "
        f"published {publisher.command_count} commands"
    )
    return publisher


def main(script: str = "autorun_cruise") -> None:
    """Main entry point"""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )
    try:
        asyncio.run(run_demo(script))
    except KeyboardInterrupt:
        logger.info("Demo interrupted by user")
    except Exception as e:
        logger.error(f"Demo failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
