#!/usr/bin/env python3
"""
teleop-joy Launcher - Easy start for joystick teleop

Usage:
    python launch.py --gamepad                 # Drive from a game controller
    python launch.py --script autorun_cruise   # Replay a built-in script
    python launch.py --demo                    # Run core demo
"""

import sys
import argparse
import asyncio
import logging
from typing import Any, Dict, List


def setup_logging(level: str = "INFO") -> None:
    """Configure logging"""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )


def parse_overrides(items: List[str]) -> Dict[str, Any]:
    """
    Parse repeated --set name=value options.

    Raises:
        ConfigError: On a malformed item, unknown name or bad value
    """
    from teleop.config import ConfigError, parse_parameter_value

    overrides: Dict[str, Any] = {}
    for item in items:
        name, sep, value = item.partition("=")
        if not sep:
            raise ConfigError(f"Expected name=value, got {item!r}")
        overrides[name.strip()] = parse_parameter_value(name.strip(), value)
    return overrides


def build_store(env_file: str, overrides: List[str], script_layout: bool):
    """Defaults < script layout < environment < command line"""
    from teleop.config import ConfigStore, load_env_config
    from joy import Scripts

    params: Dict[str, Any] = {}
    if script_layout:
        params.update(Scripts.parameters())
    params.update(load_env_config(env_file))
    params.update(parse_overrides(overrides))
    return ConfigStore.from_parameters(params)


def launch_node(args: argparse.Namespace) -> None:
    """Launch the teleop node with a gamepad or a script"""
    from teleop.config import ConfigError
    from teleop.node import TeleopNode
    from teleop.transport import MockPublisher
    from teleop.types import NodeConfig

    try:
        store = build_store(args.env_file, args.set, script_layout=bool(args.script))
    except ConfigError as e:
        print(f"Configuration error: {e}")
        sys.exit(1)

    if args.gamepad:
        from joy import GamepadInput, HAS_PYGAME
        if not HAS_PYGAME:
            print("\nERROR: pygame not installed")
            print("Install with: pip install pygame")
            sys.exit(1)
        source = GamepadInput(joystick_index=args.joystick)
    else:
        from joy import ScriptedInput
        source = ScriptedInput(loop=args.loop)
        try:
            source.load_script(args.script)
        except KeyError as e:
            print(f"Error: {e}")
            sys.exit(1)

    # No middleware transport: commands are logged by the mock publisher
    publisher = MockPublisher(keep_history=False)

    node = TeleopNode(
        source=source,
        publisher=publisher,
        store=store,
        config=NodeConfig(
            loop_interval=1.0 / args.rate,
            input_timeout=args.input_timeout,
        ),
    )

    async def run():
        node_task = asyncio.create_task(node.run())
        if not args.gamepad and not args.loop:
            while not source.exhausted and not node_task.done():
                await asyncio.sleep(0.1)
            node.stop()
        await node_task

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        print("\nShutting down...")
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


def launch_demo() -> None:
    """Launch core demo"""
    print("Starting core demo...")
    from demo_core import main
    main()


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description="teleop-joy - Joystick to velocity command teleop",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python launch.py --gamepad --set enable_turbo_button=4
  python launch.py --script autorun_cruise --log-level DEBUG
  python launch.py --gamepad --env-file robot.env --input-timeout 0.5
  python launch.py --demo
        """
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--gamepad",
        action="store_true",
        help="Read samples from a game controller (requires pygame)"
    )
    source.add_argument(
        "--script",
        choices=["normal_drive", "turbo_burst", "release_stop", "autorun_cruise"],
        help="Replay a built-in script"
    )
    source.add_argument(
        "--demo",
        action="store_true",
        help="Run core demo"
    )
    parser.add_argument(
        "--joystick",
        type=int,
        default=0,
        help="Controller index for --gamepad"
    )
    parser.add_argument(
        "--loop",
        action="store_true",
        help="Loop the script forever"
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help="Read TELEOP_* parameters from this file (default: .env if present)"
    )
    parser.add_argument(
        "--set",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Override a parameter, e.g. --set scale_linear.x=0.8"
    )
    parser.add_argument(
        "--rate",
        type=float,
        default=50.0,
        help="Sample rate in Hz"
    )
    parser.add_argument(
        "--input-timeout",
        type=float,
        default=None,
        help="Stop the robot after this many seconds without input (default: off)"
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level"
    )

    args = parser.parse_args()

    setup_logging(args.log_level)

    if args.demo:
        launch_demo()
    elif args.gamepad or args.script:
        launch_node(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
