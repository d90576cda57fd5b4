"""
Command line poller.

Reads a YAML configuration, then prints the state of every configured module,
either once or every poll interval until interrupted.

    controlbyweb-poll config.yaml --once
    controlbyweb-poll config.yaml --traffic -v
"""

import argparse
import asyncio
import logging
from typing import Optional

from .api.module import CbwModule
from .config import create_controller, load_config
from .utils import run_with_keyboard_interrupt


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="controlbyweb-poll", description="Poll ControlByWeb modules")
    parser.add_argument("config", nargs="?", default="config.yaml", help="path to the YAML configuration")
    parser.add_argument("--once", action="store_true", help="read each module once and exit")
    parser.add_argument("--traffic", action="store_true", help="print every command and reply")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug messages")
    return parser


def setup_logging(verbose: bool) -> logging.Logger:
    logger = logging.getLogger("controlbyweb")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s.%(msecs)03d %(levelname)s: %(message)s', datefmt='%H:%M:%S'
    ))
    logger.addHandler(console_handler)
    return logger


async def print_state(module: CbwModule, state) -> None:
    print(f"{module.name}: {state}")


async def print_failure(module: CbwModule, error: Exception) -> None:
    print(f"{module.name}: polling stopped ({error})")


async def poll(config_path: str, once: bool = False, traffic: bool = False,
               logger: Optional[logging.Logger] = None) -> None:
    modules = [create_controller(c, logger=logger, print_traffic=traffic) for c in load_config(config_path)]
    try:
        if once:
            for module in modules:
                await print_state(module, await module.get_state())
            return

        for module in modules:
            module.polled = print_state
            module.poll_failed = print_failure
            await module.begin_poll_cycle()
        while any(module.is_polling for module in modules):
            await asyncio.sleep(1)
    finally:
        for module in modules:
            await module.close()


def main(argv: Optional[list[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logger = setup_logging(args.verbose)
    run_with_keyboard_interrupt(lambda: poll(args.config, once=args.once, traffic=args.traffic, logger=logger))


if __name__ == "__main__":
    main()
