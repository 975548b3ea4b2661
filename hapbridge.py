#!/usr/bin/env python3
"""HomeKit to HTTP/MQTT bridge."""

import argparse
import asyncio
import logging
import signal
import sys

from config import load_config
from constants import DEFAULT_CONFIG_FILE
from errors import ConfigurationInvalid
from hapbridge_app import HapBridge

logger = logging.getLogger(__name__)


async def main(config_path: str):
    """Main entry point."""
    config = load_config(config_path)
    app = HapBridge(config)
    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def _shutdown():
        if not stop_event.is_set():
            logger.info("Shutting down...")
            stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _shutdown)
        except NotImplementedError:
            pass

    try:
        await app.start()
        await stop_event.wait()
    finally:
        await app.stop()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Expose HTTP/MQTT devices as HomeKit accessories")
    parser.add_argument("-c", "--config", default=DEFAULT_CONFIG_FILE, help="configuration file (YAML or JSON)")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    try:
        asyncio.run(main(args.config))
    except (FileNotFoundError, ConfigurationInvalid) as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)
