"""
Net Nexus Portal - Main Entry Point

Usage: python main.py [--config PATH]
The config path falls back to $CONFIG_FILE, then config/config.yaml.
"""

import argparse
import asyncio
import logging
import os
import signal
import sys

from services.nexus_server import NexusServer

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/config.yaml"


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Net Nexus Wi-Fi and Bluetooth portal")
    parser.add_argument(
        "--config",
        default=os.environ.get("CONFIG_FILE", DEFAULT_CONFIG_PATH),
        help="Path to the YAML configuration file",
    )
    return parser.parse_args(argv)


def install_signal_handlers(loop: asyncio.AbstractEventLoop, server: NexusServer) -> None:
    """Route SIGINT/SIGTERM to a graceful server stop"""

    def _shutdown(sig: signal.Signals) -> None:
        logger.info(f"Received {sig.name}, shutting down...")
        loop.create_task(server.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _shutdown, sig)
        except NotImplementedError:
            # Windows event loops have no signal handler support; Ctrl+C still raises KeyboardInterrupt
            logger.debug(f"Signal handler for {sig.name} not supported on this platform")


async def main(argv=None) -> int:
    args = parse_args(argv)
    logger.info(f"Using configuration file: {args.config}")

    try:
        server = NexusServer(config_path=args.config)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    install_signal_handlers(asyncio.get_running_loop(), server)

    try:
        await server.start()
    except Exception as e:
        logger.error(f"Server failed: {e}")
        return 1
    finally:
        await server.stop()

    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nServer stopped by user")
        sys.exit(0)
