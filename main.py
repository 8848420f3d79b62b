#!/usr/bin/env python3
"""Main entry point for the device registry."""

import argparse

from smart_home_devices.common.config import Config
from smart_home_devices.common.logging import configure_logging, get_logger

logger = get_logger(__name__)


def run_api(config: Config) -> None:
    import uvicorn
    
    uvicorn.run(
        "smart_home_devices.api.gateway:app",
        host=config.api_host,
        port=config.api_port,
        log_level=config.log_level.value.lower(),
    )


def run_consumer(config: Config) -> None:
    from smart_home_devices.messaging.sqs_poller import SQSPoller
    
    poller = SQSPoller.from_config(config)
    try:
        poller.run()
    except KeyboardInterrupt:
        poller.stop()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Smart home device registry")
    parser.add_argument(
        "command",
        choices=["api", "consume"],
        help="'api' serves the HTTP gateway, 'consume' polls the home assignment queue",
    )
    args = parser.parse_args()
    
    config = Config()
    configure_logging(config.log_level.value)
    logger.info(
        f"Device registry starting '{args.command}' in {config.environment.value} mode "
        f"(store: {config.store_backend.value})"
    )
    
    if args.command == "api":
        run_api(config)
    else:
        run_consumer(config)


if __name__ == "__main__":
    main()
