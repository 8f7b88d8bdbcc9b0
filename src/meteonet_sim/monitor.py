"""Console monitor: subscribes to every station channel and logs readings."""

import json
import logging
import signal
import sys
import threading
import time
import typing

import redis
import structlog

from meteonet_sim.config import Settings, settings
from meteonet_sim.logs import configure_structlog, json_formatter

# Configure Logging
configure_structlog()

logger = structlog.get_logger("monitor")

shutdown_event = threading.Event()


def handle_message(message: dict[str, typing.Any]) -> dict[str, typing.Any] | None:
    """Decode one pub/sub message; returns the reading payload or None."""
    channel = message.get("channel", b"")
    if isinstance(channel, bytes):
        channel = channel.decode("utf-8", errors="replace")

    try:
        data = json.loads(message["data"])
    except (json.JSONDecodeError, TypeError, UnicodeDecodeError):
        logger.warning("undecodable_reading", channel=channel)
        return None

    logger.info("reading_received", channel=channel, reading=data)
    return data


def listen(config: Settings = settings, stop: threading.Event = shutdown_event) -> None:
    r = redis.Redis(host=config.redis_host, port=config.redis_port, db=config.redis_db)
    pubsub = r.pubsub()  # type: ignore[no-untyped-call]
    pattern = f"{config.channel_prefix.rstrip('/')}/*"
    pubsub.psubscribe(pattern)

    logger.info(f"Subscribed to '{pattern}', waiting for station readings...")

    while not stop.is_set():
        try:
            message = pubsub.get_message(ignore_subscribe_messages=True, timeout=1)
            if message:
                handle_message(message)
            else:
                time.sleep(0.1)
        except redis.RedisError as e:
            logger.error("pubsub_error", error=str(e))
            time.sleep(5)

    pubsub.close()


def setup_logging(config: Settings = settings) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(json_formatter())
    logging.basicConfig(level=config.log_level, handlers=[handler], force=True)


def main() -> None:
    setup_logging()
    signal.signal(signal.SIGINT, lambda s, f: shutdown_event.set())
    signal.signal(signal.SIGTERM, lambda s, f: shutdown_event.set())

    listen()


if __name__ == "__main__":
    main()
