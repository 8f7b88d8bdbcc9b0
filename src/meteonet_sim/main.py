"""meteonet-sim - synthetic weather station publisher.

Runs the shared atmosphere and one simulated sensor per configured station,
publishing every reading as JSON on ``<channel_prefix>/<station name>``.
"""

import json
import logging
import logging.handlers
import os
import signal
import sys
import threading
import time
import typing
from datetime import datetime

import psutil
import redis
import structlog

from meteonet_sim.atmosphere import AtmosphericEngine
from meteonet_sim.config import Settings, settings
from meteonet_sim.logs import configure_structlog, json_formatter
from meteonet_sim.publisher import RedisPublisher
from meteonet_sim.scheduler import SimulationScheduler
from meteonet_sim.station import StationSensor
from meteonet_sim.utils import make_rng

# --- Structlog Configuration ---
configure_structlog()

logger = structlog.get_logger("meteonet")


def setup_logging(config: Settings = settings) -> None:
    """Configure JSON logging to stdout and a daily rotated file."""
    try:
        os.makedirs(config.log_dir, exist_ok=True)
    except OSError:
        pass  # File handler below falls back to stdout only

    formatter = json_formatter()

    handlers: list[logging.Handler] = []

    # Stdout
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    handlers.append(stream_handler)

    # File
    log_file = os.path.join(config.log_dir, "meteonet_sim.log")
    try:
        file_handler = logging.handlers.TimedRotatingFileHandler(
            log_file, when="midnight", interval=1, backupCount=30, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)
    except Exception as e:
        print(f"Failed to setup file logging: {e}")

    logging.basicConfig(level=config.log_level, handlers=handlers, force=True)


def build_scheduler(
    config: Settings, sink: RedisPublisher, shutdown_event: threading.Event
) -> SimulationScheduler:
    tz = config.tz

    def clock() -> datetime:
        return datetime.now(tz)

    engine = AtmosphericEngine(rng=make_rng(config.seed, "atmosphere"), clock=clock)
    sensors = [
        StationSensor(station, rng=make_rng(config.seed, f"station:{station.id}"))
        for station in config.stations
    ]
    return SimulationScheduler(
        engine,
        sensors,
        sink,
        channel_prefix=config.channel_prefix,
        period=config.tick_seconds,
        shutdown_event=shutdown_event,
    )


class Heartbeat(threading.Thread):
    """Writes the service status key with a TTL until shutdown."""

    def __init__(
        self, scheduler: SimulationScheduler, config: Settings, shutdown_event: threading.Event
    ) -> None:
        super().__init__(name="Heartbeat", daemon=True)
        self.scheduler = scheduler
        self.config = config
        self.shutdown_event = shutdown_event
        self._redis: redis.Redis | None = None

    def run(self) -> None:
        while not self.shutdown_event.is_set():
            self.write_status("Running")
            self.shutdown_event.wait(self.config.status_interval)

    def write_status(self, status: str) -> None:
        try:
            if self._redis is None:
                self._redis = redis.Redis(
                    host=self.config.redis_host,
                    port=self.config.redis_port,
                    db=self.config.redis_db,
                    socket_connect_timeout=1,
                )

            data = {
                "service": "meteonet_sim",
                "timestamp": time.time(),
                "status": status,
                "cpu_percent": psutil.cpu_percent(),
                "memory_usage_mb": psutil.Process(os.getpid()).memory_info().rss / 1024 / 1024,
                "meta": {
                    "stations": len(self.scheduler.sensors),
                    "tick_seconds": self.config.tick_seconds,
                    "readings_published": self.scheduler.dispatcher.published,
                    "publish_failures": self.scheduler.dispatcher.failed,
                },
                "pid": os.getpid(),
            }
            self._redis.setex(self.config.status_key, self.config.status_ttl, json.dumps(data))
        except Exception as e:
            # Log but don't crash the heartbeat
            logger.warning(f"Failed to write status to Redis: {e}")


def main() -> None:
    setup_logging()

    shutdown_event = threading.Event()

    def signal_handler(sig: int, frame: typing.Any) -> None:
        logger.info(f"Received signal {sig}, stopping...")
        shutdown_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    logger.info("meteonet-sim starting", config=settings.model_dump(mode="json"))

    publisher = RedisPublisher(
        host=settings.redis_host,
        port=settings.redis_port,
        db=settings.redis_db,
        timeout=settings.redis_timeout,
    )
    scheduler = build_scheduler(settings, publisher, shutdown_event)
    heartbeat = Heartbeat(scheduler, settings, shutdown_event)

    try:
        heartbeat.start()
        scheduler.run()
    except Exception as e:
        logger.critical(f"Fatal Service Error: {e}")
        sys.exit(1)
    finally:
        heartbeat.write_status("Stopped")
        publisher.close()


if __name__ == "__main__":
    main()
