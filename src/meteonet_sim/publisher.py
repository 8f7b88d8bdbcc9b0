import typing

import redis
import structlog

logger = structlog.get_logger("publisher")


class PublishSink(typing.Protocol):
    """Anything that can take a serialized reading for a channel."""

    def publish(self, channel: str, payload: str) -> bool: ...


class RedisPublisher:
    """Publishes readings on Redis Pub/Sub channels.

    Connects lazily and drops the client after an error so the next publish
    reconnects. Never retries a payload.
    """

    def __init__(
        self, host: str = "localhost", port: int = 6379, db: int = 0, timeout: float = 5.0
    ) -> None:
        self.host = host
        self.port = port
        self.db = db
        self.timeout = timeout
        self._redis: redis.Redis | None = None

    @property
    def client(self) -> redis.Redis:
        if self._redis is None:
            self._redis = redis.Redis(
                host=self.host,
                port=self.port,
                db=self.db,
                socket_connect_timeout=self.timeout,
                socket_timeout=self.timeout,
            )
        return self._redis

    def publish(self, channel: str, payload: str) -> bool:
        try:
            receivers = self.client.publish(channel, payload)
        except redis.RedisError as e:
            logger.warning("publish_failed", channel=channel, error=str(e))
            self.close()
            return False

        logger.debug("published", channel=channel, receivers=receivers)
        return True

    def close(self) -> None:
        if self._redis is None:
            return
        try:
            self._redis.close()
        except redis.RedisError:
            pass
        finally:
            self._redis = None
