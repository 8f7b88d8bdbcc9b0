from unittest.mock import MagicMock, patch

import redis
from meteonet_sim.publisher import RedisPublisher


@patch("meteonet_sim.publisher.redis.Redis")
def test_publish_success(mock_redis_cls) -> None:
    mock_client = MagicMock()
    mock_client.publish.return_value = 2
    mock_redis_cls.return_value = mock_client

    publisher = RedisPublisher(host="broker", port=6380, db=1, timeout=2.0)
    assert publisher.publish("sensores/clima/Lleida", '{"id": 4}') is True

    mock_client.publish.assert_called_once_with("sensores/clima/Lleida", '{"id": 4}')
    kwargs = mock_redis_cls.call_args[1]
    assert kwargs["host"] == "broker"
    assert kwargs["port"] == 6380
    assert kwargs["db"] == 1


@patch("meteonet_sim.publisher.redis.Redis")
def test_connection_is_reused(mock_redis_cls) -> None:
    publisher = RedisPublisher()
    publisher.publish("a", "1")
    publisher.publish("b", "2")
    assert mock_redis_cls.call_count == 1


@patch("meteonet_sim.publisher.redis.Redis")
def test_publish_failure_reports_false_and_reconnects(mock_redis_cls) -> None:
    broken = MagicMock()
    broken.publish.side_effect = redis.ConnectionError("broker down")
    healthy = MagicMock()
    mock_redis_cls.side_effect = [broken, healthy]

    publisher = RedisPublisher()
    assert publisher.publish("sensores/clima/Girona", "{}") is False
    broken.close.assert_called_once()

    # Next publish opens a fresh client; the failed payload is not resent
    assert publisher.publish("sensores/clima/Girona", '{"n": 2}') is True
    healthy.publish.assert_called_once_with("sensores/clima/Girona", '{"n": 2}')


def test_close_without_connection_is_noop() -> None:
    RedisPublisher().close()
