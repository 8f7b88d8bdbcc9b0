import json
from datetime import UTC
from typing import Any

from meteonet_sim.models import Reading

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Publish order of the measurement keys
MEASUREMENT_FIELDS = (
    "cloud_cover",
    "uv_index",
    "humidity",
    "temperature",
    "apparent_temperature",
    "pressure",
    "wind_speed",
    "wind_direction",
    "precipitation",
    "solar_radiation",
)


def to_payload(reading: Reading) -> dict[str, Any]:
    """Build the published record. Measurements carry one decimal."""
    payload: dict[str, Any] = {
        "id": reading.station_id,
        "name": reading.station_name,
        "region": reading.region,
        "timestamp": reading.timestamp.astimezone(UTC).strftime(TIMESTAMP_FORMAT),
        "season": reading.season.value,
    }
    for name in MEASUREMENT_FIELDS:
        payload[name] = round(getattr(reading, name), 1)
    return payload


def to_json(reading: Reading) -> str:
    return json.dumps(to_payload(reading), ensure_ascii=False)


def channel_for(prefix: str, station_name: str) -> str:
    return f"{prefix.rstrip('/')}/{station_name}"
