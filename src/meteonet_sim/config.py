import json
import logging
from pathlib import Path
from zoneinfo import ZoneInfo

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from meteonet_sim.models import Station

logger = logging.getLogger(__name__)

DEFAULT_STATIONS = [
    Station(id=1, name="Barcelona", region="Litoral Urbano"),
    Station(id=2, name="Tarragona", region="Litoral Sur"),
    Station(id=3, name="Girona", region="Pre-Pirineo"),
    Station(id=4, name="Lleida", region="Interior Seco"),
    Station(id=5, name="Pirineos", region="Alta Montaña"),
]


class Settings(BaseSettings):
    """
    Simulator configuration using Pydantic Settings.
    Reads from environment variables (METEONET_*) and an optional JSON station file.
    """

    # Application Config
    log_level: str = "INFO"
    log_dir: str = "/var/log/meteonet"

    # Simulation
    tick_seconds: float = Field(default=60.0, gt=0, description="Wall-clock period of one tick")
    timezone: str = Field(default="Europe/Madrid", description="Local time of the simulated sites")
    seed: int | None = Field(default=None, description="Seed for reproducible runs")
    stations: list[Station] = Field(default_factory=lambda: list(DEFAULT_STATIONS))
    config_path: str = "/config/stations.json"

    # Broker
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_timeout: float = 5.0
    channel_prefix: str = "sensores/clima"

    # Heartbeat
    status_key: str = "status:meteonet_sim"
    status_ttl: int = 30
    status_interval: float = 10.0

    model_config = SettingsConfigDict(
        env_prefix="METEONET_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @classmethod
    def load(cls) -> "Settings":
        """Load settings from env/defaults, then apply the station file if present."""
        base_settings = cls()

        path = Path(base_settings.config_path)
        if path.exists():
            try:
                with open(path, encoding="utf-8") as f:
                    file_data = json.load(f)

                updated_data = base_settings.model_dump()
                updated_data.update(file_data)
                return cls.model_validate(updated_data)
            except Exception as e:
                logger.warning(f"Failed to load config file {path}, using defaults/env: {e}")

        return base_settings


# Global settings instance
settings = Settings.load()
