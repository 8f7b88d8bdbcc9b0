import logging
import random
from dataclasses import dataclass
from datetime import UTC, datetime

from meteonet_sim.models import AtmosphericState, Reading, Station
from meteonet_sim.utils import chance, clamp, gauss_step, uniform, wrap_degrees

logger = logging.getLogger(__name__)

TEMPERATURE_RANGE = (5.0, 40.0)
HUMIDITY_RANGE = (20.0, 95.0)
WIND_SPEED_RANGE = (0.0, 20.0)
UV_MAX = 11.0
UV_FULL_SCALE_RADIATION = 1200.0

TEMPERATURE_SIGMA = 0.3
HUMIDITY_SIGMA = 0.5
WIND_SPEED_SIGMA = 0.5
WIND_DIRECTION_SIGMA = 2.0

HEAT_WAVE_OFFSET = 5.0
STORM_RAIN_BASE = 0.7
CALM_RAIN_BASE = 0.2
STORM_RAIN_INTENSITY = 5.0
CALM_RAIN_INTENSITY = 1.0


@dataclass
class StationState:
    """Random-walk state private to one station loop."""

    temperature_trend: float
    humidity: float
    wind_speed: float = 5.0
    wind_direction: float = 180.0

    @classmethod
    def initial(cls, rng: random.Random) -> "StationState":
        return cls(
            temperature_trend=uniform(rng, 15.0, 25.0),
            humidity=uniform(rng, 40.0, 70.0),
        )


def wind_chill(temperature: float, wind_speed: float) -> float:
    v = wind_speed**0.16
    return 13.12 + 0.6215 * temperature - 11.37 * v + 0.3965 * temperature * v


def heat_index(temperature: float, humidity: float) -> float:
    """Rothfusz regression with Celsius coefficients."""
    t = temperature
    rh = humidity
    return (
        -8.784695
        + 1.61139411 * t
        + 2.338549 * rh
        - 0.14611605 * t * rh
        - 0.012308094 * t**2
        - 0.016424828 * rh**2
        + 0.002211732 * t**2 * rh
        + 0.00072546 * t * rh**2
        - 0.000003582 * t**2 * rh**2
    )


def apparent_temperature(temperature: float, humidity: float, wind_speed: float) -> float:
    if temperature < 10.0 and wind_speed > 3.0:
        return wind_chill(temperature, wind_speed)
    if temperature > 26.0 and humidity > 40.0:
        return heat_index(temperature, humidity)
    return temperature


def uv_index(solar_radiation: float) -> float:
    return clamp(solar_radiation / UV_FULL_SCALE_RADIATION * UV_MAX, 0.0, UV_MAX)


def rain_probability(storm_active: bool, cloud_cover: float) -> float:
    """Chance of rain this tick, clamped to [0, 1]."""
    base = STORM_RAIN_BASE if storm_active else CALM_RAIN_BASE
    return clamp(base + cloud_cover / 200.0, 0.0, 1.0)


class StationSensor:
    """Sensor model for one station.

    Not thread safe: each instance belongs to exactly one station loop and its
    ticks must run sequentially.
    """

    def __init__(
        self,
        station: Station,
        rng: random.Random | None = None,
        state: StationState | None = None,
    ) -> None:
        self.station = station
        self._rng = rng or random.Random()
        self.state = state or StationState.initial(self._rng)
        self.bias = station.bias

        if station.known_region is None:
            logger.warning(
                f"Station {station.name} has unknown region '{station.region}', using zero bias"
            )

    def tick(self, atmosphere: AtmosphericState, now: datetime | None = None) -> Reading:
        """Advance the station one step. A naive ``now`` is read as UTC."""
        state = self.state
        rng = self._rng

        state.temperature_trend += gauss_step(rng, TEMPERATURE_SIGMA)
        heat_wave = HEAT_WAVE_OFFSET if atmosphere.heat_wave_active else 0.0
        temperature = clamp(
            state.temperature_trend + self.bias.temperature + heat_wave, *TEMPERATURE_RANGE
        )

        state.humidity = clamp(
            state.humidity + gauss_step(rng, HUMIDITY_SIGMA) + self.bias.humidity,
            *HUMIDITY_RANGE,
        )

        state.wind_speed = clamp(
            state.wind_speed + gauss_step(rng, WIND_SPEED_SIGMA), *WIND_SPEED_RANGE
        )
        state.wind_direction = wrap_degrees(
            state.wind_direction + gauss_step(rng, WIND_DIRECTION_SIGMA)
        )

        precipitation = 0.0
        if chance(rng, rain_probability(atmosphere.storm_active, atmosphere.cloud_cover)):
            precipitation = (
                STORM_RAIN_INTENSITY if atmosphere.storm_active else CALM_RAIN_INTENSITY
            )

        now = now or datetime.now(UTC)
        if now.tzinfo is None:
            # Naive datetimes are taken as UTC, not host local time
            now = now.replace(tzinfo=UTC)
        timestamp = now.astimezone(UTC).replace(microsecond=0)

        return Reading(
            station_id=self.station.id,
            station_name=self.station.name,
            region=self.station.region,
            timestamp=timestamp,
            season=atmosphere.season,
            cloud_cover=atmosphere.cloud_cover,
            pressure=atmosphere.pressure,
            solar_radiation=atmosphere.solar_radiation,
            uv_index=uv_index(atmosphere.solar_radiation),
            temperature=temperature,
            apparent_temperature=apparent_temperature(
                temperature, state.humidity, state.wind_speed
            ),
            humidity=state.humidity,
            wind_speed=state.wind_speed,
            wind_direction=state.wind_direction,
            precipitation=precipitation,
        )
