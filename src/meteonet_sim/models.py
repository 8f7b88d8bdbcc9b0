from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Season(str, Enum):
    WINTER = "winter"
    SPRING = "spring"
    SUMMER = "summer"
    AUTUMN = "autumn"


class Region(str, Enum):
    """Closed set of regions with a known climate bias."""

    COASTAL_URBAN = "Litoral Urbano"
    COASTAL_SOUTH = "Litoral Sur"
    FOOTHILLS = "Pre-Pirineo"
    DRY_INTERIOR = "Interior Seco"
    HIGH_MOUNTAIN = "Alta Montaña"


class RegionalBias(BaseModel):
    """Additive offsets applied to a station on every tick."""

    model_config = ConfigDict(frozen=True)

    temperature: float = 0.0
    humidity: float = 0.0


NO_BIAS = RegionalBias()

REGIONAL_BIAS: dict[Region, RegionalBias] = {
    Region.COASTAL_URBAN: RegionalBias(humidity=10.0),
    Region.COASTAL_SOUTH: NO_BIAS,
    Region.FOOTHILLS: RegionalBias(temperature=-2.0, humidity=5.0),
    Region.DRY_INTERIOR: RegionalBias(temperature=3.0, humidity=-10.0),
    Region.HIGH_MOUNTAIN: RegionalBias(temperature=-7.0, humidity=5.0),
}


class Station(BaseModel):
    """A configured measurement site.

    The region is kept as the configured name so that sites in regions
    outside of ``Region`` still publish under their own label.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str = Field(..., min_length=1)
    region: str

    @property
    def known_region(self) -> Region | None:
        try:
            return Region(self.region)
        except ValueError:
            return None

    @property
    def bias(self) -> RegionalBias:
        region = self.known_region
        if region is None:
            return NO_BIAS
        return REGIONAL_BIAS.get(region, NO_BIAS)


class AtmosphericState(BaseModel):
    """Immutable snapshot of the shared atmosphere."""

    model_config = ConfigDict(frozen=True)

    pressure: float = Field(1015.0, ge=950.0, le=1050.0)
    cloud_cover: float = Field(30.0, ge=0.0, le=100.0)
    solar_radiation: float = Field(500.0, ge=0.0, le=1200.0)
    storm_active: bool = False
    heat_wave_active: bool = False
    season: Season = Season.SPRING


class Reading(BaseModel):
    """One station's telemetry for one tick."""

    model_config = ConfigDict(frozen=True)

    station_id: int
    station_name: str
    region: str
    timestamp: datetime
    season: Season

    cloud_cover: float = Field(..., ge=0.0, le=100.0)
    pressure: float = Field(..., ge=950.0, le=1050.0)
    solar_radiation: float = Field(..., ge=0.0, le=1200.0)
    uv_index: float = Field(..., ge=0.0, le=11.0)

    temperature: float = Field(..., ge=5.0, le=40.0)
    apparent_temperature: float
    humidity: float = Field(..., ge=20.0, le=95.0)
    wind_speed: float = Field(..., ge=0.0, le=20.0)
    wind_direction: float = Field(..., ge=0.0, lt=360.0)
    precipitation: float = Field(..., ge=0.0)
