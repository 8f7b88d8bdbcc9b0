"""Shared atmospheric model.

A single ``AtmosphericEngine`` owns the process-wide state. Only ``tick`` mutates
it; every station thread reads through ``snapshot``. The state itself is an
immutable model that gets replaced as a whole under the lock, so a snapshot is
always one complete tick.
"""

import random
import threading
import typing
from datetime import datetime

from meteonet_sim.models import AtmosphericState
from meteonet_sim.utils import chance, clamp, daylight_factor, gauss_step, season_for_month

PRESSURE_RANGE = (950.0, 1050.0)
CLOUD_RANGE = (0.0, 100.0)
MAX_RADIATION = 1200.0

PRESSURE_SIGMA = 0.2
CLOUD_SIGMA = 5.0
RADIATION_SIGMA = 10.0

HEAT_WAVE_PROBABILITY = 0.01
STORM_PROBABILITY = 0.02

Clock = typing.Callable[[], datetime]


class AtmosphericEngine:
    def __init__(
        self,
        rng: random.Random | None = None,
        clock: Clock | None = None,
        initial: AtmosphericState | None = None,
    ) -> None:
        self._rng = rng or random.Random()
        self._clock: Clock = clock or datetime.now
        self._lock = threading.Lock()

        if initial is None:
            initial = AtmosphericState(season=season_for_month(self._clock().month))
        self._state = initial

    def tick(self, now: datetime | None = None) -> AtmosphericState:
        """Advance the shared state by one step and return the new snapshot."""
        now = now or self._clock()
        season = season_for_month(now.month)
        max_radiation = MAX_RADIATION * daylight_factor(now.hour)

        with self._lock:
            current = self._state
            pressure = clamp(
                current.pressure + gauss_step(self._rng, PRESSURE_SIGMA), *PRESSURE_RANGE
            )
            cloud_cover = clamp(
                current.cloud_cover + gauss_step(self._rng, CLOUD_SIGMA), *CLOUD_RANGE
            )
            solar_radiation = clamp(
                current.solar_radiation + gauss_step(self._rng, RADIATION_SIGMA),
                0.0,
                max_radiation,
            )
            # Events are re-rolled every tick, they are not latched.
            heat_wave_active = chance(self._rng, HEAT_WAVE_PROBABILITY)
            storm_active = chance(self._rng, STORM_PROBABILITY)

            self._state = AtmosphericState(
                pressure=pressure,
                cloud_cover=cloud_cover,
                solar_radiation=solar_radiation,
                storm_active=storm_active,
                heat_wave_active=heat_wave_active,
                season=season,
            )
            return self._state

    def snapshot(self) -> AtmosphericState:
        with self._lock:
            return self._state
