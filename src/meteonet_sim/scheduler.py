"""Thread pool that drives the simulation.

One thread ticks the atmosphere, one thread per station ticks its sensor, and a
dispatcher thread drains the reading queue into the publish sink. The loops stop
when the shared shutdown event is set; the dispatcher stops after them, once the
queue is empty.
"""

import queue
import threading
import time
from datetime import datetime

import structlog

from meteonet_sim.atmosphere import AtmosphericEngine
from meteonet_sim.models import Reading
from meteonet_sim.publisher import PublishSink
from meteonet_sim.serializer import channel_for, to_json
from meteonet_sim.station import StationSensor

logger = structlog.get_logger("scheduler")


class EngineLoop(threading.Thread):
    def __init__(
        self, engine: AtmosphericEngine, period: float, shutdown_event: threading.Event
    ) -> None:
        super().__init__(name="Atmosphere")
        self.engine = engine
        self.period = period
        self.shutdown_event = shutdown_event
        self.ticks = 0

    def run(self) -> None:
        logger.info("Atmosphere loop started.", period=self.period)
        while not self.shutdown_event.is_set():
            state = self.engine.tick()
            self.ticks += 1
            logger.debug(
                "atmosphere_tick",
                pressure=round(state.pressure, 1),
                cloud_cover=round(state.cloud_cover, 1),
                storm=state.storm_active,
                heat_wave=state.heat_wave_active,
            )
            self.shutdown_event.wait(self.period)


class StationLoop(threading.Thread):
    """Ticks one station and hands every reading to the outbox."""

    def __init__(
        self,
        sensor: StationSensor,
        engine: AtmosphericEngine,
        outbox: "queue.Queue[Reading]",
        period: float,
        shutdown_event: threading.Event,
    ) -> None:
        super().__init__(name=f"Station-{sensor.station.name}")
        self.sensor = sensor
        self.engine = engine
        self.outbox = outbox
        self.period = period
        self.shutdown_event = shutdown_event

    def run(self) -> None:
        logger.info("Station loop started.", station=self.sensor.station.name)
        while not self.shutdown_event.is_set():
            reading = self.sensor.tick(self.engine.snapshot())
            self.outbox.put(reading)
            self.shutdown_event.wait(self.period)


class Dispatcher(threading.Thread):
    """Serializes readings from the outbox and publishes them once each."""

    def __init__(
        self,
        outbox: "queue.Queue[Reading]",
        sink: PublishSink,
        channel_prefix: str,
        stop_event: threading.Event,
    ) -> None:
        super().__init__(name="Dispatcher")
        self.outbox = outbox
        self.sink = sink
        self.channel_prefix = channel_prefix
        # Set only once no producer can put another reading
        self.stop_event = stop_event
        self.published = 0
        self.failed = 0

    def run(self) -> None:
        logger.info("Dispatcher started.")
        # Drain what is already queued before exiting.
        while not (self.stop_event.is_set() and self.outbox.empty()):
            try:
                reading = self.outbox.get(timeout=1)
            except queue.Empty:
                continue
            self.dispatch(reading)
            self.outbox.task_done()

    def dispatch(self, reading: Reading) -> bool:
        channel = channel_for(self.channel_prefix, reading.station_name)
        message = to_json(reading)
        try:
            ok = self.sink.publish(channel, message)
        except Exception as e:
            logger.error(f"Publish raised for {reading.station_name}: {e}")
            ok = False

        if ok:
            self.published += 1
            logger.info("reading_published", station=reading.station_name, channel=channel)
        else:
            self.failed += 1
            logger.error("reading_dropped", station=reading.station_name, channel=channel)
        return ok


class SimulationScheduler:
    def __init__(
        self,
        engine: AtmosphericEngine,
        sensors: list[StationSensor],
        sink: PublishSink,
        channel_prefix: str = "sensores/clima",
        period: float = 60.0,
        shutdown_event: threading.Event | None = None,
    ) -> None:
        self.engine = engine
        self.sensors = sensors
        self.period = period
        self.shutdown_event = shutdown_event or threading.Event()
        self.outbox: queue.Queue[Reading] = queue.Queue()
        self._dispatch_stop = threading.Event()

        self.engine_loop = EngineLoop(engine, period, self.shutdown_event)
        self.station_loops = [
            StationLoop(sensor, engine, self.outbox, period, self.shutdown_event)
            for sensor in sensors
        ]
        self.dispatcher = Dispatcher(self.outbox, sink, channel_prefix, self._dispatch_stop)

    @property
    def threads(self) -> list[threading.Thread]:
        return [self.engine_loop, *self.station_loops, self.dispatcher]

    def start(self) -> None:
        logger.info("Starting simulation", stations=len(self.sensors), period=self.period)
        self.dispatcher.start()
        self.engine_loop.start()
        for loop in self.station_loops:
            loop.start()

    def stop(self) -> None:
        self.shutdown_event.set()

    def join(self, timeout: float | None = None) -> None:
        """Join the producers first, then let the dispatcher drain the outbox and exit."""
        for thread in [self.engine_loop, *self.station_loops]:
            if thread.is_alive():
                thread.join(timeout)

        self._dispatch_stop.set()
        if self.dispatcher.is_alive():
            self.dispatcher.join(timeout)

    def run(self) -> None:
        """Start all loops and block until shutdown is requested."""
        self.start()
        while not self.shutdown_event.is_set():
            time.sleep(1)
        logger.info("Shutting down...")
        self.join()
        logger.info(
            "Simulation stopped.",
            published=self.dispatcher.published,
            failed=self.dispatcher.failed,
        )

    def step(self, now: datetime | None = None) -> list[Reading]:
        """Run one engine tick and one tick per station in the calling thread."""
        self.engine.tick(now)
        snapshot = self.engine.snapshot()
        return [sensor.tick(snapshot, now) for sensor in self.sensors]
