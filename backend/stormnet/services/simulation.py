"""Simulation clock: owns all simulation state and advances it one tick per read."""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone

import numpy as np

from stormnet.config import Settings, settings
from stormnet.schemas.metrics import NetworkMetrics, ZoneAssessment
from stormnet.schemas.status import (
    HistoryPoint,
    NetworkOverview,
    SnapshotReport,
    StormSummary,
    StormUpdate,
    ZoneReport,
)
from stormnet.services import degradation
from stormnet.services.classification import (
    OUTAGE_HOURS_PER_TICK,
    classify,
    is_outage,
    predict_outage_risk,
)
from stormnet.services.degradation import round_half_up
from stormnet.services.storm import StormState
from stormnet.zones.definitions import Zone, ZoneRegistry, updated_zone

logger = logging.getLogger(__name__)

# Crew travel speed used for repair estimates (distance units per hour)
CREW_SPEED = 30


@dataclass
class NetworkLoad:
    """Network-wide aggregate, overwritten from the last zone computed each tick."""

    total_bandwidth_usage: float = 0.4
    active_sessions: int = 8500
    emergency_calls: float = 0.0  # cumulative until storm reset
    power_grid_stability: float = 1.0


@dataclass
class SimulationState:
    zones: ZoneRegistry = field(default_factory=ZoneRegistry)
    storm: StormState = field(default_factory=StormState)
    network: NetworkLoad = field(default_factory=NetworkLoad)


class SimulationClock:
    """Single owner of one SimulationState.

    Every public method holds one lock for its whole run: ticks, ingests and
    storm overrides all read-modify-write the same zones and aggregates.
    """

    def __init__(
        self,
        state: SimulationState | None = None,
        rng: np.random.Generator | None = None,
    ):
        self.state = state or SimulationState()
        self.rng = rng if rng is not None else np.random.default_rng()
        self._lock = threading.RLock()

    @classmethod
    def from_settings(cls, cfg: Settings) -> "SimulationClock":
        storm = StormState(
            intensity=cfg.initial_storm_intensity,
            movement_speed=cfg.storm_movement_speed_mph,
            direction=cfg.storm_direction_deg,
            eye_radius=cfg.storm_eye_radius_mi,
        )
        return cls(
            state=SimulationState(storm=storm),
            rng=np.random.default_rng(cfg.random_seed),
        )

    def tick(self) -> SnapshotReport:
        """Advance the storm one minute and report every zone's condition."""
        with self._lock:
            storm = self.state.storm
            storm.advance(self.state.zones, self.rng)

            reports = []
            for zone in self.state.zones:
                assessment = degradation.compute(zone, storm)
                status = classify(assessment.metrics)
                # Risk sees outage history from before this tick
                risk = predict_outage_risk(zone, storm, assessment.metrics)
                if is_outage(status):
                    zone.last_outage_hours += OUTAGE_HOURS_PER_TICK
                self._fold_network(assessment)
                reports.append(_zone_report(zone, status, assessment.metrics, risk))

            logger.debug(
                "Tick %d: intensity=%.3f %s, statuses=%s",
                storm.time, storm.intensity, storm.category,
                {r.zone: r.status for r in reports},
            )

            return SnapshotReport(
                zones=reports,
                storm=self._storm_summary(),
                network=self._network_overview(),
            )

    def ingest(self, updates: list[dict]) -> int:
        """Overwrite existing zone fields from ``{"zone": name, ...}`` records.

        Unknown zones and unknown fields are ignored. Every record is
        validated before any is applied, so a bad value leaves all zones
        unchanged. Returns the number of zones touched.
        """
        with self._lock:
            pending: dict[str, Zone] = {}
            for update in updates:
                name = update.get("zone")
                base = pending.get(name) or self.state.zones.get(name)
                if base is None:
                    logger.debug("Ignoring ingest for unknown zone %r", name)
                    continue
                pending[name] = updated_zone(base, update)

            for candidate in pending.values():
                self.state.zones.apply(candidate)

            logger.info("Ingested %d update(s) across %d zone(s)", len(updates), len(pending))
            return len(pending)

    def set_storm_intensity(self, value: float) -> StormUpdate:
        """Jump the storm to ``value`` and restart the scenario's accumulators.

        Unlike a plain storm override, this also zeroes the emergency-call
        count and every zone's outage hours: a reset starts a fresh scenario.
        """
        with self._lock:
            storm = self.state.storm
            storm.set_intensity(value)
            self.state.network.emergency_calls = 0.0
            for zone in self.state.zones:
                zone.last_outage_hours = 0.0

            return StormUpdate(
                message=f"Storm intensity set to {int(round_half_up(storm.intensity * 100))}%",
                category=storm.category,
                wind_speed=int(round_half_up(storm.wind_speed)),
                pressure=int(round_half_up(storm.pressure)),
            )

    def history(self, zone_name: str) -> list[HistoryPoint] | None:
        """Storm history as seen from a zone; None for an unknown zone.

        Only the current storm point is held, no time series is kept.
        """
        with self._lock:
            if self.state.zones.get(zone_name) is None:
                return None
            storm = self.state.storm
            return [
                HistoryPoint(
                    timestamp=datetime.now(timezone.utc),
                    storm_intensity=storm.intensity,
                    wind_speed=storm.wind_speed,
                    category=storm.category,
                )
            ]

    def zones(self) -> list[Zone]:
        with self._lock:
            return list(self.state.zones)

    def _fold_network(self, assessment: ZoneAssessment):
        network = self.state.network
        network.emergency_calls += assessment.congestion.emergency_calls
        network.total_bandwidth_usage = assessment.congestion.congestion
        network.active_sessions = assessment.congestion.active_sessions
        network.power_grid_stability = assessment.infrastructure.power_availability

    def _storm_summary(self) -> StormSummary:
        storm = self.state.storm
        return StormSummary(
            intensity=int(round_half_up(storm.intensity * 100)),
            category=storm.category,
            wind_speed=int(round_half_up(storm.wind_speed)),
            pressure=int(round_half_up(storm.pressure)),
            rainfall=round_half_up(storm.rainfall, 1),
            storm_surge=round_half_up(storm.storm_surge, 1),
            movement_speed=storm.movement_speed,
            trend=storm.trend_label,
        )

    def _network_overview(self) -> NetworkOverview:
        network = self.state.network
        return NetworkOverview(
            total_bandwidth_usage=int(round_half_up(network.total_bandwidth_usage * 100)),
            active_sessions=network.active_sessions,
            emergency_calls=int(round_half_up(network.emergency_calls)),
            power_grid_stability=int(round_half_up(network.power_grid_stability * 100)),
        )


def _zone_report(zone: Zone, status: str, m: NetworkMetrics, risk: float) -> ZoneReport:
    return ZoneReport(
        zone=zone.name,
        display_name=zone.display_name,
        population=zone.population,
        status=status,
        latency=int(round_half_up(m.latency)),
        download=round_half_up(m.download, 1),
        upload=round_half_up(m.upload, 1),
        packet_loss=round_half_up(m.packet_loss, 2),
        jitter=round_half_up(m.jitter, 1),
        retransmission_rate=round_half_up(m.retransmission_rate, 1),
        connection_drop_rate=int(round_half_up(m.connection_drop_rate)),
        voice_quality=round_half_up(m.voice_quality, 1),
        video_quality=int(round_half_up(m.video_quality)),
        infrastructure_health=int(round_half_up(m.infrastructure_health)),
        congestion_level=int(round_half_up(m.congestion_level)),
        active_towers=m.active_towers,
        total_towers=m.total_towers,
        power_availability=int(round_half_up(m.power_availability)),
        predicted_outage_risk=round_half_up(risk, 1),
        distance_to_storm=round_half_up(zone.distance_to_storm, 1),
        flood_risk=zone.flood_risk,
        estimated_repair_time=int(round_half_up(zone.repair_crew_distance / CREW_SPEED * 60)),
    )


# Process-wide clock shared by the API routes
_clock: SimulationClock | None = None
_clock_lock = threading.Lock()


def get_clock() -> SimulationClock:
    global _clock
    with _clock_lock:
        if _clock is None:
            _clock = SimulationClock.from_settings(settings)
            logger.info(
                "Simulation started: %d zones, storm intensity %.2f, seed=%s",
                len(_clock.state.zones), _clock.state.storm.intensity, settings.random_seed,
            )
        return _clock
