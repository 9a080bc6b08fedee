"""Degradation model: storm state + zone attributes -> network metrics.

Pipeline per zone, each stage feeding the next:
  storm pressure -> infrastructure damage -> congestion -> link quality
  -> voice (MOS) and video scores

Storm pressure, not raw intensity, drives everything downstream. Every
function here is pure; cross-zone aggregates (grid stability, emergency
calls, sessions) are returned to the caller instead of written globally.
"""

import math

from stormnet.schemas.metrics import (
    CongestionState,
    InfrastructureState,
    NetworkMetrics,
    ZoneAssessment,
)
from stormnet.services.storm import StormState, clamp
from stormnet.zones.definitions import Zone

# Failure probability caps
MAX_TOWER_FAILURE = 0.98
MAX_FIBER_FAILURE = 0.95

# Backhaul capacity per unit of infrastructure health
BANDWIDTH_CAPACITY = 1000
BASE_PACKET_LOSS = 0.02


def round_half_up(x: float, ndigits: int = 0) -> float:
    """Round halves upward (2.5 -> 3, -2.5 -> -2), matching dashboard rounding."""
    scale = 10 ** ndigits
    return math.floor(x * scale + 0.5) / scale


def wind_pressure(wind_speed_mph: float) -> float:
    """ASCE velocity pressure (psf), exposure factors folded to 1."""
    return 0.00256 * wind_speed_mph ** 2


def storm_pressure(zone: Zone, storm: StormState) -> float:
    """Unitless composite of proximity, wind and surge effects on a zone."""
    distance_factor = math.exp(-zone.distance_to_storm / 15)
    elevation_factor = 1 / (1 + zone.elevation / 100)
    terrain_factor = 1 - zone.terrain_ruggedness * 0.3

    base = storm.intensity * distance_factor
    wind = (wind_pressure(storm.wind_speed) / 100) * distance_factor
    surge = (storm.storm_surge / 20) * elevation_factor * zone.flood_risk

    return (base + wind + surge) * terrain_factor


def infrastructure_damage(zone: Zone, pressure: float) -> InfrastructureState:
    tower_stress = pressure * zone.wind_exposure * 1.5
    tower_failure = min(tower_stress * 0.65, MAX_TOWER_FAILURE)
    active_towers = zone.cell_towers * (1 - tower_failure)

    # Fiber is buried: flood risk matters more than wind
    fiber_stress = pressure * (zone.flood_risk * 0.7 + 0.5)
    fiber_failure = min(fiber_stress * 0.55, MAX_FIBER_FAILURE)
    active_nodes = zone.fiber_nodes * (1 - fiber_failure)

    power_stress = pressure * (1 - zone.backup_power) * 1.8
    power_availability = max(0.0, 1 - power_stress)

    overall_health = (
        active_towers / zone.cell_towers * 0.4
        + active_nodes / zone.fiber_nodes * 0.4
        + power_availability * 0.2
    )

    return InfrastructureState(
        active_towers=active_towers,
        active_nodes=active_nodes,
        power_availability=power_availability,
        overall_health=overall_health,
    )


def network_congestion(
    zone: Zone, storm: StormState, infra: InfrastructureState,
) -> CongestionState:
    emergency_calls = storm.intensity * 50

    panic_factor = min(storm.intensity * 1.5, 2)
    normal_traffic = (zone.population / 1000) * 0.8
    demand = normal_traffic * panic_factor

    available = BANDWIDTH_CAPACITY * infra.overall_health
    # No surviving capacity means fully saturated
    congestion = min(demand / available, 1.0) if available > 0 else 1.0

    return CongestionState(
        congestion=congestion,
        emergency_calls=emergency_calls,
        active_sessions=math.floor(zone.population * 0.4 * infra.overall_health),
    )


def voice_quality(latency: float, jitter: float, loss: float) -> float:
    """E-model flavoured Mean Opinion Score, 1 (bad) to 5 (excellent)."""
    mos = 4.5
    mos -= (latency / 100) * 0.5
    mos -= (jitter / 20) * 0.3
    mos -= (loss / 2) * 0.8
    return clamp(mos, 1.0, 5.0)


def video_quality(download: float, latency: float, loss: float) -> float:
    quality = 100.0
    quality -= (100 - download) * 0.5
    quality -= latency / 10
    quality -= loss * 3
    return clamp(quality, 0.0, 100.0)


def link_quality(
    zone: Zone,
    pressure: float,
    infra: InfrastructureState,
    congestion: float,
) -> NetworkMetrics:
    base_latency = 15 + (1 - zone.datacenter_proximity) * 40
    base_down = 120 * zone.redundancy
    base_up = 15 * zone.redundancy

    # Hardened infrastructure absorbs part of the storm
    effective_stress = pressure * (1 - zone.infra_score)

    latency = base_latency + effective_stress * 1200 + congestion * 400

    health = infra.overall_health
    power = infra.power_availability
    stress_penalty = effective_stress ** 1.5
    # Penalty can pass 1 under extreme stress; throughput floors at zero
    download = max(0.0, base_down * health * power * (1 - congestion * 0.7) * (1 - stress_penalty * 0.8))
    upload = max(0.0, base_up * health * power * (1 - congestion * 0.8) * (1 - stress_penalty * 0.9))

    loss = clamp(BASE_PACKET_LOSS + effective_stress * 35 + congestion * 15, 0.0, 50.0)
    jitter = clamp(latency * 0.15 * (1 + effective_stress * 2), 0.0, 200.0)
    retransmission = clamp(loss * 3, 0.0, 80.0)
    drop_rate = clamp(effective_stress * 25 + congestion * 12, 0.0, 200.0)

    return NetworkMetrics(
        latency=latency,
        download=download,
        upload=upload,
        packet_loss=loss,
        jitter=jitter,
        retransmission_rate=retransmission,
        connection_drop_rate=drop_rate,
        voice_quality=voice_quality(latency, jitter, loss),
        video_quality=video_quality(download, latency, loss),
        infrastructure_health=health * 100,
        congestion_level=congestion * 100,
        active_towers=int(round_half_up(infra.active_towers)),
        total_towers=zone.cell_towers,
        power_availability=power * 100,
    )


def compute(zone: Zone, storm: StormState) -> ZoneAssessment:
    """Run the full degradation pipeline for one zone."""
    pressure = storm_pressure(zone, storm)
    infra = infrastructure_damage(zone, pressure)
    congestion = network_congestion(zone, storm, infra)
    metrics = link_quality(zone, pressure, infra, congestion.congestion)
    return ZoneAssessment(
        storm_pressure=pressure,
        infrastructure=infra,
        metrics=metrics,
        congestion=congestion,
    )
