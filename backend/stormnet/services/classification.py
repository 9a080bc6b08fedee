"""Zone health classification and outage-risk prediction.

Status cascade, first match wins:
  CRITICAL > AT_RISK > DEGRADED > DEGRADING > OK

Outage risk weights:
  storm pressure(0.30) + lost health(0.25) + congestion(0.15)
  + lost power(0.20) + outage history(0.10)
scaled by storm trend, plus a slow escalation with storm age.
"""

from stormnet.schemas.metrics import NetworkMetrics
from stormnet.services.degradation import storm_pressure
from stormnet.services.storm import StormState, clamp
from stormnet.zones.definitions import Zone

CRITICAL = "CRITICAL"
AT_RISK = "AT_RISK"
DEGRADED = "DEGRADED"
DEGRADING = "DEGRADING"
OK = "OK"

# Statuses that count as an outage minute for the zone's history
OUTAGE_STATUSES = frozenset({CRITICAL, AT_RISK})

# One tick is one simulated minute
OUTAGE_HOURS_PER_TICK = 1 / 60


def classify(metrics: NetworkMetrics) -> str:
    loss = metrics.packet_loss
    latency = metrics.latency
    download = metrics.download
    health = metrics.infrastructure_health
    congestion = metrics.congestion_level

    if health < 30 or loss > 12 or metrics.connection_drop_rate > 40 or download < 5:
        return CRITICAL
    if loss > 7 or latency > 300 or download < 15 or health < 50:
        return AT_RISK
    if loss > 4 or latency > 150 or congestion > 60 or download < 40:
        return DEGRADED
    if loss > 1.5 or latency > 80 or congestion > 40 or download < 70:
        return DEGRADING
    return OK


def is_outage(status: str) -> bool:
    return status in OUTAGE_STATUSES


def predict_outage_risk(zone: Zone, storm: StormState, metrics: NetworkMetrics) -> float:
    """Predicted outage risk for a zone, 0-100."""
    storm_factor = storm_pressure(zone, storm) * 0.3
    health_factor = (1 - metrics.infrastructure_health / 100) * 0.25
    congestion_factor = (metrics.congestion_level / 100) * 0.15
    power_factor = (1 - metrics.power_availability / 100) * 0.2
    historical_factor = (zone.last_outage_hours / zone.mtbf) * 0.1

    trend_multiplier = 1 + storm.trend * 0.3
    # Long-lived storms keep wearing the network down
    time_escalation = storm.time / 1000

    total = (
        storm_factor + health_factor + congestion_factor + power_factor + historical_factor
    ) * trend_multiplier + time_escalation

    return clamp(total * 100, 0.0, 100.0)
