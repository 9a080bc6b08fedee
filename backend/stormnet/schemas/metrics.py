from pydantic import BaseModel


class InfrastructureState(BaseModel):
    active_towers: float
    active_nodes: float
    power_availability: float  # 0-1
    overall_health: float  # 0-1


class CongestionState(BaseModel):
    congestion: float  # 0-1
    emergency_calls: float  # calls added by this zone
    active_sessions: int


class NetworkMetrics(BaseModel):
    latency: float  # ms
    download: float  # Mbps
    upload: float  # Mbps
    packet_loss: float  # %
    jitter: float  # ms
    retransmission_rate: float  # %
    connection_drop_rate: float  # per 1000 sessions
    voice_quality: float  # MOS 1-5
    video_quality: float  # 0-100
    infrastructure_health: float  # %
    congestion_level: float  # %
    active_towers: int
    total_towers: int
    power_availability: float  # %


class ZoneAssessment(BaseModel):
    """Full degradation result for one zone, before classification."""

    storm_pressure: float
    infrastructure: InfrastructureState
    metrics: NetworkMetrics
    congestion: CongestionState
