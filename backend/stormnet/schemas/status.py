from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ZoneReport(_WireModel):
    zone: str
    display_name: str
    population: int
    status: str  # CRITICAL, AT_RISK, DEGRADED, DEGRADING, OK
    latency: int  # ms
    download: float  # Mbps
    upload: float  # Mbps
    packet_loss: float  # %
    jitter: float  # ms
    retransmission_rate: float
    connection_drop_rate: int
    voice_quality: float  # MOS
    video_quality: int
    infrastructure_health: int  # %
    congestion_level: int  # %
    active_towers: int
    total_towers: int
    power_availability: int  # %
    predicted_outage_risk: float  # 0-100
    distance_to_storm: float  # miles
    flood_risk: float
    estimated_repair_time: int  # minutes


class StormSummary(_WireModel):
    intensity: int  # % of max
    category: str
    wind_speed: int  # mph
    pressure: int  # mb
    rainfall: float  # in/hr
    storm_surge: float  # ft
    movement_speed: float  # mph
    trend: str  # Strengthening, Weakening, Steady


class NetworkOverview(_WireModel):
    total_bandwidth_usage: int  # %
    active_sessions: int
    emergency_calls: int
    power_grid_stability: int  # %


class SnapshotReport(_WireModel):
    zones: list[ZoneReport] = []
    storm: StormSummary
    network: NetworkOverview


class StormIntensityRequest(BaseModel):
    # strict: JSON numbers only, no "0.5" strings or booleans
    intensity: float = Field(ge=0.0, le=1.0, strict=True)


class StormUpdate(_WireModel):
    message: str
    category: str
    wind_speed: int
    pressure: int


class ZoneUpdate(BaseModel):
    """One ingest record: the zone name plus any zone fields to overwrite."""

    model_config = ConfigDict(extra="allow")

    # Missing name is treated like an unknown zone and skipped
    zone: str | None = None


class HistoryPoint(_WireModel):
    timestamp: datetime
    storm_intensity: float
    wind_speed: float
    category: str


class ZoneInfo(_WireModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    display_name: str
    population: int
    infra_score: float
    vulnerability_score: float
    distance_to_storm: float
    elevation: float
    cell_towers: int
    fiber_nodes: int
    datacenter_proximity: float
    redundancy: float
    backup_power: float
    flood_risk: float
    wind_exposure: float
    terrain_ruggedness: float
    last_outage_hours: float
    mtbf: float
    repair_crew_distance: float
