import math
import numbers
import re
from dataclasses import dataclass, fields, replace


class ZoneConfigError(ValueError):
    """Raised when a zone attribute is outside its allowed range."""


# Attributes scored 0-1
_UNIT_SCORES = (
    "infra_score",
    "vulnerability_score",
    "datacenter_proximity",
    "redundancy",
    "backup_power",
    "flood_risk",
    "wind_exposure",
    "terrain_ruggedness",
)

_TEXT_FIELDS = ("name", "display_name")
# Reported as integers
_COUNT_FIELDS = frozenset({"population", "cell_towers", "fiber_nodes"})

MAX_STORM_DISTANCE = 50.0


@dataclass
class Zone:
    name: str
    display_name: str
    population: int
    infra_score: float
    vulnerability_score: float
    distance_to_storm: float  # miles, mutated every tick
    elevation: float  # ft
    cell_towers: int
    fiber_nodes: int
    datacenter_proximity: float
    redundancy: float
    backup_power: float
    flood_risk: float
    wind_exposure: float
    terrain_ruggedness: float
    last_outage_hours: float
    mtbf: float  # hours
    repair_crew_distance: float

    def __post_init__(self):
        for attr in _TEXT_FIELDS:
            if not isinstance(getattr(self, attr), str):
                raise ZoneConfigError(f"{self.name}: {attr} must be a string")
        for attr in ZONE_FIELDS - set(_TEXT_FIELDS):
            value = getattr(self, attr)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise ZoneConfigError(f"{self.name}: {attr}={value!r} is not a number")
            if attr in _COUNT_FIELDS and not isinstance(value, numbers.Integral):
                raise ZoneConfigError(f"{self.name}: {attr}={value!r} must be a whole number")
            if not math.isfinite(value):
                raise ZoneConfigError(f"{self.name}: {attr} must be finite")

        for attr in _UNIT_SCORES:
            value = getattr(self, attr)
            if not 0 <= value <= 1:
                raise ZoneConfigError(f"{self.name}: {attr}={value} outside [0, 1]")
        if not 0 <= self.distance_to_storm <= MAX_STORM_DISTANCE:
            raise ZoneConfigError(
                f"{self.name}: distance_to_storm={self.distance_to_storm} outside [0, {MAX_STORM_DISTANCE:g}]"
            )
        # Divisors in the degradation and risk models
        for attr in ("cell_towers", "fiber_nodes", "mtbf"):
            if getattr(self, attr) <= 0:
                raise ZoneConfigError(f"{self.name}: {attr} must be positive")
        # Elevation factor is 1 / (1 + elevation / 100)
        if self.elevation <= -100:
            raise ZoneConfigError(f"{self.name}: elevation must be above -100 ft")
        for attr in ("population", "last_outage_hours", "repair_crew_distance"):
            if getattr(self, attr) < 0:
                raise ZoneConfigError(f"{self.name}: {attr} must be non-negative")


ZONE_FIELDS: frozenset[str] = frozenset(f.name for f in fields(Zone))

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def field_name(key: str) -> str:
    """Map a wire key (``distanceToStorm``) to its Zone attribute (``distance_to_storm``)."""
    return _CAMEL_RE.sub("_", key).lower()


def updated_zone(zone: Zone, values: dict) -> Zone:
    """Validated copy of ``zone`` with ``values`` applied; ``zone`` is untouched.

    Keys that are not Zone attributes are dropped. ``name`` is identity and
    never overwritten.
    """
    changes = {}
    for key, value in values.items():
        attr = field_name(key)
        if attr in ZONE_FIELDS and attr != "name":
            changes[attr] = value
    return replace(zone, **changes)


# Buffalo, NY deployment
DEFAULT_ZONES = [
    Zone(
        name="A",
        display_name="UB North Campus",
        population=18500,
        infra_score=0.98,
        vulnerability_score=0.1,
        distance_to_storm=35,
        elevation=620,
        cell_towers=18,
        fiber_nodes=15,
        datacenter_proximity=0.98,
        redundancy=0.95,
        backup_power=0.98,
        flood_risk=0.1,
        wind_exposure=0.4,
        terrain_ruggedness=0.3,
        last_outage_hours=0,
        mtbf=4320,
        repair_crew_distance=0.2,
    ),
    Zone(
        name="B",
        display_name="Elmwood Village",
        population=12500,
        infra_score=0.55,
        vulnerability_score=0.5,
        distance_to_storm=18,
        elevation=600,
        cell_towers=6,
        fiber_nodes=4,
        datacenter_proximity=0.45,
        redundancy=0.45,
        backup_power=0.4,
        flood_risk=0.4,
        wind_exposure=0.55,
        terrain_ruggedness=0.2,
        last_outage_hours=0,
        mtbf=600,
        repair_crew_distance=4,
    ),
    Zone(
        name="C",
        display_name="Masten Park",
        population=8200,
        infra_score=0.25,
        vulnerability_score=0.85,
        distance_to_storm=8,
        elevation=590,
        cell_towers=3,
        fiber_nodes=1,
        datacenter_proximity=0.2,
        redundancy=0.15,
        backup_power=0.2,
        flood_risk=0.65,
        wind_exposure=0.75,
        terrain_ruggedness=0.15,
        last_outage_hours=0,
        mtbf=240,
        repair_crew_distance=12,
    ),
]


class ZoneRegistry:
    """Ordered store of the monitored zones, keyed by short name.

    Holds its own copies of the zones it is built from, so two registries
    built from DEFAULT_ZONES never share mutable state.
    """

    def __init__(self, zones: list[Zone] | None = None):
        source = DEFAULT_ZONES if zones is None else zones
        self._zones: dict[str, Zone] = {}
        for zone in source:
            if zone.name in self._zones:
                raise ZoneConfigError(f"Duplicate zone name {zone.name!r}")
            self._zones[zone.name] = replace(zone)

    def __iter__(self):
        return iter(self._zones.values())

    def __len__(self) -> int:
        return len(self._zones)

    def get(self, name: str) -> Zone | None:
        return self._zones.get(name)

    def apply(self, candidate: Zone) -> None:
        """Overwrite the stored zone's attributes in place with ``candidate``'s."""
        zone = self._zones[candidate.name]
        for attr in ZONE_FIELDS:
            setattr(zone, attr, getattr(candidate, attr))
