from fastapi import APIRouter, Depends, HTTPException

from stormnet.schemas.status import HistoryPoint, ZoneInfo
from stormnet.services.simulation import SimulationClock, get_clock

router = APIRouter(prefix="/zones", tags=["zones"])


@router.get("/", response_model=list[ZoneInfo])
async def list_zones(clock: SimulationClock = Depends(get_clock)):
    """List monitored zones with their current attributes. Does not tick."""
    return [ZoneInfo.model_validate(z) for z in clock.zones()]


@router.get("/{zone_name}/history", response_model=list[HistoryPoint])
async def get_zone_history(zone_name: str, clock: SimulationClock = Depends(get_clock)):
    history = clock.history(zone_name)
    if history is None:
        raise HTTPException(status_code=404, detail=f"Zone {zone_name} not found")
    return history
