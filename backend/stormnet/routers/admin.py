from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import ValidationError

from stormnet.schemas.status import StormIntensityRequest, StormUpdate, ZoneUpdate
from stormnet.services.simulation import SimulationClock, get_clock
from stormnet.zones.definitions import ZoneConfigError

router = APIRouter(tags=["admin"])


@router.post("/ingest", status_code=201)
async def ingest_metrics(
    updates: list[ZoneUpdate],
    clock: SimulationClock = Depends(get_clock),
):
    """Overwrite zone attributes. Records for unknown zones are ignored."""
    try:
        clock.ingest([u.model_dump() for u in updates])
    except ZoneConfigError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"message": "Metrics ingested"}


@router.post("/storm", response_model=StormUpdate)
async def set_storm(
    payload: Any = Body(None),
    clock: SimulationClock = Depends(get_clock),
):
    """Override storm intensity (0-1) and restart the storm clock."""
    try:
        request = StormIntensityRequest.model_validate(payload)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Intensity must be a number between 0 and 1")
    return clock.set_storm_intensity(request.intensity)
