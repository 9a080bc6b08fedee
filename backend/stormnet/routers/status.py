from fastapi import APIRouter, Depends

from stormnet.schemas.status import SnapshotReport
from stormnet.services.simulation import SimulationClock, get_clock

router = APIRouter(tags=["status"])


@router.get("/status", response_model=SnapshotReport)
async def get_status(clock: SimulationClock = Depends(get_clock)):
    """Advance the simulation one tick and return every zone's condition."""
    return clock.tick()
