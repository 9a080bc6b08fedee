import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stormnet.config import settings
from stormnet.services.simulation import get_clock

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Shared clock exists before the first request
    get_clock()
    yield
    logger.info("Simulation stopped; state discarded")


app = FastAPI(
    title="StormNet",
    description="Storm impact simulation for regional telecom networks",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

from stormnet.routers import admin, status, zones  # noqa: E402

app.include_router(status.router, prefix="/api/v1")
app.include_router(admin.router, prefix="/api/v1")
app.include_router(zones.router, prefix="/api/v1")


@app.get("/health")
async def health():
    return {"status": "ok"}
