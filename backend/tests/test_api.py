import numpy as np
import pytest
from httpx import ASGITransport, AsyncClient

from stormnet.main import app
from stormnet.services.simulation import SimulationClock, get_clock


@pytest.fixture
def clock():
    return SimulationClock(rng=np.random.default_rng(2024))


@pytest.fixture
async def client(clock):
    app.dependency_overrides[get_clock] = lambda: clock
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_status_snapshot(client):
    resp = await client.get("/api/v1/status")
    assert resp.status_code == 200
    data = resp.json()
    assert set(data) == {"zones", "storm", "network"}
    assert [z["zone"] for z in data["zones"]] == ["A", "B", "C"]

    zone = data["zones"][0]
    for key in (
        "displayName", "status", "latency", "download", "upload", "packetLoss",
        "jitter", "retransmissionRate", "connectionDropRate", "voiceQuality",
        "videoQuality", "infrastructureHealth", "congestionLevel", "activeTowers",
        "totalTowers", "powerAvailability", "predictedOutageRisk",
        "distanceToStorm", "floodRisk", "estimatedRepairTime",
    ):
        assert key in zone
    assert zone["status"] in ("CRITICAL", "AT_RISK", "DEGRADED", "DEGRADING", "OK")

    assert set(data["storm"]) == {
        "intensity", "category", "windSpeed", "pressure", "rainfall",
        "stormSurge", "movementSpeed", "trend",
    }
    assert set(data["network"]) == {
        "totalBandwidthUsage", "activeSessions", "emergencyCalls", "powerGridStability",
    }


@pytest.mark.asyncio
async def test_status_read_advances_simulation(client, clock):
    await client.get("/api/v1/status")
    await client.get("/api/v1/status")
    assert clock.state.storm.time == 2


@pytest.mark.asyncio
async def test_ingest(client, clock):
    resp = await client.post(
        "/api/v1/ingest",
        json=[{"zone": "B", "population": 99999}, {"zone": "nowhere", "population": 1}],
    )
    assert resp.status_code == 201
    assert resp.json() == {"message": "Metrics ingested"}
    assert clock.state.zones.get("B").population == 99999

    status = (await client.get("/api/v1/status")).json()
    b = next(z for z in status["zones"] if z["zone"] == "B")
    assert b["population"] == 99999


@pytest.mark.asyncio
async def test_ingest_skips_record_without_zone(client, clock):
    resp = await client.post(
        "/api/v1/ingest",
        json=[{"population": 1}, {"zone": "A", "population": 20000}],
    )
    assert resp.status_code == 201
    assert clock.state.zones.get("A").population == 20000


@pytest.mark.asyncio
async def test_ingest_rejects_unusable_values(client, clock):
    resp = await client.post("/api/v1/ingest", json=[{"zone": "B", "elevation": "high"}])
    assert resp.status_code == 400
    status = await client.get("/api/v1/status")
    assert status.status_code == 200


@pytest.mark.asyncio
async def test_ingest_rejects_invalid_zone_values(client, clock):
    resp = await client.post("/api/v1/ingest", json=[{"zone": "A", "mtbf": 0}])
    assert resp.status_code == 400
    assert clock.state.zones.get("A").mtbf == 4320


@pytest.mark.asyncio
async def test_set_storm(client, clock):
    resp = await client.post("/api/v1/storm", json={"intensity": 1})
    assert resp.status_code == 200
    assert resp.json() == {
        "message": "Storm intensity set to 100%",
        "category": "Category 5 Hurricane",
        "windSpeed": 180,
        "pressure": 910,
    }
    assert clock.state.storm.time == 0


@pytest.mark.asyncio
async def test_set_storm_fractional(client):
    resp = await client.post("/api/v1/storm", json={"intensity": 0.25})
    assert resp.status_code == 200
    assert resp.json()["category"] == "Tropical Storm"


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {"intensity": 1.5},
    {"intensity": -0.1},
    {"intensity": "0.5"},
    {"intensity": True},
    {"intensity": None},
    {},
    [0.5],
])
async def test_set_storm_rejects_bad_input(client, clock, body):
    before = clock.state.storm.intensity
    resp = await client.post("/api/v1/storm", json=body)
    assert resp.status_code == 400
    assert resp.json() == {"detail": "Intensity must be a number between 0 and 1"}
    assert clock.state.storm.intensity == before


@pytest.mark.asyncio
async def test_zones_list(client):
    resp = await client.get("/api/v1/zones/")
    assert resp.status_code == 200
    zones = resp.json()
    assert [z["name"] for z in zones] == ["A", "B", "C"]
    assert zones[1]["displayName"] == "Elmwood Village"
    assert zones[2]["cellTowers"] == 3


@pytest.mark.asyncio
async def test_zones_list_does_not_tick(client, clock):
    await client.get("/api/v1/zones/")
    assert clock.state.storm.time == 0


@pytest.mark.asyncio
async def test_zone_history(client):
    resp = await client.get("/api/v1/zones/A/history")
    assert resp.status_code == 200
    points = resp.json()
    assert len(points) == 1
    assert set(points[0]) == {"timestamp", "stormIntensity", "windSpeed", "category"}


@pytest.mark.asyncio
async def test_zone_history_unknown_zone(client):
    resp = await client.get("/api/v1/zones/Q/history")
    assert resp.status_code == 404
