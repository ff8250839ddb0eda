"""Health & Readiness Probes — liveness, readiness and unknown routes."""


async def test_liveness_at_root_and_base_path(client):
    root = await client.get("/health")
    prefixed = await client.get("/api/health")

    assert root.status_code == 200
    assert prefixed.status_code == 200
    assert root.json()["status"] == "healthy"


async def test_readiness_with_database(client):
    res = await client.get("/health/ready")

    assert res.status_code == 200
    assert res.json()["checks"]["database"] == "healthy"


async def test_unknown_route_is_not_found(client):
    res = await client.get("/api/nope")

    assert res.status_code == 404
    assert res.json() == {"error": "not found"}
