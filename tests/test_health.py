import pytest


@pytest.mark.asyncio
async def test_health_is_public(async_client):
    resp = await async_client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "db": True}


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(async_client):
    resp = await async_client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.json()["success"] is False
