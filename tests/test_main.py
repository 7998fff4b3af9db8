"""
App-level smoke tests through the ASGI interface.
"""

from __future__ import annotations

import httpx
import pytest

import main as app_main
from api.routes import health as health_route


async def _no_redis():
    return None


@pytest.mark.asyncio
async def test_health_reports_database_and_store(sqlite_db, monkeypatch):
    monkeypatch.setattr(health_route, "get_redis", _no_redis)
    monkeypatch.setattr(health_route, "is_using_fallback", lambda: True)

    transport = httpx.ASGITransport(app=app_main.app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get("/api/v1/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "database": "connected", "store": "fallback"}


@pytest.mark.asyncio
async def test_ingest_generate_and_list_over_http(sqlite_db):
    transport = httpx.ASGITransport(app=app_main.app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        for flow in (40, 45, 50, 55, 60, 65):
            resp = await client.post("/api/v1/readings/traffic", json={"location": "Bridge Avenue", "flow_rate": flow})
            assert resp.status_code == 201

        resp = await client.post("/api/v1/predictions/generate")
        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "Predictions generated successfully"
        by_module = {m["module"]: m for m in body["report"]["modules"]}
        assert by_module["traffic"]["predictions"] == 4
        assert by_module["energy"]["status"] == "skipped"

        resp = await client.get("/api/v1/predictions", params={"module": "traffic", "limit": 2})
        assert resp.status_code == 200
        rows = resp.json()
        assert len(rows) == 2
        assert rows[0]["metadata"] == {"location": "Bridge Avenue"}

        resp = await client.get("/api/v1/predictions/cycles/last")
        assert resp.status_code == 200
        assert resp.json()["cycle_id"] == body["report"]["cycle_id"]


@pytest.mark.asyncio
async def test_request_validation_is_422(sqlite_db):
    transport = httpx.ASGITransport(app=app_main.app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.post("/api/v1/readings/energy", json={"total_consumption": -5, "renewable_percentage": 10})
        assert resp.status_code == 422
        resp = await client.get("/api/v1/predictions", params={"limit": 0})
        assert resp.status_code == 422


@pytest.mark.asyncio
async def test_activity_alerts_and_recorded_prediction_over_http(sqlite_db):
    transport = httpx.ASGITransport(app=app_main.app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.post("/api/v1/activity", json={
            "action": "acknowledged_alert",
            "module": "energy",
            "description": "Operator acknowledged the grid load warning",
            "metadata": {"alert_id": 1},
        })
        assert resp.status_code == 201
        assert resp.json()["metadata"] == {"alert_id": 1}

        resp = await client.get("/api/v1/activity", params={"limit": 5})
        assert resp.status_code == 200
        assert [row["action"] for row in resp.json()] == ["acknowledged_alert"]

        for title in ("Traffic Congestion", "Power Grid Alert"):
            resp = await client.post("/api/v1/alerts", json={
                "type": "warning", "title": title, "message": "threshold exceeded", "module": "traffic",
            })
            assert resp.status_code == 201
        resp = await client.get("/api/v1/alerts", params={"limit": 1})
        assert [row["title"] for row in resp.json()] == ["Power Grid Alert"]

        resp = await client.post("/api/v1/predictions", json={
            "module": "environmental",
            "prediction_type": "quality",
            "predicted_value": 64.0,
            "confidence": 0.55,
            "time_horizon": 6,
        })
        assert resp.status_code == 201
        recorded = resp.json()
        assert recorded["id"] is not None

        resp = await client.get("/api/v1/predictions", params={"module": "environmental"})
        assert [row["id"] for row in resp.json()] == [recorded["id"]]

        resp = await client.post("/api/v1/predictions", json={
            "module": "population", "prediction_type": "flow", "predicted_value": 1.0,
            "confidence": 0.5, "time_horizon": 1,
        })
        assert resp.status_code == 422
