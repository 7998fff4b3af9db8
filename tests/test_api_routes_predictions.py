"""
Tests for prediction route semantics, including recording a single prediction.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from api.requests import PredictionRequest
from api.routes import predictions as predictions_route
from engine.cycle import CycleReport, ModuleOutcome
from engine.enums import Module, ModuleStatus, PredictionType
from engine.prediction import Prediction

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


def _prediction(i, module=Module.traffic):
    return Prediction(
        id=i,
        module=module,
        prediction_type=PredictionType.flow,
        predicted_value=70.0 + i,
        confidence=0.6,
        time_horizon_hours=6,
        created_at=NOW,
        metadata={"location": "Bridge Avenue"},
    )


class DummySink:
    def __init__(self):
        self.calls = []
        self.appended = []

    async def append_prediction(self, prediction):
        self.appended.append(prediction)
        return replace(prediction, id=len(self.appended))

    async def list_predictions(self, module=None, limit=50):
        self.calls.append((module, limit))
        return [_prediction(i) for i in range(limit, 0, -1)][:3]


class DummyService:
    def __init__(self, report=None):
        self.sink = DummySink()
        self.report = report
        self.triggers = []

    async def generate_predictions(self, trigger="manual"):
        self.triggers.append(trigger)
        return self.report

    async def last_report(self):
        return self.report


def _report():
    return CycleReport(
        cycle_id="c-42",
        trigger="manual",
        started_at=NOW,
        finished_at=NOW,
        modules={
            Module.traffic: ModuleOutcome(module=Module.traffic, predictions=8),
            Module.energy: ModuleOutcome(module=Module.energy, status=ModuleStatus.failed, error="db down"),
            Module.environmental: ModuleOutcome(module=Module.environmental, status=ModuleStatus.skipped),
        },
    )


@pytest.mark.asyncio
async def test_list_predictions_passes_filters(monkeypatch):
    service = DummyService()
    monkeypatch.setattr(predictions_route, "get_prediction_service", lambda: service)

    rows = await predictions_route.list_predictions(module=Module.energy, limit=5)

    assert service.sink.calls == [(Module.energy, 5)]
    assert len(rows) == 3
    assert rows[0].time_horizon == 6
    assert rows[0].metadata == {"location": "Bridge Avenue"}


@pytest.mark.asyncio
async def test_list_predictions_defaults(monkeypatch):
    service = DummyService()
    monkeypatch.setattr(predictions_route, "get_prediction_service", lambda: service)

    await predictions_route.list_predictions()

    assert service.sink.calls == [(None, 50)]


@pytest.mark.asyncio
async def test_latest_predictions_uses_latest_limit(monkeypatch):
    service = DummyService()
    monkeypatch.setattr(predictions_route, "get_prediction_service", lambda: service)

    await predictions_route.latest_predictions()

    assert service.sink.calls == [(None, 10)]


@pytest.mark.asyncio
async def test_generate_returns_acknowledgement_and_outcomes(monkeypatch):
    service = DummyService(report=_report())
    monkeypatch.setattr(predictions_route, "get_prediction_service", lambda: service)

    resp = await predictions_route.generate_predictions()

    assert service.triggers == ["manual"]
    assert resp.message == "Predictions generated successfully"
    assert resp.report.total_predictions == 8
    assert resp.report.failed_modules == [Module.energy]
    statuses = {m.module: m.status for m in resp.report.modules}
    assert statuses[Module.environmental] == ModuleStatus.skipped


@pytest.mark.asyncio
async def test_last_cycle_404_when_none(monkeypatch):
    monkeypatch.setattr(predictions_route, "get_prediction_service", lambda: DummyService())

    with pytest.raises(HTTPException) as exc:
        await predictions_route.last_cycle()
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_last_cycle_returns_report(monkeypatch):
    monkeypatch.setattr(predictions_route, "get_prediction_service", lambda: DummyService(report=_report()))

    resp = await predictions_route.last_cycle()

    assert resp.cycle_id == "c-42"
    assert resp.model_dump()["total_predictions"] == 8


@pytest.mark.asyncio
async def test_generate_failure_becomes_500(monkeypatch):
    class Broken(DummyService):
        async def generate_predictions(self, trigger="manual"):
            raise RuntimeError("store exploded")

    monkeypatch.setattr(predictions_route, "get_prediction_service", lambda: Broken())

    with pytest.raises(HTTPException) as exc:
        await predictions_route.generate_predictions()
    assert exc.value.status_code == 500
    assert "store exploded" in exc.value.detail


@pytest.mark.asyncio
async def test_create_prediction_appends_through_sink(monkeypatch):
    service = DummyService()
    monkeypatch.setattr(predictions_route, "get_prediction_service", lambda: service)

    created = await predictions_route.create_prediction(PredictionRequest(
        module="energy",
        prediction_type="demand",
        predicted_value=940.5,
        confidence=0.72,
        time_horizon=12,
        metadata={"type": "total_consumption"},
    ))

    stored = service.sink.appended[0]
    assert stored.module == Module.energy
    assert stored.time_horizon_hours == 12
    assert stored.created_at.tzinfo is not None
    assert created.id == 1
    assert created.time_horizon == 12
    assert created.metadata == {"type": "total_consumption"}


@pytest.mark.parametrize("overrides", [
    {"module": "population"},
    {"confidence": 1.4},
    {"time_horizon": 0},
])
def test_prediction_request_validation(overrides):
    body = {
        "module": "traffic",
        "prediction_type": "flow",
        "predicted_value": 70.0,
        "confidence": 0.5,
        "time_horizon": 6,
        **overrides,
    }
    with pytest.raises(ValidationError):
        PredictionRequest(**body)
