"""
Tests for the prediction generation cycle: per-module fan-out, horizon sets, insufficient data handling, failure isolation and the stored cycle report.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from datasources.base import MetricSource, PredictionSink
from datasources.exceptions import DataSourceUnavailable
from engine.enums import Module, ModuleStatus, PredictionType
from engine.series import MetricPoint
from engine.targets import (
    ENERGY_RENEWABLE_PERCENTAGE,
    ENERGY_TOTAL_CONSUMPTION,
    ENVIRONMENTAL_AQI,
    TRAFFIC_FLOW_RATE,
)
from services.prediction_service import PredictionService
from store import cycles as cycle_store

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


def _points(values, labels=None, end=NOW):
    n = len(values)
    # newest first, as a relational source returns them
    return [
        MetricPoint(timestamp=end - timedelta(hours=n - 1 - i), value=v, labels=dict(labels or {}))
        for i, v in reversed(list(enumerate(values)))
    ]


class FakeSource(MetricSource):
    def __init__(self, windows=None, failing=()):
        self.windows = windows or {}
        self.failing = set(failing)
        self.calls = []

    async def fetch_window(self, module, metric_key, start, end):
        self.calls.append((module, metric_key, start, end))
        if module in self.failing:
            raise DataSourceUnavailable(f"{module.value} table unreachable")
        return list(self.windows.get((module, metric_key), []))


class FakeSink(PredictionSink):
    def __init__(self):
        self.rows = []

    async def append_prediction(self, prediction):
        stored = replace(prediction, id=len(self.rows) + 1)
        self.rows.append(stored)
        return stored

    async def list_predictions(self, module=None, limit=50):
        rows = [r for r in self.rows if module is None or r.module == module]
        return list(reversed(rows))[:limit]


def _rising(n=10, start=40.0, step=5.0):
    return [start + step * i for i in range(n)]


def _full_windows():
    return {
        (Module.traffic, TRAFFIC_FLOW_RATE): (
            _points(_rising(), {"location": "Bridge Avenue"})
            + _points(_rising(start=70.0, step=-2.0), {"location": "Central Plaza"})
        ),
        (Module.energy, ENERGY_TOTAL_CONSUMPTION): _points(_rising(start=800.0, step=10.0)),
        (Module.energy, ENERGY_RENEWABLE_PERCENTAGE): _points(_rising(start=30.0, step=1.0)),
        (Module.environmental, ENVIRONMENTAL_AQI): _points(_rising(start=30.0, step=2.0)),
    }


def _service(source, sink=None):
    return PredictionService(source, sink or FakeSink(), clock=lambda: NOW)


@pytest.mark.asyncio
async def test_full_cycle_emits_every_horizon():
    sink = FakeSink()
    report = await _service(FakeSource(_full_windows()), sink).generate_predictions()

    traffic = [p for p in sink.rows if p.module == Module.traffic]
    assert len(traffic) == 8
    assert {p.metadata["location"] for p in traffic} == {"Bridge Avenue", "Central Plaza"}
    assert sorted(p.time_horizon_hours for p in traffic if p.metadata["location"] == "Bridge Avenue") == [1, 6, 12, 24]

    demand = [p for p in sink.rows if p.prediction_type == PredictionType.demand]
    renewable = [p for p in sink.rows if p.prediction_type == PredictionType.renewable]
    quality = [p for p in sink.rows if p.prediction_type == PredictionType.quality]
    assert sorted(p.time_horizon_hours for p in demand) == [1, 6, 12, 24]
    assert sorted(p.time_horizon_hours for p in renewable) == [6, 12, 24]
    assert sorted(p.time_horizon_hours for p in quality) == [1, 6, 12, 24]
    assert all(p.metadata == {"type": "renewable_percentage"} for p in renewable)

    assert report.total_predictions == len(sink.rows) == 8 + 4 + 3 + 4
    assert report.failed_modules == []
    assert all(o.status == ModuleStatus.completed for o in report.modules.values())
    assert all(0.0 <= p.confidence <= 1.0 for p in sink.rows)
    assert all(p.created_at == NOW for p in sink.rows)


@pytest.mark.asyncio
async def test_fetch_window_uses_lookback_window():
    source = FakeSource(_full_windows())
    await _service(source).generate_predictions()
    assert source.calls
    for _, _, start, end in source.calls:
        assert end == NOW
        assert start == NOW - timedelta(hours=24)


@pytest.mark.asyncio
async def test_rising_series_forecast_is_above_last_value():
    sink = FakeSink()
    await _service(FakeSource(_full_windows()), sink).generate_predictions()
    bridge_1h = next(
        p for p in sink.rows
        if p.module == Module.traffic and p.metadata["location"] == "Bridge Avenue" and p.time_horizon_hours == 1
    )
    assert bridge_1h.predicted_value > 85.0
    assert bridge_1h.confidence > 0.5


@pytest.mark.asyncio
async def test_empty_module_is_skipped_and_others_continue():
    windows = _full_windows()
    del windows[(Module.environmental, ENVIRONMENTAL_AQI)]
    sink = FakeSink()
    report = await _service(FakeSource(windows), sink).generate_predictions()

    assert report.modules[Module.environmental].status == ModuleStatus.skipped
    assert report.modules[Module.environmental].predictions == 0
    assert not [p for p in sink.rows if p.module == Module.environmental]
    assert report.modules[Module.energy].predictions == 7


@pytest.mark.asyncio
async def test_series_below_minimum_emits_nothing():
    windows = {(Module.energy, ENERGY_TOTAL_CONSUMPTION): _points([800.0, 810.0, 820.0])}
    sink = FakeSink()
    report = await _service(FakeSource(windows), sink).generate_predictions()

    assert sink.rows == []
    assert report.total_predictions == 0
    assert report.modules[Module.energy].status == ModuleStatus.completed


@pytest.mark.asyncio
async def test_location_with_three_samples_is_skipped_but_long_one_forecast():
    windows = {
        (Module.traffic, TRAFFIC_FLOW_RATE): (
            _points(_rising(), {"location": "Bridge Avenue"})
            + _points([50.0, 55.0, 60.0], {"location": "University Campus"})
        ),
    }
    sink = FakeSink()
    await _service(FakeSource(windows), sink).generate_predictions()
    assert {p.metadata["location"] for p in sink.rows} == {"Bridge Avenue"}


@pytest.mark.asyncio
async def test_failing_module_is_isolated():
    sink = FakeSink()
    source = FakeSource(_full_windows(), failing={Module.traffic})
    report = await _service(source, sink).generate_predictions()

    assert report.failed_modules == [Module.traffic]
    assert "unreachable" in report.modules[Module.traffic].error
    assert not [p for p in sink.rows if p.module == Module.traffic]
    assert report.modules[Module.energy].predictions == 7
    assert report.modules[Module.environmental].predictions == 4


@pytest.mark.asyncio
async def test_invalid_samples_are_dropped_before_forecasting():
    points = _points(_rising(start=30.0, step=2.0))
    points.append(MetricPoint(timestamp=None, value=99.0))
    points.append(MetricPoint(timestamp=NOW, value=float("nan")))
    sink = FakeSink()
    await _service(FakeSource({(Module.environmental, ENVIRONMENTAL_AQI): points}), sink).generate_predictions()
    assert len(sink.rows) == 4


@pytest.mark.asyncio
async def test_cycles_are_deterministic_with_fixed_clock():
    first, second = FakeSink(), FakeSink()
    await _service(FakeSource(_full_windows()), first).generate_predictions()
    await _service(FakeSource(_full_windows()), second).generate_predictions()

    def key(p):
        return (p.module.value, p.prediction_type.value, p.time_horizon_hours, sorted(p.metadata.items()))

    a = sorted(((key(p), p.predicted_value, p.confidence) for p in first.rows), key=lambda r: repr(r[0]))
    b = sorted(((key(p), p.predicted_value, p.confidence) for p in second.rows), key=lambda r: repr(r[0]))
    assert a == b


@pytest.mark.asyncio
async def test_anomaly_is_recorded_without_blocking_forecast():
    values = [50.0] * 11 + [200.0]
    windows = {(Module.environmental, ENVIRONMENTAL_AQI): _points(values)}
    sink = FakeSink()
    report = await _service(FakeSource(windows), sink).generate_predictions()

    outcome = report.modules[Module.environmental]
    assert len(outcome.anomalies) == 1
    assert outcome.anomalies[0].metric_key == ENVIRONMENTAL_AQI
    assert outcome.anomalies[0].latest_value == 200.0
    assert outcome.predictions == 4


@pytest.mark.asyncio
async def test_report_is_saved_and_reloaded():
    service = _service(FakeSource(_full_windows()))
    report = await service.generate_predictions(trigger="scheduled")

    stored = await cycle_store.load_last()
    assert stored is not None
    assert stored.cycle_id == report.cycle_id
    assert stored.trigger == "scheduled"
    assert stored.total_predictions == report.total_predictions

    fresh = _service(FakeSource())
    loaded = await fresh.last_report()
    assert loaded is not None and loaded.cycle_id == report.cycle_id
