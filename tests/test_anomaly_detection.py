"""
Test cases for the latest-value anomaly check over metric windows.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from datetime import datetime, timedelta, timezone

import pytest

from config import settings
from engine.anomaly import AnomalyCheck, detect
from engine.series import Sample

T0 = datetime(2026, 3, 1, tzinfo=timezone.utc)


def _series(values):
    return [Sample(timestamp=T0 + timedelta(minutes=5 * i), value=float(v)) for i, v in enumerate(values)]


def test_short_window_is_never_anomalous():
    res = detect(_series([1, 1, 1, 1, 1, 1, 1, 1, 100]))
    assert isinstance(res, AnomalyCheck)
    assert res.is_anomaly is False
    assert res.threshold == 0.0
    assert res.sample_count == 9


def test_spike_on_latest_value_is_flagged():
    res = detect(_series([10] * 10 + [100]))
    assert res.is_anomaly is True
    assert res.latest_value == 100.0
    assert res.threshold < 100.0


def test_threshold_is_mean_plus_two_population_std():
    values = [2, 4, 4, 4, 5, 5, 7, 9, 5, 5]
    res = detect(_series(values))
    assert res.mean == pytest.approx(5.0)
    assert res.threshold == pytest.approx(res.mean + 2 * res.std)
    assert res.is_anomaly is False


def test_constant_window_is_not_anomalous():
    res = detect(_series([7] * 12))
    assert res.std == 0.0
    assert res.threshold == pytest.approx(7.0)
    # strictly greater than threshold is required
    assert res.is_anomaly is False


def test_drop_is_not_flagged():
    assert detect(_series([50] * 10 + [0])).is_anomaly is False


def test_sigma_override_and_settings(monkeypatch):
    values = [10, 11, 9, 10, 11, 9, 10, 11, 9, 13]
    assert detect(_series(values), sigma=1.0).is_anomaly is True
    monkeypatch.setattr(settings, "anomaly_sigma", 10.0)
    assert detect(_series(values)).is_anomaly is False
