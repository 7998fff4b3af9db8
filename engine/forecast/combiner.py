"""
Forecast combiner that projects a fitted trend to a future horizon and blends it with a short-window moving average, weighting the regression by its fit quality and reporting a clamped confidence score.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from config import settings
from engine.forecast.smoothing import moving_average
from engine.forecast.trend import TrendFit, fit_trend
from engine.series import Sample


@dataclass(frozen=True)
class Forecast:
    value: float
    confidence: float
    horizon_hours: float
    sample_count: int
    regression_value: float = 0.0
    moving_average: float = 0.0
    r2: float = 0.0


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def confidence_from_fit(fit: TrendFit) -> float:
    return _clamp(
        fit.r2 * settings.forecast_confidence_scale,
        settings.forecast_confidence_min,
        settings.forecast_confidence_max,
    )


def predict(
    samples: Sequence[Sample],
    horizon_hours: float,
    now: Optional[datetime] = None,
) -> Forecast:
    if len(samples) < settings.forecast_min_samples:
        return Forecast(value=0.0, confidence=0.0, horizon_hours=horizon_hours, sample_count=len(samples))

    if now is None:
        now = datetime.now(timezone.utc)

    fit = fit_trend(samples)
    recent = moving_average(samples, settings.forecast_moving_average_window)

    target_ms = (now + timedelta(hours=horizon_hours)).timestamp() * 1000.0
    projected = fit.value_at(target_ms)

    regression_weight = max(settings.forecast_regression_weight_floor, fit.r2)
    moving_avg_weight = 1.0 - regression_weight
    value = projected * regression_weight + recent * moving_avg_weight

    return Forecast(
        value=value,
        confidence=confidence_from_fit(fit),
        horizon_hours=horizon_hours,
        sample_count=len(samples),
        regression_value=projected,
        moving_average=recent,
        r2=fit.r2,
    )
