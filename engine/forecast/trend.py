"""
Trend fitting logic for metric windows, using ordinary least squares over epoch-millisecond timestamps to estimate slope, intercept and coefficient of determination, with the time axis centred on its mean so epoch-scale inputs keep their precision.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from engine.series import Sample


@dataclass(frozen=True)
class TrendFit:
    """Least-squares line ``value ~= slope * timestamp_ms + intercept``.

    ``origin_ms`` and ``level`` describe the same line in the centred frame
    (``value ~= slope * (timestamp_ms - origin_ms) + level``); projections go
    through that form to avoid cancelling two large numbers.
    """

    slope: float
    intercept: float
    r2: float
    origin_ms: float = 0.0
    level: float = 0.0

    def value_at(self, timestamp_ms: float) -> float:
        return self.slope * (timestamp_ms - self.origin_ms) + self.level


FLAT = TrendFit(slope=0.0, intercept=0.0, r2=0.0)


def _linear_fit(t: np.ndarray, v: np.ndarray) -> tuple[float, float, float]:
    origin = float(t.mean())
    t_c = t - origin
    level = float(v.mean())
    ss_t = float(np.sum(t_c ** 2))
    if ss_t == 0:
        return 0.0, level, origin
    slope = float(np.sum(t_c * (v - level)) / ss_t)
    return slope, level, origin


def _r_squared(t: np.ndarray, v: np.ndarray, slope: float, level: float, origin: float) -> float:
    predicted = slope * (t - origin) + level
    ss_res = float(np.sum((v - predicted) ** 2))
    ss_tot = float(np.sum((v - np.mean(v)) ** 2))
    if ss_tot == 0:
        return 1.0
    return max(0.0, 1.0 - ss_res / ss_tot)


def fit_trend(samples: Sequence[Sample]) -> TrendFit:
    if len(samples) < 2:
        return FLAT

    t = np.array([s.timestamp_ms for s in samples], dtype=float)
    v = np.array([s.value for s in samples], dtype=float)
    slope, level, origin = _linear_fit(t, v)
    r2 = _r_squared(t, v, slope, level, origin)

    return TrendFit(
        slope=slope,
        intercept=level - slope * origin,
        r2=r2,
        origin_ms=origin,
        level=level,
    )
