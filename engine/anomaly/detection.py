"""
Detection logic for flagging the most recent sample of a metric window as anomalous when it rises more than a configured number of population standard deviations above the window mean.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from config import settings
from engine.series import Sample


@dataclass(frozen=True)
class AnomalyCheck:
    is_anomaly: bool
    threshold: float
    latest_value: Optional[float] = None
    mean: float = 0.0
    std: float = 0.0
    sample_count: int = 0


def detect(samples: Sequence[Sample], sigma: float | None = None) -> AnomalyCheck:
    if sigma is None:
        sigma = settings.anomaly_sigma
    n = len(samples)
    if n < settings.anomaly_min_samples:
        # no judgement on short windows
        return AnomalyCheck(is_anomaly=False, threshold=0.0, sample_count=n)

    arr = np.array([s.value for s in samples], dtype=float)
    mean = float(arr.mean())
    std = float(arr.std())
    threshold = mean + sigma * std
    latest = float(arr[-1])

    return AnomalyCheck(
        is_anomaly=latest > threshold,
        threshold=threshold,
        latest_value=latest,
        mean=mean,
        std=std,
        sample_count=n,
    )
