"""
Sample value types and boundary validation for metric windows, dropping points with missing or non-finite timestamps and values, grouping by label and ordering by time before any regression math sees them.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Sample:
    timestamp: datetime
    value: float

    @property
    def timestamp_ms(self) -> float:
        return self.timestamp.timestamp() * 1000.0


@dataclass(frozen=True)
class MetricPoint:
    """Raw row as returned by a metric source, before validation."""

    timestamp: Optional[datetime]
    value: Any
    labels: Dict[str, str] = field(default_factory=dict)


def as_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def _coerce(point: MetricPoint, metric_key: str) -> Optional[Sample]:
    if not isinstance(point.timestamp, datetime):
        log.warning("%s: dropping sample with missing timestamp (value=%r)", metric_key, point.value)
        return None
    try:
        value = float(point.value)
    except (TypeError, ValueError):
        log.warning("%s: dropping sample at %s with non-numeric value %r", metric_key, point.timestamp, point.value)
        return None
    if not math.isfinite(value):
        log.warning("%s: dropping sample at %s with non-finite value %r", metric_key, point.timestamp, value)
        return None
    return Sample(timestamp=as_utc(point.timestamp), value=value)


def to_samples(points: Iterable[MetricPoint], metric_key: str = "metric") -> List[Sample]:
    samples = [s for s in (_coerce(p, metric_key) for p in points) if s is not None]
    samples.sort(key=lambda s: s.timestamp)
    return samples


def group_samples(
    points: Iterable[MetricPoint],
    label: str,
    metric_key: str = "metric",
) -> Dict[str, List[Sample]]:
    grouped: Dict[str, List[MetricPoint]] = defaultdict(list)
    for point in points:
        key = str(point.labels.get(label) or "").strip()
        if not key:
            log.warning("%s: dropping sample without %r label", metric_key, label)
            continue
        grouped[key].append(point)
    return {key: to_samples(rows, f"{metric_key}{{{label}={key}}}") for key, rows in grouped.items()}
