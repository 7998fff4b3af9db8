"""
Enumerations for city Modules, Prediction Types, Congestion Levels and Alert Severity

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from enum import Enum

from config import settings


class Module(str, Enum):
    traffic = "traffic"
    energy = "energy"
    environmental = "environmental"
    population = "population"

    @classmethod
    def forecastable(cls) -> tuple[Module, ...]:
        return (cls.traffic, cls.energy, cls.environmental)


class PredictionType(str, Enum):
    flow = "flow"
    demand = "demand"
    renewable = "renewable"
    quality = "quality"


class CongestionLevel(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"

    @classmethod
    def from_flow_rate(cls, flow_rate: float) -> CongestionLevel:
        if flow_rate > settings.congestion_high_flow:
            return cls.high
        if flow_rate > settings.congestion_medium_flow:
            return cls.medium
        return cls.low


class Severity(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class AlertType(str, Enum):
    error = "error"
    warning = "warning"
    info = "info"
    success = "success"


class ModuleStatus(str, Enum):
    completed = "completed"
    skipped = "skipped"
    failed = "failed"
