"""
Response models for API endpoints.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

import numpy as np
from pydantic import BaseModel, Field, model_serializer

from engine.cycle import CycleReport, ModuleOutcome
from engine.enums import Module, ModuleStatus, PredictionType
from engine.prediction import Prediction


def _coerce(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {k: _coerce(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_coerce(v) for v in obj]
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    return obj


class NpModel(BaseModel):

    @model_serializer(mode="wrap")
    def _serialize(self, handler: Any) -> Any:
        return _coerce(handler(self))


class PredictionResponse(NpModel):

    id: Optional[int] = None
    module: Module
    prediction_type: PredictionType
    predicted_value: float
    confidence: float = Field(ge=0.0, le=1.0)
    time_horizon: int
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime

    @classmethod
    def from_prediction(cls, prediction: Prediction) -> PredictionResponse:
        return cls(
            id=prediction.id,
            module=prediction.module,
            prediction_type=prediction.prediction_type,
            predicted_value=prediction.predicted_value,
            confidence=prediction.confidence,
            time_horizon=prediction.time_horizon_hours,
            metadata=dict(prediction.metadata),
            created_at=prediction.created_at,
        )


class AnomalyFlagResponse(NpModel):
    metric_key: str
    latest_value: float
    threshold: float
    group: Optional[str] = None


class ModuleOutcomeResponse(NpModel):
    module: Module
    status: ModuleStatus
    predictions: int = 0
    error: Optional[str] = None
    anomalies: List[AnomalyFlagResponse] = Field(default_factory=list)

    @classmethod
    def from_outcome(cls, outcome: ModuleOutcome) -> ModuleOutcomeResponse:
        return cls(
            module=outcome.module,
            status=outcome.status,
            predictions=outcome.predictions,
            error=outcome.error,
            anomalies=[
                AnomalyFlagResponse(
                    metric_key=a.metric_key,
                    latest_value=a.latest_value,
                    threshold=a.threshold,
                    group=a.group,
                )
                for a in outcome.anomalies
            ],
        )


class CycleReportResponse(NpModel):
    cycle_id: str
    trigger: str
    started_at: datetime
    finished_at: Optional[datetime] = None
    total_predictions: int = 0
    failed_modules: List[Module] = Field(default_factory=list)
    modules: List[ModuleOutcomeResponse] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: CycleReport) -> CycleReportResponse:
        return cls(
            cycle_id=report.cycle_id,
            trigger=report.trigger,
            started_at=report.started_at,
            finished_at=report.finished_at,
            total_predictions=report.total_predictions,
            failed_modules=report.failed_modules,
            modules=[ModuleOutcomeResponse.from_outcome(o) for o in report.modules.values()],
        )


class GenerateResponse(BaseModel):
    message: str
    report: CycleReportResponse


class DashboardMetrics(NpModel):
    total_population: int = 0
    energy_consumption: float = 0.0
    traffic_flow: float = 0.0
    air_quality: str
    alert_count: int = 0


class AlertResponse(BaseModel):
    id: int
    type: str
    title: str
    message: str
    module: str
    severity: str
    resolved: bool = False
    created_at: datetime
    resolved_at: Optional[datetime] = None


class ActivityResponse(BaseModel):
    id: int
    user_id: Optional[str] = None
    action: str
    module: str
    description: str
    metadata: Optional[Dict[str, Any]] = None
    created_at: datetime
