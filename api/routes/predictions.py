"""
Prediction routes: newest-first listings, recording a single prediction, the manual generation trigger and the last cycle report.

Copyright (c) 2026 Stefan Kumarasinghe
Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from api.requests import PredictionRequest
from api.responses import CycleReportResponse, GenerateResponse, PredictionResponse
from api.routes.common import coerce_query_value
from api.routes.exception import handle_exceptions
from config import settings
from engine.enums import Module
from engine.prediction import Prediction
from services.prediction_service import get_prediction_service

router = APIRouter(tags=["Predictions"])


@router.get("/predictions", response_model=List[PredictionResponse], summary="List predictions, newest first")
@handle_exceptions
async def list_predictions(
    module: Optional[Module] = Query(default=None),
    limit: int = Query(default=settings.predictions_default_limit, ge=1, le=settings.predictions_max_limit),
) -> List[PredictionResponse]:
    module = coerce_query_value(module, Module)
    limit = coerce_query_value(limit, int)
    service = get_prediction_service()
    predictions = await service.sink.list_predictions(module=module, limit=limit)
    return [PredictionResponse.from_prediction(p) for p in predictions]


@router.post("/predictions", response_model=PredictionResponse, status_code=201, summary="Record a prediction")
@handle_exceptions
async def create_prediction(req: PredictionRequest) -> PredictionResponse:
    prediction = Prediction(
        module=req.module,
        prediction_type=req.prediction_type,
        predicted_value=req.predicted_value,
        confidence=req.confidence,
        time_horizon_hours=req.time_horizon,
        created_at=datetime.now(timezone.utc),
        metadata=dict(req.metadata),
    )
    stored = await get_prediction_service().sink.append_prediction(prediction)
    return PredictionResponse.from_prediction(stored)


@router.get("/predictions/latest", response_model=List[PredictionResponse], summary="Most recent predictions")
@handle_exceptions
async def latest_predictions() -> List[PredictionResponse]:
    service = get_prediction_service()
    predictions = await service.sink.list_predictions(limit=settings.predictions_latest_limit)
    return [PredictionResponse.from_prediction(p) for p in predictions]


@router.post("/predictions/generate", response_model=GenerateResponse, summary="Run a prediction cycle now")
@handle_exceptions
async def generate_predictions() -> GenerateResponse:
    report = await get_prediction_service().generate_predictions(trigger="manual")
    return GenerateResponse(
        message="Predictions generated successfully",
        report=CycleReportResponse.from_report(report),
    )


@router.get("/predictions/cycles/last", response_model=CycleReportResponse, summary="Outcome of the last cycle")
@handle_exceptions
async def last_cycle() -> CycleReportResponse:
    report = await get_prediction_service().last_report()
    if report is None:
        raise HTTPException(status_code=404, detail="No prediction cycle has run yet")
    return CycleReportResponse.from_report(report)
