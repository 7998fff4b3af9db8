"""
Reading routes for ingesting city sensor readings and querying them by time range.

Copyright (c) 2026 Stefan Kumarasinghe
Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from api.requests import (
    EnergyReadingRequest,
    EnvironmentalReadingRequest,
    PopulationReadingRequest,
    TrafficReadingRequest,
)
from api.routes.common import coerce_query_value, get_metric_source
from api.routes.exception import handle_exceptions
from config import settings
from engine.enums import Module
from engine.series import as_utc

router = APIRouter(tags=["Readings"])


async def _ingest(module: Module, req: BaseModel) -> Dict[str, Any]:
    payload = {
        key: value.value if isinstance(value, Enum) else value
        for key, value in req.model_dump(exclude_none=True).items()
    }
    return await get_metric_source().insert_reading(module, payload)


@router.post("/readings/traffic", status_code=201, summary="Ingest a traffic reading")
@handle_exceptions
async def ingest_traffic(req: TrafficReadingRequest) -> Dict[str, Any]:
    return await _ingest(Module.traffic, req)


@router.post("/readings/energy", status_code=201, summary="Ingest an energy reading")
@handle_exceptions
async def ingest_energy(req: EnergyReadingRequest) -> Dict[str, Any]:
    return await _ingest(Module.energy, req)


@router.post("/readings/environmental", status_code=201, summary="Ingest an environmental reading")
@handle_exceptions
async def ingest_environmental(req: EnvironmentalReadingRequest) -> Dict[str, Any]:
    return await _ingest(Module.environmental, req)


@router.post("/readings/population", status_code=201, summary="Ingest a population snapshot")
@handle_exceptions
async def ingest_population(req: PopulationReadingRequest) -> Dict[str, Any]:
    return await _ingest(Module.population, req)


@router.get("/readings/{module}", summary="Readings of a module within a time range, newest first")
@handle_exceptions
async def list_readings(
    module: Module,
    start: Optional[datetime] = Query(default=None),
    end: Optional[datetime] = Query(default=None),
    limit: int = Query(default=settings.readings_max_rows, ge=1, le=settings.readings_max_rows),
) -> List[Dict[str, Any]]:
    start = coerce_query_value(start)
    end = coerce_query_value(end)
    limit = coerce_query_value(limit, int)
    if start is not None and end is not None and as_utc(start) > as_utc(end):
        raise HTTPException(status_code=400, detail="start must not be after end")
    return await get_metric_source().readings(Module(module), start=start, end=end, limit=limit)
