"""
System alert routes.

Copyright (c) 2026 Stefan Kumarasinghe
Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, HTTPException, Query

from api.requests import AlertRequest
from api.responses import AlertResponse
from api.routes.common import coerce_query_value, get_metric_source
from api.routes.exception import handle_exceptions
from config import settings

router = APIRouter(tags=["Alerts"])


@router.get("/alerts", response_model=List[AlertResponse], summary="Recent alerts, newest first")
@handle_exceptions
async def list_alerts(
    limit: int = Query(default=settings.log_default_limit, ge=1, le=settings.log_max_limit),
) -> List[AlertResponse]:
    limit = coerce_query_value(limit, int)
    rows = await get_metric_source().alerts(limit=limit)
    return [AlertResponse(**row) for row in rows]


@router.get("/alerts/unresolved", response_model=List[AlertResponse], summary="Unresolved alerts, newest first")
@handle_exceptions
async def unresolved_alerts() -> List[AlertResponse]:
    rows = await get_metric_source().unresolved_alerts()
    return [AlertResponse(**row) for row in rows]


@router.post("/alerts", response_model=AlertResponse, status_code=201, summary="Raise a system alert")
@handle_exceptions
async def create_alert(req: AlertRequest) -> AlertResponse:
    payload = req.model_dump()
    payload["type"] = req.type.value
    payload["severity"] = req.severity.value
    row = await get_metric_source().create_alert(payload)
    return AlertResponse(**row)


@router.patch("/alerts/{alert_id}/resolve", response_model=AlertResponse, summary="Mark an alert resolved")
@handle_exceptions
async def resolve_alert(alert_id: int) -> AlertResponse:
    row = await get_metric_source().resolve_alert(alert_id)
    if row is None:
        raise HTTPException(status_code=404, detail=f"Alert {alert_id} not found")
    return AlertResponse(**row)
