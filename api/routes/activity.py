"""
System activity log routes.

Copyright (c) 2026 Stefan Kumarasinghe
Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Query

from api.requests import ActivityRequest
from api.responses import ActivityResponse
from api.routes.common import coerce_query_value, get_metric_source
from api.routes.exception import handle_exceptions
from config import settings

router = APIRouter(tags=["Activity"])


@router.get("/activity", response_model=List[ActivityResponse], summary="Recent activity, newest first")
@handle_exceptions
async def list_activity(
    limit: int = Query(default=settings.log_default_limit, ge=1, le=settings.log_max_limit),
) -> List[ActivityResponse]:
    limit = coerce_query_value(limit, int)
    rows = await get_metric_source().activity(limit=limit)
    return [ActivityResponse(**row) for row in rows]


@router.post("/activity", response_model=ActivityResponse, status_code=201, summary="Record an activity entry")
@handle_exceptions
async def create_activity(req: ActivityRequest) -> ActivityResponse:
    row = await get_metric_source().create_activity(req.model_dump())
    return ActivityResponse(**row)
