"""
Dashboard snapshot route.

Copyright (c) 2026 Stefan Kumarasinghe
Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from fastapi import APIRouter

from api.responses import DashboardMetrics
from api.routes.common import get_metric_source
from api.routes.exception import handle_exceptions

router = APIRouter(tags=["Dashboard"])


@router.get("/dashboard/metrics", response_model=DashboardMetrics, summary="City-wide headline metrics")
@handle_exceptions
async def dashboard_metrics() -> DashboardMetrics:
    snapshot = await get_metric_source().dashboard_metrics()
    return DashboardMetrics(**snapshot)
