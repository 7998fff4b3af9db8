"""
Routes initialization for API endpoints.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from fastapi import APIRouter

from api.routes.health import router as health_router
from api.routes.predictions import router as predictions_router
from api.routes.readings import router as readings_router
from api.routes.dashboard import router as dashboard_router
from api.routes.alerts import router as alerts_router
from api.routes.activity import router as activity_router

router = APIRouter()

router.include_router(health_router)
router.include_router(predictions_router)
router.include_router(readings_router)
router.include_router(dashboard_router)
router.include_router(alerts_router)
router.include_router(activity_router)

__all__ = ["router"]
