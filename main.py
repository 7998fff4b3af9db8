"""
Entry point for the Metropulse prediction API server.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI

from api.routes import router
from config import settings
from database import dispose_database, init_database, init_db
from services.runtime import build_runtime
from store.client import close_redis

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    stream=sys.stdout,
)
log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    init_database(settings.database_url)
    init_db()

    runtime = build_runtime()
    app.state.runtime = runtime
    runtime.start()
    log.info("Metropulse started")
    try:
        yield
    finally:
        await runtime.stop()
        await close_redis()
        dispose_database()
        log.info("Metropulse stopped")


app = FastAPI(
    title="Metropulse",
    description="Smart-city monitoring backend with periodic traffic, energy and air-quality forecasts.",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(router, prefix="/api/v1")


if __name__ == "__main__":
    uvicorn_kwargs = {
        "host": settings.host,
        "port": settings.port,
        "log_level": "info",
        "access_log": True,
    }
    if settings.ssl_enabled:
        uvicorn_kwargs["ssl_certfile"] = settings.ssl_certfile
        uvicorn_kwargs["ssl_keyfile"] = settings.ssl_keyfile

    uvicorn.run(
        "main:app",
        **uvicorn_kwargs,
    )
