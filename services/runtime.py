"""
Background runtime wiring the prediction scheduler and the data simulator to the application lifespan.

Copyright (c) 2026 Stefan Kumarasinghe
Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""
from __future__ import annotations

import logging
from typing import Optional

from config import settings
from datasources.sql import SqlMetricSource
from services.prediction_service import PredictionService, get_prediction_service
from services.scheduler import PredictionScheduler
from services.simulation import DataSimulator

log = logging.getLogger(__name__)


class ForecastRuntime:
    def __init__(
        self,
        service: PredictionService,
        scheduler: Optional[PredictionScheduler] = None,
        simulator: Optional[DataSimulator] = None,
    ) -> None:
        self.service = service
        self.scheduler = scheduler
        self.simulator = simulator

    def start(self) -> None:
        if self.simulator is not None:
            self.simulator.start()
        if self.scheduler is not None:
            self.scheduler.start()

    async def stop(self) -> None:
        if self.scheduler is not None:
            await self.scheduler.stop()
        if self.simulator is not None:
            await self.simulator.stop()


def build_runtime(service: Optional[PredictionService] = None) -> ForecastRuntime:
    service = service or get_prediction_service()
    scheduler = None
    simulator = None
    if settings.scheduler_enabled:
        scheduler = PredictionScheduler(
            service.generate_predictions,
            interval_seconds=settings.schedule_interval_seconds,
            initial_delay_seconds=settings.bootstrap_delay_seconds,
        )
    else:
        log.info("Prediction scheduler disabled")
    if settings.simulation_enabled:
        simulator = DataSimulator(SqlMetricSource(), settings.simulation_interval_seconds)
    return ForecastRuntime(service, scheduler=scheduler, simulator=simulator)
