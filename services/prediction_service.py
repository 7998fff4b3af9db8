"""
Prediction generation service that fans out one forecasting task per city module, reads each module's look-back window, blends trend and moving-average forecasts per horizon and appends the results to the prediction log.

Copyright (c) 2026 Stefan Kumarasinghe
Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Tuple

from config import settings
from datasources.base import MetricSource, PredictionSink
from datasources.predictions import SqlPredictionStore
from datasources.sql import SqlMetricSource
from engine.anomaly import detect as detect_anomaly
from engine.cycle import AnomalyFlag, CycleReport, ModuleOutcome
from engine.enums import Module, ModuleStatus
from engine.forecast import predict
from engine.prediction import Prediction
from engine.series import MetricPoint, Sample, group_samples, to_samples
from engine.targets import ForecastTarget, forecast_targets
from store import cycles as cycle_store

log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PredictionService:
    def __init__(
        self,
        source: MetricSource,
        sink: PredictionSink,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._source = source
        self._sink = sink
        self._clock = clock
        self._last: Optional[CycleReport] = None

    @property
    def sink(self) -> PredictionSink:
        return self._sink

    async def generate_predictions(self, trigger: str = "manual") -> CycleReport:
        now = self._clock()
        report = CycleReport(cycle_id=str(uuid.uuid4()), trigger=trigger, started_at=now)
        log.info("Generating predictions (trigger=%s, cycle=%s)", trigger, report.cycle_id)

        modules = Module.forecastable()
        outcomes = await asyncio.gather(*[self._run_module(module, now) for module in modules])
        for outcome in outcomes:
            report.modules[outcome.module] = outcome

        report.finished_at = self._clock()
        self._last = report
        await cycle_store.save_last(report)

        if report.failed_modules:
            log.warning(
                "Prediction generation completed with failures: %d predictions, failed=%s",
                report.total_predictions,
                ",".join(m.value for m in report.failed_modules),
            )
        else:
            log.info("Prediction generation completed: %d predictions", report.total_predictions)
        return report

    async def last_report(self) -> Optional[CycleReport]:
        if self._last is not None:
            return self._last
        return await cycle_store.load_last()

    async def _run_module(self, module: Module, now: datetime) -> ModuleOutcome:
        outcome = ModuleOutcome(module=module)
        try:
            await self._generate_module(module, now, outcome)
        except Exception as exc:
            log.exception("Error generating %s predictions", module.value)
            outcome.status = ModuleStatus.failed
            outcome.error = str(exc) or type(exc).__name__
        return outcome

    async def _generate_module(self, module: Module, now: datetime, outcome: ModuleOutcome) -> None:
        start = now - timedelta(hours=settings.lookback_hours)
        windows: List[Tuple[ForecastTarget, List[MetricPoint]]] = []
        for target in forecast_targets(module):
            points = await self._source.fetch_window(module, target.metric_key, start, now)
            windows.append((target, points))

        if not any(points for _, points in windows):
            log.info("No %s data in the last %gh, skipping", module.value, settings.lookback_hours)
            outcome.status = ModuleStatus.skipped
            return

        for target, points in windows:
            for group, samples in _series(target, points).items():
                self._check_anomaly(target, group, samples, outcome)
                if len(samples) < settings.forecast_min_samples:
                    log.debug(
                        "%s/%s%s: %d samples, not enough to forecast",
                        module.value, target.metric_key, f"[{group}]" if group else "", len(samples),
                    )
                    continue
                metadata = {target.group_by: group} if target.group_by else dict(target.metadata)
                for hours in target.horizons:
                    forecast = predict(samples, hours, now=now)
                    prediction = Prediction(
                        module=module,
                        prediction_type=target.prediction_type,
                        predicted_value=forecast.value,
                        confidence=forecast.confidence,
                        time_horizon_hours=hours,
                        metadata=dict(metadata),
                        created_at=self._clock(),
                    )
                    await self._sink.append_prediction(prediction)
                    outcome.predictions += 1

        log.info("Generated %d %s predictions", outcome.predictions, module.value)

    @staticmethod
    def _check_anomaly(
        target: ForecastTarget,
        group: Optional[str],
        samples: List[Sample],
        outcome: ModuleOutcome,
    ) -> None:
        check = detect_anomaly(samples)
        if not check.is_anomaly:
            return
        log.warning(
            "%s/%s%s latest value %.3f exceeds anomaly threshold %.3f",
            target.module.value, target.metric_key, f"[{group}]" if group else "",
            check.latest_value, check.threshold,
        )
        outcome.anomalies.append(AnomalyFlag(
            metric_key=target.metric_key,
            latest_value=float(check.latest_value),
            threshold=check.threshold,
            group=group,
        ))


def _series(target: ForecastTarget, points: List[MetricPoint]) -> Dict[Optional[str], List[Sample]]:
    if target.group_by:
        return dict(group_samples(points, target.group_by, target.metric_key))
    return {None: to_samples(points, target.metric_key)}


_service = PredictionService(SqlMetricSource(), SqlPredictionStore())


def get_prediction_service() -> PredictionService:
    return _service
