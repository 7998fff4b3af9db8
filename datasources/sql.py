"""
Relational metric source backed by the city reading tables, serving time windows to the forecaster and handling reading ingestion, range queries, alerts, the activity log and the dashboard snapshot.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple, Type

from sqlalchemy import and_, func, select
from sqlalchemy.exc import SQLAlchemyError

from config import AIR_QUALITY_BANDS, AIR_QUALITY_WORST, settings
from database import get_db_session
from datasources.base import MetricSource
from datasources.exceptions import DataSourceUnavailable, InvalidQuery, WriteFailed
from db_models import (
    ActivityRecord,
    Base,
    EnergyReading,
    EnvironmentalReading,
    PopulationReading,
    SystemAlert,
    TrafficReading,
)
from engine.enums import CongestionLevel, Module
from engine.series import MetricPoint, as_utc
from engine.targets import (
    ENERGY_RENEWABLE_PERCENTAGE,
    ENERGY_TOTAL_CONSUMPTION,
    ENVIRONMENTAL_AQI,
    LOCATION_LABEL,
    POPULATION_TOTAL,
    TRAFFIC_FLOW_RATE,
)

log = logging.getLogger(__name__)

READING_MODELS: Dict[Module, Type[Base]] = {
    Module.traffic: TrafficReading,
    Module.energy: EnergyReading,
    Module.environmental: EnvironmentalReading,
    Module.population: PopulationReading,
}

# (module, metric key) -> (value column, label columns)
_METRIC_COLUMNS: Dict[Tuple[Module, str], Tuple[Any, Dict[str, Any]]] = {
    (Module.traffic, TRAFFIC_FLOW_RATE): (TrafficReading.flow_rate, {LOCATION_LABEL: TrafficReading.location}),
    (Module.energy, ENERGY_TOTAL_CONSUMPTION): (EnergyReading.total_consumption, {}),
    (Module.energy, ENERGY_RENEWABLE_PERCENTAGE): (EnergyReading.renewable_percentage, {}),
    (Module.environmental, ENVIRONMENTAL_AQI): (EnvironmentalReading.air_quality_index, {}),
    (Module.population, POPULATION_TOTAL): (PopulationReading.total_population, {}),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _to_dict(row: Base) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for attr in row.__mapper__.column_attrs:
        value = getattr(row, attr.key)
        if isinstance(value, datetime):
            value = as_utc(value)
        out[attr.key] = value
    return out


def _clamp_limit(limit: Optional[int]) -> int:
    return max(1, min(int(limit or settings.log_default_limit), settings.log_max_limit))


def _activity_dict(row: ActivityRecord) -> Dict[str, Any]:
    out = _to_dict(row)
    out["metadata"] = out.pop("metadata_", None)
    return out


def air_quality_label(aqi: Optional[float]) -> str:
    if not aqi:
        return AIR_QUALITY_BANDS[0][1]
    for upper, label in AIR_QUALITY_BANDS:
        if aqi <= upper:
            return label
    return AIR_QUALITY_WORST


class SqlMetricSource(MetricSource):

    async def fetch_window(
        self,
        module: Module,
        metric_key: str,
        start: datetime,
        end: datetime,
    ) -> List[MetricPoint]:
        try:
            value_col, label_cols = _METRIC_COLUMNS[(Module(module), metric_key)]
        except (KeyError, ValueError) as exc:
            raise InvalidQuery(f"Unknown metric {metric_key!r} for module {module!r}") from exc

        model = value_col.class_
        start, end = as_utc(start), as_utc(end)

        def _fetch() -> List[MetricPoint]:
            stmt = (
                select(model.timestamp, value_col, *label_cols.values())
                .where(and_(model.timestamp >= start, model.timestamp <= end))
                .order_by(model.timestamp.desc())
            )
            with get_db_session() as db:
                rows = db.execute(stmt).all()
            points: List[MetricPoint] = []
            for row in rows:
                labels = {name: str(row[i + 2]) for i, name in enumerate(label_cols)}
                points.append(MetricPoint(timestamp=row[0], value=row[1], labels=labels))
            return points

        try:
            points = await asyncio.to_thread(_fetch)
        except SQLAlchemyError as exc:
            raise DataSourceUnavailable(f"fetch_window {module}/{metric_key} failed: {exc}") from exc
        log.debug("fetch_window %s/%s rows=%d", module, metric_key, len(points))
        return points

    async def insert_reading(self, module: Module, payload: Dict[str, Any]) -> Dict[str, Any]:
        model = READING_MODELS[Module(module)]
        values = dict(payload)
        now = _utcnow()
        values["timestamp"] = as_utc(values.get("timestamp") or now)
        if model is TrafficReading and not values.get("congestion_level"):
            values["congestion_level"] = CongestionLevel.from_flow_rate(float(values["flow_rate"])).value

        def _insert() -> Dict[str, Any]:
            with get_db_session() as db:
                row = model(**values, created_at=now)
                db.add(row)
                db.flush()
                return _to_dict(row)

        try:
            return await asyncio.to_thread(_insert)
        except SQLAlchemyError as exc:
            raise WriteFailed(f"insert into {model.__tablename__} failed: {exc}") from exc

    async def readings(
        self,
        module: Module,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        model = READING_MODELS[Module(module)]
        row_cap = max(1, min(int(limit or settings.readings_max_rows), settings.readings_max_rows))

        def _list() -> List[Dict[str, Any]]:
            stmt = select(model)
            if start is not None:
                stmt = stmt.where(model.timestamp >= as_utc(start))
            if end is not None:
                stmt = stmt.where(model.timestamp <= as_utc(end))
            stmt = stmt.order_by(model.timestamp.desc(), model.id.desc()).limit(row_cap)
            with get_db_session() as db:
                return [_to_dict(row) for row in db.scalars(stmt).all()]

        try:
            return await asyncio.to_thread(_list)
        except SQLAlchemyError as exc:
            raise DataSourceUnavailable(f"read from {model.__tablename__} failed: {exc}") from exc

    async def create_alert(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        def _create() -> Dict[str, Any]:
            with get_db_session() as db:
                row = SystemAlert(**payload, resolved=False, created_at=_utcnow())
                db.add(row)
                db.flush()
                return _to_dict(row)

        try:
            return await asyncio.to_thread(_create)
        except SQLAlchemyError as exc:
            raise WriteFailed(f"insert into system_alerts failed: {exc}") from exc

    async def alerts(self, limit: int = 50) -> List[Dict[str, Any]]:
        row_cap = _clamp_limit(limit)

        def _list() -> List[Dict[str, Any]]:
            stmt = (
                select(SystemAlert)
                .order_by(SystemAlert.created_at.desc(), SystemAlert.id.desc())
                .limit(row_cap)
            )
            with get_db_session() as db:
                return [_to_dict(row) for row in db.scalars(stmt).all()]

        try:
            return await asyncio.to_thread(_list)
        except SQLAlchemyError as exc:
            raise DataSourceUnavailable(f"alerts failed: {exc}") from exc

    async def unresolved_alerts(self) -> List[Dict[str, Any]]:
        def _list() -> List[Dict[str, Any]]:
            stmt = (
                select(SystemAlert)
                .where(SystemAlert.resolved.is_(False))
                .order_by(SystemAlert.created_at.desc(), SystemAlert.id.desc())
            )
            with get_db_session() as db:
                return [_to_dict(row) for row in db.scalars(stmt).all()]

        try:
            return await asyncio.to_thread(_list)
        except SQLAlchemyError as exc:
            raise DataSourceUnavailable(f"unresolved_alerts failed: {exc}") from exc

    async def resolve_alert(self, alert_id: int) -> Optional[Dict[str, Any]]:
        def _resolve() -> Optional[Dict[str, Any]]:
            with get_db_session() as db:
                row = db.get(SystemAlert, alert_id)
                if row is None:
                    return None
                if not row.resolved:
                    row.resolved = True
                    row.resolved_at = _utcnow()
                db.flush()
                return _to_dict(row)

        try:
            return await asyncio.to_thread(_resolve)
        except SQLAlchemyError as exc:
            raise DataSourceUnavailable(f"resolve_alert {alert_id} failed: {exc}") from exc

    async def create_activity(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        values = dict(payload)
        values["metadata_"] = values.pop("metadata", None)

        def _create() -> Dict[str, Any]:
            with get_db_session() as db:
                row = ActivityRecord(**values, created_at=_utcnow())
                db.add(row)
                db.flush()
                return _activity_dict(row)

        try:
            return await asyncio.to_thread(_create)
        except SQLAlchemyError as exc:
            raise WriteFailed(f"insert into system_activity failed: {exc}") from exc

    async def activity(self, limit: int = 50) -> List[Dict[str, Any]]:
        row_cap = _clamp_limit(limit)

        def _list() -> List[Dict[str, Any]]:
            stmt = (
                select(ActivityRecord)
                .order_by(ActivityRecord.created_at.desc(), ActivityRecord.id.desc())
                .limit(row_cap)
            )
            with get_db_session() as db:
                return [_activity_dict(row) for row in db.scalars(stmt).all()]

        try:
            return await asyncio.to_thread(_list)
        except SQLAlchemyError as exc:
            raise DataSourceUnavailable(f"activity failed: {exc}") from exc

    async def dashboard_metrics(self) -> Dict[str, Any]:
        since = _utcnow() - timedelta(hours=settings.lookback_hours)

        def _latest(db: Any, model: Type[Base]) -> Any:
            return db.scalars(
                select(model).order_by(model.timestamp.desc(), model.id.desc()).limit(1)
            ).first()

        def _snapshot() -> Dict[str, Any]:
            with get_db_session() as db:
                population = _latest(db, PopulationReading)
                energy = _latest(db, EnergyReading)
                environmental = _latest(db, EnvironmentalReading)
                avg_flow = db.execute(
                    select(func.avg(TrafficReading.flow_rate)).where(TrafficReading.timestamp >= since)
                ).scalar()
                alert_count = db.execute(
                    select(func.count(SystemAlert.id)).where(SystemAlert.resolved.is_(False))
                ).scalar()
            return {
                "total_population": population.total_population if population else 0,
                "energy_consumption": energy.total_consumption if energy else 0.0,
                "traffic_flow": float(avg_flow or 0.0),
                "air_quality": air_quality_label(environmental.air_quality_index if environmental else None),
                "alert_count": int(alert_count or 0),
            }

        try:
            return await asyncio.to_thread(_snapshot)
        except SQLAlchemyError as exc:
            raise DataSourceUnavailable(f"dashboard_metrics failed: {exc}") from exc
