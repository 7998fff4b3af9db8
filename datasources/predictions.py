"""
Append-only relational prediction log, serving newest-first reads filtered by module.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from config import settings
from database import get_db_session
from datasources.base import PredictionSink
from datasources.exceptions import DataSourceUnavailable, WriteFailed
from db_models import PredictionRecord
from engine.enums import Module, PredictionType
from engine.prediction import Prediction
from engine.series import as_utc


def _to_prediction(row: PredictionRecord) -> Prediction:
    return Prediction(
        id=row.id,
        module=Module(row.module),
        prediction_type=PredictionType(row.prediction_type),
        predicted_value=row.predicted_value,
        confidence=row.confidence,
        time_horizon_hours=row.time_horizon,
        metadata=dict(row.metadata_ or {}),
        created_at=as_utc(row.created_at),
    )


class SqlPredictionStore(PredictionSink):

    async def append_prediction(self, prediction: Prediction) -> Prediction:
        def _insert() -> int:
            with get_db_session() as db:
                row = PredictionRecord(
                    module=prediction.module.value,
                    prediction_type=prediction.prediction_type.value,
                    predicted_value=float(prediction.predicted_value),
                    confidence=float(prediction.confidence),
                    time_horizon=int(prediction.time_horizon_hours),
                    metadata_=dict(prediction.metadata),
                    created_at=as_utc(prediction.created_at),
                )
                db.add(row)
                db.flush()
                return row.id

        try:
            new_id = await asyncio.to_thread(_insert)
        except SQLAlchemyError as exc:
            raise WriteFailed(f"append_prediction failed: {exc}") from exc
        return replace(prediction, id=new_id)

    async def list_predictions(
        self,
        module: Optional[Module] = None,
        limit: int = 50,
    ) -> List[Prediction]:
        page_size = max(1, min(settings.predictions_max_limit, int(limit)))

        def _list() -> List[Prediction]:
            stmt = select(PredictionRecord)
            if module is not None:
                stmt = stmt.where(PredictionRecord.module == Module(module).value)
            stmt = stmt.order_by(PredictionRecord.created_at.desc(), PredictionRecord.id.desc()).limit(page_size)
            with get_db_session() as db:
                return [_to_prediction(row) for row in db.scalars(stmt).all()]

        try:
            return await asyncio.to_thread(_list)
        except SQLAlchemyError as exc:
            raise DataSourceUnavailable(f"list_predictions failed: {exc}") from exc
