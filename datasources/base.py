"""
Base contracts for the metric sources the forecaster reads from and the prediction sinks it appends to

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from engine.enums import Module
from engine.prediction import Prediction
from engine.series import MetricPoint


class MetricSource(ABC):
    @abstractmethod
    async def fetch_window(
        self,
        module: Module,
        metric_key: str,
        start: datetime,
        end: datetime,
    ) -> List[MetricPoint]: ...


class PredictionSink(ABC):
    @abstractmethod
    async def append_prediction(self, prediction: Prediction) -> Prediction: ...

    @abstractmethod
    async def list_predictions(
        self,
        module: Optional[Module] = None,
        limit: int = 50,
    ) -> List[Prediction]: ...
