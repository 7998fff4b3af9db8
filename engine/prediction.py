"""
Prediction record emitted by the generation cycle.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from engine.enums import Module, PredictionType


@dataclass(frozen=True)
class Prediction:
    module: Module
    prediction_type: PredictionType
    predicted_value: float
    confidence: float
    time_horizon_hours: int
    created_at: datetime
    metadata: Dict[str, Any] = field(default_factory=dict)
    id: Optional[int] = None

    def __post_init__(self) -> None:
        if self.time_horizon_hours <= 0:
            raise ValueError(f"time horizon must be positive, got {self.time_horizon_hours}")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")
