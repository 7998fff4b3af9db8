"""
Forecast target catalogue describing which metric series each city module forecasts, under which prediction type, for which horizons, and how the series is grouped and labelled.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from config import settings
from engine.enums import Module, PredictionType

# metric keys understood by every metric source
TRAFFIC_FLOW_RATE = "flow_rate"
ENERGY_TOTAL_CONSUMPTION = "total_consumption"
ENERGY_RENEWABLE_PERCENTAGE = "renewable_percentage"
ENVIRONMENTAL_AQI = "air_quality_index"
POPULATION_TOTAL = "total_population"

LOCATION_LABEL = "location"


@dataclass(frozen=True)
class ForecastTarget:
    module: Module
    metric_key: str
    prediction_type: PredictionType
    horizons: Tuple[int, ...]
    group_by: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)


def forecast_targets(module: Module) -> List[ForecastTarget]:
    if module == Module.traffic:
        return [
            ForecastTarget(
                module=module,
                metric_key=TRAFFIC_FLOW_RATE,
                prediction_type=PredictionType.flow,
                horizons=tuple(settings.traffic_flow_horizons),
                group_by=LOCATION_LABEL,
            ),
        ]
    if module == Module.energy:
        return [
            ForecastTarget(
                module=module,
                metric_key=ENERGY_TOTAL_CONSUMPTION,
                prediction_type=PredictionType.demand,
                horizons=tuple(settings.energy_demand_horizons),
                metadata={"type": ENERGY_TOTAL_CONSUMPTION},
            ),
            ForecastTarget(
                module=module,
                metric_key=ENERGY_RENEWABLE_PERCENTAGE,
                prediction_type=PredictionType.renewable,
                horizons=tuple(settings.energy_renewable_horizons),
                metadata={"type": ENERGY_RENEWABLE_PERCENTAGE},
            ),
        ]
    if module == Module.environmental:
        return [
            ForecastTarget(
                module=module,
                metric_key=ENVIRONMENTAL_AQI,
                prediction_type=PredictionType.quality,
                horizons=tuple(settings.environmental_quality_horizons),
                metadata={"type": ENVIRONMENTAL_AQI},
            ),
        ]
    return []
