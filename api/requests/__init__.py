from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from engine.enums import AlertType, CongestionLevel, Module, PredictionType, Severity


class TrafficReadingRequest(BaseModel):
    timestamp: Optional[datetime] = None
    location: str = Field(min_length=1, max_length=128)
    flow_rate: float = Field(ge=0.0)
    congestion_level: Optional[CongestionLevel] = None
    average_speed: Optional[float] = Field(default=None, ge=0.0)
    vehicle_count: Optional[int] = Field(default=None, ge=0)


class EnergyReadingRequest(BaseModel):
    timestamp: Optional[datetime] = None
    total_consumption: float = Field(ge=0.0)
    renewable_percentage: float = Field(ge=0.0, le=100.0)
    solar_output: Optional[float] = Field(default=None, ge=0.0)
    wind_output: Optional[float] = Field(default=None, ge=0.0)
    grid_load: Optional[float] = Field(default=None, ge=0.0)
    peak_demand: Optional[float] = Field(default=None, ge=0.0)


class EnvironmentalReadingRequest(BaseModel):
    timestamp: Optional[datetime] = None
    air_quality_index: int = Field(ge=0)
    pm25: Optional[float] = Field(default=None, ge=0.0)
    pm10: Optional[float] = Field(default=None, ge=0.0)
    temperature: Optional[float] = None
    humidity: Optional[float] = Field(default=None, ge=0.0, le=100.0)
    noise_level: Optional[float] = Field(default=None, ge=0.0)


class PopulationReadingRequest(BaseModel):
    timestamp: Optional[datetime] = None
    total_population: int = Field(ge=0)
    active_users: Optional[int] = Field(default=None, ge=0)
    demographics: Optional[Dict[str, Any]] = None
    growth_rate: Optional[float] = None


class AlertRequest(BaseModel):
    type: AlertType
    title: str = Field(min_length=1, max_length=256)
    message: str = Field(min_length=1)
    module: str = Field(min_length=1, max_length=32)
    severity: Severity = Severity.low


class ActivityRequest(BaseModel):
    user_id: Optional[str] = Field(default=None, max_length=128)
    action: str = Field(min_length=1, max_length=64)
    module: str = Field(min_length=1, max_length=32)
    description: str = Field(min_length=1)
    metadata: Optional[Dict[str, Any]] = None


class PredictionRequest(BaseModel):
    module: Module
    prediction_type: PredictionType
    predicted_value: float
    confidence: float = Field(ge=0.0, le=1.0)
    time_horizon: int = Field(gt=0)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("module")
    @classmethod
    def _forecastable_module(cls, value: Module) -> Module:
        if value not in Module.forecastable():
            raise ValueError(f"module {value.value!r} does not carry predictions")
        return value
