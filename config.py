"""
Constants and configuration for Metropulse.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import os
from typing import List, Optional

from pydantic_settings import BaseSettings


REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
CYCLE_STATUS_TTL: int = int(os.getenv("CYCLE_STATUS_TTL", "604800"))
CYCLE_STATUS_KEY: str = "metropulse:cycle:last"

METROPULSE_DATABASE_URL = os.getenv("METROPULSE_DATABASE_URL", "sqlite:///./metropulse.db")
METROPULSE_HOST = os.getenv("METROPULSE_HOST", "0.0.0.0")
METROPULSE_PORT = int(os.getenv("METROPULSE_PORT", "4322"))

# window and scheduling
METROPULSE_LOOKBACK_HOURS = float(os.getenv("METROPULSE_LOOKBACK_HOURS", "24"))
METROPULSE_SCHEDULE_INTERVAL_SECONDS = float(os.getenv("METROPULSE_SCHEDULE_INTERVAL_SECONDS", "3600"))
METROPULSE_BOOTSTRAP_DELAY_SECONDS = float(os.getenv("METROPULSE_BOOTSTRAP_DELAY_SECONDS", "60"))

# traffic locations used by the simulator
TRAFFIC_LOCATIONS: List[str] = [
    "Downtown Main St",
    "Highway 101 North",
    "Bridge Avenue",
    "Central Plaza",
    "Industrial District",
    "Residential Area East",
    "University Campus",
    "Shopping District",
]

# air quality labels keyed by inclusive upper AQI bound
AIR_QUALITY_BANDS: List[tuple] = [
    (50, "Good"),
    (100, "Moderate"),
    (150, "Poor"),
]
AIR_QUALITY_WORST = "Unhealthy"


class Settings(BaseSettings):
    database_url: str = METROPULSE_DATABASE_URL
    db_pool_size: int = 10
    db_max_overflow: int = 20
    db_pool_timeout: int = 30
    db_pool_recycle: int = 1800

    host: str = METROPULSE_HOST
    port: int = METROPULSE_PORT
    ssl_enabled: bool = False
    ssl_certfile: Optional[str] = None
    ssl_keyfile: Optional[str] = None

    # generation cycle
    lookback_hours: float = METROPULSE_LOOKBACK_HOURS
    schedule_interval_seconds: float = METROPULSE_SCHEDULE_INTERVAL_SECONDS
    bootstrap_delay_seconds: float = METROPULSE_BOOTSTRAP_DELAY_SECONDS
    scheduler_enabled: bool = True

    # forecast combiner
    # minimum number of samples before a forecast is produced at all
    forecast_min_samples: int = 5
    forecast_moving_average_window: int = 5
    forecast_regression_weight_floor: float = 0.3
    forecast_confidence_scale: float = 0.9
    forecast_confidence_min: float = 0.1
    forecast_confidence_max: float = 0.95

    # anomaly detection
    anomaly_min_samples: int = 10
    anomaly_sigma: float = 2.0

    # horizon sets (hours) per forecast target; renewable skips the 1h horizon
    traffic_flow_horizons: List[int] = [1, 6, 12, 24]
    energy_demand_horizons: List[int] = [1, 6, 12, 24]
    energy_renewable_horizons: List[int] = [6, 12, 24]
    environmental_quality_horizons: List[int] = [1, 6, 12, 24]

    # synthetic data generator
    simulation_enabled: bool = True
    simulation_interval_seconds: float = 30.0
    simulation_population_chance: float = 0.1
    simulation_alert_chance: float = 0.1

    # prediction listing
    predictions_default_limit: int = 50
    predictions_max_limit: int = 500
    predictions_latest_limit: int = 10
    readings_max_rows: int = 5000

    # alert and activity log listing
    log_default_limit: int = 50
    log_max_limit: int = 500

    # congestion level cutoffs on traffic flow rate (percent)
    congestion_high_flow: float = 80.0
    congestion_medium_flow: float = 60.0

    store_redis_retry_cooldown_seconds: float = 10.0
    store_fallback_max_items: int = 10_000

    model_config = {
        "env_prefix": "METROPULSE_",
        "extra": "ignore",
    }


settings = Settings()
