"""
Synthetic city data generator that periodically writes traffic, energy and environmental readings with time-of-day patterns, occasional population snapshots and templated system alerts.

Copyright (c) 2026 Stefan Kumarasinghe
Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
import math
import random
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from config import TRAFFIC_LOCATIONS, settings
from datasources.sql import SqlMetricSource
from engine.enums import AlertType, CongestionLevel, Module, Severity

log = logging.getLogger(__name__)

ALERT_TEMPLATES: List[Dict[str, str]] = [
    {
        "type": AlertType.error.value,
        "title": "Power Grid Alert",
        "message": "High demand detected in Sector 7",
        "module": Module.energy.value,
        "severity": Severity.high.value,
    },
    {
        "type": AlertType.warning.value,
        "title": "Traffic Congestion",
        "message": "Heavy traffic detected at Main St intersection",
        "module": Module.traffic.value,
        "severity": Severity.medium.value,
    },
    {
        "type": AlertType.info.value,
        "title": "System Maintenance",
        "message": "Scheduled maintenance completed successfully",
        "module": "system",
        "severity": Severity.low.value,
    },
    {
        "type": AlertType.warning.value,
        "title": "Air Quality Alert",
        "message": "PM2.5 levels above normal threshold",
        "module": Module.environmental.value,
        "severity": Severity.medium.value,
    },
    {
        "type": AlertType.success.value,
        "title": "Backup Completed",
        "message": "Daily system backup completed successfully",
        "module": "system",
        "severity": Severity.low.value,
    },
]

BASE_POPULATION = 2_400_000
DEMOGRAPHICS = {
    "age_groups": {"0-18": 22, "19-35": 35, "36-55": 28, "56+": 15},
    "income": {"low": 30, "medium": 50, "high": 20},
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReadingGenerator:
    """Produces one synthetic reading per module for a given instant."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()

    def _between(self, low: float, high: float) -> float:
        return self._rng.uniform(low, high)

    def traffic(self, now: datetime) -> Dict[str, Any]:
        hour = now.hour
        if 7 <= hour <= 9:
            modifier = 1.3
        elif 17 <= hour <= 19:
            modifier = 1.4
        elif hour >= 22 or hour <= 5:
            modifier = 0.6
        else:
            modifier = 1.0
        flow_rate = min(100.0, self._between(50, 90) * modifier)
        return {
            "timestamp": now,
            "location": self._rng.choice(TRAFFIC_LOCATIONS),
            "flow_rate": flow_rate,
            "congestion_level": CongestionLevel.from_flow_rate(flow_rate).value,
            "average_speed": self._between(20, 60),
            "vehicle_count": int(self._between(100, 500)),
        }

    def energy(self, now: datetime) -> Dict[str, Any]:
        hour = now.hour
        if 18 <= hour <= 22:
            modifier = 1.2
        elif 10 <= hour <= 16:
            modifier = 1.1
        elif 0 <= hour <= 6:
            modifier = 0.7
        else:
            modifier = 1.0
        consumption = self._between(800, 1000) * modifier
        solar = self._between(50, 200) * math.sin((hour - 6) * math.pi / 12) if 6 <= hour <= 18 else 0.0
        return {
            "timestamp": now,
            "total_consumption": consumption,
            "renewable_percentage": self._between(30, 60),
            "solar_output": solar,
            "wind_output": self._between(20, 80),
            "grid_load": consumption * 0.85,
            "peak_demand": consumption * 1.2,
        }

    def environmental(self, now: datetime) -> Dict[str, Any]:
        hour = now.hour
        if 7 <= hour <= 9:
            modifier = 1.3
        elif 17 <= hour <= 19:
            modifier = 1.2
        elif 2 <= hour <= 6:
            modifier = 0.8
        else:
            modifier = 1.0
        return {
            "timestamp": now,
            "air_quality_index": int(self._between(30, 70) * modifier),
            "pm25": self._between(5, 25),
            "pm10": self._between(10, 50),
            "temperature": self._between(15, 30),
            "humidity": self._between(40, 80),
            "noise_level": self._between(45, 75),
        }

    def population(self, now: datetime) -> Dict[str, Any]:
        return {
            "timestamp": now,
            "total_population": BASE_POPULATION + int(self._between(-1000, 1000)),
            "active_users": int(self._between(50_000, 150_000)),
            "demographics": DEMOGRAPHICS,
            "growth_rate": self._between(-0.5, 2.5),
        }

    def alert(self) -> Dict[str, str]:
        return dict(self._rng.choice(ALERT_TEMPLATES))

    def chance(self, probability: float) -> bool:
        return self._rng.random() < probability


class DataSimulator:
    def __init__(
        self,
        store: SqlMetricSource,
        interval_seconds: float,
        generator: Optional[ReadingGenerator] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._interval = float(interval_seconds)
        self._generator = generator or ReadingGenerator()
        self._clock = clock
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            return
        log.info("Starting data simulation (every %gs)", self._interval)
        self._task = asyncio.create_task(self._loop(), name="data-simulation")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def tick(self) -> int:
        now = self._clock()
        gen = self._generator
        written = 0
        await self._store.insert_reading(Module.traffic, gen.traffic(now))
        await self._store.insert_reading(Module.energy, gen.energy(now))
        await self._store.insert_reading(Module.environmental, gen.environmental(now))
        written += 3
        if gen.chance(settings.simulation_population_chance):
            await self._store.insert_reading(Module.population, gen.population(now))
            written += 1
        if gen.chance(settings.simulation_alert_chance):
            await self._store.create_alert(gen.alert())
            written += 1
        return written

    async def _loop(self) -> None:
        while True:
            try:
                written = await self.tick()
                log.debug("Data simulation cycle completed (%d records)", written)
            except Exception:
                log.exception("Error in data simulation")
            await asyncio.sleep(self._interval)
