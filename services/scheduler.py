"""
Recurring task scheduling for the prediction generator, owning a one-shot bootstrap run after a short delay and an interval loop, both started and stopped explicitly by the application lifespan.

Copyright (c) 2026 Stefan Kumarasinghe
Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Awaitable, Callable, List, Optional

log = logging.getLogger(__name__)

TRIGGER_BOOTSTRAP = "bootstrap"
TRIGGER_SCHEDULED = "scheduled"


class PredictionScheduler:
    def __init__(
        self,
        job: Callable[[str], Awaitable[Any]],
        interval_seconds: float,
        initial_delay_seconds: float,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError(f"interval must be positive, got {interval_seconds}")
        self._job = job
        self._interval = float(interval_seconds)
        self._initial_delay = max(0.0, float(initial_delay_seconds))
        self._tasks: List[asyncio.Task] = []
        self.runs = 0
        self.last_error: Optional[str] = None

    @property
    def is_running(self) -> bool:
        return any(not t.done() for t in self._tasks)

    def start(self) -> None:
        if self.is_running:
            return
        self._tasks = [
            asyncio.create_task(self._bootstrap(), name="prediction-bootstrap"),
            asyncio.create_task(self._loop(), name="prediction-schedule"),
        ]
        log.info(
            "Prediction scheduler started (bootstrap in %gs, every %gs)",
            self._initial_delay, self._interval,
        )

    async def stop(self) -> None:
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if tasks:
            log.info("Prediction scheduler stopped")

    async def _bootstrap(self) -> None:
        await asyncio.sleep(self._initial_delay)
        await self._run_once(TRIGGER_BOOTSTRAP)

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await self._run_once(TRIGGER_SCHEDULED)

    async def _run_once(self, trigger: str) -> None:
        try:
            await self._job(trigger)
            self.last_error = None
        except Exception as exc:
            # a failed cycle never stops the schedule
            log.exception("Scheduled prediction run (%s) failed", trigger)
            self.last_error = str(exc)
        finally:
            self.runs += 1
