"""
Persistence of the most recent generation cycle report through the shared store client.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from config import CYCLE_STATUS_KEY, CYCLE_STATUS_TTL
from engine.cycle import CycleReport
from store.client import redis_get, redis_set

log = logging.getLogger(__name__)


async def save_last(report: CycleReport) -> None:
    await redis_set(CYCLE_STATUS_KEY, json.dumps(report.to_dict()), ttl=CYCLE_STATUS_TTL)


async def load_last() -> Optional[CycleReport]:
    raw = await redis_get(CYCLE_STATUS_KEY)
    if not raw:
        return None
    try:
        return CycleReport.from_dict(json.loads(raw))
    except (ValueError, KeyError, TypeError) as exc:
        log.warning("Discarding unreadable cycle report: %s", exc)
        return None
