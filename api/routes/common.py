"""
Shared dependencies and helpers for API route modules.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import Any, Optional

from datasources.sql import SqlMetricSource

_metric_source: Optional[SqlMetricSource] = None


def get_metric_source() -> SqlMetricSource:
    global _metric_source
    if _metric_source is None:
        _metric_source = SqlMetricSource()
    return _metric_source


def coerce_query_value(value: Any, cast: Any = None) -> Any:
    # Allow direct unit-test invocation without FastAPI Query parsing.
    raw = value.default if hasattr(value, "default") else value
    if raw is None or cast is None:
        return raw
    return cast(raw)
