"""
Smoothing helpers for metric windows.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from engine.series import Sample


def moving_average(samples: Sequence[Sample], window: int) -> float:
    if not samples or window < 1:
        return 0.0
    recent = np.array([s.value for s in samples[-window:]], dtype=float)
    return float(recent.mean())
