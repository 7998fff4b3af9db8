"""
Anomaly detection logic for metric windows, flagging the latest observation when it exceeds a mean-plus-sigma threshold computed over the whole window.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from engine.anomaly.detection import AnomalyCheck, detect

__all__ = ["AnomalyCheck", "detect"]
