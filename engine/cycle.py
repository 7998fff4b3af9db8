"""
Outcome records for a prediction generation cycle, capturing per-module status, emitted prediction counts, captured errors and informational anomaly flags.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from engine.enums import Module, ModuleStatus


@dataclass
class AnomalyFlag:
    metric_key: str
    latest_value: float
    threshold: float
    group: Optional[str] = None


@dataclass
class ModuleOutcome:
    module: Module
    status: ModuleStatus = ModuleStatus.completed
    predictions: int = 0
    error: Optional[str] = None
    anomalies: List[AnomalyFlag] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "module": self.module.value,
            "status": self.status.value,
            "predictions": self.predictions,
            "error": self.error,
            "anomalies": [asdict(a) for a in self.anomalies],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ModuleOutcome:
        return cls(
            module=Module(data["module"]),
            status=ModuleStatus(data["status"]),
            predictions=int(data.get("predictions", 0)),
            error=data.get("error"),
            anomalies=[AnomalyFlag(**a) for a in data.get("anomalies", [])],
        )


@dataclass
class CycleReport:
    cycle_id: str
    trigger: str
    started_at: datetime
    finished_at: Optional[datetime] = None
    modules: Dict[Module, ModuleOutcome] = field(default_factory=dict)

    @property
    def total_predictions(self) -> int:
        return sum(m.predictions for m in self.modules.values())

    @property
    def failed_modules(self) -> List[Module]:
        return [m.module for m in self.modules.values() if m.status == ModuleStatus.failed]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cycle_id": self.cycle_id,
            "trigger": self.trigger,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "total_predictions": self.total_predictions,
            "modules": {m.value: outcome.to_dict() for m, outcome in self.modules.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CycleReport:
        finished = data.get("finished_at")
        return cls(
            cycle_id=str(data["cycle_id"]),
            trigger=str(data.get("trigger") or "unknown"),
            started_at=datetime.fromisoformat(data["started_at"]),
            finished_at=datetime.fromisoformat(finished) if finished else None,
            modules={
                Module(name): ModuleOutcome.from_dict(outcome)
                for name, outcome in (data.get("modules") or {}).items()
            },
        )
