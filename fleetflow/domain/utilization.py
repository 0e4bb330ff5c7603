"""
Cargo Utilization Scorer
========================

Formula
-------
Percentage = Cargo_Weight / Vehicle_Capacity x 100

Bands (lower bound inclusive)
-----------------------------
* ``> 100``      -- **blocked**, dispatch and trip creation are refused
* ``90 .. 100``  -- **critical**, near the limit
* ``70 .. < 90`` -- **warning**, heavy load
* ``< 70``       -- **ok**

Complexity: O(1) per score.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .enums import Severity
from .errors import InvalidInputError

CRITICAL_THRESHOLD = 90.0
WARNING_THRESHOLD = 70.0


@dataclass(frozen=True)
class UtilizationResult:
    percentage: float
    severity: Severity
    allow_dispatch: bool
    overage: float
    message: str


def _require_positive(name: str, value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(f"{name} must be a number", field=name)
    if not math.isfinite(value) or value <= 0:
        raise InvalidInputError(
            f"{name} must be a positive finite number", field=name
        )
    return float(value)


def _kg(value: float) -> str:
    return f"{value:.10g}kg"


def score_utilization(cargo_weight: float, vehicle_capacity: float) -> UtilizationResult:
    """Classify *cargo_weight* against *vehicle_capacity*."""
    weight = _require_positive("cargo_weight", cargo_weight)
    capacity = _require_positive("vehicle_capacity", vehicle_capacity)

    percentage = weight * 100 / capacity
    load = f"{_kg(weight)} / {_kg(capacity)}"

    if percentage > 100:
        overage = weight - capacity
        return UtilizationResult(
            percentage=percentage,
            severity=Severity.BLOCKED,
            allow_dispatch=False,
            overage=overage,
            message=(
                f"OVERWEIGHT: cargo {_kg(weight)} exceeds vehicle capacity "
                f"{_kg(capacity)} by {_kg(overage)}"
            ),
        )
    if percentage >= CRITICAL_THRESHOLD:
        severity, message = Severity.CRITICAL, f"{load} - near limit"
    elif percentage >= WARNING_THRESHOLD:
        severity, message = Severity.WARNING, f"{load} - heavy load"
    else:
        severity, message = Severity.OK, f"{load} - good"

    return UtilizationResult(
        percentage=percentage,
        severity=severity,
        allow_dispatch=True,
        overage=0.0,
        message=message,
    )
