"""
Dispatch error taxonomy.

Every error carries the HTTP status the API layer answers with, so routes
never translate domain failures by hand.

* ``InvalidStateError``         -- status value outside the lifecycle (data bug)
* ``IllegalTransitionError``    -- business-rule violation, user-recoverable
* ``MissingFieldError``         -- required payload field absent
* ``NumericRangeError``         -- payload number outside its allowed range
* ``InvalidInputError``         -- malformed input to the utilization scorer
* ``CapacityExceededError``     -- cargo over vehicle capacity (hard block)
* ``EligibilityError``          -- vehicle / driver cannot take the trip
* ``ResourceNotFoundError``     -- referenced trip, vehicle or driver missing
* ``TransitionInProgressError`` -- another transition holds the trip lock
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .utilization import UtilizationResult


class DispatchError(Exception):
    """Base class for every error raised by the dispatch core."""

    status_code: int = 400

    def __init__(self, message: str, *, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class InvalidStateError(DispatchError):
    status_code = 500


class IllegalTransitionError(DispatchError):
    status_code = 409


class MissingFieldError(DispatchError):
    status_code = 422

    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(message or f"{field} is required", field=field)


class NumericRangeError(DispatchError):
    status_code = 422

    def __init__(self, field: str, message: str):
        super().__init__(message, field=field)


class InvalidInputError(DispatchError):
    status_code = 422


class CapacityExceededError(DispatchError):
    status_code = 400

    def __init__(self, result: UtilizationResult):
        super().__init__(result.message, field="cargo_weight")
        self.result = result


class EligibilityError(DispatchError):
    status_code = 400


class ResourceNotFoundError(DispatchError):
    status_code = 404


class TransitionInProgressError(DispatchError):
    status_code = 409
