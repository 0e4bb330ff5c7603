"""Assignment checks run before a trip is created."""

from __future__ import annotations

from datetime import date

from .entities import Driver, Vehicle
from .enums import DriverStatus, VehicleStatus
from .errors import CapacityExceededError, EligibilityError
from .utilization import UtilizationResult, score_utilization


def check_assignment(
    vehicle: Vehicle, driver: Driver, cargo_weight: float, *, today: date
) -> UtilizationResult:
    """
    Verify *vehicle* and *driver* can take *cargo_weight*.

    Checks run in the order a dispatcher resolves them: vehicle state,
    cargo weight, driver state, license validity, license category.
    """
    if vehicle.is_retired or vehicle.status == VehicleStatus.RETIRED:
        raise EligibilityError("Vehicle is retired", field="vehicle_id")
    if vehicle.status != VehicleStatus.AVAILABLE:
        raise EligibilityError(
            f"Vehicle is {vehicle.status.value}, not available for dispatch",
            field="vehicle_id",
        )

    utilization = score_utilization(cargo_weight, vehicle.capacity)
    if not utilization.allow_dispatch:
        raise CapacityExceededError(utilization)

    if driver.status != DriverStatus.AVAILABLE:
        raise EligibilityError(
            f"Driver is {driver.status.value}", field="driver_id"
        )
    if driver.license_expiry is not None and driver.license_expiry < today:
        raise EligibilityError(
            f"Driver license expired on {driver.license_expiry.isoformat()}",
            field="driver_id",
        )
    if driver.license_category != vehicle.type:
        raise EligibilityError(
            f"Driver license category ({driver.license_category.value}) "
            f"doesn't match vehicle type ({vehicle.type.value})",
            field="driver_id",
        )
    return utilization
