"""Unit tests for the vehicle / driver assignment checks."""

from datetime import date

import pytest

from fleetflow.domain.eligibility import check_assignment
from fleetflow.domain.entities import Driver, Vehicle
from fleetflow.domain.enums import (
    DriverStatus,
    Severity,
    VehicleStatus,
    VehicleType,
)
from fleetflow.domain.errors import CapacityExceededError, EligibilityError

TODAY = date(2026, 3, 1)
VAN = Vehicle(id=1, type=VehicleType.VAN, capacity=1500)
VAN_DRIVER = Driver(
    id=1, license_category=VehicleType.VAN, license_expiry=date(2027, 1, 1)
)


class TestCheckAssignment:
    def test_eligible_pair_returns_utilization(self):
        result = check_assignment(VAN, VAN_DRIVER, 1200, today=TODAY)
        assert result.severity == Severity.WARNING

    def test_retired_vehicle(self):
        vehicle = Vehicle(type=VehicleType.VAN, capacity=1500, is_retired=True)
        with pytest.raises(EligibilityError, match="retired"):
            check_assignment(vehicle, VAN_DRIVER, 100, today=TODAY)

    def test_vehicle_in_shop(self):
        vehicle = Vehicle(
            type=VehicleType.VAN, capacity=1500, status=VehicleStatus.IN_SHOP
        )
        with pytest.raises(EligibilityError, match="In Shop"):
            check_assignment(vehicle, VAN_DRIVER, 100, today=TODAY)

    def test_overweight_cargo(self):
        with pytest.raises(CapacityExceededError):
            check_assignment(VAN, VAN_DRIVER, 1600, today=TODAY)

    def test_suspended_driver(self):
        driver = Driver(
            license_category=VehicleType.VAN,
            license_expiry=date(2027, 1, 1),
            status=DriverStatus.SUSPENDED,
        )
        with pytest.raises(EligibilityError, match="Suspended"):
            check_assignment(VAN, driver, 100, today=TODAY)

    def test_expired_license(self):
        driver = Driver(
            license_category=VehicleType.VAN, license_expiry=date(2026, 2, 28)
        )
        with pytest.raises(EligibilityError, match="expired"):
            check_assignment(VAN, driver, 100, today=TODAY)

    def test_license_expiring_today_is_still_valid(self):
        driver = Driver(license_category=VehicleType.VAN, license_expiry=TODAY)
        check_assignment(VAN, driver, 100, today=TODAY)

    def test_license_category_mismatch(self):
        driver = Driver(
            license_category=VehicleType.TRUCK, license_expiry=date(2027, 1, 1)
        )
        with pytest.raises(EligibilityError) as exc_info:
            check_assignment(VAN, driver, 100, today=TODAY)
        assert exc_info.value.field == "driver_id"
