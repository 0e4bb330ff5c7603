"""Domain enumerations and state-transition rules."""

import enum


class TripStatus(str, enum.Enum):
    DRAFT = "Draft"
    DISPATCHED = "Dispatched"
    IN_TRANSIT = "In Transit"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


# Forward path: current status -> its single successor (None when terminal)
FORWARD_SUCCESSOR: dict[TripStatus, TripStatus | None] = {
    TripStatus.DRAFT: TripStatus.DISPATCHED,
    TripStatus.DISPATCHED: TripStatus.IN_TRANSIT,
    TripStatus.IN_TRANSIT: TripStatus.COMPLETED,
    TripStatus.COMPLETED: None,
    TripStatus.CANCELLED: None,
}

TERMINAL_STATUSES: frozenset[TripStatus] = frozenset(
    {TripStatus.COMPLETED, TripStatus.CANCELLED}
)

# State machine: maps current status -> ordered valid next statuses
TRIP_TRANSITIONS: dict[TripStatus, tuple[TripStatus, ...]] = {
    TripStatus.DRAFT: (TripStatus.DISPATCHED, TripStatus.CANCELLED),
    TripStatus.DISPATCHED: (TripStatus.IN_TRANSIT, TripStatus.CANCELLED),
    TripStatus.IN_TRANSIT: (TripStatus.COMPLETED, TripStatus.CANCELLED),
    TripStatus.COMPLETED: (),
    TripStatus.CANCELLED: (),
}

# Trigger name for each target status (drives button labels and audit notes)
TRIP_ACTIONS: dict[TripStatus, str] = {
    TripStatus.DISPATCHED: "dispatch",
    TripStatus.IN_TRANSIT: "start",
    TripStatus.COMPLETED: "complete",
    TripStatus.CANCELLED: "cancel",
}


class VehicleType(str, enum.Enum):
    TRUCK = "Truck"
    VAN = "Van"
    BIKE = "Bike"


class VehicleStatus(str, enum.Enum):
    AVAILABLE = "Available"
    ON_TRIP = "On Trip"
    IN_SHOP = "In Shop"
    RETIRED = "Retired"


class DriverStatus(str, enum.Enum):
    AVAILABLE = "Available"
    ON_TRIP = "On Trip"
    OFF_DUTY = "Off Duty"
    SUSPENDED = "Suspended"


class Severity(str, enum.Enum):
    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"
    BLOCKED = "blocked"
