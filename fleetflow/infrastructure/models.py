"""
SQLAlchemy ORM models  (maps to PostgreSQL).

Tables
------
* ``vehicles``             -- fleet vehicles with load capacity and odometer
* ``drivers``              -- drivers with license category and expiry
* ``trips``                -- dispatch units moving cargo between two points
* ``trip_status_history``  -- append-only transition log, one row per change

Indexes
-------
* **B-Tree** on ``status``, ``vehicle_id``, ``driver_id``, ``created_at`` for
  the trip listing filters, and on the history ``trip_id`` for timelines.
"""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base
from fleetflow.domain.entities import (
    Driver,
    TransitionRecord,
    Trip,
    Vehicle,
)
from fleetflow.domain.enums import DriverStatus, TripStatus, VehicleStatus, VehicleType


def _enum(enum_cls, name: str) -> Enum:
    """Persist enum *values* ("In Transit"), not member names."""
    return Enum(
        enum_cls,
        name=name,
        values_callable=lambda members: [m.value for m in members],
    )


class VehicleModel(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    license_plate = Column(String(15), unique=True, nullable=False)
    type = Column(_enum(VehicleType, "vehicle_type"), nullable=False)
    capacity = Column(Float, nullable=False)
    odometer = Column(Float, default=0.0, nullable=False)
    status = Column(
        _enum(VehicleStatus, "vehicle_status"),
        default=VehicleStatus.AVAILABLE,
        nullable=False,
    )
    is_retired = Column(Boolean, default=False, nullable=False)
    total_revenue = Column(Float, default=0.0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_vehicles_status", "status"),
        Index("idx_vehicles_type", "type"),
    )

    def to_entity(self) -> Vehicle:
        return Vehicle(
            id=self.id,
            type=self.type,
            capacity=self.capacity,
            odometer=self.odometer or 0.0,
            status=self.status,
            is_retired=bool(self.is_retired),
            name=self.name,
        )


class DriverModel(Base):
    __tablename__ = "drivers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    license_number = Column(String(40), unique=True, nullable=False)
    license_category = Column(_enum(VehicleType, "license_category"), nullable=False)
    license_expiry = Column(Date, nullable=False)
    safety_score = Column(Float, default=100.0, nullable=False)
    status = Column(
        _enum(DriverStatus, "driver_status"),
        default=DriverStatus.AVAILABLE,
        nullable=False,
    )
    total_trips = Column(Integer, default=0, nullable=False)
    completed_trips = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_drivers_status", "status"),
        Index("idx_drivers_license_category", "license_category"),
        Index("idx_drivers_license_expiry", "license_expiry"),
    )

    def to_entity(self) -> Driver:
        return Driver(
            id=self.id,
            license_category=self.license_category,
            license_expiry=self.license_expiry,
            safety_score=self.safety_score,
            status=self.status,
            name=self.name,
        )


class TripStatusHistoryModel(Base):
    __tablename__ = "trip_status_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False)
    status = Column(_enum(TripStatus, "trip_history_status"), nullable=False)
    changed_at = Column(DateTime(timezone=True), nullable=False)
    changed_by = Column(Integer, nullable=True)
    note = Column(String(500), default="", nullable=False)

    __table_args__ = (Index("idx_trip_history_trip", "trip_id"),)

    @classmethod
    def from_record(cls, record: TransitionRecord) -> "TripStatusHistoryModel":
        return cls(
            status=record.status,
            changed_at=record.timestamp,
            changed_by=record.actor_id,
            note=record.note,
        )


class TripModel(Base):
    __tablename__ = "trips"

    id = Column(Integer, primary_key=True, autoincrement=True)
    trip_code = Column(String(12), unique=True, nullable=False)
    status = Column(
        _enum(TripStatus, "trip_status"), default=TripStatus.DRAFT, nullable=False
    )
    origin = Column(String(200), nullable=False)
    destination = Column(String(200), nullable=False)
    cargo_weight = Column(Float, nullable=False)
    cargo_description = Column(String(500), default="", nullable=False)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False)
    driver_id = Column(Integer, ForeignKey("drivers.id"), nullable=False)

    estimated_distance = Column(Float, default=0.0, nullable=False)
    estimated_fuel_cost = Column(Float, default=0.0, nullable=False)
    estimated_revenue = Column(Float, default=0.0, nullable=False)
    actual_fuel_cost = Column(Float, nullable=True)
    actual_revenue = Column(Float, nullable=True)

    start_odometer = Column(Float, nullable=True)
    end_odometer = Column(Float, nullable=True)
    cancel_reason = Column(String(500), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    history = relationship(
        TripStatusHistoryModel,
        order_by=TripStatusHistoryModel.id,
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_trips_status", "status"),
        Index("idx_trips_vehicle", "vehicle_id"),
        Index("idx_trips_driver", "driver_id"),
        Index("idx_trips_created", "created_at"),
    )

    def to_entity(self) -> Trip:
        return Trip(
            id=self.id,
            status=self.status,
            origin=self.origin,
            destination=self.destination,
            cargo_weight=self.cargo_weight,
            vehicle_id=self.vehicle_id,
            driver_id=self.driver_id,
            estimated_distance=self.estimated_distance,
            estimated_fuel_cost=self.estimated_fuel_cost,
            estimated_revenue=self.estimated_revenue,
            actual_fuel_cost=self.actual_fuel_cost,
            actual_revenue=self.actual_revenue,
            end_odometer=self.end_odometer,
            cancel_reason=self.cancel_reason,
            history=[
                TransitionRecord(
                    status=h.status,
                    timestamp=h.changed_at,
                    actor_id=h.changed_by,
                    note=h.note,
                )
                for h in self.history
            ],
        )
