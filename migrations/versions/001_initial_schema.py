"""Initial schema: vehicles, drivers, trips and the trip status history.

Revision ID: 001
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None

VEHICLE_TYPES = ("Truck", "Van", "Bike")
TRIP_STATUSES = ("Draft", "Dispatched", "In Transit", "Completed", "Cancelled")


def upgrade() -> None:
    # ── vehicles ──────────────────────────────────────────────────────
    op.create_table(
        "vehicles",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("license_plate", sa.String(15), unique=True, nullable=False),
        sa.Column(
            "type", sa.Enum(*VEHICLE_TYPES, name="vehicle_type"), nullable=False
        ),
        sa.Column("capacity", sa.Float, nullable=False),
        sa.Column("odometer", sa.Float, nullable=False, server_default="0"),
        sa.Column(
            "status",
            sa.Enum(
                "Available", "On Trip", "In Shop", "Retired",
                name="vehicle_status",
            ),
            nullable=False,
            server_default="Available",
        ),
        sa.Column(
            "is_retired", sa.Boolean, nullable=False, server_default=sa.false()
        ),
        sa.Column("total_revenue", sa.Float, nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_vehicles_status", "vehicles", ["status"])
    op.create_index("idx_vehicles_type", "vehicles", ["type"])

    # ── drivers ───────────────────────────────────────────────────────
    op.create_table(
        "drivers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("license_number", sa.String(40), unique=True, nullable=False),
        sa.Column(
            "license_category",
            sa.Enum(*VEHICLE_TYPES, name="license_category"),
            nullable=False,
        ),
        sa.Column("license_expiry", sa.Date, nullable=False),
        sa.Column("safety_score", sa.Float, nullable=False, server_default="100"),
        sa.Column(
            "status",
            sa.Enum(
                "Available", "On Trip", "Off Duty", "Suspended",
                name="driver_status",
            ),
            nullable=False,
            server_default="Available",
        ),
        sa.Column("total_trips", sa.Integer, nullable=False, server_default="0"),
        sa.Column("completed_trips", sa.Integer, nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_drivers_status", "drivers", ["status"])
    op.create_index("idx_drivers_license_category", "drivers", ["license_category"])
    op.create_index("idx_drivers_license_expiry", "drivers", ["license_expiry"])

    # ── trips ─────────────────────────────────────────────────────────
    op.create_table(
        "trips",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("trip_code", sa.String(12), unique=True, nullable=False),
        sa.Column(
            "status",
            sa.Enum(*TRIP_STATUSES, name="trip_status"),
            nullable=False,
            server_default="Draft",
        ),
        sa.Column("origin", sa.String(200), nullable=False),
        sa.Column("destination", sa.String(200), nullable=False),
        sa.Column("cargo_weight", sa.Float, nullable=False),
        sa.Column(
            "cargo_description", sa.String(500), nullable=False, server_default=""
        ),
        sa.Column(
            "vehicle_id", sa.Integer, sa.ForeignKey("vehicles.id"), nullable=False
        ),
        sa.Column(
            "driver_id", sa.Integer, sa.ForeignKey("drivers.id"), nullable=False
        ),
        sa.Column("estimated_distance", sa.Float, nullable=False, server_default="0"),
        sa.Column("estimated_fuel_cost", sa.Float, nullable=False, server_default="0"),
        sa.Column("estimated_revenue", sa.Float, nullable=False, server_default="0"),
        sa.Column("actual_fuel_cost", sa.Float, nullable=True),
        sa.Column("actual_revenue", sa.Float, nullable=True),
        sa.Column("start_odometer", sa.Float, nullable=True),
        sa.Column("end_odometer", sa.Float, nullable=True),
        sa.Column("cancel_reason", sa.String(500), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.Integer, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_trips_status", "trips", ["status"])
    op.create_index("idx_trips_vehicle", "trips", ["vehicle_id"])
    op.create_index("idx_trips_driver", "trips", ["driver_id"])
    op.create_index("idx_trips_created", "trips", ["created_at"])

    # ── trip_status_history (append-only) ─────────────────────────────
    op.create_table(
        "trip_status_history",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "trip_id", sa.Integer, sa.ForeignKey("trips.id"), nullable=False
        ),
        sa.Column(
            "status",
            sa.Enum(*TRIP_STATUSES, name="trip_history_status"),
            nullable=False,
        ),
        sa.Column("changed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("changed_by", sa.Integer, nullable=True),
        sa.Column("note", sa.String(500), nullable=False, server_default=""),
    )
    op.create_index("idx_trip_history_trip", "trip_status_history", ["trip_id"])


def downgrade() -> None:
    op.drop_table("trip_status_history")
    op.drop_table("trips")
    op.drop_table("drivers")
    op.drop_table("vehicles")
    for enum_name in (
        "trip_history_status",
        "trip_status",
        "driver_status",
        "license_category",
        "vehicle_status",
        "vehicle_type",
    ):
        op.execute(f"DROP TYPE IF EXISTS {enum_name}")
