"""
Role-based access control as a capability-set lookup.

``fleet_manager`` holds every permission; other roles hold the static sets
below.  Unknown roles hold nothing.
"""

from __future__ import annotations

import enum
from typing import Optional


class Role(str, enum.Enum):
    FLEET_MANAGER = "fleet_manager"
    DISPATCHER = "dispatcher"
    SAFETY_OFFICER = "safety_officer"
    FINANCIAL = "financial"


class Permission(str, enum.Enum):
    VIEW_DASHBOARD = "view_dashboard"
    MANAGE_VEHICLES = "manage_vehicles"
    VIEW_VEHICLES = "view_vehicles"
    CREATE_TRIPS = "create_trips"
    VIEW_TRIPS = "view_trips"
    MANAGE_DRIVERS = "manage_drivers"
    VIEW_DRIVERS = "view_drivers"
    MANAGE_MAINTENANCE = "manage_maintenance"
    VIEW_MAINTENANCE = "view_maintenance"
    MANAGE_EXPENSES = "manage_expenses"
    VIEW_EXPENSES = "view_expenses"
    VIEW_ANALYTICS = "view_analytics"
    EXPORT_REPORTS = "export_reports"
    VIEW_AUDIT_LOGS = "view_audit_logs"
    VIEW_EXPIRY_ALERTS = "view_expiry_alerts"


P = Permission

ROLE_PERMISSIONS: dict[Role, frozenset[Permission]] = {
    Role.FLEET_MANAGER: frozenset(Permission),
    Role.DISPATCHER: frozenset({
        P.VIEW_DASHBOARD, P.VIEW_VEHICLES, P.CREATE_TRIPS, P.VIEW_TRIPS,
        P.VIEW_DRIVERS, P.VIEW_MAINTENANCE, P.MANAGE_EXPENSES, P.VIEW_EXPENSES,
    }),
    Role.SAFETY_OFFICER: frozenset({
        P.VIEW_DASHBOARD, P.MANAGE_DRIVERS, P.VIEW_DRIVERS, P.VIEW_VEHICLES,
        P.VIEW_TRIPS, P.VIEW_MAINTENANCE, P.VIEW_ANALYTICS, P.EXPORT_REPORTS,
        P.VIEW_EXPIRY_ALERTS,
    }),
    Role.FINANCIAL: frozenset({
        P.VIEW_DASHBOARD, P.VIEW_VEHICLES, P.VIEW_TRIPS, P.VIEW_EXPENSES,
        P.MANAGE_EXPENSES, P.VIEW_ANALYTICS, P.EXPORT_REPORTS,
    }),
}


def permissions_for(role: Optional[str]) -> frozenset[Permission]:
    try:
        return ROLE_PERMISSIONS[Role(role)]
    except ValueError:
        return frozenset()


def can(role: Optional[str], permission: Permission) -> bool:
    return permission in permissions_for(role)


def can_any(role: Optional[str], *permissions: Permission) -> bool:
    return any(can(role, p) for p in permissions)


def can_all(role: Optional[str], *permissions: Permission) -> bool:
    return all(can(role, p) for p in permissions)
