"""FastAPI dependency injection helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from fleetflow.domain.rbac import Permission, can_all, can_any
from fleetflow.infrastructure.database import async_session_factory


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@dataclass(frozen=True)
class Actor:
    """Caller identity forwarded by the upstream gateway."""

    id: Optional[int]
    role: Optional[str]


async def get_actor(
    x_actor_id: Optional[int] = Header(None),
    x_actor_role: Optional[str] = Header(None),
) -> Actor:
    return Actor(id=x_actor_id, role=x_actor_role)


def _guard(allowed):
    async def _check(actor: Actor = Depends(get_actor)) -> Actor:
        if not allowed(actor.role):
            raise HTTPException(
                status_code=403,
                detail="You do not have permission to perform this action",
            )
        return actor

    return _check


def require_permission(*permissions: Permission):
    """Dependency factory: 403 unless the caller's role grants every permission."""
    return _guard(lambda role: can_all(role, *permissions))


def require_any_permission(*permissions: Permission):
    """Dependency factory: 403 unless the caller's role grants at least one."""
    return _guard(lambda role: can_any(role, *permissions))
