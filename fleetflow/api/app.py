"""
FastAPI application factory.

* Registers routes for trips, fleet lookups and admin.
* Renders every ``DispatchError`` with its own status code.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from fleetflow.api.middleware import limiter
from fleetflow.api.routes import admin, fleet, trips
from fleetflow.api.schemas import ErrorResponse
from fleetflow.config import settings
from fleetflow.domain.errors import DispatchError
from fleetflow.infrastructure.redis_client import close_redis

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Release the shared Redis pool on shutdown."""
    logger.info("FleetFlow dispatch API starting")
    yield
    await close_redis()
    logger.info("FleetFlow dispatch API stopped")


async def dispatch_error_handler(request: Request, exc: DispatchError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method,
                     request.url.path, exc.message)
    else:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.message)
    body = ErrorResponse(detail=exc.message, error=type(exc).__name__, field=exc.field)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


def create_app() -> FastAPI:
    app = FastAPI(
        title="FleetFlow Dispatch API",
        description=(
            "Creates trips and advances them through the dispatch lifecycle "
            "(Draft, Dispatched, In Transit, Completed or Cancelled), "
            "blocking overweight cargo and illegal transitions server-side."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Domain errors
    app.add_exception_handler(DispatchError, dispatch_error_handler)

    # Routers
    app.include_router(trips.router, prefix="/api/v1")
    app.include_router(fleet.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
