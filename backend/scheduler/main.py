# backend/scheduler/main.py

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from redis import Redis
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .config import Settings, get_settings
from .database import create_db_engine, create_session_factory, init_db
from .routers import reservation_settings, reservations
from .services.clock import BusinessClock
from .services.errors import SchedulingError
from .services.events import BookingNotifier

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    engine = create_db_engine(settings.resolved_database_url)
    init_db(engine)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    redis = Redis.from_url(settings.redis_url) if settings.redis_url else None
    app.state.redis = redis
    owns_notifier = app.state.notifier is None
    if owns_notifier:
        app.state.notifier = BookingNotifier(redis, settings.events_queue)
    if app.state.clock is None:
        app.state.clock = BusinessClock(settings.business_timezone)

    logger.info(
        f"Reservation scheduler started (timezone={settings.business_timezone}, "
        f"redis={'on' if redis is not None else 'off'})"
    )
    try:
        yield
    finally:
        # The notifier closes the Redis client it was given
        if owns_notifier:
            app.state.notifier.close()
        elif redis is not None:
            redis.close()
        engine.dispose()


def create_app(
    settings: Optional[Settings] = None,
    notifier: Optional[BookingNotifier] = None,
    clock: Optional[BusinessClock] = None,
) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(title="Reservation Scheduler API", lifespan=lifespan)
    app.state.settings = settings
    app.state.notifier = notifier
    app.state.clock = clock

    app.include_router(reservation_settings.router)
    app.include_router(reservations.router)

    app.add_exception_handler(SchedulingError, scheduling_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)

    @app.get("/health")
    def health(request: Request):
        result = {"database": True, "redis": None}
        try:
            with request.app.state.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.exception("Health check: database unreachable")
            result["database"] = False

        redis = request.app.state.redis
        if redis is not None:
            try:
                result["redis"] = bool(redis.ping())
            except Exception:
                logger.exception("Health check: redis unreachable")
                result["redis"] = False
        return result

    return app


# ── Exception handlers ───────────────────────────────────────────────────


async def scheduling_error_handler(request: Request, exc: SchedulingError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors: dict[str, str] = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "path", "query")]
        errors[".".join(loc) or "request"] = err.get("msg", "Invalid value")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request", "code": "validation_error", "errors": errors},
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


app = create_app()
