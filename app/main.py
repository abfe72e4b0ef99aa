import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .db.seed import seed_currencies
from .core import errors
from .routers import health, budgets, currencies, shares
from .services.container import BudgetServices, build_sqlite_services


def create_app(
    settings_override: Settings | None = None,
    services_override: BudgetServices | None = None,
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., temp DB). Falls back to cached get_settings().
    services_override: pre-built services (e.g. over in-memory stores); the
    SQLite schema is then left untouched.
    """
    settings = settings_override or get_settings()
    if settings_override is not None:
        settings.init_post_load()
    # Initialize logging early
    init_logging(debug=settings.debug)

    if services_override is None:
        # Ensure schema + reference currencies (idempotent) so fresh DBs are usable
        try:
            seed_currencies(settings.db_path)  # type: ignore[arg-type]
        except Exception:
            # Failing to init DB is fatal; re-raise after logging
            logging.getLogger("app").exception("failed to apply migrations on startup")
            raise

    app = FastAPI(
        title=settings.app_name, debug=settings.debug, version=settings.version
    )
    app.state.services = services_override or build_sqlite_services(settings)

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.not_found_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(errors.TripNotFoundError, errors.trip_not_found_handler)
    app.add_exception_handler(errors.CurrencyResolutionError, errors.currency_error_handler)
    app.add_exception_handler(errors.StoreError, errors.store_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(health.router)
    app.include_router(budgets.router)
    app.include_router(currencies.router)
    app.include_router(shares.router)

    @app.get("/")
    async def root():
        return {"message": "Trip Budget API", "version": settings.version}

    return app
