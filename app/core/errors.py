from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

logger = logging.getLogger("app.errors")


class TravelPlannerError(Exception):
    """Base class for errors raised by the budget services."""


class TripNotFoundError(TravelPlannerError):
    def __init__(self, trip_id: str):
        super().__init__(f"trip '{trip_id}' not found")
        self.trip_id = trip_id


class CurrencyResolutionError(TravelPlannerError):
    """Neither the user's currency nor the default currency could be resolved."""

    def __init__(self, user_id: str, default_code: str):
        super().__init__(
            f"could not resolve currency for user '{user_id}' (default '{default_code}' missing)"
        )
        self.user_id = user_id
        self.default_code = default_code


class StoreError(TravelPlannerError):
    """Raised by store adapters when the backing store fails."""


def not_found_handler(request: Request, exc: StarletteHTTPException):  # type: ignore
    if exc.status_code != status.HTTP_404_NOT_FOUND:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": "http_error", "detail": exc.detail},
        )
    if exc.detail and exc.detail != "Not Found":
        detail = exc.detail
    else:
        detail = f"No route for {request.method} {request.url.path}"
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": "not_found", "detail": detail},
    )


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


def trip_not_found_handler(request: Request, exc: TripNotFoundError):  # type: ignore
    logger.info("trip not found trip_id=%s", exc.trip_id)
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": "trip_not_found", "detail": str(exc)},
    )


def currency_error_handler(request: Request, exc: CurrencyResolutionError):  # type: ignore
    logger.error("currency resolution failed: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": "currency_unavailable", "detail": str(exc)},
    )


def store_error_handler(request: Request, exc: StoreError):  # type: ignore
    logger.error("store failure: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": "store_unavailable", "detail": str(exc)},
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "detail": "An unexpected error occurred.",
        },
    )
