"""Error handling middleware and exception handlers."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import structlog

from deal_risk.domain.exceptions import (
    DealDataAccessException,
    DealDataTimeoutException,
    DealNotFoundException,
    DomainException,
    RiskConfigurationException,
    RiskConfigVersionConflictException,
    ValidationException,
)
from .request_context import get_request_id

logger = structlog.get_logger(__name__)


def _error_response(status_code: int, code: str, message: str, **extra) -> JSONResponse:
    content = {
        "error": code,
        "message": message,
        "request_id": get_request_id(),
    }
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


def _location(loc) -> str:
    # ("body", "weights", "nsf") -> "weights.nsf"
    return ".".join(str(part) for part in loc if part not in ("body", "query", "path"))


def error_handler_middleware(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI app.

    Maps domain exceptions to appropriate HTTP responses.
    """

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Handle malformed request bodies and query parameters."""
        details = exc.errors()
        errors = [f"{_location(error['loc'])}: {error['msg']}" for error in details]
        field = _location(details[0]["loc"]) if details else None
        return _error_response(422, "VALIDATION_ERROR", "; ".join(errors), field=field, errors=errors)

    @app.exception_handler(ValidationException)
    async def validation_handler(
        request: Request,
        exc: ValidationException,
    ) -> JSONResponse:
        """Handle invalid config input and query parameters."""
        return _error_response(422, exc.code, exc.message, field=exc.field, errors=exc.errors)

    @app.exception_handler(DealNotFoundException)
    async def deal_not_found_handler(
        request: Request,
        exc: DealNotFoundException,
    ) -> JSONResponse:
        """Handle deal not found errors."""
        return _error_response(404, exc.code, exc.message)

    @app.exception_handler(RiskConfigVersionConflictException)
    async def version_conflict_handler(
        request: Request,
        exc: RiskConfigVersionConflictException,
    ) -> JSONResponse:
        """Handle a lost race between two config saves."""
        return _error_response(409, exc.code, exc.message)

    @app.exception_handler(RiskConfigurationException)
    async def configuration_handler(
        request: Request,
        exc: RiskConfigurationException,
    ) -> JSONResponse:
        """Handle a stored config that cannot be applied."""
        logger.error(
            "risk_configuration_error",
            team_id=exc.team_id,
            message=exc.message,
        )
        return _error_response(500, exc.code, exc.message)

    @app.exception_handler(DealDataTimeoutException)
    async def deal_data_timeout_handler(
        request: Request,
        exc: DealDataTimeoutException,
    ) -> JSONResponse:
        """Handle deal data API timeout errors."""
        logger.error("deal_api_timeout")
        return _error_response(
            503,
            exc.code,
            "Deal data temporarily unavailable. Please try again.",
        )

    @app.exception_handler(DealDataAccessException)
    async def deal_data_error_handler(
        request: Request,
        exc: DealDataAccessException,
    ) -> JSONResponse:
        """Handle deal data API errors."""
        logger.error(
            "deal_api_error",
            message=exc.message,
            status_code=exc.status_code,
        )
        return _error_response(
            503,
            exc.code,
            "Unable to load deal data. Please try again later.",
        )

    @app.exception_handler(DomainException)
    async def domain_exception_handler(
        request: Request,
        exc: DomainException,
    ) -> JSONResponse:
        """Handle generic domain exceptions."""
        logger.warning(
            "domain_exception",
            code=exc.code,
            message=exc.message,
        )
        return _error_response(400, exc.code, exc.message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return _error_response(500, "INTERNAL_ERROR", "An unexpected error occurred.")
