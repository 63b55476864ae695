from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from catalog_hub.core.exceptions import (
    APIException,
    IntegrationException,
    NotFoundError,
    SnapshotUnavailableError,
)
from catalog_hub.core.logging import get_logger

# Initialize logger
logger = get_logger(__name__)

SENSITIVE_CONTEXT_KEYS = ("auth_token", "api_key", "password")


def _safe_context(context: dict) -> dict:
    safe = dict(context or {})
    for key in SENSITIVE_CONTEXT_KEYS:
        if key in safe:
            safe[key] = "[REDACTED]"
    return safe


async def handle_api_exception(request: Request, exc: APIException) -> JSONResponse:
    """
    Handle APIException instances.

    Args:
        request: FastAPI request object
        exc: APIException instance

    Returns:
        JSONResponse: Formatted error response
    """
    logger.error(
        f"API Exception: {exc.detail}",
        extra={"data": {"status_code": exc.status_code, "error_code": exc.code}}
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def handle_not_found_exception(request: Request, exc: NotFoundError) -> JSONResponse:
    """Handle resource not found errors."""
    logger.info(
        f"Resource not found: {exc.detail}",
        extra={"data": {
            "resource_type": exc.context.get("resource_type"),
            "resource_id": exc.context.get("resource_id"),
        }}
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def handle_integration_exception(request: Request, exc: IntegrationException) -> JSONResponse:
    """
    Handle partner API integration errors.

    The original error stays in the logs; credentials are redacted from
    the response.
    """
    logger.error(
        f"Integration error: {exc.detail}",
        extra={"data": {"original_error": exc.context.get("original_error")}}
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.code,
                "message": exc.detail,
                "status_code": exc.status_code,
                "context": _safe_context(exc.context)
            }
        }
    )


async def handle_snapshot_unavailable(request: Request, exc: SnapshotUnavailableError) -> JSONResponse:
    logger.warning(f"Snapshot unavailable: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request body and parameter validation errors."""
    errors = [
        {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": {
                "code": "validation_error",
                "message": "Request validation error",
                "status_code": status.HTTP_422_UNPROCESSABLE_ENTITY,
                "context": {"errors": errors}
            }
        }
    )


async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred",
                "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR
            }
        }
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Configure global exception handlers for the FastAPI application.

    More specific handlers are looked up first by exception class.
    """
    app.add_exception_handler(NotFoundError, handle_not_found_exception)
    app.add_exception_handler(IntegrationException, handle_integration_exception)
    app.add_exception_handler(SnapshotUnavailableError, handle_snapshot_unavailable)
    app.add_exception_handler(APIException, handle_api_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected_exception)
