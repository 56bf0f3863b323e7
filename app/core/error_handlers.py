from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException
from app.utils.response import error_response
import logging

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Something went wrong. Please try again."


def format_validation_errors(errors) -> list[dict]:
    """One entry per failing field: dotted path without the `body` prefix."""
    formatted = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        formatted.append(
            {
                "field": ".".join(loc) or "body",
                "message": err.get("msg", "Invalid value"),
            }
        )
    return formatted


# -------------------------
# APP EXCEPTIONS
# -------------------------
async def app_exception_handler(request: Request, exc: AppException):
    if exc.status_code >= 500:
        logger.error(
            "Application error",
            extra={"path": request.url.path, "error_code": exc.error_code},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.detail, exc.error_code, exc.details),
    )


# -------------------------
# REQUEST VALIDATION (body, query, path)
# -------------------------
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = format_validation_errors(exc.errors())
    logger.info(
        "Request rejected",
        extra={"path": request.url.path, "fields": [d["field"] for d in details]},
    )
    return JSONResponse(
        status_code=422,
        content=error_response("Invalid request data", ErrorCode.VALIDATION_ERROR, details),
    )


# -------------------------
# PLAIN HTTP EXCEPTIONS (router 404/405, etc.)
# -------------------------
HTTP_STATUS_TO_ERROR_CODE = {
    400: ErrorCode.VALIDATION_ERROR,
    404: ErrorCode.NOT_FOUND,
    405: ErrorCode.VALIDATION_ERROR,
    409: ErrorCode.CONFLICT,
    422: ErrorCode.VALIDATION_ERROR,
}


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    error_code = HTTP_STATUS_TO_ERROR_CODE.get(exc.status_code, ErrorCode.INTERNAL_ERROR)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(str(exc.detail), error_code),
    )


# -------------------------
# CONSTRAINT VIOLATIONS
# -------------------------
async def integrity_error_handler(request: Request, exc: IntegrityError):
    # The request's session was rolled back by get_db before we get here
    logger.warning(
        "Constraint violation",
        extra={"path": request.url.path, "method": request.method, "error": str(exc.orig)},
    )
    return JSONResponse(
        status_code=409,
        content=error_response("Database constraint violation", ErrorCode.CONFLICT),
    )


# -------------------------
# LAST RESORT
# -------------------------
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "Unhandled exception",
        extra={"path": request.url.path, "method": request.method},
    )
    return JSONResponse(
        status_code=500,
        content=error_response(GENERIC_FAILURE_MESSAGE, ErrorCode.INTERNAL_ERROR),
    )
