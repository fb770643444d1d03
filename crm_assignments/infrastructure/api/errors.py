"""Translation of service failures and framework errors into JSON responses.

Every error body has the same shape: ``{success: false, error, code, ...}``.
"""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from crm_assignments.domain.value_objects.enums import ErrorCode

logger = logging.getLogger(__name__)

STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.INVALID_INPUT: 400,
    ErrorCode.INVALID_USER: 400,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.NOT_FOUND: 404,
}

_CODE_BY_STATUS = {status: code for code, status in STATUS_BY_CODE.items() if code != ErrorCode.INVALID_USER}


def failure_response(
    code: ErrorCode, error: str | None, message: str | None = None, **extra
) -> JSONResponse:
    body = {"success": False, "error": error, "code": code.value, **extra}
    if message is not None:
        body["message"] = message
    return JSONResponse(status_code=STATUS_BY_CODE[code], content=body)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = _CODE_BY_STATUS.get(exc.status_code)
    body = {
        "success": False,
        "error": exc.detail,
        "code": code.value if code else f"HTTP_{exc.status_code}",
    }
    return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        detail = "Invalid request"
    logger.info("Rejected request %s %s: %s", request.method, request.url.path, detail)
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": detail, "code": ErrorCode.INVALID_INPUT.value},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error", "code": "INTERNAL_ERROR"},
    )
