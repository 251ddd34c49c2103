"""
Uniform error envelope: {"error": CATEGORY, "code"?, "field"?, "details"?}.
Absent keys are left out, never sent as null.
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from notification_prefs.engine.models import ErrorCategory, ValidationError
from notification_prefs.engine.store import StoreUnavailableError

HTTP_ERROR_NAMES = {
    404: ErrorCategory.NOT_FOUND.value,
    405: "METHOD_NOT_ALLOWED",
}


def error_body(error: str, code: Optional[str] = None, field: Optional[str] = None,
               details: Optional[str] = None) -> dict:
    body = {"error": error}
    if code:
        body["code"] = code
    if field:
        body["field"] = field
    if details:
        body["details"] = details
    return body


class ApiError(Exception):
    def __init__(self, error: str, status: int = 400, code: Optional[str] = None,
                 field: Optional[str] = None, details: Optional[str] = None):
        super().__init__(details or error)
        self.error = error
        self.status = status
        self.code = code
        self.field = field
        self.details = details

    @classmethod
    def from_validation(cls, err: ValidationError) -> "ApiError":
        return cls(err.category.value, 400, code=err.code, field=err.field, details=err.details)

    @classmethod
    def not_found(cls) -> "ApiError":
        return cls(ErrorCategory.NOT_FOUND.value, 404)

    def body(self) -> dict:
        return error_body(self.error, self.code, self.field, self.details)


# ─── Handlers ────────────────────────────────────────────────

async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(exc.body(), status_code=exc.status)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if not errors or any(e.get("type") == "json_invalid" for e in errors):
        body = error_body(ErrorCategory.VALIDATION_ERROR.value, "INVALID_JSON",
                          details="Invalid JSON body")
    else:
        first = errors[0]
        loc = [str(p) for p in first.get("loc", ()) if p not in ("body", "path", "query")]
        body = error_body(ErrorCategory.VALIDATION_ERROR.value, "INVALID_REQUEST",
                          field=".".join(loc) or None, details=first.get("msg"))
    return JSONResponse(body, status_code=400)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    name = HTTP_ERROR_NAMES.get(exc.status_code)
    if name is not None:
        body = error_body(name)
    else:
        body = error_body("ERROR", details=str(exc.detail))
    return JSONResponse(body, status_code=exc.status_code, headers=getattr(exc, "headers", None))


async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error("unhandled error on {} {}", request.method, request.url.path)
    body = error_body(ErrorCategory.INTERNAL_ERROR.value, details="Unexpected server error")
    return JSONResponse(body, status_code=500)


def install_error_handlers(app: FastAPI):
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(StoreUnavailableError, internal_error_handler)
    app.add_exception_handler(Exception, internal_error_handler)
