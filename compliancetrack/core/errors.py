# compliancetrack/core/errors.py
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

log = logging.getLogger("compliancetrack.errors")


# -----------------------------
# Domain exceptions
# -----------------------------
class ComplianceTrackError(Exception):
    """Base class for errors raised by ComplianceTrack services."""

    status_code = 500
    error_type = "compliancetrack_error"

    def __init__(self, message: str, *, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidDeadlineError(ComplianceTrackError, ValueError):
    """A deadline value could not be parsed as a calendar date."""

    status_code = 422
    error_type = "invalid_deadline"

    def __init__(self, value: Any):
        super().__init__(f"Invalid deadline date: {value!r}", details={"value": str(value)})
        self.value = value


class InsightGatewayError(ComplianceTrackError):
    """The LLM gateway refused or failed the request."""

    status_code = 502
    error_type = "insight_gateway_error"

    def __init__(self, message: str, *, upstream_status: Optional[int] = None):
        super().__init__(message, details={"upstream_status": upstream_status})
        self.upstream_status = upstream_status
        # surface the gateway's own throttling / billing signals
        if upstream_status in (402, 429):
            self.status_code = upstream_status
        elif upstream_status == 503:
            self.status_code = 503


class RateLimitExceeded(ComplianceTrackError):
    status_code = 429
    error_type = "rate_limited"

    def __init__(self, retry_after: int):
        super().__init__(
            "Too many requests, please try again shortly.",
            details={"retry_after": retry_after},
        )
        self.retry_after = retry_after


class EmailDeliveryError(ComplianceTrackError):
    status_code = 502
    error_type = "email_delivery_error"


# -----------------------------
# Trace / request id helpers
# -----------------------------
def _ensure_trace_id(request: Request) -> str:
    """
    Return a stable trace_id for this request.
    Prefer a value already set on request.state, then common headers,
    and finally generate a new one (and store it on request.state).
    """
    val = getattr(request.state, "trace_id", None)
    if val:
        return str(val)

    for h in ("x-request-id", "x-correlation-id", "x-trace-id"):
        v = request.headers.get(h)
        if v:
            request.state.trace_id = v
            return v

    new_id = uuid.uuid4().hex
    request.state.trace_id = new_id
    return new_id


def _payload(
    *,
    message: str,
    typ: str,
    status: int,
    trace_id: str,
    details: Optional[Any] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "ok": False,
        "error": {
            "type": typ,
            "message": message,
            "status": status,
            "trace_id": trace_id,
        },
    }
    if details is not None:
        body["error"]["details"] = details
    return body


# -----------------------------
# Install / register handlers
# -----------------------------
def register_exception_handlers(app: FastAPI) -> None:
    """
    Registers consistent JSON error handlers.
    Also ensures X-Request-ID header is present on error responses.
    """

    @app.exception_handler(HTTPException)
    async def http_exc_handler(request: Request, exc: HTTPException):
        trace_id = _ensure_trace_id(request)
        status_code = int(exc.status_code)
        message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        details = exc.detail if isinstance(exc.detail, dict) else None

        headers = dict(exc.headers or {})
        headers["X-Request-ID"] = trace_id

        level = logging.ERROR if status_code >= 500 else logging.WARNING
        log.log(
            level,
            "HTTPException %s %s -> %s | trace_id=%s | detail=%r",
            request.method,
            request.url.path,
            status_code,
            trace_id,
            exc.detail,
        )

        return JSONResponse(
            status_code=status_code,
            headers=headers,
            content=_payload(
                message=message,
                typ="http_error",
                status=status_code,
                trace_id=trace_id,
                details=details,
            ),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):
        trace_id = _ensure_trace_id(request)
        errors = exc.errors()
        log.warning(
            "ValidationError %s %s -> 422 | trace_id=%s | errors=%s",
            request.method,
            request.url.path,
            trace_id,
            errors,
        )
        return JSONResponse(
            status_code=422,
            headers={"X-Request-ID": trace_id},
            content=_payload(
                message="Validation failed.",
                typ="validation_error",
                status=422,
                trace_id=trace_id,
                # ctx may hold exception objects; keep the serialisable parts
                details=[
                    {k: e.get(k) for k in ("type", "loc", "msg") if k in e}
                    for e in errors
                ],
            ),
        )

    @app.exception_handler(ComplianceTrackError)
    async def domain_exc_handler(request: Request, exc: ComplianceTrackError):
        trace_id = _ensure_trace_id(request)
        status_code = int(exc.status_code)
        headers = {"X-Request-ID": trace_id}
        if isinstance(exc, RateLimitExceeded):
            headers["Retry-After"] = str(exc.retry_after)

        level = logging.ERROR if status_code >= 500 else logging.WARNING
        log.log(
            level,
            "%s %s %s -> %s | trace_id=%s | %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            status_code,
            trace_id,
            exc.message,
        )
        return JSONResponse(
            status_code=status_code,
            headers=headers,
            content=_payload(
                message=exc.message,
                typ=exc.error_type,
                status=status_code,
                trace_id=trace_id,
                details=exc.details,
            ),
        )

    @app.exception_handler(Exception)
    async def unhandled_exc_handler(request: Request, exc: Exception):
        trace_id = _ensure_trace_id(request)
        # Full traceback to server logs; generic message to client
        log.exception(
            "Unhandled exception %s %s -> 500 | trace_id=%s",
            request.method,
            request.url.path,
            trace_id,
        )
        return JSONResponse(
            status_code=500,
            headers={"X-Request-ID": trace_id},
            content=_payload(
                message="Internal server error.",
                typ="internal_error",
                status=500,
                trace_id=trace_id,
            ),
        )
