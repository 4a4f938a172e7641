"""
Alert error hierarchy and FastAPI handlers.

Every failure of a lifecycle or dispatch operation surfaces to the caller as
one of these exceptions. The API renders them as::

    {"detail": "<user facing message>", "error_code": "<CODE>"}

Usage:
    from safesignal.core.errors import ConflictError, register_error_handlers

    raise NotFoundError("Alert", id=42)
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class SafeSignalError(Exception):
    """Base exception for all domain errors."""

    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str = "An unexpected error occurred", **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(SafeSignalError):
    """Unknown profile, alert, contact or notification (404)."""

    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, **identifiers: Any):
        super().__init__(f"{resource} not found", resource=resource, **identifiers)


class ConflictError(SafeSignalError):
    """The profile already has an active alert (409)."""

    status_code = 409
    error_code = "ACTIVE_ALERT_EXISTS"

    def __init__(self, profile_id: int | None = None):
        super().__init__(
            "Resolve your existing alert before starting a new one.",
            profile_id=profile_id,
        )


class InvalidTransitionError(SafeSignalError):
    """Operation not allowed from the current status (409)."""

    status_code = 409
    error_code = "INVALID_TRANSITION"

    def __init__(self, operation: str, current_status: str, **details: Any):
        super().__init__(
            f"Cannot {operation} an alert that is {current_status}.",
            operation=operation,
            current_status=current_status,
            **details,
        )


class AuthorizationError(SafeSignalError):
    """Actor lacks the role required for the operation (403)."""

    status_code = 403
    error_code = "FORBIDDEN"

    def __init__(self, operation: str, subject: str = "alert", **details: Any):
        super().__init__(f"You are not allowed to {operation} this {subject}.", operation=operation, **details)


class PersistenceError(SafeSignalError):
    """Underlying store failure (503)."""

    status_code = 503
    error_code = "PERSISTENCE_ERROR"

    def __init__(self, cause: str = ""):
        super().__init__("Could not save changes. Please try again.", cause=cause)


def register_error_handlers(app: FastAPI) -> None:
    """Register the domain exception handler on the FastAPI app."""

    @app.exception_handler(SafeSignalError)
    async def handle_safesignal_error(request: Request, exc: SafeSignalError):
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            "%s %s -> %s: %s | details=%s",
            request.method,
            request.url.path,
            exc.error_code,
            exc.message,
            exc.details,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "error_code": exc.error_code},
        )
