"""
Error taxonomy shared by every app.

Services raise :class:`ServiceError` (or one of its subclasses) and never
build HTTP responses themselves. API views let the error propagate and
``api_exception_handler`` turns it into ``{"error": CODE, "message": ...}``
with the status code of the taxonomy entry.
"""
from __future__ import annotations

from functools import wraps

import structlog
from django.db import DatabaseError
from django.http import Http404, JsonResponse
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = structlog.get_logger(__name__)


class ErrorCode:
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    PRIVATE_INVENTORY = "PRIVATE_INVENTORY"
    CONSENT_REQUIRED = "CONSENT_REQUIRED"
    RATE_LIMITED = "RATE_LIMITED"
    STEAM_API_ERROR = "STEAM_API_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


STATUS_BY_CODE = {
    ErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.PRIVATE_INVENTORY: status.HTTP_403_FORBIDDEN,
    ErrorCode.CONSENT_REQUIRED: status.HTTP_403_FORBIDDEN,
    ErrorCode.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorCode.STEAM_API_ERROR: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.DATABASE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class ServiceError(Exception):
    """Base error raised by the service layer."""

    code = ErrorCode.DATABASE_ERROR
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None, code: str | None = None):
        self.message = message or self.default_message
        if code is not None:
            self.code = code
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_CODE.get(self.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    def as_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class Unauthorized(ServiceError):
    code = ErrorCode.UNAUTHORIZED
    default_message = "Authentication required"


class Forbidden(ServiceError):
    code = ErrorCode.FORBIDDEN
    default_message = "You do not have permission to do this"


class NotFound(ServiceError):
    code = ErrorCode.NOT_FOUND
    default_message = "Not found"


class ValidationError(ServiceError):
    code = ErrorCode.VALIDATION_ERROR
    default_message = "Invalid input"


class ConsentRequired(ServiceError):
    code = ErrorCode.CONSENT_REQUIRED
    default_message = "Consent is required before importing your inventory"


def error_response(error: ServiceError) -> JsonResponse:
    """JSON response for plain Django views."""
    return JsonResponse(error.as_dict(), status=error.status_code)


def api_exception_handler(exc, context):
    """DRF exception handler mapping errors onto the flat taxonomy."""
    if isinstance(exc, ServiceError):
        if exc.status_code >= 500:
            logger.error("service_error", code=exc.code, message=exc.message)
        return Response(exc.as_dict(), status=exc.status_code)

    if isinstance(exc, exceptions.NotAuthenticated):
        return Response(
            {"error": ErrorCode.UNAUTHORIZED, "message": "Authentication required"},
            status=status.HTTP_401_UNAUTHORIZED,
        )

    if isinstance(exc, DatabaseError):
        logger.exception("database_error")
        return Response(
            {"error": ErrorCode.DATABASE_ERROR, "message": "A database error occurred"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, Http404):
        exc = exceptions.NotFound("Not found")

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, exceptions.NotFound):
        code = ErrorCode.NOT_FOUND
    elif isinstance(exc, exceptions.PermissionDenied):
        code = ErrorCode.FORBIDDEN
    elif isinstance(exc, exceptions.ValidationError):
        code = ErrorCode.VALIDATION_ERROR
    elif isinstance(exc, exceptions.Throttled):
        code = ErrorCode.RATE_LIMITED
    else:
        return response

    detail = response.data
    if isinstance(detail, dict) and set(detail) == {"detail"}:
        detail = detail["detail"]
    response.data = {"error": code, "message": detail}
    return response


def json_errors(view_func):
    """Decorator for plain Django views: ServiceError and DatabaseError become JSON error responses."""
    @wraps(view_func)
    def _wrapped_view(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except ServiceError as e:
            if e.status_code >= 500:
                logger.error("service_error", code=e.code, message=e.message)
            return error_response(e)
        except DatabaseError:
            logger.exception("database_error")
            return error_response(ServiceError("A database error occurred", code=ErrorCode.DATABASE_ERROR))
    return _wrapped_view
