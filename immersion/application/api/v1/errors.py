"""Centralized error transformation for API routes.

Maps service errors (domain and infrastructure) to HTTPException responses.
"""

from typing import Any

from fastapi import HTTPException

from immersion.domain.shared.error import (
    AuthorizationError,
    ConflictError,
    DomainError,
    ImmersionError,
    InfrastructureError,
    InvalidStateError,
    NotFoundError,
    ThrottledError,
    ValidationError,
)

DOMAIN_ERROR_STATUS_MAP: dict[type[DomainError], int] = {
    NotFoundError: 404,
    ValidationError: 422,
    InvalidStateError: 409,
    ConflictError: 409,
    AuthorizationError: 403,
    ThrottledError: 429,
}

# Codes meaning "no usable credential", as opposed to "not allowed"
UNAUTHENTICATED_CODES = frozenset(
    {"missing_token", "token_expired", "invalid_token", "token_revoked"}
)


def map_immersion_error(error: ImmersionError) -> HTTPException:
    """Map a service error to an HTTPException carrying its stable code."""
    detail: dict[str, Any] = {
        "code": error.code,
        "message": error.message,
    }

    if isinstance(error, InfrastructureError):
        return HTTPException(status_code=503, detail=detail)

    if isinstance(error, DomainError):
        status_code = DOMAIN_ERROR_STATUS_MAP.get(type(error), 400)
        if isinstance(error, ValidationError) and error.field is not None:
            detail["field"] = error.field
        if isinstance(error, ThrottledError):
            detail["time_remaining"] = error.time_remaining
            detail["min_hours_between_reminder"] = error.min_hours_between_reminder
        # Distinguish 401 (unauthenticated) from 403 (unauthorized)
        if isinstance(error, AuthorizationError) and error.code in UNAUTHENTICATED_CODES:
            return HTTPException(
                status_code=401,
                detail=detail,
                headers={"WWW-Authenticate": "Bearer"},
            )
        return HTTPException(status_code=status_code, detail=detail)

    return HTTPException(status_code=500, detail=detail)
