"""
Custom exceptions for the SEAP API.
Every error carries a stable machine-readable kind and maps to one HTTP status.
"""
from typing import Optional

from fastapi import status


class SeapException(Exception):
    """Base exception for SEAP"""
    kind: str = "error"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": {"kind": self.kind, "message": self.message}}


class ValidationError(SeapException):
    """Malformed or missing input"""
    kind = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "Validation failed", field: Optional[str] = None):
        if field:
            message = f"Validation failed for field '{field}': {message}"
        super().__init__(message)


class UnauthorizedError(SeapException):
    """Authentication failed"""
    kind = "unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message)


class ForbiddenError(SeapException):
    """Access denied"""
    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "You don't have permission to access this resource"):
        super().__init__(message)


class CampaignExpiredError(ForbiddenError):
    """Approved campaign past its expiry date"""

    def __init__(self, message: str = "Campaign has expired"):
        super().__init__(message)


class NotFoundError(SeapException):
    """Resource not found"""
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str = "Resource", resource_id: Optional[str] = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        super().__init__(message)


class ConflictError(SeapException):
    """Uniqueness violation or state conflict"""
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str = "Resource already exists"):
        super().__init__(message)


class AlreadyExistsError(ConflictError):
    """Resource already exists"""

    def __init__(self, resource: str = "Resource", field: Optional[str] = None, value: Optional[str] = None):
        if field and value:
            message = f"{resource} with {field} '{value}' already exists"
        else:
            message = f"{resource} already exists"
        super().__init__(message)


class InvalidTransitionError(ConflictError):
    """Campaign status change not allowed from the current status"""

    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot change campaign status from '{current}' to '{target}'")


class TransientError(SeapException):
    """Store timeout or unavailable dependency, safe to retry"""
    kind = "transient"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, message: str = "Service temporarily unavailable, please retry"):
        super().__init__(message)


class FatalError(SeapException):
    """Programming or configuration error"""
    kind = "fatal"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)


def raise_not_found(resource: str = "Resource", resource_id: Optional[str] = None):
    raise NotFoundError(resource, resource_id)


def raise_already_exists(resource: str = "Resource", field: Optional[str] = None, value: Optional[str] = None):
    raise AlreadyExistsError(resource, field, value)


def raise_unauthorized(message: str = "Could not validate credentials"):
    raise UnauthorizedError(message)


def raise_forbidden(message: str = "You don't have permission to access this resource"):
    raise ForbiddenError(message)


def raise_validation_error(message: str = "Validation failed", field: Optional[str] = None):
    raise ValidationError(message, field)
