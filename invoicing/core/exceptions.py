"""
Custom exceptions for the Invoicing API.

Every exception carries the HTTP status it maps to; ``main.py`` installs a
single handler that renders them as ``{"detail": message}``. The authorization
pipeline raises them in a fixed order and never catches them itself.
"""
from typing import Optional

from fastapi import status


class InvoicingException(Exception):
    """Base exception for the Invoicing API"""
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class NotFoundError(InvoicingException):
    """Resource not found"""
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str = "Resource", resource_id: Optional[str] = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        super().__init__(message)


class AlreadyExistsError(InvoicingException):
    """Resource already exists"""
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, resource: str = "Resource", field: Optional[str] = None, value: Optional[str] = None):
        if field and value:
            message = f"{resource} with {field} '{value}' already exists"
        else:
            message = f"{resource} already exists"
        super().__init__(message)


class ConflictError(InvoicingException):
    """Operation conflicts with the current state of a resource"""
    status_code = status.HTTP_409_CONFLICT


class UnauthorizedError(InvoicingException):
    """Bearer credential missing, invalid or expired"""
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message)


class ForbiddenError(InvoicingException):
    """Access denied"""
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "You don't have permission to access this resource"):
        super().__init__(message)


class AccessDeniedError(ForbiddenError):
    """Caller lacks membership in the organization or the required permission"""


class NoOrganizationContextError(ForbiddenError):
    """No organization could be determined for the request"""

    def __init__(self, message: str = "No organization access"):
        super().__init__(message)


class SubscriptionRequiredError(ForbiddenError):
    """Organization subscription is missing, inactive or expired"""

    def __init__(self, message: str = "Active subscription required"):
        super().__init__(message)


class LimitReachedError(ForbiddenError):
    """Usage quota of the subscription plan is exhausted"""

    def __init__(self, resource: str):
        super().__init__(f"{resource.capitalize()} limit reached for your subscription plan")
        self.resource = resource


class ValidationError(InvoicingException):
    """Validation failed"""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, message: str = "Validation failed", field: Optional[str] = None):
        if field:
            message = f"Validation failed for field '{field}': {message}"
        super().__init__(message)
