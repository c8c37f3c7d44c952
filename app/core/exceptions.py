from typing import Optional
from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base for domain errors. Carries a stable error code alongside the HTTP status."""
    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "BAD_REQUEST"
    default_detail: str = "Bad request."

    def __init__(self, detail: Optional[str] = None):
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail)


class NotFoundException(AppException):
    """Entity absent, or the caller has no visibility into it."""
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    default_detail = "Resource not found."


class ForbiddenException(AppException):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    default_detail = "You do not have permission to perform this action."


class PreconditionFailedException(AppException):
    """Valid target in the wrong state."""
    status_code = status.HTTP_400_BAD_REQUEST
    code = "PRECONDITION_FAILED"
    default_detail = "The resource is not in a state that allows this action."


class ConflictException(AppException):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    default_detail = "Resource already exists."


class ValidationException(AppException):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "VALIDATION_ERROR"
    default_detail = "Invalid input."


class ServiceUnavailableException(AppException):
    """A collaborator (media store, transcript service) could not complete the request."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "SERVICE_UNAVAILABLE"
    default_detail = "A required service is unavailable. Please try again later."
