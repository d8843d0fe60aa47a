from typing import Optional
from fastapi import HTTPException, status


class APIError(HTTPException):
    """
    Base for errors the API reports on purpose.

    Each subclass pins an HTTP status code so route handlers only pick the
    error kind and a short, caller-safe message.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"

    def __init__(self, detail: Optional[str] = None, headers: Optional[dict] = None):
        super().__init__(
            status_code=type(self).status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )


class ValidationError(APIError):
    """Malformed or missing input"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class AuthenticationError(APIError):
    """Missing or invalid session, or bad credentials"""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Unauthorized"


class ConflictError(APIError):
    """Duplicate unique key"""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists"


class InternalError(APIError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"
