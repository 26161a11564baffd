"""
Domain exceptions.
Raised by services, converted to structured JSON responses by the handlers in main.py.
"""

from typing import Any, Dict, Optional


class ParkingError(Exception):
    status_code = 500

    def __init__(self, message: str, extra: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.extra = extra or {}


class ValidationError(ParkingError):
    """Missing or malformed required field."""
    status_code = 400


class NotFoundError(ParkingError):
    status_code = 404


class AuthError(ParkingError):
    """Missing/invalid/expired token or bad credentials."""
    status_code = 401


class ForbiddenError(ParkingError):
    status_code = 403


class InternalError(ParkingError):
    status_code = 500
