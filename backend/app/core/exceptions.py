"""
Custom exception classes for the application
"""
from typing import Optional, Dict, Any


class HireOrbitException(Exception):
    """Base exception for HireOrbit"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationError(HireOrbitException):
    """Missing, invalid or expired credentials"""

    def __init__(self, message: str = "Unauthorized", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=401, details=details)


class AuthorizationError(HireOrbitException):
    """Authenticated, but the role does not allow the action"""

    def __init__(self, message: str = "Forbidden", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=403, details=details)


class NotFoundError(HireOrbitException):
    """Resource absent, or not owned by the caller"""

    def __init__(self, resource: str = "Resource", identifier: Optional[str] = None):
        message = f"{resource} not found"
        if identifier:
            message += f": {identifier}"
        super().__init__(message, status_code=404)


class ConflictError(HireOrbitException):
    """Request clashes with existing state"""

    def __init__(self, message: str = "Conflict", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=409, details=details)


class ValidationError(HireOrbitException):
    """Invalid or missing request input"""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=400, details=details)


class InternalError(HireOrbitException):
    """Failure the client cannot fix, e.g. the mail server is down"""

    def __init__(self, message: str = "Internal server error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=500, details=details)
