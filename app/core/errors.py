"""
Application errors raised by services and core helpers.
main.py renders every AppError as {"detail": ..., "code": ...} with its status_code.
"""

from typing import Optional


class AppError(Exception):
    status_code: int = 500
    code: str = "ERROR"
    default_message: str = "An unexpected error occurred"
    # Server-facing errors are logged in full but only public_message reaches the caller
    client_facing: bool = True
    public_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def detail(self) -> str:
        return self.message if self.client_facing else self.public_message


class ValidationFault(AppError):
    """Malformed input rejected before it reaches the store."""
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class AuthenticationFault(AppError):
    status_code = 401
    code = "AUTHENTICATION_ERROR"
    default_message = "Invalid or expired token"


class PermissionDenied(AppError):
    status_code = 403
    code = "PERMISSION_DENIED"
    default_message = "Permission denied"

    def __init__(self, permission: Optional[str] = None):
        message = f"Insufficient permissions. Required: {permission}" if permission else None
        super().__init__(message)


class NotFoundOrForbidden(AppError):
    """
    Zero rows matched a scoped read or write.

    Deliberately ambiguous: the row may not exist or may belong to another
    organization. The message must never say which.
    """
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found or not accessible"

    def __init__(self, resource: Optional[str] = None):
        message = f"{resource} not found or not accessible" if resource else None
        super().__init__(message)


class ConflictFault(AppError):
    status_code = 409
    code = "CONFLICT"
    default_message = "Conflicting resource state"


class IntegrityFault(AppError):
    """More rows matched than a single-row operation allows."""
    status_code = 500
    code = "INTEGRITY_ERROR"
    default_message = "Data integrity violation"
    client_facing = False


class TransportFault(AppError):
    """The store or the network failed."""
    status_code = 500
    code = "DB_ERROR"
    default_message = "Database request failed"
    client_facing = False
