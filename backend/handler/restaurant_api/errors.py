"""Errors raised by the API layer.

Each error knows the HTTP status it maps to; the router turns any ``ApiError``
into a JSON response and everything else into a 500.
"""

from typing import Any, Dict, Optional


class ApiError(Exception):
    error = "ApiError"

    def __init__(self, message: str, status_code: int = 400, field: Optional[str] = None):
        self.message = message
        self.status_code = status_code
        self.field = field
        super().__init__(message)

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error, "message": self.message}
        if self.field:
            body["field"] = self.field
        return body


class ValidationError(ApiError):
    error = "BadRequest"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, 400, field=field)


class NotFoundError(ApiError):
    error = "NotFound"

    def __init__(self, message: str):
        super().__init__(message, 404)


class ConflictError(ApiError):
    error = "Conflict"

    def __init__(self, message: str):
        super().__init__(message, 409)


class AuthError(ApiError):
    # 401 when no credential was sent, 400 when the identity provider rejects one
    error = "Unauthorized"

    def __init__(self, message: str, status_code: int = 401):
        super().__init__(message, status_code)


class InternalError(ApiError):
    error = "InternalError"

    def __init__(self, message: str = "Unexpected error"):
        super().__init__(message, 500)
