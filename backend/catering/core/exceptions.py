"""
Domain error taxonomy.

Services raise these; the API layer renders them with the HTTP status they
carry. Anything else that escapes a request is reported as a generic 500.
"""


class DomainError(Exception):
    status_code = 400

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(DomainError):
    """Missing or malformed input, or a business rule on the input failed."""
    status_code = 400


class NotFoundError(DomainError):
    """Unknown id, or a record the caller does not own."""
    status_code = 404


class StateError(DomainError):
    """Operation not allowed for the order's current status."""
    status_code = 400


class PermissionDeniedError(DomainError):
    """The caller's role does not allow the operation."""
    status_code = 403


class AuthError(DomainError):
    """Missing, invalid or expired credential."""
    status_code = 401
