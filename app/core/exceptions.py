"""Domain errors raised by the directory service.

The service layer never imports FastAPI; ``app.main`` maps these to HTTP
responses with the same ``{"detail": ...}`` body as ``HTTPException``.
"""


class DirectoryError(Exception):
    """Base class for failures surfaced to the caller untouched."""

    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConflictError(DirectoryError):
    """Email already in use."""

    status_code = 409


class NotFoundError(DirectoryError):
    status_code = 404


class PermissionDeniedError(DirectoryError):
    """The acting principal may not perform the operation on the target."""

    status_code = 403
