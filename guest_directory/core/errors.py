"""
Error taxonomy for the guest directory client
"""

from typing import Optional


class DirectoryError(Exception):
    """Base class for every error raised by the directory client"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DirectoryError):
    """Input rejected locally, before anything reaches the network"""


class TransportError(DirectoryError):
    """Non-2xx response, network failure or a response body that fails validation"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NotFound(TransportError):
    """The server reported the resource as absent (404)"""

    def __init__(self, message: str = "Resource not found", status_code: int = 404):
        super().__init__(message, status_code)


class ConflictError(TransportError):
    """The server rejected a write as conflicting (409), e.g. duplicate name or phone"""

    def __init__(self, message: str, status_code: int = 409):
        super().__init__(message, status_code)


class ImportPartialFailure(DirectoryError):
    """An import reached the server but some rows were rejected"""

    def __init__(self, result):
        self.result = result
        super().__init__(
            f"{len(result.errors)} row(s) rejected, {result.imported} of {result.total} imported"
        )
