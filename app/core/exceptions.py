from typing import Optional, Any

class UserServiceError(Exception):
    """
    Base exception for the user service.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)

class InvalidInputError(UserServiceError):
    """
    Raised when validation or normalization of caller input fails.
    """
    def __init__(self, message: str = "Invalid input", details: Optional[Any] = None):
        super().__init__(message, code="INVALID_INPUT", status_code=400, details=details)

class ResourceNotFoundError(UserServiceError):
    """
    Raised when a requested resource is not found.
    """
    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)

class AlreadyExistsError(UserServiceError):
    """
    Raised when a resource with the same identifier already exists.
    """
    def __init__(self, message: str = "Resource already exists", details: Optional[Any] = None):
        super().__init__(message, code="ALREADY_EXISTS", status_code=409, details=details)

class InternalError(UserServiceError):
    """
    Raised when infrastructure (store, cache, tile server, hashing) fails.
    """
    def __init__(self, message: str = "Internal error", details: Optional[Any] = None):
        super().__init__(message, code="INTERNAL_ERROR", status_code=500, details=details)

class CacheError(InternalError):
    """
    Raised when the tile cache backend is unavailable.
    """

class TileProviderError(InternalError):
    """
    Raised when the remote tile server fails or answers with a non-success status.
    """
