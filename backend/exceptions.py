class AppError(Exception):
    """Base exception for application errors."""
    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code
        self.message = message

class NotFoundError(AppError):
    """Raised when a resource is not found."""
    def __init__(self, message: str):
        super().__init__(message, status_code=404)

class ValidationError(AppError):
    """Raised when input validation fails."""
    def __init__(self, message: str):
        super().__init__(message, status_code=400)

class AuthenticationError(AppError):
    """Raised when the caller must sign in first."""
    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, status_code=401)

class AuthorizationError(AppError):
    """Raised when user is not authorized to perform an action."""
    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, status_code=403)

class ConflictError(AppError):
    """Raised when the store rejects a write as a duplicate."""
    def __init__(self, message: str):
        super().__init__(message, status_code=409)

##### STORAGE EXCEPTIONS #####

class StorageError(AppError):
    """Raised when the object store rejects an upload or URL request."""
    def __init__(self, message: str):
        super().__init__(message, status_code=502)

class FileTooLargeError(ValidationError):
    """Raised when an upload exceeds the configured size limit."""
    def __init__(self, limit_bytes: int):
        super().__init__(f"File too large. Please upload a file smaller than {limit_bytes // (1024 * 1024)}MB")
