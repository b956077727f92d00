
class ApplicationError(Exception):
    """Base class for application-specific errors."""
    pass

class ConfigurationError(ApplicationError):
    """Raised when required settings are missing or inconsistent."""
    pass

class UploadError(ApplicationError):
    """Raised when the media host rejects an upload or cannot be reached."""
    def __init__(self, message="An image upload error occurred.", payload=None, status_code=None, original_exception=None):
        super().__init__(message)
        self.payload = payload
        self.status_code = status_code
        self.original_exception = original_exception

class StoreError(ApplicationError):
    """Raised for document store failures during a write or a scan."""
    def __init__(self, message="A database error occurred.", original_exception=None):
        super().__init__(message)
        self.original_exception = original_exception
