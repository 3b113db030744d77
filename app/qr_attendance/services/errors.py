# --- Custom Service Layer Exception Classes ---

class ServiceError(Exception):
    """General exception class for the service layer."""
    pass

class AuthorizationError(ServiceError):
    """Exception class for authorization-related errors."""
    pass

class SecretKeyMissingError(ServiceError):
    """The station has no secret key for the remote plugin yet."""

    def __init__(self, message: str = "Secret API key is not set."):
        super().__init__(message)

# --- Scan errors ---

class ScanError(ServiceError):
    """Base class for every rejected scan. None of them changes session state."""
    pass

class InvalidScanFormatError(ScanError):
    pass

class DuplicateScanError(ScanError):
    pass

class PersonNotFoundError(ScanError):
    def __init__(self, person_id: str, message: str):
        super().__init__(message)
        self.person_id = person_id

class UploadFailedError(ScanError):
    pass

# --- Other errors ---

class SubmissionError(ServiceError):
    """Bulk teacher attendance could not be submitted."""
    pass

class UserAlreadyExistsError(ServiceError):
    pass
