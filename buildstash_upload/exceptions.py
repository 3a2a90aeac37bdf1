"""Custom exception classes for the upload client."""

from typing import Any, Optional


class UploadError(Exception):
    """
    Base exception class for all upload-related errors.
    """
    pass


class ConfigurationError(UploadError):
    """
    Raised when inputs or local files are unusable before any transfer starts.
    """
    pass


class ChunkPlanError(ConfigurationError):
    """
    Raised when chunking parameters cannot describe the file.
    """
    pass


class NegotiationError(UploadError):
    """
    Raised when a request to the registry service fails.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Any = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class PartTransferError(UploadError):
    """
    Raised when writing bytes to a presigned storage URL fails.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class PartUploadFailedError(UploadError):
    """
    Raised when a part could not be uploaded within its attempt budget.
    """

    def __init__(self, part_number: int, attempts: int, cause: Exception):
        super().__init__(
            f"Part {part_number} failed after {attempts} attempt(s): {cause}"
        )
        self.part_number = part_number
        self.attempts = attempts
        self.cause = cause


class ManifestSealedError(UploadError):
    """
    Raised when appending to a manifest that was already handed off.
    """
    pass
