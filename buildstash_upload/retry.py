"""Per-part retry policy."""

from dataclasses import dataclass

from buildstash_upload.constants import PART_MAX_ATTEMPTS, PART_RETRY_BACKOFF_SECONDS
from buildstash_upload.exceptions import NegotiationError, PartTransferError


@dataclass(frozen=True)
class RetryPolicy:
    """
    How often a part is attempted and what counts as a retryable failure.

    Defaults allow one retry after a fixed half-second pause.
    """
    max_attempts: int = PART_MAX_ATTEMPTS
    backoff_seconds: float = PART_RETRY_BACKOFF_SECONDS
    retry_on: tuple = (NegotiationError, PartTransferError)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.backoff_seconds < 0:
            raise ValueError("backoff_seconds must not be negative")

    def is_retryable(self, error: BaseException) -> bool:
        return isinstance(error, self.retry_on)
