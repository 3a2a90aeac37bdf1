"""Bounded-retry driver for single part uploads."""

import time
from dataclasses import replace
from typing import Callable, Optional

from buildstash_upload.exceptions import PartUploadFailedError
from buildstash_upload.logging_config import get_logger
from buildstash_upload.part_transport import PartTransport
from buildstash_upload.retry import RetryPolicy
from buildstash_upload.types import PartDescriptor, PartResult, UploadSession

logger = get_logger(__name__)


class RetryingPartDriver:
    """Runs PartTransport under a RetryPolicy."""

    def __init__(
        self,
        transport: PartTransport,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize the driver.

        Args:
            transport: Transport used for each attempt
            policy: Retry policy (defaults to 2 attempts, 0.5s backoff)
            sleep: Sleep function, injectable for tests
        """
        self.transport = transport
        self.policy = policy or RetryPolicy()
        self._sleep = sleep

    def run_part(self, session: UploadSession, descriptor: PartDescriptor) -> PartResult:
        """
        Upload one part, retrying retryable failures within the attempt budget.

        Every attempt goes through the transport from the start, so it gets
        a fresh presigned URL and a fresh read window.

        Args:
            session: Negotiated session the part belongs to
            descriptor: Part to upload

        Returns:
            PartResult with the number of attempts used

        Raises:
            PartUploadFailedError: If every attempt failed
        """
        max_attempts = self.policy.max_attempts

        for attempt in range(1, max_attempts + 1):
            try:
                result = self.transport.transfer_part(session, descriptor)
            except Exception as e:
                if not self.policy.is_retryable(e):
                    raise

                logger.warning(
                    f"Part upload failed (attempt {attempt}/{max_attempts}): "
                    f"{session.role.value} part {descriptor.part_number} "
                    f"error={type(e).__name__}: {e}"
                )
                if attempt >= max_attempts:
                    logger.error(
                        f"Giving up on {session.role.value} part {descriptor.part_number} "
                        f"after {attempt} attempt(s)"
                    )
                    raise PartUploadFailedError(descriptor.part_number, attempt, e) from e

                logger.debug(f"Retrying part {descriptor.part_number} in {self.policy.backoff_seconds}s")
                self._sleep(self.policy.backoff_seconds)
                continue

            return replace(result, attempts=attempt)
