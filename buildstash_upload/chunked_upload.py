"""Sequential multipart upload of one file."""

import time
from typing import Callable, Optional

from buildstash_upload.chunking import plan_parts
from buildstash_upload.logging_config import get_logger
from buildstash_upload.part_driver import RetryingPartDriver
from buildstash_upload.part_transport import PartTransport
from buildstash_upload.registry_client import RegistryClient
from buildstash_upload.retry import RetryPolicy
from buildstash_upload.types import UploadManifest, UploadSession
from buildstash_upload.utils import format_file_size

logger = get_logger(__name__)


class ChunkedUploadOrchestrator:
    """
    Uploads a file part by part, strictly in ascending order.

    A terminal failure of any part stops the file immediately; later parts
    are never attempted and no manifest is returned.
    """

    def __init__(
        self,
        client: RegistryClient,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
        transport_factory: Optional[Callable[[str], PartTransport]] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            client: Registry client used for part URLs and writes
            policy: Per-part retry policy
            sleep: Sleep function passed to the retry driver
            transport_factory: Builds the PartTransport for a file path
        """
        self.client = client
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        self._transport_factory = transport_factory or (
            lambda file_path: PartTransport(client, file_path)
        )

    def upload_chunked(
        self,
        file_path: str,
        file_size: int,
        session: UploadSession,
        number_of_parts: int,
        part_size_bytes: int
    ) -> UploadManifest:
        """
        Upload every part of a file and return the sealed manifest.

        Args:
            file_path: Local path of the file
            file_size: Size of the file in bytes
            session: Negotiated session for this file
            number_of_parts: Part count dictated by the registry
            part_size_bytes: Part size dictated by the registry

        Returns:
            Sealed UploadManifest with one entry per part, ascending

        Raises:
            ChunkPlanError: If the registry's parameters do not fit the file
            PartUploadFailedError: If a part exhausts its attempts
        """
        descriptors = plan_parts(file_size, part_size_bytes, number_of_parts)
        driver = RetryingPartDriver(
            self._transport_factory(file_path),
            policy=self.policy,
            sleep=self._sleep
        )
        manifest = UploadManifest(session.role)
        total = len(descriptors)
        sent = 0

        logger.info(
            f"Uploading {session.role.value} file in {total} part(s) "
            f"of {format_file_size(part_size_bytes)}"
        )

        for descriptor in descriptors:
            result = driver.run_part(session, descriptor)
            manifest.append(result)
            sent += descriptor.length
            logger.info(
                f"Uploaded {session.role.value} part {descriptor.part_number}/{total} "
                f"({format_file_size(sent)} / {format_file_size(file_size)})"
            )

        manifest.seal()
        return manifest
