"""Transfer of a single part of a multipart upload."""

from buildstash_upload.constants import PART_CONTENT_TYPE
from buildstash_upload.file_range import FileRange
from buildstash_upload.logging_config import get_logger
from buildstash_upload.registry_client import RegistryClient
from buildstash_upload.types import PartDescriptor, PartResult, UploadSession

logger = get_logger(__name__)


class PartTransport:
    """
    Requests a presigned URL for one part and streams its byte range there.

    Each call opens its own FileRange and storage connection and releases
    both before returning, whether the write succeeded or not.
    """

    def __init__(self, client: RegistryClient, file_path: str):
        self.client = client
        self.file_path = file_path

    def transfer_part(self, session: UploadSession, descriptor: PartDescriptor) -> PartResult:
        """
        Upload one part.

        Args:
            session: Negotiated session the part belongs to
            descriptor: Byte range and part number to send

        Returns:
            PartResult carrying the store's ETag ("" when absent)

        Raises:
            NegotiationError: If the presigned part URL could not be obtained
            PartTransferError: If the write to storage failed
        """
        url = self.client.request_part_url(
            session.session_id,
            descriptor.part_number,
            descriptor.length
        )

        headers = {'Content-Type': PART_CONTENT_TYPE}
        with FileRange(self.file_path, descriptor.start, descriptor.end) as window:
            response_headers = self.client.put_object(
                url,
                content=window,
                headers=headers,
                content_length=descriptor.length
            )

        etag = response_headers.get('ETag')
        if not etag:
            logger.warning(
                f"No ETag returned for {session.role.value} part {descriptor.part_number}, "
                f"continuing with empty acknowledgment"
            )
            etag = ''

        return PartResult(part_number=descriptor.part_number, etag=etag)
