"""Choice between single-shot and multipart transfer for one file."""

from typing import Optional

from buildstash_upload.chunked_upload import ChunkedUploadOrchestrator
from buildstash_upload.exceptions import ChunkPlanError
from buildstash_upload.file_range import FileRange
from buildstash_upload.logging_config import get_logger
from buildstash_upload.registry_client import RegistryClient
from buildstash_upload.types import (
    ChunkedUpload,
    DirectUpload,
    UploadManifest,
    UploadSession,
    UploadTarget,
)
from buildstash_upload.utils import format_file_size

logger = get_logger(__name__)

DIRECT_UPLOAD_FORWARDED_HEADERS = ('content-type', 'content-disposition')


class TransferStrategySelector:
    """Routes each file to a whole-file PUT or the chunked orchestrator."""

    def __init__(self, client: RegistryClient, orchestrator: ChunkedUploadOrchestrator):
        self.client = client
        self.orchestrator = orchestrator

    def transfer(
        self,
        file_path: str,
        file_size: int,
        session: UploadSession,
        target: UploadTarget
    ) -> Optional[UploadManifest]:
        """
        Transfer one file using the strategy the registry chose for it.

        Args:
            file_path: Local path of the file
            file_size: Size in bytes
            session: Negotiated session for this file
            target: DirectUpload or ChunkedUpload instructions

        Returns:
            Sealed manifest for chunked transfers, None for single-shot

        Raises:
            ChunkPlanError: If a chunked transfer was requested for an empty file
            TypeError: If target is not a known upload target
        """
        match target:
            case DirectUpload():
                self.upload_direct(file_path, file_size, session, target)
                return None
            case ChunkedUpload(number_of_parts=number_of_parts, part_size_bytes=part_size_bytes):
                if file_size == 0:
                    raise ChunkPlanError(
                        f"Registry requested a chunked upload for empty {session.role.value} file"
                    )
                return self.orchestrator.upload_chunked(
                    file_path,
                    file_size,
                    session,
                    number_of_parts,
                    part_size_bytes
                )
            case _:
                raise TypeError(f"Unknown upload target: {target!r}")

    def upload_direct(
        self,
        file_path: str,
        file_size: int,
        session: UploadSession,
        target: DirectUpload
    ) -> None:
        """Stream the whole file to its presigned URL in one request."""
        logger.info(f"Uploading {session.role.value} file ({format_file_size(file_size)})...")

        headers = {
            name: value
            for name, value in target.headers.items()
            if name.lower() in DIRECT_UPLOAD_FORWARDED_HEADERS
        }
        headers['x-amz-acl'] = 'private'

        if file_size == 0:
            self.client.put_object(target.url, content=b'', headers=headers, content_length=0)
            return

        with FileRange(file_path, 0, file_size - 1) as window:
            self.client.put_object(
                target.url,
                content=window,
                headers=headers,
                content_length=file_size
            )
