"""End-to-end upload flow: negotiate, transfer, verify."""

import time
from typing import Callable, Optional

from buildstash_upload.chunked_upload import ChunkedUploadOrchestrator
from buildstash_upload.config import Config
from buildstash_upload.exceptions import NegotiationError
from buildstash_upload.inputs import UploadInputs
from buildstash_upload.logging_config import get_logger
from buildstash_upload.registry_client import RegistryClient
from buildstash_upload.schemas import (
    FileInfo,
    MultipartChunk,
    UploadRequestPayload,
    VerifyUploadRequest,
    VerifyUploadResponse,
)
from buildstash_upload.strategy import TransferStrategySelector
from buildstash_upload.types import FileRole, UploadManifest, UploadSession
from buildstash_upload.utils import inspect_file

logger = get_logger(__name__)


class Uploader:
    """Runs one complete upload of a primary artifact and optional expansion."""

    def __init__(
        self,
        config: Config,
        inputs: UploadInputs,
        client: Optional[RegistryClient] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize the uploader.

        Args:
            config: Client configuration (base URL, timeouts, retry policy)
            inputs: Files and build metadata for this run
            client: Optional RegistryClient for dependency injection (testing)
            sleep: Sleep function used between part retries
        """
        self.config = config
        self.inputs = inputs
        self._owns_client = client is None
        self.client = client or RegistryClient(config, inputs.api_key)
        orchestrator = ChunkedUploadOrchestrator(
            self.client,
            policy=config.get_retry_policy(),
            sleep=sleep
        )
        self.selector = TransferStrategySelector(self.client, orchestrator)

    def build_payload(
        self,
        primary_name: str,
        primary_size: int,
        expansion: Optional[tuple[str, int]] = None
    ) -> UploadRequestPayload:
        """Assemble the negotiate request, leaving out blank optional fields."""
        descriptive = {
            name: value for name, value in self.inputs.descriptive_fields().items() if value
        }
        expansion_files = None
        if expansion is not None:
            expansion_files = [FileInfo(filename=expansion[0], size_bytes=expansion[1])]

        return UploadRequestPayload(
            structure=self.inputs.structure,
            primary_file=FileInfo(filename=primary_name, size_bytes=primary_size),
            expansion_files=expansion_files,
            **descriptive
        )

    def run(self) -> VerifyUploadResponse:
        """
        Upload the configured files and verify the session.

        Returns:
            Registry's verification response

        Raises:
            ConfigurationError: If a file is missing before any transfer
            NegotiationError: If the registry rejects a request
            PartUploadFailedError: If a part of a chunked file cannot be sent
        """
        try:
            return self._run()
        finally:
            if self._owns_client:
                self.client.close()

    def _run(self) -> VerifyUploadResponse:
        primary_path = self.inputs.primary_file_path
        primary_name, primary_size = inspect_file(primary_path, 'Primary')

        expansion = None
        expansion_path = self.inputs.expansion_file_path
        if self.inputs.has_expansion:
            expansion = inspect_file(expansion_path, 'Expansion')

        payload = self.build_payload(primary_name, primary_size, expansion)
        negotiated = self.client.request_upload(payload)
        session_id = negotiated.pending_upload_id

        primary_target = negotiated.primary_target()
        if primary_target is None:
            raise NegotiationError("Registry response has no upload instructions for the primary file")

        primary_manifest = self.selector.transfer(
            primary_path,
            primary_size,
            UploadSession(session_id, FileRole.PRIMARY, primary_size),
            primary_target
        )

        expansion_manifest = None
        if expansion is not None:
            expansion_target = negotiated.expansion_target()
            if expansion_target is None:
                raise NegotiationError("Registry response has no upload instructions for the expansion file")
            expansion_manifest = self.selector.transfer(
                expansion_path,
                expansion[1],
                UploadSession(session_id, FileRole.EXPANSION, expansion[1]),
                expansion_target
            )

        verify_request = VerifyUploadRequest(
            pending_upload_id=session_id,
            multipart_chunks=_manifest_chunks(primary_manifest),
            expansion_multipart_chunks=_manifest_chunks(expansion_manifest),
        )
        result = self.client.verify_upload(verify_request)
        logger.info("Upload completed and verified successfully!")
        return result


def _manifest_chunks(manifest: Optional[UploadManifest]) -> Optional[list[MultipartChunk]]:
    if manifest is None:
        return None
    return [MultipartChunk(**chunk) for chunk in manifest.to_multipart_chunks()]
