"""HTTP client for the Buildstash registry API and presigned storage writes."""

from typing import Any, Iterable, Mapping, Optional, Type, TypeVar, Union

import httpx
from pydantic import BaseModel, ValidationError

from buildstash_upload.config import Config
from buildstash_upload.constants import (
    UPLOAD_PART_REQUEST_ENDPOINT,
    UPLOAD_REQUEST_ENDPOINT,
    UPLOAD_VERIFY_ENDPOINT,
)
from buildstash_upload.exceptions import NegotiationError, PartTransferError
from buildstash_upload.logging_config import get_logger
from buildstash_upload.schemas import (
    PartUrlRequest,
    PartUrlResponse,
    UploadRequestPayload,
    UploadRequestResponse,
    VerifyUploadRequest,
    VerifyUploadResponse,
)

logger = get_logger(__name__)

ResponseModel = TypeVar('ResponseModel', bound=BaseModel)


class RegistryClient:
    """HTTP client for the registry API with structured error handling."""

    def __init__(
        self,
        config: Config,
        api_key: str,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize registry client.

        Args:
            config: Configuration instance
            api_key: Buildstash API key sent as a bearer token
            transport: Optional httpx transport (used by tests to fake the network)
        """
        self.config = config
        self._transport = transport
        self.session = httpx.Client(
            base_url=config.get_base_url(),
            timeout=config.get_timeout(),
            headers={
                'Authorization': f'Bearer {api_key}',
                'Accept': 'application/json',
            },
            transport=transport
        )
        logger.debug(f"Initialized RegistryClient [base_url={config.get_base_url()}]")

    def _format_error(self, response: httpx.Response) -> str:
        """
        Map HTTP errors to user-friendly messages.

        Args:
            response: HTTP response object

        Returns:
            User-friendly error message
        """
        detail = None
        payload = _decode_json(response)
        if isinstance(payload, dict):
            detail = payload.get('message') or payload.get('error') or payload.get('detail')

        status_messages = {
            400: 'Bad request',
            401: 'Not authenticated, check the API key',
            403: 'Access forbidden',
            404: 'Not found',
            413: 'File too large',
            422: 'Request rejected',
            429: 'Rate limited',
            500: 'Server error',
            503: 'Service unavailable',
        }

        message = status_messages.get(response.status_code, f"HTTP {response.status_code}")
        return f"{message}: {detail}" if detail else message

    def _post(
        self,
        endpoint: str,
        payload: BaseModel,
        response_model: Type[ResponseModel]
    ) -> ResponseModel:
        """
        POST a JSON body to the registry and parse the response.

        Args:
            endpoint: API endpoint path
            payload: Request model, serialized without null fields
            response_model: Pydantic model for the response body

        Returns:
            Parsed response model

        Raises:
            NegotiationError: On network failure, non-2xx status or malformed body
        """
        logger.debug(f"Making request: POST {endpoint}")
        try:
            response = self.session.post(endpoint, json=payload.model_dump(exclude_none=True))
        except httpx.HTTPError as e:
            logger.error(f"Network error: POST {endpoint} error={type(e).__name__}: {e}")
            raise NegotiationError(f"Request to {endpoint} failed: {e}") from e

        logger.debug(f"Response received: POST {endpoint} status={response.status_code}")

        if not response.is_success:
            raise NegotiationError(
                f"Request to {endpoint} failed: {self._format_error(response)}",
                status_code=response.status_code,
                payload=_decode_json(response)
            )

        try:
            return response_model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise NegotiationError(
                f"Unexpected response from {endpoint}: {e}",
                status_code=response.status_code,
                payload=_decode_json(response)
            ) from e

    def request_upload(self, payload: UploadRequestPayload) -> UploadRequestResponse:
        """
        Negotiate an upload session for the primary (and expansion) file.

        Args:
            payload: File metadata and descriptive build fields

        Returns:
            Session id and per-file upload instructions
        """
        logger.info(f"Requesting upload session for {payload.primary_file.filename}")
        return self._post(UPLOAD_REQUEST_ENDPOINT, payload, UploadRequestResponse)

    def request_part_url(self, session_id: str, part_number: int, content_length: int) -> str:
        """
        Obtain a presigned write URL for one part of a multipart upload.

        Args:
            session_id: pending_upload_id from negotiation
            part_number: 1-based part number
            content_length: Exact byte length the part will carry

        Returns:
            Presigned part URL
        """
        request = PartUrlRequest(
            pending_upload_id=session_id,
            part_number=part_number,
            content_length=content_length
        )
        response = self._post(UPLOAD_PART_REQUEST_ENDPOINT, request, PartUrlResponse)
        return response.part_presigned_url

    def verify_upload(self, request: VerifyUploadRequest) -> VerifyUploadResponse:
        """Finalize a session so the registry registers the build."""
        logger.info(f"Verifying upload [pending_upload_id={request.pending_upload_id}]")
        return self._post(UPLOAD_VERIFY_ENDPOINT, request, VerifyUploadResponse)

    def put_object(
        self,
        url: str,
        content: Union[bytes, Iterable[bytes]],
        headers: Mapping[str, str],
        content_length: int
    ) -> httpx.Headers:
        """
        Stream a body to a presigned storage URL.

        A dedicated client is used per write so the connection is released
        as soon as the write finishes, and so the registry's bearer token is
        never sent to the storage host.

        Args:
            url: Presigned URL
            content: Body bytes or an iterable of byte chunks
            headers: Headers required by the presigned request
            content_length: Declared Content-Length of the body

        Returns:
            Response headers of the successful write

        Raises:
            PartTransferError: On network failure, stream error or non-2xx status
        """
        put_headers = dict(headers)
        put_headers['Content-Length'] = str(content_length)
        timeout = self.config.get_upload_timeout(content_length)

        try:
            with httpx.Client(timeout=timeout, transport=self._transport) as storage_client:
                response = storage_client.put(url, content=content, headers=put_headers)
        except httpx.HTTPError as e:
            raise PartTransferError(f"Write to storage failed: {type(e).__name__}: {e}") from e
        except IOError as e:
            raise PartTransferError(f"Reading source file failed: {e}") from e

        if not response.is_success:
            raise PartTransferError(
                f"Storage rejected write with status {response.status_code}",
                status_code=response.status_code
            )
        return response.headers

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()

    def __enter__(self) -> 'RegistryClient':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def _decode_json(response: httpx.Response) -> Any:
    """Best-effort decode of a response body for error reporting."""
    try:
        return response.json()
    except ValueError:
        return response.text or None
