"""Project-wide constants (endpoints, defaults, stream sizes)."""

DEFAULT_API_BASE_URL: str = "https://app.buildstash.com/api/v1"

UPLOAD_REQUEST_ENDPOINT: str = "/upload/request"
UPLOAD_PART_REQUEST_ENDPOINT: str = "/upload/request/multipart"
UPLOAD_VERIFY_ENDPOINT: str = "/upload/verify"

DEFAULT_SOURCE: str = "ghactions"

STRUCTURE_FILE: str = "file"
STRUCTURE_FILE_EXPANSION: str = "file+expansion"
SUPPORTED_STRUCTURES = (STRUCTURE_FILE, STRUCTURE_FILE_EXPANSION)

PART_CONTENT_TYPE: str = "application/octet-stream"
STREAM_READ_SIZE_BYTES: int = 64 * 1024

PART_MAX_ATTEMPTS: int = 2
PART_RETRY_BACKOFF_SECONDS: float = 0.5

BYTES_PER_MB: int = 1024 * 1024
