"""Buildstash build-artifact upload client."""

from buildstash_upload.chunked_upload import ChunkedUploadOrchestrator
from buildstash_upload.chunking import plan_parts
from buildstash_upload.part_driver import RetryingPartDriver
from buildstash_upload.part_transport import PartTransport
from buildstash_upload.retry import RetryPolicy
from buildstash_upload.strategy import TransferStrategySelector
from buildstash_upload.uploader import Uploader

__all__ = [
    "ChunkedUploadOrchestrator",
    "PartTransport",
    "RetryPolicy",
    "RetryingPartDriver",
    "TransferStrategySelector",
    "Uploader",
    "plan_parts",
]
