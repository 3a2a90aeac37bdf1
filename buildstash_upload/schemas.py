"""Pydantic schemas for registry requests and responses."""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from buildstash_upload.chunking import part_size_from_mb
from buildstash_upload.constants import DEFAULT_SOURCE
from buildstash_upload.types import ChunkedUpload, DirectUpload, UploadTarget


class FileInfo(BaseModel):
    """Name and size of one artifact announced to the registry."""
    filename: str
    size_bytes: int


class UploadRequestPayload(BaseModel):
    """Request model for negotiating an upload session."""
    structure: str
    primary_file: FileInfo
    expansion_files: Optional[List[FileInfo]] = None
    source: str = DEFAULT_SOURCE
    version_component_1_major: Optional[str] = None
    version_component_2_minor: Optional[str] = None
    version_component_3_patch: Optional[str] = None
    version_component_extra: Optional[str] = None
    version_component_meta: Optional[str] = None
    custom_build_number: Optional[str] = None
    ci_pipeline: Optional[str] = None
    ci_run_id: Optional[str] = None
    ci_run_url: Optional[str] = None
    ci_build_duration: Optional[str] = None
    vc_host_type: Optional[str] = None
    vc_host: Optional[str] = None
    vc_repo_name: Optional[str] = None
    vc_repo_url: Optional[str] = None
    vc_branch: Optional[str] = None
    vc_commit_sha: Optional[str] = None
    vc_commit_url: Optional[str] = None
    platform: Optional[str] = None
    stream: Optional[str] = None
    notes: Optional[str] = None


class PresignedData(BaseModel):
    """Direct write target for a whole file."""
    url: str
    headers: Dict[str, str] = Field(default_factory=dict)


class FileUploadTargetResponse(BaseModel):
    """Per-file upload instructions returned by the registry."""
    model_config = ConfigDict(extra='ignore')

    chunked_upload: bool = False
    chunked_number_parts: Optional[int] = None
    chunked_part_size_mb: Optional[float] = None
    presigned_data: Optional[PresignedData] = None

    def to_target(self) -> Optional[UploadTarget]:
        """
        Convert wire shape into the DirectUpload | ChunkedUpload variant.

        Returns:
            UploadTarget, or None when the registry sent neither form
        """
        if self.chunked_upload:
            if not self.chunked_number_parts or not self.chunked_part_size_mb:
                return None
            return ChunkedUpload(
                number_of_parts=self.chunked_number_parts,
                part_size_bytes=part_size_from_mb(self.chunked_part_size_mb),
            )
        if self.presigned_data is not None:
            return DirectUpload(
                url=self.presigned_data.url,
                headers=dict(self.presigned_data.headers),
            )
        return None


class UploadRequestResponse(BaseModel):
    """Response model for session negotiation."""
    model_config = ConfigDict(extra='ignore')

    pending_upload_id: str
    primary_file: Optional[FileUploadTargetResponse] = None
    primary_presigned_data: Optional[PresignedData] = None
    expansion_files: List[FileUploadTargetResponse] = Field(default_factory=list)

    def primary_target(self) -> Optional[UploadTarget]:
        if self.primary_file is not None:
            return self.primary_file.to_target()
        if self.primary_presigned_data is not None:
            return DirectUpload(
                url=self.primary_presigned_data.url,
                headers=dict(self.primary_presigned_data.headers),
            )
        return None

    def expansion_target(self) -> Optional[UploadTarget]:
        if not self.expansion_files:
            return None
        return self.expansion_files[0].to_target()


class PartUrlRequest(BaseModel):
    """Request model for a presigned part URL."""
    pending_upload_id: str
    part_number: int
    content_length: int


class PartUrlResponse(BaseModel):
    """Response model for a presigned part URL."""
    model_config = ConfigDict(extra='ignore')

    part_presigned_url: str


class MultipartChunk(BaseModel):
    """One entry of a completed-parts manifest."""
    PartNumber: int
    ETag: str


class VerifyUploadRequest(BaseModel):
    """Request model for finalizing an upload session."""
    pending_upload_id: str
    multipart_chunks: Optional[List[MultipartChunk]] = None
    expansion_multipart_chunks: Optional[List[MultipartChunk]] = None


class VerifyUploadResponse(BaseModel):
    """Response model for upload verification."""
    model_config = ConfigDict(extra='ignore', coerce_numbers_to_str=True)

    build_id: Optional[str] = None
    pending_processing: bool = False
    build_info_url: Optional[str] = None
    download_url: Optional[str] = None
