"""Shared data type definitions (UploadSession, PartDescriptor, UploadManifest, etc.)."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Union

from buildstash_upload.exceptions import ManifestSealedError


class FileRole(str, Enum):
    """Which artifact of a build a file is."""

    PRIMARY = "primary"
    EXPANSION = "expansion"


@dataclass(frozen=True)
class UploadSession:
    """
    One negotiated transfer of a single file.
    """
    session_id: str
    role: FileRole
    total_size: int


@dataclass(frozen=True)
class PartDescriptor:
    """
    Inclusive byte range of one planned part.
    """
    part_number: int
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1


@dataclass(frozen=True)
class PartResult:
    """
    Outcome of uploading one part.

    An empty etag means the store acknowledged the write without one.
    Failed parts raise instead of producing a result, so success is True
    for every instance the driver returns.
    """
    part_number: int
    etag: str
    success: bool = True
    attempts: int = 1


@dataclass(frozen=True)
class DirectUpload:
    """Whole-file presigned write target."""

    url: str
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ChunkedUpload:
    """Multipart parameters dictated by the registry."""

    number_of_parts: int
    part_size_bytes: int


UploadTarget = Union[DirectUpload, ChunkedUpload]


class UploadManifest:
    """Ordered, append-only list of completed parts for one file."""

    def __init__(self, role: FileRole):
        self.role = role
        self._parts: List[PartResult] = []
        self._sealed = False

    def append(self, result: PartResult) -> None:
        """
        Record a completed part.

        Args:
            result: PartResult for the next part in sequence

        Raises:
            ManifestSealedError: If the manifest was already sealed
            ValueError: If the part number does not follow the last one
        """
        if self._sealed:
            raise ManifestSealedError(f"{self.role.value} manifest is sealed")
        if self._parts and result.part_number <= self._parts[-1].part_number:
            raise ValueError(
                f"Part {result.part_number} appended after part {self._parts[-1].part_number}"
            )
        self._parts.append(result)

    def seal(self) -> None:
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def part_numbers(self) -> List[int]:
        return [part.part_number for part in self._parts]

    def to_multipart_chunks(self) -> List[dict]:
        """Render the manifest in the shape the verify endpoint expects."""
        return [
            {"PartNumber": part.part_number, "ETag": part.etag}
            for part in self._parts
        ]

    def __len__(self) -> int:
        return len(self._parts)

    def __iter__(self) -> Iterator[PartResult]:
        return iter(self._parts)
