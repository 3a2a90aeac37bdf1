"""Part planning for multipart uploads."""

import math
from typing import List, Optional

from buildstash_upload.constants import BYTES_PER_MB
from buildstash_upload.exceptions import ChunkPlanError
from buildstash_upload.types import PartDescriptor


def part_size_from_mb(part_size_mb: float) -> int:
    """
    Convert the registry's part size in MB to bytes.

    Args:
        part_size_mb: Part size as reported in chunked_part_size_mb

    Returns:
        Part size in bytes (binary megabytes)
    """
    size = int(part_size_mb * BYTES_PER_MB)
    if size <= 0:
        raise ChunkPlanError(f"Invalid part size: {part_size_mb} MB")
    return size


def count_parts(file_size: int, part_size_bytes: int) -> int:
    """Number of parts needed to cover file_size bytes."""
    return math.ceil(file_size / part_size_bytes)


def plan_parts(
    file_size: int,
    part_size_bytes: int,
    number_of_parts: Optional[int] = None
) -> List[PartDescriptor]:
    """
    Split a file into contiguous, 1-numbered inclusive byte ranges.

    When the registry dictated the part count, ranges are produced for
    exactly that count so numbering matches what the server expects. The
    count must be consistent with the size: every part non-empty and the
    last part reaching the final byte.

    Args:
        file_size: Total file size in bytes (must be positive)
        part_size_bytes: Size of every part except possibly the last
        number_of_parts: Authoritative part count from the registry, if any

    Returns:
        Descriptors in ascending part-number order

    Raises:
        ChunkPlanError: If sizes are not positive or the count cannot cover the file
    """
    if file_size <= 0:
        raise ChunkPlanError(f"Cannot plan parts for file size {file_size}")
    if part_size_bytes <= 0:
        raise ChunkPlanError(f"Part size must be positive, got {part_size_bytes}")

    expected = count_parts(file_size, part_size_bytes)
    if number_of_parts is None:
        number_of_parts = expected
    elif number_of_parts != expected:
        raise ChunkPlanError(
            f"Registry requested {number_of_parts} part(s) of {part_size_bytes} bytes "
            f"for a {file_size} byte file, which needs {expected}"
        )

    parts = []
    for index in range(number_of_parts):
        start = index * part_size_bytes
        end = min(start + part_size_bytes, file_size) - 1
        parts.append(PartDescriptor(part_number=index + 1, start=start, end=end))
    return parts
