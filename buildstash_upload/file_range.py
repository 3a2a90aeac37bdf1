"""Bounded read window over a byte range of a local file."""

from typing import Iterator

from buildstash_upload.constants import STREAM_READ_SIZE_BYTES


class FileRange:
    """
    File-like reader restricted to the inclusive range [start, end].

    Reads never return bytes past `end`. Iterating yields the remaining
    bytes of the window in pieces of at most `read_size`, which lets the
    window be handed to httpx as a streamed request body.
    """

    def __init__(
        self,
        file_path: str,
        start: int,
        end: int,
        read_size: int = STREAM_READ_SIZE_BYTES
    ):
        """
        Initialize the range reader. The file is opened lazily.

        Args:
            file_path: Path to the source file
            start: First byte offset (inclusive)
            end: Last byte offset (inclusive)
            read_size: Maximum bytes returned per iteration step
        """
        if start < 0 or end < start:
            raise ValueError(f"Invalid byte range [{start}, {end}]")
        self.file_path = file_path
        self.start = start
        self.end = end
        self.read_size = read_size
        self._file = None
        self._remaining = end - start + 1
        self._closed = False

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    @property
    def closed(self) -> bool:
        return self._closed

    def open(self) -> 'FileRange':
        """Open the underlying file and seek to the start of the window."""
        if self._closed:
            raise ValueError("FileRange is closed and cannot be reopened")
        if self._file is None:
            self._file = open(self.file_path, 'rb')
            self._file.seek(self.start)
        return self

    def read(self, size: int = -1) -> bytes:
        """
        Read bytes from the window.

        Args:
            size: Maximum number of bytes (-1 reads the rest of the window)

        Returns:
            Bytes read, b'' once the window is exhausted

        Raises:
            IOError: If the file ends before the window does
        """
        if self._file is None:
            self.open()
        if self._remaining <= 0:
            return b''

        to_read = self._remaining if size is None or size < 0 else min(size, self._remaining)
        data = self._file.read(to_read)
        if not data:
            raise IOError(
                f"Unexpected end of file {self.file_path} with {self._remaining} bytes left in range"
            )
        self._remaining -= len(data)
        return data

    def __iter__(self) -> Iterator[bytes]:
        while True:
            chunk = self.read(self.read_size)
            if not chunk:
                break
            yield chunk

    def close(self) -> None:
        """Close the underlying file."""
        self._closed = True
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> 'FileRange':
        """Enter context manager and open the window."""
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager and ensure file is closed."""
        self.close()

