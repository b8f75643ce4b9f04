"""Base protocols and shared settings for the I/O layer."""

from typing import Protocol, runtime_checkable


DEFAULT_CHUNK_SIZE = 64 * 1024  # 64 KB per streamed network read
HTTP_TIMEOUT = 30.0
HTTP_ASYNC_TIMEOUT = 60.0


@runtime_checkable
class ByteSource(Protocol):
    """Protocol for sequential synchronous byte sources."""

    bytes_read: int  # running total

    def read_exact(self, length: int) -> bytes:
        """Return exactly `length` bytes from the current position.
        Nothing left at all → raise EndOfStream.
        Fewer than `length` bytes left → raise TruncatedRecordError.
        """
        ...

    def readinto_exact(self, view: memoryview) -> None:
        """Fill `view` completely, with the same error rules as read_exact."""
        ...


@runtime_checkable
class AsyncByteSource(Protocol):
    """Protocol for sequential asynchronous byte sources."""

    bytes_read: int  # running total

    async def read_exact(self, length: int) -> bytes:
        ...

    async def readinto_exact(self, view: memoryview) -> None:
        ...


@runtime_checkable
class ByteSink(Protocol):
    """Protocol for append-only byte sinks."""

    bytes_written: int  # running total

    def write_all(self, data) -> None:
        """Write every byte of `data` or raise."""
        ...
