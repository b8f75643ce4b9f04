"""Local byte sources and sinks over paths and binary file objects."""

import asyncio
from pathlib import Path
from typing import BinaryIO, Union

from ..core.model import EndOfStream, TruncatedRecordError


def _short_read(requested: int, got: int) -> Exception:
    if got == 0:
        return EndOfStream(f"End of stream: requested {requested} bytes, none left")
    return TruncatedRecordError(f"Not enough data: requested {requested} bytes, "
                                f"but stream only had {got}")


class LocalByteSource:
    """Sequential reader over a local file or an already-open binary stream."""

    def __init__(self, source: Union[Path, str, BinaryIO]):
        self.bytes_read = 0
        self.requests_made = 0
        self._should_close_file = False

        if hasattr(source, 'read'):
            # BinaryIO object, owned by the caller
            self._file = source
        else:
            # Path or str
            self._file = open(source, 'rb')
            self._should_close_file = True

    def readinto_exact(self, view: memoryview) -> None:
        """Fill `view` completely from the current position."""
        self.requests_made += 1
        requested = len(view)
        got = 0
        readinto = getattr(self._file, 'readinto', None)
        while got < requested:
            if readinto is not None:
                n = readinto(view[got:])
            else:
                chunk = self._file.read(requested - got)
                n = len(chunk) if chunk is not None else None
                if n:
                    view[got:got + n] = chunk
            if n is None:
                raise IOError("Source has no data available (non-blocking stream?)")
            if n == 0:
                break
            got += n
        self.bytes_read += got
        if got < requested:
            raise _short_read(requested, got)

    def read_exact(self, length: int) -> bytes:
        """Return exactly `length` bytes from the current position."""
        buf = bytearray(length)
        self.readinto_exact(memoryview(buf))
        return bytes(buf)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Close the file if we opened it."""
        if self._should_close_file and self._file is not None:
            self._file.close()
            self._file = None


class LocalByteSink:
    """Append-only writer over a local file or an already-open binary stream."""

    def __init__(self, target: Union[Path, str, BinaryIO], *, append: bool = False):
        self.bytes_written = 0
        self._should_close_file = False

        if hasattr(target, 'write'):
            self._file = target
        else:
            self._file = open(target, 'ab' if append else 'wb')
            self._should_close_file = True

    def write_all(self, data) -> None:
        """Write every byte of `data`, looping over short writes."""
        view = memoryview(data).cast('B')
        while view:
            n = self._file.write(view)
            if not n:
                # None: non-blocking stream, 0: stream is full
                raise IOError("Sink accepted no data")
            self.bytes_written += n
            view = view[n:]

    def flush(self):
        self._file.flush()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Flush, and close the file if we opened it."""
        if self._file is None:
            return
        if self._should_close_file:
            self._file.close()
            self._file = None
        else:
            self._file.flush()


class LocalAsyncByteSource:
    """Asynchronous local source - thin wrapper around the sync source."""

    def __init__(self, source: Union[Path, str, BinaryIO]):
        self._sync_source = LocalByteSource(source)

    @property
    def bytes_read(self) -> int:
        return self._sync_source.bytes_read

    @property
    def requests_made(self) -> int:
        return self._sync_source.requests_made

    async def read_exact(self, length: int) -> bytes:
        return await asyncio.to_thread(self._sync_source.read_exact, length)

    async def readinto_exact(self, view: memoryview) -> None:
        await asyncio.to_thread(self._sync_source.readinto_exact, view)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the underlying sync source."""
        await asyncio.to_thread(self._sync_source.close)


def open_local_source(source: Union[Path, str, BinaryIO]) -> LocalByteSource:
    """Create a synchronous local byte source."""
    return LocalByteSource(source)


async def open_local_source_async(source: Union[Path, str, BinaryIO]) -> LocalAsyncByteSource:
    """Create an asynchronous local byte source."""
    return LocalAsyncByteSource(source)


def open_local_sink(target: Union[Path, str, BinaryIO], *, append: bool = False) -> LocalByteSink:
    """Create a local byte sink."""
    return LocalByteSink(target, append=append)
