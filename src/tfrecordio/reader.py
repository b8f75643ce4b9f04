"""Sequential TFRecord readers.

Both iterators pull one frame per advance, verify the length checksum before
allocating anything, and optionally verify the payload checksum.  Payloads are
read into a reusable scratch buffer when they fit, so the borrowed ``value``
is only valid until the next advance; use ``value_bytes()`` (or plain
iteration, which yields copies) to keep a record around.

Any failure is terminal: the iterator records the error, stops touching the
source, and reports the same outcome on every later advance.
"""

from __future__ import annotations

import warnings

from .core.frame import HEADER_SIZE, FOOTER_SIZE, decode_header, verify_footer
from .core.model import EndOfStream, Step, TFRecordError, TruncatedRecordError
from .io.local import LocalByteSource, LocalAsyncByteSource

DEFAULT_BUF_SIZE = 64 * 1024  # 64 KB; upper bound of a "typical" record

_EMPTY = memoryview(b"")

# Errors a source or the frame codec may raise for a bad stream.
# Anything else is a bug and propagates.
_STREAM_ERRORS = (OSError, TFRecordError)


def _as_source(source, file_wrapper):
    """Wrap a binary file object; pass ByteSources through. Paths are not opened here."""
    if hasattr(source, 'read_exact'):
        return source
    if hasattr(source, 'read'):
        return file_wrapper(source)
    raise TypeError(f"Expected a byte source or binary file object, got {type(source).__name__}; "
                    "use read_records() for paths and URLs")


class _IteratorState:
    """Scratch buffer and sticky terminal state shared by both iterators."""

    def __init__(self, buf_size: int, check_data_crc: bool):
        if buf_size < 0:
            warnings.warn(f"Negative buffer size {buf_size} ignored, no scratch buffer allocated")
            buf_size = 0
        self.check_data_crc = check_data_crc
        self.records_read = 0
        self._scratch = bytearray(buf_size)
        self._value = _EMPTY
        self._terminal: Step | None = None

    # --- accessors -------------------------------------------------------- #
    @property
    def value(self) -> memoryview:
        """Current record, borrowed. Valid until the next advance."""
        return self._value

    def value_bytes(self) -> bytes:
        """Copy of the current record."""
        return bytes(self._value)

    @property
    def err(self) -> BaseException | None:
        """Error that stopped iteration; None while running or after a clean end."""
        return self._terminal.error if self._terminal is not None else None

    @property
    def done(self) -> bool:
        return self._terminal is not None

    # --- helpers ---------------------------------------------------------- #
    def _payload_view(self, length: int) -> memoryview:
        if length <= len(self._scratch):
            return memoryview(self._scratch)[:length]
        try:
            return memoryview(bytearray(length))
        except (MemoryError, OverflowError):
            raise TFRecordError(f"Cannot allocate {length} bytes for record") from None

    def _finish(self, error: BaseException | None) -> Step:
        self._value = _EMPTY
        self._terminal = Step(False, _EMPTY, error)
        return self._terminal

    def _accept(self, view: memoryview) -> Step:
        self._value = view
        self.records_read += 1
        return Step(True, view, None)

    @staticmethod
    def _truncated(exc: EndOfStream) -> TruncatedRecordError:
        return TruncatedRecordError(f"Stream ended inside a record: {exc}")


class RecordIterator(_IteratorState):
    """Iterate TFRecords from a ByteSource or binary file object.

    `buf_size` should be the upper bound of the common record size: records up
    to that size reuse one preallocated buffer, larger ones get their own.
    Checking the payload CRC is recommended; it is rarely the bottleneck.
    """

    def __init__(self, source, buf_size: int = 0, check_data_crc: bool = True):
        super().__init__(buf_size, check_data_crc)
        self._source = _as_source(source, LocalByteSource)

    def advance(self) -> Step:
        """Read the next record from the underlying source."""
        if self._terminal is not None:
            return self._terminal
        self._value = _EMPTY

        try:
            header = self._source.read_exact(HEADER_SIZE)
        except EndOfStream:
            return self._finish(None)
        except _STREAM_ERRORS as e:
            return self._finish(e)

        try:
            length = decode_header(header)
            view = self._payload_view(length)
            self._source.readinto_exact(view)
            footer = self._source.read_exact(FOOTER_SIZE)
            if self.check_data_crc:
                verify_footer(view, footer)
        except EndOfStream as e:
            return self._finish(self._truncated(e))
        except _STREAM_ERRORS as e:
            return self._finish(e)
        return self._accept(view)

    def next(self) -> bool:
        """Advance and report whether a record is available in `value`."""
        return self.advance().has_next

    def __iter__(self):
        return self

    def __next__(self) -> bytes:
        step = self.advance()
        if step.has_next:
            return bytes(step.value)
        if step.error is not None:
            raise step.error
        raise StopIteration


class AsyncRecordIterator(_IteratorState):
    """Iterate TFRecords from an AsyncByteSource. Same rules as RecordIterator."""

    def __init__(self, source, buf_size: int = 0, check_data_crc: bool = True):
        super().__init__(buf_size, check_data_crc)
        self._source = _as_source(source, LocalAsyncByteSource)

    async def advance(self) -> Step:
        if self._terminal is not None:
            return self._terminal
        self._value = _EMPTY

        try:
            header = await self._source.read_exact(HEADER_SIZE)
        except EndOfStream:
            return self._finish(None)
        except _STREAM_ERRORS as e:
            return self._finish(e)

        try:
            length = decode_header(header)
            view = self._payload_view(length)
            await self._source.readinto_exact(view)
            footer = await self._source.read_exact(FOOTER_SIZE)
            if self.check_data_crc:
                verify_footer(view, footer)
        except EndOfStream as e:
            return self._finish(self._truncated(e))
        except _STREAM_ERRORS as e:
            return self._finish(e)
        return self._accept(view)

    async def next(self) -> bool:
        return (await self.advance()).has_next

    def __aiter__(self):
        return self

    async def __anext__(self) -> bytes:
        step = await self.advance()
        if step.has_next:
            return bytes(step.value)
        if step.error is not None:
            raise step.error
        raise StopAsyncIteration
