from __future__ import annotations
from dataclasses import dataclass


class TFRecordError(Exception):
    """Base class for errors raised while reading or writing TFRecords."""
    pass


class ChecksumError(TFRecordError, ValueError):
    """Raised when a stored checksum does not match the recomputed one.

    Indicates data corruption or a stream that is not in TFRecord format.
    """

    def __init__(self, kind: str, expected: int, actual: int):
        self.kind = kind            # "length" or "payload"
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"checksum error in TFRecord {kind}: stored 0x{expected:08x}, computed 0x{actual:08x}"
        )


class TruncatedRecordError(TFRecordError, IOError):
    """Raised when the stream ends part-way through a frame."""
    pass


class EndOfStream(EOFError):
    """Raised by a byte source when no bytes at all are left to read."""
    pass


_EMPTY = memoryview(b"")


@dataclass(frozen=True, slots=True)
class Step:
    """Outcome of one advance of a record iterator.

    ``value`` is a borrowed view, valid until the iterator advances again.
    """
    has_next: bool
    value: memoryview = _EMPTY
    error: BaseException | None = None


@dataclass(slots=True)
class Summary:
    success: bool
    records: int
    payload_bytes: int
    error: str | None
    bytes_read: int            # filled by the byte source
