"""tfrecordio - a streaming reader and writer for TFRecord files."""

from .core.model import (                                              # re-export
    Step, Summary, TFRecordError, ChecksumError, TruncatedRecordError, EndOfStream,
)
from .core.checksum import checksum
from .io import open_source, open_source_async, open_sink
from .reader import RecordIterator, AsyncRecordIterator, DEFAULT_BUF_SIZE
from .writer import RecordWriter


def read_records(source, *, buf_size: int = DEFAULT_BUF_SIZE, check_data_crc: bool = True):
    """Yield every record (as bytes) from a path, URL, file object or ByteSource.

    Raises the iterator's error, if any, after the last good record.
    """
    src = open_source(source)
    try:
        yield from RecordIterator(src, buf_size, check_data_crc)
    finally:
        # Only close what we opened ourselves
        if src is not source:
            src.close()


async def read_records_async(source, *, buf_size: int = DEFAULT_BUF_SIZE, check_data_crc: bool = True):
    """Async counterpart of read_records."""
    src = await open_source_async(source)
    try:
        async for record in AsyncRecordIterator(src, buf_size, check_data_crc):
            yield record
    finally:
        if src is not source:
            await src.close()


def write_records(target, records, *, append: bool = False) -> int:
    """Write records to a path, file object or ByteSink; return payload bytes written."""
    sink = open_sink(target, append=append)
    try:
        return RecordWriter(sink).write_many(records)
    finally:
        if sink is not target:
            sink.close()


def scan(source, *, buf_size: int = DEFAULT_BUF_SIZE, check_data_crc: bool = True) -> Summary:
    """Validate a whole stream and summarise it without raising on bad data."""
    records = payload_bytes = 0
    try:
        src = open_source(source)
    except (OSError, ValueError) as e:
        return Summary(False, 0, 0, str(e), 0)

    try:
        it = RecordIterator(src, buf_size, check_data_crc)
        while it.next():
            records += 1
            payload_bytes += len(it.value)
    finally:
        if src is not source:
            src.close()

    error = it.err
    return Summary(error is None, records, payload_bytes,
                   None if error is None else f"{type(error).__name__}: {error}",
                   getattr(src, 'bytes_read', 0))


__all__ = [
    "read_records", "read_records_async", "write_records", "scan", "checksum",
    "RecordIterator", "AsyncRecordIterator", "RecordWriter",
    "open_source", "open_source_async", "open_sink",
    "Step", "Summary", "TFRecordError", "ChecksumError", "TruncatedRecordError", "EndOfStream",
]
