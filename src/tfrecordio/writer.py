"""TFRecord writer."""

from __future__ import annotations

from typing import Iterable

from .core.frame import encode_header, encode_footer
from .io import open_sink


class RecordWriter:
    """Frame records and append them to a ByteSink (or binary file object).

    The sink is never closed by the writer, so paths are rejected; use
    write_records() to write to a path.
    """

    def __init__(self, sink):
        if not (hasattr(sink, 'write_all') or hasattr(sink, 'write')):
            raise TypeError(f"RecordWriter needs a ByteSink or binary file object, got {type(sink).__name__}; "
                            "use write_records() for paths")
        self._sink = open_sink(sink)

    @property
    def bytes_written(self) -> int:
        """Bytes pushed to the sink, frame overhead included."""
        return self._sink.bytes_written

    def write(self, record) -> int:
        """Write one record and return its payload length.

        A failing sub-write propagates immediately; the sink may then hold a
        partial frame.
        """
        payload = memoryview(record).cast('B')
        self._sink.write_all(encode_header(len(payload)))
        self._sink.write_all(payload)
        self._sink.write_all(encode_footer(payload))
        return len(payload)

    def write_many(self, records: Iterable) -> int:
        return sum(self.write(r) for r in records)
