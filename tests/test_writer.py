"""Tests for RecordWriter."""

import io
import struct

import pytest

from tfrecordio import RecordWriter
from tfrecordio.core.checksum import checksum
from tfrecordio.io.local import LocalByteSink


class FlakySink:
    """ByteSink that fails on the n-th write_all call."""

    def __init__(self, fail_on: int):
        self.bytes_written = 0
        self.calls = 0
        self.data = bytearray()
        self._fail_on = fail_on

    def write_all(self, data) -> None:
        self.calls += 1
        if self.calls == self._fail_on:
            raise OSError("disk full")
        self.data.extend(data)
        self.bytes_written += len(data)


class TestRecordWriter:

    def test_write_returns_payload_length(self):
        buf = io.BytesIO()
        writer = RecordWriter(buf)
        assert writer.write(b"Hello") == 5
        assert writer.write(b"World!") == 6
        assert len(buf.getvalue()) == 21 + 22
        assert writer.bytes_written == 43

    def test_frame_layout(self):
        buf = io.BytesIO()
        RecordWriter(buf).write(b"Hello")
        data = buf.getvalue()

        assert struct.unpack("<Q", data[:8])[0] == 5
        assert struct.unpack("<I", data[8:12])[0] == checksum(data[:8])
        assert data[12:17] == b"Hello"
        assert struct.unpack("<I", data[17:])[0] == checksum(b"Hello")

    def test_empty_record(self):
        buf = io.BytesIO()
        assert RecordWriter(buf).write(b"") == 0
        data = buf.getvalue()
        assert len(data) == 16
        assert data[:8] == b"\x00" * 8
        assert struct.unpack("<I", data[12:])[0] == checksum(b"")

    def test_accepts_bytes_like(self):
        a, b = io.BytesIO(), io.BytesIO()
        RecordWriter(a).write(b"abc")
        RecordWriter(b).write(memoryview(bytearray(b"abc")))
        assert a.getvalue() == b.getvalue()

    def test_write_many(self):
        buf = io.BytesIO()
        assert RecordWriter(buf).write_many([b"a", b"bb", b""]) == 3
        assert len(buf.getvalue()) == 17 + 18 + 16

    @pytest.mark.parametrize("fail_on, kept", [(1, 0), (2, 12), (3, 17)])
    def test_failed_sub_write_leaves_partial_frame(self, fail_on, kept):
        sink = FlakySink(fail_on)
        with pytest.raises(OSError, match="disk full"):
            RecordWriter(sink).write(b"Hello")
        assert len(sink.data) == kept

    def test_does_not_close_sink(self):
        buf = io.BytesIO()
        sink = LocalByteSink(buf)
        RecordWriter(sink).write(b"x")
        assert not buf.closed

    def test_rejects_text(self):
        with pytest.raises(TypeError):
            RecordWriter(io.BytesIO()).write("text")

    def test_rejects_path(self, tmp_path):
        path = tmp_path / "out.tfrecord"
        with pytest.raises(TypeError, match="write_records"):
            RecordWriter(str(path))
        with pytest.raises(TypeError):
            RecordWriter(path)
        assert not path.exists()

    def test_path_through_owned_sink(self, tmp_path):
        path = tmp_path / "out.tfrecord"
        with LocalByteSink(path) as sink:
            RecordWriter(sink).write(b"Hello")
        assert path.stat().st_size == 21

    def test_full_sink_fails_fast(self):
        class FullStream(io.RawIOBase):
            def writable(self):
                return True

            def write(self, b):
                return 0

        with pytest.raises(OSError, match="accepted no data"):
            RecordWriter(FullStream()).write(b"Hello")
