import io
import struct

import pytest

from tfrecordio import RecordIterator
from tfrecordio.core.checksum import checksum, mask, unmask, MASK_DELTA
from tfrecordio.core.frame import (
    HEADER_SIZE, FOOTER_SIZE, frame_size, encode_header, decode_header,
    encode_footer, verify_footer,
)
from tfrecordio.core.model import ChecksumError, Summary
from tfrecordio.core.util import summary_asdict, record_asdict


class TestChecksum:
    """Masked CRC-32C."""

    def test_empty_input(self):
        # crc32c(b"") == 0, so only the delta remains
        assert checksum(b"") == MASK_DELTA == 0xA282EAD8

    def test_check_string(self):
        # crc32c(b"123456789") == 0xE3069283, rotated right 15 and offset
        assert checksum(b"123456789") == 0xC78AB0E5

    def test_accepts_bytes_like(self):
        data = b"123456789"
        assert checksum(bytearray(data)) == checksum(data)
        assert checksum(memoryview(data)) == checksum(data)

    def test_mask_rotation_and_wrap(self):
        assert mask(0) == 0xA282EAD8
        assert mask(1) == (1 << 17) + 0xA282EAD8
        # addition wraps modulo 2**32
        assert mask(0xFFFFFFFF) == 0xA282EAD7

    def test_unmask_inverts_mask(self):
        for crc in (0, 1, 0xE3069283, 0xFFFFFFFF, 0x80000000):
            assert unmask(mask(crc)) == crc


class TestFrame:
    """Header and footer codec."""

    def test_header_layout(self):
        header = encode_header(5)
        assert len(header) == HEADER_SIZE
        assert header[:8] == struct.pack("<Q", 5)
        assert struct.unpack("<I", header[8:])[0] == checksum(header[:8])

    def test_decode_header(self):
        assert decode_header(encode_header(0)) == 0
        assert decode_header(encode_header(2**40 + 3)) == 2**40 + 3

    def test_decode_header_bad_checksum(self):
        header = bytearray(encode_header(5))
        header[8] ^= 0x01
        with pytest.raises(ChecksumError) as exc_info:
            decode_header(bytes(header))
        assert exc_info.value.kind == "length"

    def test_decode_header_corrupt_length(self):
        header = bytearray(encode_header(5))
        header[0] = 6
        with pytest.raises(ChecksumError):
            decode_header(bytes(header))

    def test_decode_header_wrong_size(self):
        with pytest.raises(ValueError):
            decode_header(b"\x00" * 11)

    def test_encode_header_out_of_range(self):
        with pytest.raises(ValueError):
            encode_header(-1)
        with pytest.raises(ValueError):
            encode_header(2**64)

    def test_footer(self):
        footer = encode_footer(b"Hello")
        assert len(footer) == FOOTER_SIZE
        verify_footer(b"Hello", footer)
        with pytest.raises(ChecksumError) as exc_info:
            verify_footer(b"Jello", footer)
        assert exc_info.value.kind == "payload"
        assert exc_info.value.expected == checksum(b"Hello")
        assert exc_info.value.actual == checksum(b"Jello")

    def test_frame_size(self):
        assert frame_size(0) == 16
        assert frame_size(5) == 21
        assert frame_size(6) == 22

    def test_known_payload_footers(self):
        # CRC-32C reference vectors from RFC 3720 B.4, masked
        assert encode_footer(bytes(32)) == b"\xfa\xff\xd7\x0f"
        assert encode_footer(b"\xff" * 32) == b"\x29\xb0\x09\xf9"

    def test_known_frame_reads_back(self):
        length = b"\x20\x00\x00\x00\x00\x00\x00\x00"
        frame = (length + struct.pack("<I", checksum(length))
                 + bytes(32) + b"\xfa\xff\xd7\x0f")
        assert encode_header(32) + bytes(32) + encode_footer(bytes(32)) == frame

        it = RecordIterator(io.BytesIO(frame), 64)
        assert list(it) == [bytes(32)]
        assert it.err is None


class TestUtil:
    """Test utility functions."""

    def test_summary_asdict_success(self):
        res = Summary(success=True, records=3, payload_bytes=15, error=None, bytes_read=63)
        assert summary_asdict(res) == {
            "records": 3, "payload_bytes": 15, "success": True, "bytes_read": 63,
        }

    def test_summary_asdict_fields(self):
        res = Summary(success=True, records=3, payload_bytes=15, error=None, bytes_read=63)
        assert summary_asdict(res, fields=["records"]) == {
            "records": 3, "success": True, "bytes_read": 63,
        }

    def test_summary_asdict_failure(self):
        res = Summary(success=False, records=1, payload_bytes=5, error="boom", bytes_read=30)
        assert summary_asdict(res) == {
            "success": False, "error": "boom", "records": 1, "bytes_read": 30,
        }

    def test_record_asdict(self):
        assert record_asdict(0, b"Hi") == {"index": 0, "length": 2, "data_b64": "SGk="}
        assert record_asdict(4, b"Hi", text=True) == {"index": 4, "length": 2, "text": "Hi"}
