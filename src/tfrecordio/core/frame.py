from __future__ import annotations
import struct

from .checksum import checksum
from .model import ChecksumError

# Frame: [length u64][masked crc of length u32][payload][masked crc of payload u32]
# Byte order is not stated by the format; every known writer uses little-endian.
LENGTH_SIZE = 8
CRC_SIZE = 4
HEADER_SIZE = LENGTH_SIZE + CRC_SIZE
FOOTER_SIZE = CRC_SIZE
FRAME_OVERHEAD = HEADER_SIZE + FOOTER_SIZE
MAX_RECORD_LENGTH = 2**64 - 1

_LENGTH = struct.Struct("<Q")
_CRC = struct.Struct("<I")


def frame_size(length: int) -> int:
    """Number of bytes a payload of `length` bytes occupies on the stream."""
    return length + FRAME_OVERHEAD


def encode_header(length: int) -> bytes:
    if not 0 <= length <= MAX_RECORD_LENGTH:
        raise ValueError(f"Record length {length} does not fit in 64 bits")
    raw_len = _LENGTH.pack(length)
    return raw_len + _CRC.pack(checksum(raw_len))


def decode_header(header) -> int:
    """Return the payload length stored in a 12-byte header.

    The length checksum is always verified; a corrupted length must never
    drive an allocation.
    """
    if len(header) != HEADER_SIZE:
        raise ValueError(f"Header must be {HEADER_SIZE} bytes, got {len(header)}")
    (length,) = _LENGTH.unpack_from(header, 0)
    (stored,) = _CRC.unpack_from(header, LENGTH_SIZE)
    actual = checksum(header[:LENGTH_SIZE])
    if actual != stored:
        raise ChecksumError("length", stored, actual)
    return length


def encode_footer(payload) -> bytes:
    return _CRC.pack(checksum(payload))


def verify_footer(payload, footer) -> None:
    (stored,) = _CRC.unpack_from(footer, 0)
    actual = checksum(payload)
    if actual != stored:
        raise ChecksumError("payload", stored, actual)
