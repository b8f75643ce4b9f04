"""Masked CRC-32C as stored in TFRecord frames."""

from __future__ import annotations

import crc32c

MASK_DELTA = 0xA282EAD8
_U32 = 0xFFFFFFFF


def mask(crc: int) -> int:
    """Rotate a raw CRC-32C right by 15 bits and add the TFRecord delta."""
    crc &= _U32
    rotated = ((crc >> 15) | (crc << 17)) & _U32
    return (rotated + MASK_DELTA) & _U32


def unmask(masked: int) -> int:
    """Inverse of :func:`mask`."""
    rotated = (masked - MASK_DELTA) & _U32
    return ((rotated >> 17) | (rotated << 15)) & _U32


def checksum(data) -> int:
    """Return the masked CRC-32C of a bytes-like object."""
    return mask(crc32c.crc32c(data))
