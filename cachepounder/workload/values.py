"""
Checksum-bearing payloads.

Every value the pounder writes has a fixed header (bytes 0, 1, 2, 3, 4) and a
fixed trailer in which each of the last four bytes holds its distance from
the end (..., 4, 3, 2, 1). The bytes in between are random in [0, 128).
Reading a value back and finding anything else in those nine positions means
the cache under test returned wrong or truncated data.
"""

from typing import Optional, Tuple

import numpy as np

from cachepounder.config import (
    CHECKSUM_HEADER_LENGTH,
    CHECKSUM_OVERHEAD,
    CHECKSUM_TRAILER_LENGTH,
    PAYLOAD_BYTE_LIMIT,
    PAYLOAD_SIZE_SPREAD,
)
from cachepounder.error_messages import format_error
from cachepounder.errors import DataCorruptionError

CHECKSUM_HEADER = np.arange(CHECKSUM_HEADER_LENGTH, dtype=np.uint8)
CHECKSUM_TRAILER = np.arange(CHECKSUM_TRAILER_LENGTH, 0, -1, dtype=np.uint8)


def payload_length(min_size: int, max_size: int, rng: np.random.Generator) -> int:
    """Draw a payload length in [min_size, max_size + PAYLOAD_SIZE_SPREAD - 1]."""
    return int(rng.integers(0, max_size - min_size + PAYLOAD_SIZE_SPREAD)) + min_size


def build_value(length: int, rng: np.random.Generator) -> bytes:
    """Build a payload of exactly ``length`` bytes with checksum header and trailer."""
    if length < CHECKSUM_OVERHEAD:
        raise ValueError(f"Payload length {length} cannot hold a {CHECKSUM_OVERHEAD} byte checksum")

    payload = rng.integers(0, PAYLOAD_BYTE_LIMIT, size=length, dtype=np.uint8)
    payload[:CHECKSUM_HEADER_LENGTH] = CHECKSUM_HEADER
    payload[-CHECKSUM_TRAILER_LENGTH:] = CHECKSUM_TRAILER
    return payload.tobytes()


class ValueGenerator:
    """Produces payloads for one worker from that worker's own generator."""

    def __init__(self, min_size: int, max_size: int, rng: Optional[np.random.Generator] = None):
        if min_size < CHECKSUM_OVERHEAD:
            raise ValueError(f"min_size must be at least {CHECKSUM_OVERHEAD}, got {min_size}")
        if max_size < min_size:
            raise ValueError(f"max_size ({max_size}) must not be smaller than min_size ({min_size})")
        self.min_size = min_size
        self.max_size = max_size
        self.rng = rng if rng is not None else np.random.default_rng()

    def generate(self) -> bytes:
        return build_value(payload_length(self.min_size, self.max_size, self.rng), self.rng)


def find_checksum_mismatch(value) -> Optional[Tuple[int, int, int]]:
    """
    Locate the first checksum byte that differs from what was written.

    Returns:
        None when the header and trailer are intact, otherwise a tuple of
        (position, expected byte, actual byte). Header bytes are checked
        before trailer bytes.
    """
    length = len(value)
    for position in range(CHECKSUM_HEADER_LENGTH):
        if value[position] != position:
            return position, position, value[position]

    for distance in range(1, CHECKSUM_TRAILER_LENGTH + 1):
        if value[length - distance] != distance:
            return length - distance, distance, value[length - distance]

    return None


class ValueValidator:
    """Checks payloads read back from the cache."""

    def validate(self, value, key: Optional[str] = None) -> bool:
        """
        Verify the checksum header and trailer of ``value``.

        Returns:
            True when the payload is intact.

        Raises:
            DataCorruptionError: On any mismatch, naming the position and
                the expected and actual bytes.
        """
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise DataCorruptionError(f"Cache returned {type(value).__name__} instead of bytes", key=key)

        length = len(value)
        if length < CHECKSUM_OVERHEAD:
            raise DataCorruptionError(
                format_error('VALUE_TRUNCATED', length=length, minimum=CHECKSUM_OVERHEAD),
                length=length,
                key=key,
            )

        mismatch = find_checksum_mismatch(value)
        if mismatch is None:
            return True

        position, expected, actual = mismatch
        template = 'CHECKSUM_HEADER_MISMATCH' if position < CHECKSUM_HEADER_LENGTH else 'CHECKSUM_TRAILER_MISMATCH'
        raise DataCorruptionError(
            format_error(template, position=position, expected=expected, actual=actual),
            position=position,
            expected=expected,
            actual=actual,
            length=length,
            key=key,
        )


def validate_value(value, key: Optional[str] = None) -> bool:
    return ValueValidator().validate(value, key=key)
