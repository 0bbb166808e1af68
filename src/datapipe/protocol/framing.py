"""Message header encoding and frame slicing."""

from __future__ import annotations

import struct

from ..const import (
    ATT_OVERHEAD,
    HEADER_FORMAT,
    HEADER_SIZE,
    MAX_PAYLOAD_SIZE,
    MAX_TYPE,
)
from ..exceptions import ProtocolError

_HEADER = struct.Struct(HEADER_FORMAT)


def build_header(message_type: int, length: int) -> bytes:
    """Build the 3-byte message header.

    Args:
        message_type: Type tag (0 = JSON, 1-255 application-defined)
        length: Payload length in bytes

    Returns:
        Header bytes: [type:1][length:2 little-endian]

    Raises:
        ValueError: If type or length is out of range
    """
    if not 0 <= message_type <= MAX_TYPE:
        raise ValueError(f"message_type out of range: {message_type} (must be 0-255)")
    if not 0 <= length <= MAX_PAYLOAD_SIZE:
        raise ValueError(
            f"payload length out of range: {length} (must be 0-{MAX_PAYLOAD_SIZE})"
        )
    return _HEADER.pack(message_type, length)


def parse_header(data: bytes) -> tuple[int, int]:
    """Parse a message header.

    Args:
        data: At least HEADER_SIZE bytes; extra bytes are ignored

    Returns:
        Tuple of (message_type, payload_length)

    Raises:
        ProtocolError: If fewer than HEADER_SIZE bytes are given
    """
    if len(data) < HEADER_SIZE:
        raise ProtocolError(
            f"Header too short: {len(data)} bytes (need {HEADER_SIZE})"
        )
    message_type, length = _HEADER.unpack_from(data)
    return message_type, length


def encode_message(message_type: int, payload: bytes) -> bytes:
    """Prefix payload with its header."""
    return build_header(message_type, len(payload)) + bytes(payload)


def max_frame_size(mtu: int, overhead: int = ATT_OVERHEAD) -> int:
    """Largest frame that fits one transport write for the given MTU."""
    return mtu - overhead


def frame_count(payload_length: int, frame_size: int) -> int:
    """Number of frames a payload of this length occupies, header included."""
    if frame_size <= 0:
        raise ValueError(f"frame_size must be positive, got {frame_size}")
    return -(-(payload_length + HEADER_SIZE) // frame_size)


def split_frames(data: bytes, frame_size: int) -> list[bytes]:
    """Slice an encoded message into frames of at most frame_size bytes.

    Frames carry no metadata of their own; the receiver relies on the
    declared length in the header.
    """
    if frame_size <= 0:
        raise ValueError(f"frame_size must be positive, got {frame_size}")
    return [data[i:i + frame_size] for i in range(0, len(data), frame_size)]
