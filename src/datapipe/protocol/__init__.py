"""BLE data pipe protocol implementation."""

from ..const import (
    ATT_OVERHEAD,
    CHAR_UUID,
    DEFAULT_MTU,
    HEADER_SIZE,
    JSON_TYPE,
    MAX_PAYLOAD_SIZE,
    MIN_FRAME_SIZE,
    SERVICE_UUID,
)
from .chunking import MessageAssembler
from .codec import decode_json, encode_json
from .dispatch import BinaryHandler, JsonHandler, MessageDispatcher
from .framing import (
    build_header,
    encode_message,
    frame_count,
    max_frame_size,
    parse_header,
    split_frames,
)

__all__ = [
    "ATT_OVERHEAD",
    "CHAR_UUID",
    "DEFAULT_MTU",
    "HEADER_SIZE",
    "JSON_TYPE",
    "MAX_PAYLOAD_SIZE",
    "MIN_FRAME_SIZE",
    "SERVICE_UUID",
    "MessageAssembler",
    "MessageDispatcher",
    "JsonHandler",
    "BinaryHandler",
    "build_header",
    "parse_header",
    "encode_message",
    "frame_count",
    "max_frame_size",
    "split_frames",
    "encode_json",
    "decode_json",
]
