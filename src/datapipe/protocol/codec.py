"""JSON payload encoding for type-0 messages."""

from __future__ import annotations

import json
from typing import Any

from ..exceptions import DecodeError


def encode_json(document: Any) -> bytes:
    """Serialize a JSON-compatible document to compact UTF-8 bytes.

    Raises:
        TypeError: If the document is not JSON serializable
    """
    return json.dumps(document, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def decode_json(payload: bytes) -> Any:
    """Parse a UTF-8 JSON payload.

    Raises:
        DecodeError: If payload is not valid UTF-8 JSON, or is JSON the
            parser refuses (oversized integers, excessive nesting)
    """
    try:
        return json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, ValueError, RecursionError) as e:
        raise DecodeError(f"Invalid JSON payload ({len(payload)} bytes): {e}") from e
