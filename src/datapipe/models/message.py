"""Typed message model."""

from __future__ import annotations

from dataclasses import dataclass

from ..const import JSON_TYPE, MAX_PAYLOAD_SIZE, MAX_TYPE


@dataclass(frozen=True, slots=True)
class Message:
    """One complete message as sent or reassembled.

    Attributes:
        message_type: Type tag (0 = JSON, 1-255 application-defined binary)
        payload: Message body, 0-65535 bytes
    """

    message_type: int
    payload: bytes = b""

    def __post_init__(self) -> None:
        if not 0 <= self.message_type <= MAX_TYPE:
            raise ValueError(
                f"message_type out of range: {self.message_type} (must be 0-255)"
            )
        if len(self.payload) > MAX_PAYLOAD_SIZE:
            raise ValueError(
                f"payload too large: {len(self.payload)} bytes (max {MAX_PAYLOAD_SIZE})"
            )
        if not isinstance(self.payload, bytes):
            object.__setattr__(self, "payload", bytes(self.payload))

    @property
    def is_json(self) -> bool:
        return self.message_type == JSON_TYPE

    def __len__(self) -> int:
        return len(self.payload)
