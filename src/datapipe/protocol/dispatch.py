"""Route completed messages to JSON or binary handlers."""

from __future__ import annotations

import logging
from typing import Any, Callable

from ..exceptions import DecodeError
from ..models.message import Message
from .codec import decode_json

_LOGGER = logging.getLogger(__name__)

JsonHandler = Callable[[Any], object]
BinaryHandler = Callable[[int, bytes], object]


class MessageDispatcher:
    """Hands each completed message to the handler registered for its type.

    Type 0 payloads are decoded as JSON and passed to the JSON handler.
    Every other type goes to the binary handler as (message_type, payload).
    Messages with no matching handler are dropped.
    """

    def __init__(
            self,
            on_json: JsonHandler | None = None,
            on_binary: BinaryHandler | None = None,
    ):
        self._json_handler = on_json
        self._binary_handler = on_binary

    def set_on_json(self, handler: JsonHandler | None) -> None:
        """Register (or clear, with None) the JSON document handler."""
        self._json_handler = handler

    def set_on_binary(self, handler: BinaryHandler | None) -> None:
        """Register (or clear, with None) the binary payload handler."""
        self._binary_handler = handler

    def dispatch(self, message: Message) -> bool:
        """Deliver a completed message.

        Args:
            message: Reassembled message

        Returns:
            True if a handler was invoked
        """
        if message.is_json:
            if self._json_handler is None:
                _LOGGER.debug("No JSON handler, dropping %d-byte message", len(message))
                return False
            try:
                document = decode_json(message.payload)
            except DecodeError as e:
                _LOGGER.error("JSON error: %s", e)
                return False
            self._json_handler(document)
            return True

        if self._binary_handler is None:
            _LOGGER.debug(
                "No binary handler, dropping type 0x%02x message (%d bytes)",
                message.message_type,
                len(message),
            )
            return False
        self._binary_handler(message.message_type, message.payload)
        return True
