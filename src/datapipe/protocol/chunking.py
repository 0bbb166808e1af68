"""Incremental message reassembly from BLE write events."""

from __future__ import annotations

import logging
from typing import Callable

from ..const import HEADER_SIZE
from ..models.enums import OverflowPolicy, ReassemblyState
from ..models.message import Message
from .framing import parse_header

_LOGGER = logging.getLogger(__name__)


class MessageAssembler:
    """Rebuilds messages from a stream of chunks with arbitrary boundaries.

    The peer sends each message as [type:1][length:2][payload], sliced into
    MTU-sized frames. Chunks arrive in order but a chunk boundary may fall
    anywhere, including inside the header:
    - AWAITING_HEADER: header bytes are buffered until all 3 have arrived
    - ACCUMULATING_PAYLOAD: payload bytes are appended until the declared
      length is reached, then the message is handed to on_message

    Bytes past the declared length are dropped or parsed as the next
    message's header, depending on overflow_policy.
    """

    def __init__(
            self,
            on_message: Callable[[Message], object] | None = None,
            overflow_policy: OverflowPolicy = OverflowPolicy.DISCARD,
    ):
        """Initialize message assembler.

        Args:
            on_message: Called with each completed Message
            overflow_policy: Handling of surplus bytes after a completed message
        """
        self.on_message = on_message
        self.overflow_policy = overflow_policy

        self.expected_type = 0
        self.expected_length = 0
        self.header_received = False
        self.messages_completed = 0
        self._header = bytearray()
        self._buffer = bytearray()

    @property
    def state(self) -> ReassemblyState:
        """Current state machine state."""
        if self.header_received:
            return ReassemblyState.ACCUMULATING_PAYLOAD
        return ReassemblyState.AWAITING_HEADER

    @property
    def bytes_received(self) -> int:
        """Payload bytes received so far for the message in flight."""
        return len(self._buffer)

    @property
    def is_idle(self) -> bool:
        """True when no partial header or payload is buffered."""
        return not self.header_received and not self._header

    def reset(self) -> None:
        """Discard any partially received message."""
        if not self.is_idle:
            _LOGGER.debug(
                "Discarding partial message (type=0x%02x, %d/%d bytes)",
                self.expected_type,
                len(self._buffer),
                self.expected_length,
            )
        self.expected_type = 0
        self.expected_length = 0
        self.header_received = False
        self._header.clear()
        self._buffer.clear()

    def feed(self, data: bytes) -> int:
        """Consume one received chunk.

        Args:
            data: Raw bytes of one write event

        Returns:
            Number of messages completed by this chunk

        Raises:
            Exception: The first error raised by on_message, re-raised once the
                whole chunk has been consumed
        """
        if not data:
            return 0

        view = memoryview(data)
        completed = 0
        handler_error: Exception | None = None

        while view:
            if not self.header_received:
                view = self._take_header(view)
                if not self.header_received:
                    _LOGGER.debug("Partial header: have %d/%d bytes", len(self._header), HEADER_SIZE)
                    break

            owed = self.expected_length - len(self._buffer)
            take = min(len(view), owed)
            if take:
                self._buffer += view[:take]
                view = view[take:]

            if len(self._buffer) < self.expected_length:
                break

            try:
                self._complete()
            except Exception as e:
                # Keep consuming so surplus bytes stay in step with the stream
                if handler_error is None:
                    handler_error = e
            completed += 1

            if view and self.overflow_policy is OverflowPolicy.DISCARD:
                _LOGGER.warning(
                    "Dropping %d bytes received past end of message", len(view)
                )
                break

        if handler_error is not None:
            raise handler_error
        return completed

    def _take_header(self, view: memoryview) -> memoryview:
        need = HEADER_SIZE - len(self._header)
        self._header += view[:need]
        view = view[need:]

        if len(self._header) < HEADER_SIZE:
            return view

        self.expected_type, self.expected_length = parse_header(self._header)
        self._header.clear()
        self._buffer.clear()
        self.header_received = True

        _LOGGER.debug(
            "Header: type=0x%02x, length=%d bytes",
            self.expected_type,
            self.expected_length,
        )
        return view

    def _complete(self) -> None:
        message = Message(self.expected_type, bytes(self._buffer))
        self.header_received = False
        self.expected_type = 0
        self.expected_length = 0
        self._buffer.clear()
        self.messages_completed += 1

        _LOGGER.debug(
            "Message complete: type=0x%02x, %d bytes",
            message.message_type,
            len(message),
        )
        if self.on_message is not None:
            self.on_message(message)
