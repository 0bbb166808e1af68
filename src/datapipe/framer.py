"""Outbound message framing."""

from __future__ import annotations

import asyncio
import logging

from .const import MIN_FRAME_SIZE
from .exceptions import (
    BLEConnectionError,
    FrameTooSmallError,
    NotConnectedError,
    ProtocolError,
    TransmitAbortedError,
)
from .models.config import PipeConfig
from .protocol.framing import encode_message, max_frame_size, split_frames
from .transport.base import PipeTransport

_LOGGER = logging.getLogger(__name__)


class MessageFramer:
    """Splits messages into MTU-sized frames and writes them to a transport.

    Sending is best-effort: with no peer, or an MTU too small for a header,
    the message is dropped. A multi-frame send stops at the first frame the
    peer does not take (disconnect, or a confirmed write that fails); frames
    are never retried.
    """

    def __init__(self, transport: PipeTransport, config: PipeConfig | None = None):
        """Initialize framer.

        Args:
            transport: Link used for frame delivery and MTU/connection queries
            config: Delivery mode and throttle settings (default: PipeConfig())
        """
        self.transport = transport
        self.config = config or PipeConfig()

    async def send(self, message_type: int, payload: bytes) -> bool:
        """Frame and transmit one message.

        Args:
            message_type: Type tag (0 = JSON, 1-255 application-defined)
            payload: Message body, at most 65535 bytes

        Returns:
            True if every frame was handed to the transport

        Raises:
            ValueError: If message_type or payload length is out of range
        """
        data = encode_message(message_type, payload)

        try:
            await self._transmit(data)
        except ProtocolError as e:
            if isinstance(e, NotConnectedError):
                _LOGGER.debug("Dropping type 0x%02x message: %s", message_type, e)
            else:
                _LOGGER.warning("Dropping type 0x%02x message: %s", message_type, e)
            return False
        return True

    async def _transmit(self, data: bytes) -> None:
        if not self.transport.is_connected:
            raise NotConnectedError("No peer connected")

        mtu = self.transport.mtu
        frame_size = max_frame_size(mtu, self.config.att_overhead)
        if frame_size < MIN_FRAME_SIZE:
            raise FrameTooSmallError(
                f"MTU {mtu} leaves {frame_size} bytes per frame (need {MIN_FRAME_SIZE})"
            )

        frames = split_frames(data, frame_size)
        delay = self.config.throttle_for(len(frames))

        _LOGGER.debug(
            "Sending %d bytes in %d frame(s) of up to %d bytes (%s)",
            len(data),
            len(frames),
            frame_size,
            self.config.delivery_mode.name,
        )

        for index, frame in enumerate(frames):
            if index and not self.transport.is_connected:
                raise TransmitAbortedError(
                    f"Peer disconnected after {index}/{len(frames)} frames"
                )

            if self.config.confirmed:
                if not await self.transport.transmit_confirmed(frame):
                    raise TransmitAbortedError(
                        f"Frame {index + 1}/{len(frames)} not acknowledged"
                    )
                continue

            try:
                await self.transport.transmit_unconfirmed(frame)
            except BLEConnectionError as e:
                raise TransmitAbortedError(
                    f"Frame {index + 1}/{len(frames)} failed: {e}"
                ) from e

            if delay and index < len(frames) - 1:
                await asyncio.sleep(delay)
