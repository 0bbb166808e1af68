"""Main BLE data pipe class."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .framer import MessageFramer
from .models.config import PipeConfig
from .models.enums import DeliveryMode
from .models.message import Message
from .protocol import (
    CHAR_UUID,
    JSON_TYPE,
    MessageAssembler,
    MessageDispatcher,
    encode_json,
)
from .protocol.dispatch import BinaryHandler, JsonHandler
from .transport import BLEConnection

if TYPE_CHECKING:
    from bleak.backends.device import BLEDevice

    from .transport import PipeLink

_LOGGER = logging.getLogger(__name__)


class DataPipe:
    """Typed message exchange with one BLE peer over a single characteristic.

    Usage:
        async with DataPipe("AA:BB:CC:DD:EE:FF") as pipe:
            pipe.set_on_json(lambda doc: print(doc))
            await pipe.send_json({"cmd": "status"})

        # Confirmed delivery, binary payloads
        config = PipeConfig(delivery_mode=DeliveryMode.CONFIRMED)
        async with DataPipe(mac, config=config) as pipe:
            await pipe.send_binary(0x05, firmware_block)

    The pipe is the owner of all per-session state: the transport, one
    framer for outbound messages, and one assembler for inbound messages.
    The assembler is reset on every connect and disconnect so a message cut
    off by link loss never leaks into the next connection.
    """

    def __init__(
            self,
            mac_address: str,
            ble_device: BLEDevice | None = None,
            char_uuid: str = CHAR_UUID,
            config: PipeConfig | None = None,
            timeout: float = 10.0,
            auto_reconnect: bool = False,
            transport: PipeLink | None = None,
    ):
        """Initialize data pipe.

        Args:
            mac_address: Peer MAC address
            ble_device: Optional BLEDevice from a prior scan
            char_uuid: Data characteristic UUID
            config: Framing and delivery settings (default: PipeConfig())
            timeout: BLE operation timeout in seconds (default: 10)
            auto_reconnect: Reconnect when the link drops (default: False)
            transport: Pre-built link used instead of the bleak connection
        """
        self.mac_address = mac_address
        self.config = config or PipeConfig()

        if transport is None:
            transport = BLEConnection(
                mac_address,
                ble_device,
                char_uuid=char_uuid,
                callbacks=self,
                timeout=timeout,
                default_mtu=self.config.default_mtu,
                auto_reconnect=auto_reconnect,
            )
        else:
            transport.callbacks = self
        self._connection = transport

        self._dispatcher = MessageDispatcher()
        self._assembler = MessageAssembler(
            on_message=self._dispatcher.dispatch,
            overflow_policy=self.config.overflow_policy,
        )
        self._framer = MessageFramer(self._connection, self.config)

    async def __aenter__(self) -> DataPipe:
        """Connect to peer."""
        await self.begin()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Disconnect from peer."""
        await self.stop()

    async def begin(self) -> None:
        """Open the link to the peer.

        Raises:
            BLEConnectionError: If connection fails
            BLETimeoutError: If connection times out
        """
        await self._connection.connect()
        _LOGGER.info(
            "Data pipe started (%s mode)",
            "Indicate" if self.config.confirmed else "Notify",
        )

    async def stop(self) -> None:
        """Close the link and drop any partially received message."""
        await self._connection.disconnect()
        self._assembler.reset()
        _LOGGER.info("Data pipe stopped")

    @property
    def is_connected(self) -> bool:
        """Check if a peer is attached."""
        return self._connection.is_connected

    @property
    def mtu(self) -> int:
        """Negotiated MTU, or the default minimum when not connected."""
        return self._connection.mtu

    @property
    def delivery_mode(self) -> DeliveryMode:
        return self.config.delivery_mode

    def set_on_json(self, handler: JsonHandler | None) -> None:
        """Register handler for received JSON documents."""
        self._dispatcher.set_on_json(handler)

    def set_on_binary(self, handler: BinaryHandler | None) -> None:
        """Register handler for received binary messages: handler(message_type, payload)."""
        self._dispatcher.set_on_binary(handler)

    async def send_json(self, document: Any) -> bool:
        """Send a JSON document as a type-0 message.

        Returns:
            True if the message was fully handed to the transport
        """
        if not self.is_connected:
            return False
        return await self._framer.send(JSON_TYPE, encode_json(document))

    async def send_binary(self, message_type: int, data: bytes) -> bool:
        """Send raw bytes tagged with an application-defined type.

        Returns:
            True if the message was fully handed to the transport
        """
        return await self._framer.send(message_type, data)

    async def send(self, message: Message) -> bool:
        """Send a prepared Message."""
        return await self._framer.send(message.message_type, message.payload)

    # Transport callbacks

    def on_peer_connected(self) -> None:
        _LOGGER.info("Client connected (MTU=%d)", self.mtu)
        self._assembler.reset()

    def on_peer_disconnected(self) -> None:
        _LOGGER.info("Client disconnected")
        self._assembler.reset()

    def on_bytes_written(self, data: bytes) -> None:
        self._assembler.feed(data)
