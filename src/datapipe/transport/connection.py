"""BLE connection management."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from bleak import BleakClient, BleakScanner
from bleak.exc import BleakError
from bleak_retry_connector import BleakClientWithServiceCache, establish_connection

from ..const import CHAR_UUID, DEFAULT_MTU
from ..exceptions import BLEConnectionError, BLETimeoutError

if TYPE_CHECKING:
    from bleak.backends.characteristic import BleakGATTCharacteristic
    from bleak.backends.device import BLEDevice

    from .base import PipeCallbacks

_LOGGER = logging.getLogger(__name__)


class BLEConnection:
    """Manages the BLE link to a data pipe peer.

    Features:
    - Automatic retry logic with bleak-retry-connector
    - Service caching for faster reconnections
    - Context manager for automatic cleanup
    - Notifications forwarded to the owner's on_bytes_written callback
    - Optional reconnect after the link drops
    """

    def __init__(
            self,
            mac_address: str,
            ble_device: BLEDevice | None = None,
            char_uuid: str = CHAR_UUID,
            callbacks: PipeCallbacks | None = None,
            timeout: float = 10.0,
            max_attempts: int = 4,
            use_services_cache: bool = True,
            default_mtu: int = DEFAULT_MTU,
            auto_reconnect: bool = False,
            reconnect_delay: float = 1.0,
    ):
        """Initialize BLE connection manager.

        Args:
            mac_address: Peer MAC address
            ble_device: Optional BLEDevice from a prior scan
            char_uuid: Data characteristic UUID
            callbacks: Receiver of connect/disconnect/data events
            timeout: Connection timeout in seconds (default: 10)
            max_attempts: Maximum connection attempts for bleak-retry-connector (default: 4)
            use_services_cache: Enable GATT service caching for faster reconnections (default: True)
            default_mtu: MTU reported while disconnected (default: 23)
            auto_reconnect: Reconnect when the link drops unexpectedly (default: False)
            reconnect_delay: Seconds between reconnect attempts (default: 1)
        """
        self.mac_address = mac_address
        self.ble_device = ble_device
        self.char_uuid = char_uuid
        self.callbacks = callbacks
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.use_services_cache = use_services_cache
        self.default_mtu = default_mtu
        self.auto_reconnect = auto_reconnect
        self.reconnect_delay = reconnect_delay

        self._client: BleakClient | None = None
        self._characteristic: BleakGATTCharacteristic | None = None
        self._closing = False
        self._reconnect_task: asyncio.Task | None = None
        self._discarded_client: BleakClient | None = None

    async def __aenter__(self) -> BLEConnection:
        """Connect to peer (context manager entry)."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Disconnect from peer (context manager exit)."""
        await self.disconnect()

    async def connect(self) -> None:
        """Establish BLE connection to the peer.

        Raises:
            BLEConnectionError: If connection fails
            BLETimeoutError: If connection times out
        """
        if self._client and self._client.is_connected:
            return  # Already connected

        self._closing = False

        try:
            _LOGGER.debug(
                "Connecting to %s with bleak-retry-connector (max_attempts=%d)",
                self.mac_address,
                self.max_attempts
            )

            if self.ble_device:
                device = self.ble_device
            else:
                device = await BleakScanner.find_device_by_address(
                    self.mac_address,
                    timeout=self.timeout
                )
                if device is None:
                    raise BLEConnectionError(
                        f"Device {self.mac_address} not found during scan"
                    )

            self._client = await establish_connection(
                client_class=BleakClientWithServiceCache,
                device=device,
                name=device.name or self.mac_address,
                disconnected_callback=self._on_disconnected,
                max_attempts=self.max_attempts,
                use_services_cache=self.use_services_cache,
                timeout=self.timeout,
            )

            _LOGGER.info("Connected to %s (MTU=%d)", self.mac_address, self.mtu)

            try:
                await self._setup_notifications()
            except Exception:
                await self._discard_client()
                raise

        except asyncio.TimeoutError as e:
            raise BLETimeoutError(
                f"Connection timeout after {self.timeout}s"
            ) from e
        except BLEConnectionError:
            raise
        except Exception as e:
            raise BLEConnectionError(
                f"Failed to connect: {e}"
            ) from e

        if self.callbacks is not None:
            self.callbacks.on_peer_connected()

    async def disconnect(self) -> None:
        """Disconnect from peer. Never triggers a reconnect."""
        self._closing = True
        if self._reconnect_task is not None:
            self._reconnect_task.cancel()
            self._reconnect_task = None

        if self._client and self._client.is_connected:
            try:
                _LOGGER.debug("Disconnecting from %s", self.mac_address)
                await self._client.disconnect()
            except Exception as e:
                _LOGGER.warning("Error during disconnect: %s", e)
            finally:
                self._client = None
                self._characteristic = None

    async def _discard_client(self) -> None:
        """Drop a client whose setup failed so the next connect() starts over."""
        client, self._client = self._client, None
        self._discarded_client = client
        self._characteristic = None
        if client is None or not client.is_connected:
            return
        try:
            await client.disconnect()
        except Exception as e:
            _LOGGER.warning("Error during disconnect: %s", e)

    async def _setup_notifications(self) -> None:
        """Locate the data characteristic and subscribe to it.

        Raises:
            BLEConnectionError: If characteristic not found
        """
        if not self._client or not self._client.is_connected:
            raise BLEConnectionError("Not connected")

        characteristic = self._client.services.get_characteristic(self.char_uuid)
        if characteristic is None:
            raise BLEConnectionError(
                f"Characteristic {self.char_uuid} not found"
            )
        self._characteristic = characteristic

        await self._client.start_notify(characteristic, self._notification_callback)

        _LOGGER.debug("Notifications started on %s", self.char_uuid)

    def _notification_callback(self, sender, data: bytearray) -> None:
        """Forward one notification/indication to the owner."""
        if self.callbacks is not None:
            self.callbacks.on_bytes_written(bytes(data))

    def _on_disconnected(self, client: BleakClient) -> None:
        """Handle link loss reported by bleak."""
        if client is self._discarded_client:
            return  # Setup never completed, nothing was reported as connected
        _LOGGER.info("Peer %s disconnected", self.mac_address)
        self._characteristic = None

        if self.callbacks is not None:
            self.callbacks.on_peer_disconnected()

        if self.auto_reconnect and not self._closing and self._reconnect_task is None:
            self._reconnect_task = asyncio.get_running_loop().create_task(self._reconnect())

    async def _reconnect(self) -> None:
        """Keep trying to reconnect until connected or disconnect() is called."""
        try:
            while not self._closing:
                await asyncio.sleep(self.reconnect_delay)
                try:
                    await self.connect()
                except (BLEConnectionError, BLETimeoutError) as e:
                    _LOGGER.warning("Reconnect to %s failed: %s", self.mac_address, e)
                    continue
                _LOGGER.info("Reconnected to %s", self.mac_address)
                return
        finally:
            self._reconnect_task = None

    async def transmit_confirmed(self, data: bytes) -> bool:
        """Write one frame with response.

        Returns:
            False if not connected or the peer did not acknowledge
        """
        if not self.is_connected or self._characteristic is None:
            return False
        try:
            await self._client.write_gatt_char(self._characteristic, data, response=True)
        except (BleakError, asyncio.TimeoutError, OSError) as e:
            _LOGGER.debug("Confirmed write failed: %s", e)
            return False
        return True

    async def transmit_unconfirmed(self, data: bytes) -> None:
        """Write one frame without response.

        Raises:
            BLEConnectionError: If not connected or write fails
        """
        if not self.is_connected or self._characteristic is None:
            raise BLEConnectionError("Not connected")
        try:
            await self._client.write_gatt_char(self._characteristic, data, response=False)
        except (BleakError, asyncio.TimeoutError, OSError) as e:
            raise BLEConnectionError(f"Write failed: {e}") from e

    @property
    def mtu(self) -> int:
        """Negotiated MTU, or default_mtu when not connected."""
        if not self.is_connected:
            return self.default_mtu
        return self._client.mtu_size

    @property
    def is_connected(self) -> bool:
        """Check if currently connected to peer."""
        return self._client is not None and self._client.is_connected
