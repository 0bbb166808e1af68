"""Wire-level constants for the data pipe protocol."""

from __future__ import annotations

from typing import Final

# Message header: [type:1][length:2 little-endian]
HEADER_FORMAT: Final = "<BH"
HEADER_SIZE: Final = 3

JSON_TYPE: Final = 0x00
MAX_TYPE: Final = 0xFF
MAX_PAYLOAD_SIZE: Final = 0xFFFF

# ATT bytes below the application payload in one write/notification
ATT_OVERHEAD: Final = 4
DEFAULT_MTU: Final = 23  # BLE minimum ATT_MTU
MIN_FRAME_SIZE: Final = HEADER_SIZE

# Default GATT layout (one service, one read/write/notify characteristic)
SERVICE_UUID: Final = "4fafc201-1fb5-459e-8fcc-c5c9c331914b"
CHAR_UUID: Final = "beb5483e-36e1-4688-b7f5-ea07361b26a8"
