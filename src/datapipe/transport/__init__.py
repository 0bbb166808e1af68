"""BLE transport layer."""

from .base import PipeCallbacks, PipeLink, PipeTransport
from .connection import BLEConnection

__all__ = ["BLEConnection", "PipeCallbacks", "PipeLink", "PipeTransport"]
