"""Exceptions raised by the BLE data pipe."""

from __future__ import annotations


class DataPipeError(Exception):
    """Base class for all data pipe errors."""


class BLEConnectionError(DataPipeError):
    """Connecting to, or writing to, the peer failed."""


class BLETimeoutError(DataPipeError):
    """A BLE operation did not complete in time."""


class ProtocolError(DataPipeError):
    """Framing or message-level protocol failure."""


class NotConnectedError(ProtocolError):
    """Send attempted while no peer is connected."""


class FrameTooSmallError(ProtocolError):
    """Negotiated MTU cannot carry even a message header."""


class TransmitAbortedError(ProtocolError):
    """Multi-frame transmission stopped before the last frame."""


class DecodeError(ProtocolError):
    """Received JSON payload could not be decoded."""
