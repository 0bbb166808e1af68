"""Interfaces between the data pipe and a BLE transport."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class PipeTransport(Protocol):
    """Outbound side of a BLE link as seen by the framer."""

    @property
    def is_connected(self) -> bool:
        """True while a peer is attached."""
        ...

    @property
    def mtu(self) -> int:
        """Negotiated MTU, or the default minimum when not connected."""
        ...

    async def transmit_confirmed(self, data: bytes) -> bool:
        """Send one frame and wait for the peer's acknowledgement.

        Returns:
            False if the peer did not acknowledge
        """
        ...

    async def transmit_unconfirmed(self, data: bytes) -> None:
        """Send one frame without acknowledgement."""
        ...


class PipeCallbacks(Protocol):
    """Link events a transport reports to its owner.

    Callbacks run to completion before the transport delivers the next event.
    """

    def on_peer_connected(self) -> None:
        ...

    def on_peer_disconnected(self) -> None:
        ...

    def on_bytes_written(self, data: bytes) -> None:
        ...


class PipeLink(PipeTransport, Protocol):
    """Transport that also owns the link lifecycle and reports link events."""

    callbacks: PipeCallbacks | None

    async def connect(self) -> None:
        ...

    async def disconnect(self) -> None:
        ...
