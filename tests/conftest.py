"""Shared fixtures: in-memory links standing in for a BLE connection."""

from __future__ import annotations

import pytest

from datapipe.const import DEFAULT_MTU


class LoopbackLink:
    """In-memory link; frames sent here are written to the peer link's owner.

    Attributes:
        frames: Every frame handed to transmit_*, in order
        fail_confirmed_at: 1-based frame number whose confirmed write fails
        drop_after: Link goes down after this many frames have been sent
    """

    def __init__(self, mtu: int = DEFAULT_MTU):
        self.callbacks = None
        self.peer: LoopbackLink | None = None
        self.negotiated_mtu = mtu
        self.connected = False
        self.frames: list[bytes] = []
        self.confirmed_writes = 0
        self.unconfirmed_writes = 0
        self.fail_confirmed_at: int | None = None
        self.drop_after: int | None = None

    @property
    def is_connected(self) -> bool:
        return self.connected

    @property
    def mtu(self) -> int:
        return self.negotiated_mtu if self.connected else DEFAULT_MTU

    async def connect(self) -> None:
        self.connected = True
        if self.callbacks is not None:
            self.callbacks.on_peer_connected()

    async def disconnect(self) -> None:
        if not self.connected:
            return
        self.connected = False
        if self.callbacks is not None:
            self.callbacks.on_peer_disconnected()

    async def transmit_confirmed(self, data: bytes) -> bool:
        self.confirmed_writes += 1
        if self.fail_confirmed_at == self.confirmed_writes:
            return False
        self._deliver(data)
        return True

    async def transmit_unconfirmed(self, data: bytes) -> None:
        self.unconfirmed_writes += 1
        self._deliver(data)

    def _deliver(self, data: bytes) -> None:
        self.frames.append(bytes(data))
        if self.peer is not None and self.peer.callbacks is not None:
            self.peer.callbacks.on_bytes_written(bytes(data))
        if self.drop_after is not None and len(self.frames) >= self.drop_after:
            self.connected = False


@pytest.fixture
def link() -> LoopbackLink:
    """A connected link at the minimum MTU with no peer."""
    link = LoopbackLink()
    link.connected = True
    return link


@pytest.fixture
def link_pair() -> tuple[LoopbackLink, LoopbackLink]:
    """Two links wired to each other, not yet connected."""
    a = LoopbackLink()
    b = LoopbackLink()
    a.peer = b
    b.peer = a
    return a, b


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Record throttle delays instead of sleeping."""
    recorded: list[float] = []

    async def _fake_sleep(delay: float) -> None:
        recorded.append(delay)

    monkeypatch.setattr("datapipe.framer.asyncio.sleep", _fake_sleep)
    return recorded
