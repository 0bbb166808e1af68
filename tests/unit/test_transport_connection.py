"""Test BLEConnection against a fake bleak client."""

from __future__ import annotations

import asyncio

import pytest
from bleak.exc import BleakError

from datapipe.const import CHAR_UUID
from datapipe.exceptions import BLEConnectionError, BLETimeoutError
from datapipe.transport.connection import BLEConnection


class _FakeDevice:
    name = "datapipe-peer"
    address = "AA:BB:CC:DD:EE:FF"


class _FakeServices:
    def __init__(self, characteristic):
        self._characteristic = characteristic

    def get_characteristic(self, uuid):
        if self._characteristic is not None and uuid == CHAR_UUID:
            return self._characteristic
        return None


class _FakeClient:
    def __init__(self, mtu_size: int = 185, characteristic: object | None = "char"):
        self.is_connected = True
        self.mtu_size = mtu_size
        self.services = _FakeServices(characteristic)
        self.notify_callback = None
        self.disconnected_callback = None
        self.writes: list[tuple[bytes, bool]] = []
        self.write_error: Exception | None = None

    async def start_notify(self, characteristic, callback) -> None:
        self.notify_callback = callback

    async def write_gatt_char(self, characteristic, data, response: bool = False) -> None:
        if self.write_error is not None:
            raise self.write_error
        self.writes.append((bytes(data), response))

    async def disconnect(self) -> None:
        self.is_connected = False
        if self.disconnected_callback is not None:
            self.disconnected_callback(self)


class _Recorder:
    def __init__(self):
        self.events: list[object] = []

    def on_peer_connected(self) -> None:
        self.events.append("connected")

    def on_peer_disconnected(self) -> None:
        self.events.append("disconnected")

    def on_bytes_written(self, data: bytes) -> None:
        self.events.append(data)


@pytest.fixture
def fake_clients(monkeypatch):
    """Patch establish_connection to hand out fake clients."""
    clients: list[_FakeClient] = []
    factory = {"make": _FakeClient}

    async def _establish(client_class, device, name, disconnected_callback=None, **kwargs):
        client = factory["make"]()
        client.disconnected_callback = disconnected_callback
        clients.append(client)
        return client

    monkeypatch.setattr("datapipe.transport.connection.establish_connection", _establish)
    return clients, factory


def _connection(recorder: _Recorder, **kwargs) -> BLEConnection:
    return BLEConnection(
        "AA:BB:CC:DD:EE:FF",
        ble_device=_FakeDevice(),
        callbacks=recorder,
        **kwargs,
    )


@pytest.mark.asyncio
async def test_connect_subscribes_and_reports(fake_clients) -> None:
    clients, _ = fake_clients
    recorder = _Recorder()
    connection = _connection(recorder)

    await connection.connect()

    assert connection.is_connected is True
    assert connection.mtu == 185
    assert recorder.events == ["connected"]
    assert clients[0].notify_callback is not None


@pytest.mark.asyncio
async def test_notifications_forwarded_as_bytes(fake_clients) -> None:
    clients, _ = fake_clients
    recorder = _Recorder()
    connection = _connection(recorder)
    await connection.connect()

    clients[0].notify_callback(None, bytearray(b'\x00\x02\x00{}'))

    assert recorder.events[-1] == b'\x00\x02\x00{}'
    assert isinstance(recorder.events[-1], bytes)


@pytest.mark.asyncio
async def test_mtu_default_when_disconnected() -> None:
    connection = BLEConnection("AA:BB:CC:DD:EE:FF", default_mtu=30)
    assert connection.is_connected is False
    assert connection.mtu == 30


@pytest.mark.asyncio
async def test_missing_characteristic_raises(fake_clients) -> None:
    _, factory = fake_clients
    factory["make"] = lambda: _FakeClient(characteristic=None)
    connection = _connection(_Recorder())

    with pytest.raises(BLEConnectionError, match="not found"):
        await connection.connect()


@pytest.mark.asyncio
async def test_failed_setup_releases_client_and_retry_connects(fake_clients) -> None:
    clients, factory = fake_clients
    recorder = _Recorder()
    connection = _connection(recorder, auto_reconnect=True, reconnect_delay=0)
    factory["make"] = lambda: _FakeClient(characteristic=None)

    with pytest.raises(BLEConnectionError, match="not found"):
        await connection.connect()

    assert clients[0].is_connected is False
    assert connection.is_connected is False
    assert connection._reconnect_task is None
    assert recorder.events == []

    factory["make"] = _FakeClient
    await connection.connect()

    assert len(clients) == 2
    assert connection.is_connected is True
    assert connection._characteristic == "char"
    assert clients[1].notify_callback is not None
    assert recorder.events == ["connected"]


@pytest.mark.asyncio
async def test_device_not_found_during_scan(monkeypatch) -> None:
    class _Scanner:
        @staticmethod
        async def find_device_by_address(address, timeout):
            return None

    monkeypatch.setattr("datapipe.transport.connection.BleakScanner", _Scanner)
    connection = BLEConnection("AA:BB:CC:DD:EE:FF")

    with pytest.raises(BLEConnectionError, match="not found during scan"):
        await connection.connect()


@pytest.mark.asyncio
async def test_connect_timeout(monkeypatch) -> None:
    async def _establish(**kwargs):
        raise asyncio.TimeoutError

    monkeypatch.setattr("datapipe.transport.connection.establish_connection", _establish)
    connection = _connection(_Recorder(), timeout=2.0)

    with pytest.raises(BLETimeoutError, match="after 2.0s"):
        await connection.connect()


@pytest.mark.asyncio
async def test_confirmed_and_unconfirmed_writes(fake_clients) -> None:
    clients, _ = fake_clients
    connection = _connection(_Recorder())
    await connection.connect()

    assert await connection.transmit_confirmed(b'\x01') is True
    await connection.transmit_unconfirmed(b'\x02')

    assert clients[0].writes == [(b'\x01', True), (b'\x02', False)]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [BleakError("ATT timeout"), asyncio.TimeoutError(), OSError("adapter gone")],
    ids=["bleak", "timeout", "os"],
)
async def test_confirmed_write_failure_returns_false(fake_clients, error) -> None:
    clients, _ = fake_clients
    connection = _connection(_Recorder())
    await connection.connect()
    clients[0].write_error = error

    assert await connection.transmit_confirmed(b'\x01') is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [BleakError("link lost"), asyncio.TimeoutError(), OSError("adapter gone")],
    ids=["bleak", "timeout", "os"],
)
async def test_unconfirmed_write_failure_raises(fake_clients, error) -> None:
    clients, _ = fake_clients
    connection = _connection(_Recorder())
    await connection.connect()
    clients[0].write_error = error

    with pytest.raises(BLEConnectionError, match="Write failed"):
        await connection.transmit_unconfirmed(b'\x01')


@pytest.mark.asyncio
async def test_writes_when_disconnected() -> None:
    connection = BLEConnection("AA:BB:CC:DD:EE:FF")

    assert await connection.transmit_confirmed(b'\x01') is False
    with pytest.raises(BLEConnectionError, match="Not connected"):
        await connection.transmit_unconfirmed(b'\x01')


@pytest.mark.asyncio
async def test_user_disconnect_reports_and_does_not_reconnect(fake_clients) -> None:
    clients, _ = fake_clients
    recorder = _Recorder()
    connection = _connection(recorder, auto_reconnect=True, reconnect_delay=0)
    await connection.connect()

    await connection.disconnect()
    await asyncio.sleep(0)

    assert recorder.events == ["connected", "disconnected"]
    assert connection.is_connected is False
    assert len(clients) == 1


@pytest.mark.asyncio
async def test_link_loss_triggers_reconnect(fake_clients) -> None:
    clients, _ = fake_clients
    recorder = _Recorder()
    connection = _connection(recorder, auto_reconnect=True, reconnect_delay=0)
    await connection.connect()

    # Peer drops the link
    clients[0].is_connected = False
    clients[0].disconnected_callback(clients[0])
    task = connection._reconnect_task
    assert task is not None
    await task

    assert len(clients) == 2
    assert connection.is_connected is True
    assert recorder.events == ["connected", "disconnected", "connected"]


@pytest.mark.asyncio
async def test_link_loss_without_auto_reconnect(fake_clients) -> None:
    clients, _ = fake_clients
    recorder = _Recorder()
    connection = _connection(recorder)
    await connection.connect()

    clients[0].is_connected = False
    clients[0].disconnected_callback(clients[0])

    assert connection._reconnect_task is None
    assert connection.is_connected is False
    assert recorder.events == ["connected", "disconnected"]
