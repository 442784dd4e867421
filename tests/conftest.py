"""Shared fixtures: a scripted stand-in for ``serial.Serial``."""

from __future__ import annotations

from collections import deque

import pytest

from sharp_aquos_mcp.transport.serial_connection import SerialConnection


class FakeSerial:
    """Replays one scripted reply per write. ``b""`` means the TV stays silent."""

    def __init__(self, *replies: bytes) -> None:
        self.replies = deque(replies)
        self.writes: list[bytes] = []
        self.rx = bytearray()
        self.timeout = None
        self.open_kwargs: dict = {}
        self.is_open = False

    def factory(self, **kwargs):
        self.open_kwargs = kwargs
        self.timeout = kwargs.get("timeout")
        self.is_open = True
        return self

    def queue(self, *replies: bytes) -> None:
        self.replies.extend(replies)

    def write(self, data: bytes) -> int:
        self.writes.append(bytes(data))
        if self.replies:
            self.rx += self.replies.popleft()
        return len(data)

    def flush(self) -> None:
        pass

    def read(self, size: int = 1) -> bytes:
        if not self.rx:
            return b""
        chunk = bytes(self.rx[:size])
        del self.rx[:size]
        return chunk

    def close(self) -> None:
        self.is_open = False


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("AQUOS_PORT", "AQUOS_BAUDRATE", "AQUOS_TIMEOUT", "AQUOS_PROTOCOL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_serial() -> FakeSerial:
    return FakeSerial()


@pytest.fixture
def connection(fake_serial):
    conn = SerialConnection("FAKE", serial_cls=fake_serial.factory)
    conn.open()
    yield conn
    conn.close()
