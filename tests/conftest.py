from __future__ import annotations

import logging
import threading

import pytest

from seriallog.errors import TransportError


class FakeTransport:
    """Hands out scripted chunks, then fails or blocks until cancelled."""

    name = "FAKE0"

    def __init__(self, chunks, then="error"):
        self._chunks = list(chunks)
        self._then = then
        self._cancelled = threading.Event()
        self.drained = threading.Event()
        self.closed = False
        self.reads = 0

    def read(self, size):
        if self._chunks:
            self.reads += 1
            return self._chunks.pop(0)
        self.drained.set()
        if self._then == "error":
            raise TransportError(f"{self.name}: device disconnected")
        self._cancelled.wait()
        raise TransportError(f"{self.name}: read cancelled")

    def cancel(self):
        self._cancelled.set()

    def close(self):
        self.closed = True


class ScriptedKeys:
    """next_key() source: waits for `gate`, yields the scripted bytes, then EOF."""

    def __init__(self, keys, gate: threading.Event | None = None):
        self._keys = list(keys)
        self._gate = gate
        self.restored = False

    def next_key(self) -> int:
        if self._gate is not None:
            self._gate.wait(5)
        if not self._keys:
            raise EOFError("no more keys")
        return self._keys.pop(0)

    def restore(self):
        self.restored = True


@pytest.fixture
def fake_transport():
    return FakeTransport


@pytest.fixture
def scripted_keys():
    return ScriptedKeys


@pytest.fixture(autouse=True)
def reset_seriallog_logger():
    yield
    logger = logging.getLogger("seriallog")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
