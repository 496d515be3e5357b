from __future__ import annotations

import pytest
import serial

from seriallog.errors import TransportError
from seriallog.transport import SerialTransport, open_transport


class StubSerial:
    port = "STUB"
    is_open = True

    def __init__(self, reads=(), waiting=0, exc=None):
        self._reads = list(reads)
        self.in_waiting = waiting
        self._exc = exc

    def read(self, n):
        if self._exc:
            raise self._exc
        return self._reads.pop(0)[:n] if self._reads else b""

    def close(self):
        self.is_open = False


def test_read_drains_pending_bytes():
    ser = serial.serial_for_url("loop://", timeout=None)
    ser.write(b"hello")
    with SerialTransport(ser) as transport:
        assert transport.read(128) == b"hello"
    assert not ser.is_open


def test_read_is_capped_at_chunk_size():
    ser = serial.serial_for_url("loop://", timeout=None)
    ser.write(b"abcdef")
    transport = SerialTransport(ser)
    assert transport.read(4) == b"abcd"
    assert transport.read(4) == b"ef"
    transport.close()


def test_empty_read_means_device_gone():
    with pytest.raises(TransportError):
        SerialTransport(StubSerial()).read(128)


def test_serial_exception_becomes_transport_error():
    stub = StubSerial(exc=serial.SerialException("device reports readiness to read but returned no data"))
    with pytest.raises(TransportError) as exc_info:
        SerialTransport(stub).read(128)
    assert isinstance(exc_info.value.__cause__, serial.SerialException)


def test_close_is_idempotent():
    stub = StubSerial()
    transport = SerialTransport(stub)
    transport.close()
    transport.close()
    assert not stub.is_open


def test_open_missing_device_fails(tmp_path):
    with pytest.raises(TransportError) as exc_info:
        open_transport(str(tmp_path / "ttyNOPE"), 115200)
    assert "ttyNOPE" in str(exc_info.value)
