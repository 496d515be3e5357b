# seriallog/transport.py
import glob
from typing import List

import serial

from seriallog.errors import TransportError


class SerialTransport:
    """Blocking byte-stream reads from an open serial port."""

    def __init__(self, ser: serial.Serial):
        self._ser = ser

    @property
    def name(self) -> str:
        return self._ser.port

    def read(self, size: int) -> bytes:
        # block for the first byte, then drain what already arrived (up to size)
        try:
            data = self._ser.read(1)
            if not data:
                raise TransportError(f"{self.name}: device returned no data (disconnected?)")
            waiting = min(self._ser.in_waiting, size - 1)
            if waiting > 0:
                data += self._ser.read(waiting)
        except (serial.SerialException, OSError) as exc:
            raise TransportError(f"{self.name}: read failed: {exc}") from exc
        return data

    def cancel(self):
        """Wake a read blocked in another thread; it then raises TransportError."""
        if self._ser.is_open:
            self._ser.cancel_read()

    def close(self):
        if self._ser.is_open:
            self._ser.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def open_transport(device: str, baud: int) -> SerialTransport:
    try:
        ser = serial.Serial(
            port=device,
            baudrate=baud,
            bytesize=serial.EIGHTBITS,
            parity=serial.PARITY_NONE,
            stopbits=serial.STOPBITS_ONE,
            timeout=None,  # blocking
        )
    except (serial.SerialException, ValueError) as exc:
        raise TransportError(f"failed to open {device} at {baud} baud: {exc}") from exc
    return SerialTransport(ser)


def list_candidate_ports() -> List[str]:
    """Return likely serial ports on this machine (Windows + POSIX)."""
    from serial.tools import list_ports

    candidates = [port.device for port in list_ports.comports()]
    if not candidates:
        for pattern in ("/dev/ttyUSB*", "/dev/ttyACM*", "/dev/serial/by-id/*"):
            candidates.extend(sorted(glob.glob(pattern)))
    return candidates
