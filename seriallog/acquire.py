# seriallog/acquire.py
import logging
import threading
from datetime import datetime
from typing import Callable

from seriallog.entries import Entry
from seriallog.errors import TransportError, WriteFailed
from seriallog.hotkey import SessionSignal
from seriallog.writer import CsvRecord

log = logging.getLogger(__name__)


class AcquisitionLoop:
    """Reads chunks from the transport and appends them, stamped, to the record.

    Runs until the session is resolved or a read/append fails. A failure is
    never retried: it resolves the session as "failed" with the error.
    """

    def __init__(self, transport, record: CsvRecord, signal: SessionSignal,
                 chunk: int = 128, echo: bool = True,
                 clock: Callable[[], datetime] = datetime.now):
        self.transport = transport
        self.record = record
        self.signal = signal
        self.chunk = chunk
        self.echo = echo
        self.clock = clock
        self.count = 0

    def run(self):
        try:
            while not self.signal.triggered:
                data = self.transport.read(self.chunk)
                entry = Entry(t=self.clock(), data=data)
                self.record.append(entry)
                self.count += 1
                if self.echo:
                    print(f"Data received: {data.decode('utf-8', errors='replace')}")
        except (TransportError, WriteFailed) as exc:
            self._fail(exc)
        except Exception as exc:
            # anything else (e.g. a closed stdout under echo) also ends the session
            log.exception("acquisition thread crashed")
            self._fail(exc)

    def _fail(self, exc: Exception):
        if self.signal.resolve("failed", exc):
            log.error("acquisition stopped after %d entries: %s", self.count, exc)
        else:
            log.debug("acquisition ended during shutdown: %s", exc)


def attach_acquisition(loop: AcquisitionLoop) -> threading.Thread:
    t = threading.Thread(target=loop.run, name="acquisition", daemon=True)
    t.start()
    return t
