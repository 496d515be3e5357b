# seriallog/session.py
import logging
from typing import Callable, Optional

from seriallog.acquire import AcquisitionLoop, attach_acquisition
from seriallog.errors import SerialLogError
from seriallog.hotkey import KeyWatcher, SessionSignal, attach_key_watcher
from seriallog.writer import CsvRecord

log = logging.getLogger(__name__)

AWAITING_PORT = "awaiting_port"
ACQUIRING = "acquiring"
TERMINATING = "terminating"
ENDED = "ended"

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INTERRUPTED = 130

ON_ERROR_POLICIES = ("commit", "discard")
READER_JOIN_TIMEOUT = 1.0


class SessionController:
    """Owns one recording session from opening the port to the final close.

    The key watcher and the acquisition loop run on their own threads and only
    ever resolve the shared SessionSignal. This object is the single consumer
    of that signal and the only caller of the record's close methods, so the
    record is committed or discarded exactly once.
    """

    def __init__(self, open_transport: Callable, open_record: Callable[[], CsvRecord],
                 next_key: Callable[[], int], on_error: str = "commit",
                 chunk: int = 128, echo: bool = True,
                 watcher_factory: Callable[[SessionSignal], KeyWatcher] = KeyWatcher,
                 restore_terminal: Optional[Callable[[], None]] = None):
        if on_error not in ON_ERROR_POLICIES:
            raise ValueError(f"on_error must be one of {ON_ERROR_POLICIES}, got {on_error!r}")
        self._open_transport = open_transport
        self._open_record = open_record
        self._next_key = next_key
        self._watcher_factory = watcher_factory
        self._restore_terminal = restore_terminal
        self.on_error = on_error
        self.chunk = chunk
        self.echo = echo

        self.state = AWAITING_PORT
        self.signal = SessionSignal()
        self.transport = None
        self.record: Optional[CsvRecord] = None
        self.error: Optional[Exception] = None
        self._reader = None

    def run(self) -> int:
        try:
            self.transport = self._open_transport()
        except SerialLogError as exc:
            return self._fail_before_record(exc)
        try:
            self.record = self._open_record()
        except SerialLogError as exc:
            self.transport.close()
            return self._fail_before_record(exc)

        self.state = ACQUIRING
        loop = AcquisitionLoop(self.transport, self.record, self.signal,
                               chunk=self.chunk, echo=self.echo)
        self._reader = attach_acquisition(loop)
        attach_key_watcher(self._watcher_factory(self.signal), self._next_key)
        print("Reading serial data. Press Alt+C to save and exit, or Ctrl+X to exit without saving.")

        interrupted = False
        try:
            self.signal.wait()
        except KeyboardInterrupt:
            interrupted = True
            if self.signal.resolve("commit"):
                print("\nInterrupted. Saving data and exiting.")
        return self._terminate(interrupted)

    def _fail_before_record(self, exc: SerialLogError) -> int:
        self.error = exc
        self.state = ENDED
        log.error("%s", exc)
        return EXIT_FAILED

    def _stop_reader(self):
        self.transport.cancel()
        self._reader.join(READER_JOIN_TIMEOUT)
        if self._reader.is_alive():
            # still blocked in the driver; the port is released when the process exits
            log.debug("acquisition thread did not stop; leaving %s open", self.transport.name)
            return
        self.transport.close()

    def _terminate(self, interrupted: bool = False) -> int:
        self.state = TERMINATING
        outcome = self.signal.outcome
        if outcome == "failed":
            self.error = self.signal.error
            action = self.on_error
        else:
            action = outcome

        try:
            if action == "commit":
                self.record.commit_close()
            else:
                self.record.discard_close()
        except SerialLogError as exc:
            log.error("%s", exc)
            self.error = self.error or exc
        finally:
            self._stop_reader()
            if self._restore_terminal is not None:
                self._restore_terminal()
            self.state = ENDED

        if self.error is not None:
            if outcome == "failed":
                log.error("session ended by %s; partial record %s",
                          self.error, "kept" if action == "commit" else "deleted")
            return EXIT_FAILED
        if interrupted:
            return EXIT_INTERRUPTED
        if action == "commit":
            print(f"Saved {self.record.count} entries to {self.record.path}")
        return EXIT_OK
