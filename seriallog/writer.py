# seriallog/writer.py
import csv
import logging
import os
import threading
from datetime import datetime
from typing import List, Optional

from seriallog.entries import PAYLOAD_ENCODING, PAYLOAD_ERRORS, Entry, RecordState
from seriallog.errors import StorageUnavailable, WriteFailed

log = logging.getLogger(__name__)


class CsvRecord:
    """A session's record file: append-only rows of (timestamp, payload).

    The record is closed exactly once, either committed (kept on disk) or
    discarded (deleted). Appends and closes share one lock so an append in
    flight never interleaves with a close.
    """

    def __init__(self, path: str, f):
        self.path = path
        self._f = f
        self._csv = csv.writer(f)
        self._lock = threading.Lock()
        self.state: RecordState = "open"
        self.count = 0

    @classmethod
    def open(cls, out_dir: str, prefix: str = "data_", now: Optional[datetime] = None) -> "CsvRecord":
        stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
        path = os.path.join(out_dir, f"{prefix}{stamp}.csv")
        try:
            os.makedirs(out_dir, exist_ok=True)
            # "x": an existing file with the same second-resolution name is a collision, never overwritten
            f = open(path, "x", encoding=PAYLOAD_ENCODING, errors=PAYLOAD_ERRORS, newline="")
        except OSError as exc:
            raise StorageUnavailable(f"cannot create record {path}: {exc}") from exc
        log.info("record opened: %s", path)
        return cls(path, f)

    def append(self, entry: Entry):
        with self._lock:
            if self.state != "open":
                raise WriteFailed(f"record {self.path} is {self.state}")
            try:
                self._csv.writerow(entry.row())
                self._f.flush()
            except (OSError, ValueError) as exc:
                raise WriteFailed(f"cannot append to {self.path}: {exc}") from exc
            self.count += 1

    def commit_close(self):
        with self._lock:
            self._ensure_open()
            self.state = "committed"
            try:
                self._f.flush()
            except OSError as exc:
                raise WriteFailed(f"cannot flush {self.path}: {exc}") from exc
            finally:
                self._f.close()
        log.info("record committed: %s (%d entries)", self.path, self.count)

    def discard_close(self):
        with self._lock:
            self._ensure_open()
            self.state = "discarded"
            try:
                self._f.close()
            except OSError as exc:
                log.warning("closing discarded record %s failed: %s", self.path, exc)
            try:
                os.remove(self.path)
            except OSError as exc:
                # the operator asked to discard; a leftover file is reported, not raised
                log.warning("could not delete discarded record %s: %s", self.path, exc)
                return
        log.info("record discarded: %s", self.path)

    def _ensure_open(self):
        if self.state != "open":
            raise RuntimeError(f"record {self.path} already {self.state}")


def read_record(path: str) -> List[Entry]:
    """Load a record file back as Entries, payloads byte-for-byte as received.

    The reading half of the artifact format: use it to post-process or verify
    a committed session.
    """
    with open(path, encoding=PAYLOAD_ENCODING, errors=PAYLOAD_ERRORS, newline="") as f:
        return [Entry.from_row(row) for row in csv.reader(f)]
