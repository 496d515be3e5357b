# seriallog/hotkey.py
import logging
import threading
from typing import Callable, Optional

from config import COMMIT_LETTER, DISCARD_KEY, ESCAPE_KEY
from seriallog.entries import Outcome

log = logging.getLogger(__name__)

IDLE = "idle"
SAW_ESCAPE = "saw_escape"

MESSAGES = {
    "commit": "\nAlt+C pressed. Saving data and exiting.",
    "discard": "\nCtrl+X pressed. Exiting without saving.",
}


class SessionSignal:
    """Set-once end-of-session decision shared by the watcher and the reader.

    The first `resolve()` wins; every later call is ignored and returns False.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._outcome: Optional[Outcome] = None
        self._error: Optional[Exception] = None

    @property
    def triggered(self) -> bool:
        return self._done.is_set()

    @property
    def outcome(self) -> Optional[Outcome]:
        with self._lock:
            return self._outcome

    @property
    def error(self) -> Optional[Exception]:
        with self._lock:
            return self._error

    def resolve(self, outcome: Outcome, error: Optional[Exception] = None) -> bool:
        with self._lock:
            if self._done.is_set():
                log.debug("ignoring %s after session already ended with %s", outcome, self._outcome)
                return False
            self._outcome = outcome
            self._error = error
            self._done.set()
            return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._done.wait(timeout)


class KeyWatcher:
    """Turns raw key bytes into a commit or discard decision.

    Ctrl+X (one byte) discards. Alt+C arrives as ESC followed by "c"/"C" and
    commits. A byte after ESC that is not the commit letter is replayed as if
    it had arrived on its own, so ESC ESC c still commits and ESC Ctrl+X still
    discards.
    """

    def __init__(self, signal: SessionSignal, discard_key: int = DISCARD_KEY,
                 escape_key: int = ESCAPE_KEY, commit_letter: str = COMMIT_LETTER):
        self.signal = signal
        self.discard_key = discard_key
        self.escape_key = escape_key
        self.commit_keys = {ord(commit_letter.lower()), ord(commit_letter.upper())}
        self.state = IDLE

    def feed(self, key: int) -> Optional[Outcome]:
        if self.state == SAW_ESCAPE:
            self.state = IDLE
            if key in self.commit_keys:
                return "commit"
        if key == self.discard_key:
            return "discard"
        if key == self.escape_key:
            self.state = SAW_ESCAPE
        return None

    def run(self, next_key: Callable[[], int]):
        while not self.signal.triggered:
            try:
                key = next_key()
            except EOFError:
                log.warning("keyboard input closed; use Ctrl+C or unplug the device to stop")
                return
            except Exception:
                log.exception("keyboard input failed; use Ctrl+C or unplug the device to stop")
                return
            outcome = self.feed(key)
            if outcome is None:
                continue
            if self.signal.resolve(outcome):
                print(MESSAGES[outcome])
            return


def attach_key_watcher(watcher: KeyWatcher, next_key: Callable[[], int]) -> threading.Thread:
    t = threading.Thread(target=watcher.run, args=(next_key,), name="key-watcher", daemon=True)
    t.start()
    return t
