# seriallog/terminal.py
import os
import sys
import threading
from contextlib import contextmanager

if sys.platform == "win32":
    import msvcrt
else:
    import termios
    import tty


class RawInput:
    """Single raw keyboard bytes, no echo, no line buffering.

    Raw mode is held only for the duration of one read, with output
    post-processing left on so other threads can keep printing normal lines.
    The terminal settings seen at construction are kept so `restore()` can put
    them back from another thread at shutdown; after that no read enters raw
    mode again.
    """

    def __init__(self, stream=None):
        self._stream = stream or sys.stdin
        self._fd = self._stream.fileno()
        self._saved = None
        self._lock = threading.Lock()
        self._restored = False
        if sys.platform != "win32" and os.isatty(self._fd):
            self._saved = termios.tcgetattr(self._fd)

    @contextmanager
    def _raw(self):
        with self._lock:
            if self._saved is None or self._restored:
                entered = False
            else:
                old = termios.tcgetattr(self._fd)
                tty.setraw(self._fd, termios.TCSANOW)  # TCSANOW keeps keys typed between reads
                mode = termios.tcgetattr(self._fd)
                mode[1] |= termios.OPOST  # oflag: "\n" still prints as CR LF
                termios.tcsetattr(self._fd, termios.TCSANOW, mode)
                entered = True
        try:
            yield
        finally:
            if entered:
                with self._lock:
                    if not self._restored:
                        termios.tcsetattr(self._fd, termios.TCSADRAIN, old)

    def next_key(self) -> int:
        if sys.platform == "win32":
            return msvcrt.getch()[0]
        with self._raw():
            b = os.read(self._fd, 1)
        if not b:
            raise EOFError("keyboard input closed")
        return b[0]

    def restore(self):
        with self._lock:
            self._restored = True
            if self._saved is not None:
                termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved)
