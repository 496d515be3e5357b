from __future__ import annotations

import logging
import threading

import pytest

from config import COMMIT_LETTER, DISCARD_KEY as CTRL_X, ESCAPE_KEY as ESC
from seriallog.hotkey import IDLE, SAW_ESCAPE, KeyWatcher, SessionSignal


@pytest.fixture
def watcher():
    return KeyWatcher(SessionSignal())


def feed_all(watcher, keys):
    outcome = None
    for k in keys:
        outcome = watcher.feed(k) or outcome
    return outcome


def test_ctrl_x_discards(watcher):
    assert watcher.feed(CTRL_X) == "discard"


@pytest.mark.parametrize("letter", ["c", "C"])
def test_alt_c_commits(watcher, letter):
    assert watcher.feed(ESC) is None
    assert watcher.state == SAW_ESCAPE
    assert watcher.feed(ord(letter)) == "commit"


def test_no_other_single_byte_ends_session(watcher):
    for key in range(256):
        if key in (CTRL_X, ESC):
            continue
        assert watcher.feed(key) is None
        assert watcher.state == IDLE


def test_escape_then_other_byte_is_not_commit(watcher):
    assert feed_all(watcher, [ESC, ord("x")]) is None
    assert watcher.state == IDLE
    assert watcher.feed(ord("c")) is None


def test_unmatched_byte_after_escape_is_replayed(watcher):
    assert feed_all(watcher, [ESC, ESC, ord("c")]) == "commit"


def test_discard_after_escape_still_discards(watcher):
    assert feed_all(watcher, [ESC, CTRL_X]) == "discard"


def test_plain_c_does_not_commit(watcher):
    assert feed_all(watcher, [ord("c"), ord("C")]) is None


def test_custom_keys():
    w = KeyWatcher(SessionSignal(), discard_key=0x11, commit_letter="s")
    assert w.feed(CTRL_X) is None
    assert feed_all(w, [ESC, ord("S")]) == "commit"
    assert w.feed(0x11) == "discard"


def test_run_resolves_and_stops_consuming(capsys):
    signal = SessionSignal()
    keys = iter([ord("a"), ESC, ord("c"), CTRL_X])
    KeyWatcher(signal).run(lambda: next(keys))

    assert signal.outcome == "commit"
    assert next(keys) == CTRL_X  # left unread
    assert "Alt+C pressed" in capsys.readouterr().out


def test_run_stops_quietly_at_end_of_input():
    signal = SessionSignal()

    def closed():
        raise EOFError

    KeyWatcher(signal).run(closed)
    assert not signal.triggered


def test_signal_first_resolve_wins():
    signal = SessionSignal()
    err = RuntimeError("boom")
    assert signal.resolve("failed", err) is True
    assert signal.resolve("commit") is False
    assert signal.outcome == "failed"
    assert signal.error is err
    assert signal.wait(0)


def test_signal_single_winner_under_contention():
    signal = SessionSignal()
    barrier = threading.Barrier(8)
    wins = []

    def racer(outcome):
        barrier.wait()
        if signal.resolve(outcome):
            wins.append(outcome)

    threads = [
        threading.Thread(target=racer, args=("commit" if i % 2 else "discard",)) for i in range(8)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(wins) == 1
    assert signal.outcome == wins[0]


def test_run_logs_keyboard_failure_and_stops(caplog):
    signal = SessionSignal()

    def broken():
        raise OSError(5, "Input/output error")

    with caplog.at_level(logging.ERROR, logger="seriallog.hotkey"):
        KeyWatcher(signal).run(broken)

    assert not signal.triggered
    assert "keyboard input failed" in caplog.text


def test_default_keys_come_from_config():
    w = KeyWatcher(SessionSignal())
    assert (w.discard_key, w.escape_key) == (CTRL_X, ESC)
    assert w.commit_keys == {ord(COMMIT_LETTER.lower()), ord(COMMIT_LETTER.upper())}
