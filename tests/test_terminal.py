import io
import os
import signal
import pytest
from unittest.mock import patch

from youtube_subscriptions.terminal import (
    CLEAR_TO_END_OF_LINE,
    HIDE_CURSOR,
    RMCUP,
    SHOW_CURSOR,
    SMCUP,
    Key,
    Terminal,
)

def terminal(stdin_text: str = "") -> Terminal:
    return Terminal(stdin=io.StringIO(stdin_text), stdout=io.StringIO())

def output(term: Terminal) -> str:
    return term.stdout.getvalue()

def test_enter_and_exit():
    term = terminal()

    with term:
        assert output(term) == SMCUP + HIDE_CURSOR

    assert output(term) == SMCUP + HIDE_CURSOR + SHOW_CURSOR + RMCUP

def test_release_on_exception():
    term = terminal()

    with pytest.raises(RuntimeError):
        with term:
            raise RuntimeError("crash")

    assert output(term).endswith(SHOW_CURSOR + RMCUP)

def test_release_is_idempotent():
    term = terminal()

    with term:
        term.release()
    term.release()

    assert output(term).count(RMCUP) == 1

def test_signal_handlers_are_restored():
    previous = signal.getsignal(signal.SIGTERM)
    term = terminal()

    with term:
        assert signal.getsignal(signal.SIGTERM) == term._on_signal

    assert signal.getsignal(signal.SIGTERM) == previous

def test_signal_releases_terminal():
    term = terminal()

    with term:
        with pytest.raises(SystemExit) as exit_info:
            term._on_signal(signal.SIGTERM, None)

    assert exit_info.value.code == 128 + signal.SIGTERM
    assert output(term).count(RMCUP) == 1

@patch("atexit.register")
@patch("atexit.unregister")
def test_atexit_hook(mock_unregister, mock_register):
    term = terminal()

    with term:
        mock_register.assert_called_once_with(term.release)

    mock_unregister.assert_called_once_with(term.release)

@patch("shutil.get_terminal_size")
def test_size_is_read_on_every_call(mock_size):
    term = terminal()
    mock_size.return_value = os.terminal_size((80, 24))
    assert term.lines() == 23
    assert term.cols() == 80

    mock_size.return_value = os.terminal_size((100, 40))
    assert term.lines() == 39
    assert term.cols() == 100

@pytest.mark.parametrize(
    "row, expected",
    [
        (0, "\x1b[1;0f"),
        (9, "\x1b[10;0f"),
    ]
)
def test_move_cursor(row, expected):
    term = terminal()

    term.move_cursor(row)

    assert output(term) == expected

@patch("shutil.get_terminal_size")
def test_status(mock_size):
    mock_size.return_value = os.terminal_size((80, 24))
    term = terminal()

    term.status("updating video list...")

    assert output(term) == "\x1b[24;0f" + CLEAR_TO_END_OF_LINE + "\x1b[24;0f" + "updating video list..."

def test_write_rows():
    term = terminal()

    term.write_rows(["first", "second"])

    assert output(term) == "first\r\nsecond\r\n"

@pytest.mark.parametrize(
    "chars, expected_key",
    [
        (["j"], "j"),
        (["/"], "/"),
        (["\r"], Key.ENTER),
        (["\n"], Key.ENTER),
        (["\x1b", "[", "A"], Key.UP),
        (["\x1b", "[", "B"], Key.DOWN),
        (["\x1b", "[", "C"], Key.RIGHT),
        (["\x1b", "[", "D"], Key.LEFT),
        (["\x1b", "O", "A"], Key.UP),
        (["\x1b", ""], Key.ESCAPE),
        (["\x1b", "[", "Z"], Key.ESCAPE),
    ]
)
def test_read_key(chars, expected_key):
    term = terminal()

    with patch.object(term, "_read_char", side_effect=chars):
        assert term.read_key() == expected_key

@patch("shutil.get_terminal_size")
def test_read_line(mock_size):
    mock_size.return_value = os.terminal_size((80, 24))
    term = terminal("Some Channel\nignored\n")

    line = term.read_line("|")

    assert line == "Some Channel"
    assert output(term).endswith("|" + SHOW_CURSOR + HIDE_CURSOR)

def test_raw_mode_without_tty():
    term = terminal()

    with term.raw_mode():
        pass
