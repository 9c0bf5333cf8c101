"""Terminal handling: alternate screen, raw key reads and ANSI drawing primitives."""

import os
import sys
import tty
import atexit
import select
import shutil
import signal
import termios
import logging
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional, TextIO

# Size used when the terminal cannot report one.
FALLBACK_SIZE = (20, 20)

# Seconds to wait for the rest of an escape sequence.
ESCAPE_TIMEOUT = 0.05

SMCUP = "\x1b[?1049h"
RMCUP = "\x1b[?1049l"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
CLEAR = "\x1b[2J"
CLEAR_TO_END_OF_LINE = "\x1b[K"

class Key:
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    ENTER = "enter"
    ESCAPE = "escape"

ESCAPE_SEQUENCES = {
    "[A": Key.UP,
    "[B": Key.DOWN,
    "[C": Key.RIGHT,
    "[D": Key.LEFT,
    "OA": Key.UP,
    "OB": Key.DOWN,
    "OC": Key.RIGHT,
    "OD": Key.LEFT,
}

class Terminal:
    """
    The terminal the browser draws on.

    Used as a context manager: entering switches to the alternate screen and
    hides the cursor; leaving restores the terminal as it was. The restore
    also runs at interpreter exit and on SIGTERM/SIGHUP so that a crash never
    leaves the user's terminal in raw mode or on the alternate screen.
    """
    def __init__(
            self,
            stdin: TextIO = sys.stdin,
            stdout: TextIO = sys.stdout,
        ):
        self.stdin = stdin
        self.stdout = stdout
        self._saved_attributes = None
        self._saved_handlers = {}
        self._active = False

    def __enter__(self) -> "Terminal":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.release()

    def _is_tty(self) -> bool:
        try:
            return self.stdin.isatty()
        except (AttributeError, ValueError):
            return False

    def acquire(self):
        if self._active:
            return
        if self._is_tty():
            self._saved_attributes = termios.tcgetattr(self.stdin.fileno())
        atexit.register(self.release)
        for signum in (signal.SIGTERM, signal.SIGHUP):
            self._saved_handlers[signum] = signal.signal(signum, self._on_signal)
        self._active = True
        self.write(SMCUP)
        self.hide_cursor()

    def release(self):
        """
        Restore the terminal. Safe to call more than once.
        """
        if not self._active:
            return
        self._active = False
        if self._saved_attributes is not None:
            termios.tcsetattr(self.stdin.fileno(), termios.TCSADRAIN, self._saved_attributes)
            self._saved_attributes = None
        self.show_cursor()
        self.write(RMCUP)
        atexit.unregister(self.release)
        for signum, handler in self._saved_handlers.items():
            signal.signal(signum, handler)
        self._saved_handlers = {}

    def _on_signal(self, signum, frame):
        logging.info(f"Received signal {signum}, leaving.")
        self.release()
        raise SystemExit(128 + signum)

    @contextmanager
    def raw_mode(self) -> Iterator[None]:
        """
        Deliver keystrokes unbuffered and without echo for the duration of the block.
        """
        if not self._is_tty():
            yield
            return
        fd = self.stdin.fileno()
        attributes = termios.tcgetattr(fd)
        try:
            tty.setraw(fd)
            yield
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, attributes)

    ### Size

    def size(self):
        return shutil.get_terminal_size(FALLBACK_SIZE)

    def lines(self) -> int:
        """
        Rows available for videos: every row but the status line.
        """
        return max(self.size().lines - 1, 0)

    def cols(self) -> int:
        return self.size().columns

    ### Drawing

    def write(self, text: str):
        self.stdout.write(text)
        self.stdout.flush()

    def clear(self):
        self.write(CLEAR)

    def move_cursor(self, row: int):
        self.write(f"\x1b[{row + 1};0f")

    def move_to_bottom(self):
        self.move_cursor(self.lines())

    def clear_to_end_of_line(self):
        self.write(CLEAR_TO_END_OF_LINE)

    def hide_cursor(self):
        self.write(HIDE_CURSOR)

    def show_cursor(self):
        self.write(SHOW_CURSOR)

    def status(self, text: str):
        """
        Replace the content of the status line, the last row of the terminal.
        """
        self.move_to_bottom()
        self.clear_to_end_of_line()
        self.move_to_bottom()
        self.write(text)

    def write_rows(self, rows: Iterable[str]):
        self.write("".join(f"{row}\r\n" for row in rows))

    ### Input

    def _read_char(self, timeout: Optional[float] = None) -> str:
        """
        Read one character from stdin, "" when the timeout expires first.
        """
        fd = self.stdin.fileno()
        if timeout is not None and not select.select([fd], [], [], timeout)[0]:
            return ""
        first = os.read(fd, 1)
        if not first:
            return ""
        # Continuation bytes of a UTF-8 character.
        length = 1
        if first[0] >= 0xF0:
            length = 4
        elif first[0] >= 0xE0:
            length = 3
        elif first[0] >= 0xC0:
            length = 2
        data = first + (os.read(fd, length - 1) if length > 1 else b"")
        return data.decode("utf-8", errors="replace")

    def read_key(self) -> str:
        """
        Block until a key is pressed and return it.

        Arrows and enter are returned as `Key` constants, other keys as the character typed.
        """
        with self.raw_mode():
            char = self._read_char()
            if char in ("\r", "\n"):
                return Key.ENTER
            if char != "\x1b":
                return char
            sequence = self._read_char(ESCAPE_TIMEOUT)
            if sequence:
                sequence += self._read_char(ESCAPE_TIMEOUT)
            return ESCAPE_SEQUENCES.get(sequence, Key.ESCAPE)

    def read_line(self, prefix: str) -> str:
        """
        Show the prefix on the status line and read a line of text with echo.
        """
        self.status(prefix)
        self.show_cursor()
        try:
            line = self.stdin.readline()
        finally:
            self.hide_cursor()
        return line.rstrip("\r\n")

    def pause(self):
        """
        Wait for any key.
        """
        self.read_key()
