"""The interactive video browser: a key driven state machine drawn on a `Terminal`."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from youtube_subscriptions.cache_manager import CacheManager
from youtube_subscriptions.logics.commands import Commands
from youtube_subscriptions.logics.view import (
    filtered_count,
    find_video,
    next_start,
    previous_start,
    to_show_videos,
)
from youtube_subscriptions.models import CommandResult, Video, Videos
from youtube_subscriptions.terminal import Key, Terminal

HELP = """
  youtube-subscriptions: a tool to view your youtube subscriptions in a terminal

  q          quit
  j,l,down   move down
  k,up       move up
  g,H        go to top
  G,L        go to bottom
  M          go to middle
  r,$,left   soft refresh
  P          previous page
  N          next page
  R          full refresh (fetches video list)
  h,?        prints this help
  i,right    prints video information
  /          search
  f          filter
  :o <id>    plays the video with the given id
  p,enter    plays selected video
  d          downloads selected video
  o          open selected video in browser
"""

UNSUPPORTED_KEY = "key not supported (press h for help)"

DATE_COLOR = "\x1b[36m"
CHANNEL_COLOR = "\x1b[34m"
BOLD = "\x1b[1m"
RESET = "\x1b[0m"

class Mode(Enum):
    BROWSING = "browsing"
    AWAITING_LINE_INPUT = "awaiting_line_input"
    SHOWING_INFO = "showing_info"
    SHOWING_HELP = "showing_help"

@dataclass
class SessionState:
    """
    Everything the browser knows between two keys.
    """
    videos: Videos = field(default_factory=Videos) # The whole video list.
    start: int = 0 # Offset of the page in the sorted, filtered list.
    n: int = 0 # Number of rows available for videos.
    filter: str = "" # Only videos whose title or channel contain it are shown.
    i: int = 0 # Selected row.
    toshow: List[Video] = field(default_factory=list) # The videos on screen, top row first.
    mode: Mode = Mode.BROWSING
    prompt: Optional[str] = None # The prompt of the pending line input.
    running: bool = True

    @property
    def selected(self) -> Optional[Video]:
        if 0 <= self.i < len(self.toshow):
            return self.toshow[self.i]
        return None

def wrap(index: int, length: int) -> int:
    """
    Wrap a row index around the number of rows; 0 when there are none.
    """
    if length == 0:
        return 0
    return index % length

def clip_row(segments: List[Tuple[str, str]], width: int) -> str:
    """
    Join `(color, text)` segments, cutting the text so that at most `width` characters are visible.
    """
    row = ""
    for color, text in segments:
        text = text[:max(width, 0)]
        width -= len(text)
        if not text:
            continue
        row += f"{color}{text}{RESET}" if color else text
    return row

def format_video_rows(toshow: List[Video], cols: int) -> List[str]:
    """
    One line per video: date, channel aligned on the widest channel and title.

    Rows never reach the last column so that they never wrap.
    """
    width = max((len(video.channel) for video in toshow), default=0)
    rows = []
    for video in toshow:
        date = video.published.split("T")[0][5:10]
        # Two spaces for the selector, one before the channel, one before the title.
        rows.append(clip_row([
            ("", "  "),
            (DATE_COLOR, date),
            ("", " "),
            (CHANNEL_COLOR, video.channel.ljust(width)),
            ("", " "),
            ("", video.title),
        ], cols - 1))
    return rows

def format_info(video: Video) -> List[str]:
    return [
        video.title,
        "",
        f"from {video.channel}",
        "",
        *video.description.splitlines(),
    ]

class Browser:
    """
    The interactive browser.

    Keys are read one at a time and dispatched by `handle_key`, which updates
    the given `SessionState` and redraws the terminal.
    """
    def __init__(
            self,
            terminal: Terminal,
            cache_manager: CacheManager,
            commands: Commands,
            state: Optional[SessionState] = None,
        ):
        self.terminal = terminal
        self.cache_manager = cache_manager
        self.commands = commands
        self.state = state or SessionState()
        self.bindings: Dict[str, Callable[[SessionState], None]] = {}
        self._bind(self.move_down, "j", "l", Key.DOWN)
        self._bind(self.move_up, "k", Key.UP)
        self._bind(self.go_to_top, "g", "H")
        self._bind(self.go_to_middle, "M")
        self._bind(self.go_to_bottom, "G", "L")
        self._bind(self.soft_reload, "r", "$", Key.LEFT)
        self._bind(self.previous_page, "P")
        self._bind(self.next_page, "N")
        self._bind(self.hard_reload, "R")
        self._bind(self.help, "h", "?")
        self._bind(self.info, "i", Key.RIGHT)
        self._bind(self.play_current, "p", Key.ENTER)
        self._bind(self.download_current, "d")
        self._bind(self.open_current, "o")
        self._bind(self.search, "/")
        self._bind(self.filter, "f")
        self._bind(self.command, ":")
        self._bind(self.quit, "q")

    def _bind(self, action: Callable[[SessionState], None], *keys: str):
        for key in keys:
            self.bindings[key] = action

    ### Loop

    def run(self):
        """
        Show the first page and handle keys until the user quits.
        """
        state = self.state
        self.first_page(state)
        while state.running:
            self.print_selector(state.i)
            key = self.terminal.read_key()
            self.handle_key(state, key)

    def handle_key(self, state: SessionState, key: str):
        action = self.bindings.get(key)
        if action is None:
            logging.debug(f"Unsupported key {key!r}.")
            self.terminal.status(UNSUPPORTED_KEY)
            return
        action(state)
        state.i = wrap(state.i, len(state.toshow))

    ### Drawing

    def derive(self, state: SessionState):
        state.toshow = to_show_videos(state.videos.videos, state.start, state.n, state.filter)
        state.i = wrap(state.i, len(state.toshow))

    def clear_and_print_videos(self, state: SessionState):
        self.terminal.clear()
        self.terminal.move_cursor(0)
        self.terminal.write_rows(format_video_rows(state.toshow, self.terminal.cols()))

    def print_selector(self, i: int):
        self.terminal.move_cursor(i)
        self.terminal.write(f"{BOLD}|{RESET}\r")

    def clear_selector(self, i: int):
        self.terminal.move_cursor(i)
        self.terminal.write(" ")

    def refresh_view(self, state: SessionState):
        """
        Re-derive the page from the current offset and filter and redraw it.
        """
        state.n = self.terminal.lines()
        self.derive(state)
        self.clear_and_print_videos(state)

    ### Selection

    def jump(self, state: SessionState, new_i: int):
        self.clear_selector(state.i)
        state.i = wrap(new_i, len(state.toshow))

    def move_down(self, state: SessionState):
        self.jump(state, state.i + 1)

    def move_up(self, state: SessionState):
        self.jump(state, state.i - 1)

    def go_to_top(self, state: SessionState):
        self.jump(state, 0)

    def go_to_middle(self, state: SessionState):
        self.jump(state, len(state.toshow) // 2)

    def go_to_bottom(self, state: SessionState):
        self.jump(state, len(state.toshow) - 1)

    ### Pages

    def move_page(self, state: SessionState, direction: int):
        """
        Move to the page of older videos (1), newer videos (-1) or the first page (0).
        """
        state.n = self.terminal.lines()
        if direction == 1:
            total = filtered_count(state.videos.videos, state.filter)
            state.start = next_start(state.start, state.n, total)
        elif direction == -1:
            state.start = previous_start(state.start, state.n)
        else:
            state.start = 0
        state.i = 0
        self.derive(state)
        self.clear_and_print_videos(state)

    def first_page(self, state: SessionState):
        state.start = 0
        state.i = 0
        self.refresh_view(state)

    def previous_page(self, state: SessionState):
        self.move_page(state, 1)

    def next_page(self, state: SessionState):
        self.move_page(state, -1)

    def soft_reload(self, state: SessionState):
        self.move_page(state, 0)

    def hard_reload(self, state: SessionState):
        self.terminal.status("updating video list...")
        state.videos = self.cache_manager.load(force_refresh=True)
        self.terminal.status("")
        self.soft_reload(state)

    ### Screens

    def wait_key_press(self, state: SessionState):
        self.terminal.pause()
        state.mode = Mode.BROWSING
        self.refresh_view(state)

    def help(self, state: SessionState):
        state.mode = Mode.SHOWING_HELP
        self.terminal.clear()
        self.terminal.move_cursor(0)
        self.terminal.write_rows(HELP.splitlines())
        self.wait_key_press(state)

    def info(self, state: SessionState):
        video = state.selected
        if video is None:
            return
        state.mode = Mode.SHOWING_INFO
        self.terminal.clear()
        self.terminal.move_cursor(0)
        self.terminal.write_rows(format_info(video))
        self.wait_key_press(state)

    ### Commands

    def report(self, result: CommandResult):
        """
        Show a failed command on the status line until a key is pressed.
        """
        if result.ok:
            return
        self.terminal.status(f"{result.message} (press any key)")
        self.terminal.pause()

    def play_id(self, state: SessionState, video_id: str):
        self.terminal.clear()
        self.terminal.move_cursor(0)
        self.terminal.write(f"playing {video_id}...\r\n")
        self.report(self.commands.play(video_id))
        self.refresh_view(state)

    def play_current(self, state: SessionState):
        video = state.selected
        if video is None or not video.video_id:
            return
        self.play_id(state, video.video_id)

    def download_current(self, state: SessionState):
        video = state.selected
        if video is None or not video.video_id:
            return
        self.terminal.clear()
        self.terminal.move_cursor(0)
        self.report(self.commands.download(video.video_id))
        self.refresh_view(state)

    def open_current(self, state: SessionState):
        video = state.selected
        if video is None:
            return
        self.terminal.status(f"opening {video.url}")
        self.report(self.commands.open_in_browser(video.url))

    ### Line input

    def input_with_prefix(self, state: SessionState, prefix: str) -> str:
        state.mode = Mode.AWAITING_LINE_INPUT
        state.prompt = prefix
        try:
            return self.terminal.read_line(prefix)
        finally:
            state.mode = Mode.BROWSING
            state.prompt = None

    def search(self, state: SessionState):
        text = self.input_with_prefix(state, "/")
        state.n = self.terminal.lines()
        self.derive(state)
        state.i = find_video(state.toshow, text)
        self.clear_and_print_videos(state)

    def filter(self, state: SessionState):
        state.filter = self.input_with_prefix(state, "|")
        self.move_page(state, 0)

    def command(self, state: SessionState):
        """
        Run a `<command> <argument>` line; only `o <id>` is known.
        """
        words = self.input_with_prefix(state, ":").split()
        if len(words) == 2 and words[0] == "o":
            self.play_id(state, words[1])
            return
        logging.debug(f"Ignoring command {words}.")
        self.refresh_view(state)

    def quit(self, state: SessionState):
        state.running = False
