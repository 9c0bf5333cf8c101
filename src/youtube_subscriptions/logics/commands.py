import os
import sys
import logging
import subprocess
import webbrowser
from typing import List, Optional, TextIO

from youtube_subscriptions.models import AppConfig, CommandResult, VideoID, WATCH_URL

YOUTUBE_DL = "youtube-dl"

class Commands:
    """
    Launches the external programs used to watch videos.

    Every method reports failures through its `CommandResult` and never raises.
    """
    def __init__(
            self,
            config: AppConfig,
            output: TextIO = sys.stdout, # Where the output of the programs is copied to
        ):
        self.config = config
        self.output = output

    def video_file(self, video_id: VideoID) -> str:
        return os.path.join(
            self.config.video_path,
            f"{video_id}.{self.config.video_extension}",
        )

    def run(self, command: List[str]) -> CommandResult:
        """
        Run a command, copying its output until it exits.
        """
        binary = command[0]
        logging.info(f"Running {command}")
        try:
            process = subprocess.Popen(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except FileNotFoundError:
            logging.warning(f"\"{binary}\" was not found.")
            return CommandResult(ok=False, message=f"`{binary}` was not found: maybe you should install it ?")
        except OSError as e:
            logging.warning(f"Error while running \"{binary}\": {e}")
            return CommandResult(ok=False, message=f"error while running {binary} : {e}")

        with process:
            for line in process.stdout:
                self.output.write(line)
                self.output.flush()
        if process.returncode != 0:
            logging.warning(f"\"{binary}\" exited with code {process.returncode}.")
            return CommandResult(ok=False, message=f"{binary} exited with code {process.returncode}")
        return CommandResult(ok=True)

    def download(self, video_id: VideoID, path: Optional[str] = None) -> CommandResult:
        """
        Download a video with youtube-dl unless it was already downloaded.
        """
        path = path or self.video_file(video_id)
        if os.path.exists(path):
            logging.info(f"\"{path}\" already downloaded.")
            return CommandResult(ok=True)
        return self.run([
            YOUTUBE_DL,
            "-f", self.config.youtubedl_format,
            "-o", path,
            "--", video_id,
        ])

    def find_player(self) -> Optional[List[str]]:
        for player in self.config.players:
            if player and os.path.exists(player[0]):
                return player
        return None

    def play_file(self, path: str) -> CommandResult:
        player = self.find_player()
        if player is None:
            return CommandResult(ok=False, message="no video player found")
        return self.run(player + [path])

    def play(self, video_id: VideoID) -> CommandResult:
        """
        Play a video: streamed with mpv in mpv mode, otherwise downloaded then played.
        """
        if self.config.mpv_mode and os.path.exists(self.config.mpv_path):
            return self.run([
                self.config.mpv_path,
                "-fs",
                "-really-quiet",
                "--ytdl-format", self.config.youtubedl_format,
                WATCH_URL.format(video_id),
            ])
        path = self.video_file(video_id)
        result = self.download(video_id, path)
        if not result.ok:
            return result
        return self.play_file(path)

    def open_in_browser(self, url: str) -> CommandResult:
        try:
            opened = webbrowser.open(url)
        except webbrowser.Error as e:
            logging.warning(f"Failed to open \"{url}\": {e}")
            return CommandResult(ok=False, message=f"failed to open {url}: {e}")
        if not opened:
            return CommandResult(ok=False, message=f"no browser available to open {url}")
        return CommandResult(ok=True)
