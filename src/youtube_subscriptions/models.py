from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict

# Identifier of a video, the last path segment of its URL.
VideoID = str

WATCH_URL = "https://www.youtube.com/watch?v={}"

### Video

class Video(BaseModel):
    """
    A video from a channel feed.
    """
    channel: str # The title of the feed the video comes from.
    title: str # The title of the video.
    thumbnail: str # The URL of the thumbnail, may be empty.
    url: str # The URL of the video.
    published: str # The ISO 8601 publication date; sorts lexically.
    description: str # The description of the video, may be empty.

    model_config = ConfigDict(
        frozen = True,
    )

    @property
    def video_id(self) -> VideoID:
        """
        The identifier of the video: the last path segment of its URL without the query string.
        """
        page = self.url.split("/")[-1]
        return page.split("?")[0]

    @property
    def watch_url(self) -> str:
        return WATCH_URL.format(self.video_id)

class Videos(BaseModel):
    """
    Every video of every subscription, as persisted in the cache file.
    """
    videos: List[Video] = [] # Videos in no particular order.

### Commands

class CommandResult(BaseModel):
    """
    The outcome of an external command (player, downloader, browser).
    """
    ok: bool # Whether the command ran successfully.
    message: str = "" # What to show the user when it did not.

    model_config = ConfigDict(
        frozen = True,
    )

### App

def default_players() -> List[List[str]]:
    """
    Player command lines tried in order when mpv mode is off.
    """
    return [
        ["/usr/bin/omxplayer", "-o", "local"],
        ["/Applications/VLC.app/Contents/MacOS/VLC", "--play-and-exit", "-f"],
        ["/usr/bin/vlc", "--play-and-exit", "-f"],
        ["/usr/bin/mpv", "-really-quiet", "-fs"],
        ["/usr/bin/mplayer", "-really-quiet", "-fs"],
    ]

class AppEnvSettings(BaseSettings):
    """
    App settings from environment variables.
    """
    config: Optional[str] = None # The path of the JSON config file.
    video_path: Optional[str] = None # The directory videos are downloaded to.
    cache_path: Optional[str] = None # The path of the video list cache.
    youtubedl_format: Optional[str] = None # The format passed to youtube-dl and mpv.
    video_extension: Optional[str] = None # The extension of downloaded videos.
    mpv_mode: Optional[bool] = None # Whether to stream videos with mpv.
    mpv_path: Optional[str] = None # The path of the mpv binary.
    subscriptions_path: Optional[str] = None # The path of the OPML subscription export.
    log_file: Optional[str] = None # The file logs are written to.
    fetch_timeout: Optional[float] = None # Seconds to wait for a single feed.
    max_workers: Optional[int] = None # Maximum number of feeds fetched at once.

    model_config = SettingsConfigDict(
        env_prefix="YTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        frozen=True,
        extra="ignore",
    )

class AppConfig(BaseModel):
    """
    Global app config.
    """
    video_path: str = "/tmp" # The directory videos are downloaded to.
    cache_path: str = "/tmp/yts.json" # The path of the video list cache.
    youtubedl_format: str = "[height <=? 360][ext = mp4]" # The format passed to youtube-dl and mpv.
    video_extension: str = "mp4" # The extension of downloaded videos.
    players: List[List[str]] = default_players() # Player command lines, first existing binary wins.
    channel_ids: List[str] = [] # Channels to follow in addition to the subscription export.
    mpv_mode: bool = True # Whether to stream videos with mpv instead of downloading them first.
    mpv_path: str = "/usr/bin/mpv" # The path of the mpv binary.
    subscriptions_path: str = "__HOME/.config/youtube-subscriptions/subscription_manager" # The OPML subscription export.
    log_file: str = "__HOME/.cache/youtube-subscriptions/yts.log" # The file logs are written to.
    fetch_timeout: Optional[float] = None # Seconds to wait for a single feed, no limit when unset.
    max_workers: Optional[int] = None # Maximum number of feeds fetched at once, executor default when unset.

    model_config = ConfigDict(
        frozen = True,
        extra = "ignore",
    )
