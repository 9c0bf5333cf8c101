import os
import logging
import tempfile
from typing import Callable, Iterable, List, Optional

from pydantic import ValidationError

from youtube_subscriptions.models import Videos
from youtube_subscriptions.logics.fetch_feeds import fetch_feeds

SourcesProvider = Callable[[], List[str]]
Aggregator = Callable[[Iterable[str]], Videos]

def dump_videos(videos: Videos) -> str:
    """
    Serialize the video list as JSON with one video per line.
    """
    lines = ",\n".join(video.model_dump_json() for video in videos.videos)
    if not lines:
        return '{"videos": []}\n'
    return '{"videos": [\n' + lines + "\n]}\n"

class CacheManager:
    def __init__(
            self,
            cache_path: str, # The path to load/save the video list
            sources_provider: SourcesProvider, # Returns the feed URLs, may raise SetupError
            aggregate: Aggregator = fetch_feeds, # Fetches and merges the feeds
        ):
        """
        Initialize the cache manager. Nothing is read until `load` is called.
        """
        self._cache_path = cache_path
        self._sources_provider = sources_provider
        self._aggregate = aggregate

    @property
    def cache_path(self) -> str:
        return self._cache_path

    def read(self) -> Optional[Videos]:
        """
        Read the cached video list.

        Returns:
            Videos: The cached video list.
            None: If there is no cache or it cannot be read.
        """
        if not os.path.exists(self._cache_path):
            logging.info(f"No cache at \"{self._cache_path}\".")
            return None
        try:
            with open(self._cache_path, "rb") as f:
                return Videos.model_validate_json(f.read())
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            logging.warning(f"Ignoring unreadable cache \"{self._cache_path}\": {e}")
            return None

    def write(self, videos: Videos):
        """
        Replace the cache with the given video list.

        The list is written to a temporary file next to the cache which then
        replaces it, so readers never see a partial file.
        """
        directory = os.path.dirname(os.path.abspath(self._cache_path))
        fd, temp_path = tempfile.mkstemp(
            dir=directory,
            prefix=".yts-",
            suffix=".json.tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(dump_videos(videos))
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self._cache_path)
        except BaseException:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise
        logging.info(f"Cache written to \"{self._cache_path}\" with {len(videos.videos)} videos.")

    def refresh(self) -> Videos:
        """
        Fetch every feed and overwrite the cache with the result.
        """
        sources = self._sources_provider()
        videos = self._aggregate(sources)
        self.write(videos)
        return videos

    def load(self, force_refresh: bool = False) -> Videos:
        """
        Load the video list, from the cache unless a refresh is forced or there is no usable cache.
        """
        if not force_refresh:
            videos = self.read()
            if videos is not None:
                logging.info(f"Loaded {len(videos.videos)} videos from cache.")
                return videos
        return self.refresh()
