import sys
import logging
from functools import partial
from typing import Callable, List, Optional

from youtube_subscriptions.cache_manager import CacheManager
from youtube_subscriptions.config import download_count, load_config, parse_cli_arguments
from youtube_subscriptions.exceptions import SetupError
from youtube_subscriptions.logics.commands import Commands
from youtube_subscriptions.logics.fetch_feeds import fetch_channel_videos, fetch_feeds
from youtube_subscriptions.logics.view import sort_videos
from youtube_subscriptions.models import AppConfig
from youtube_subscriptions.session import Browser, SessionState
from youtube_subscriptions.subscriptions import read_subscription_sources
from youtube_subscriptions.terminal import Terminal

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

def setup_logging(config: AppConfig, verbose: bool = False, interactive: bool = True):
    """
    Log to the log file; to stderr as well when no terminal UI owns the screen.

    Replaces any handler installed by messages logged while the config was loading.
    """
    handlers: List[logging.Handler] = [logging.FileHandler(config.log_file)]
    if not interactive:
        handlers.append(logging.StreamHandler(sys.stderr))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )

class Main:
    """
    Main class for the youtube-subscriptions application.
    """
    def __init__(
            self,
            config: AppConfig,
            terminal_factory: Callable[[], Terminal] = Terminal,
            ):
        self.config = config
        self.terminal_factory = terminal_factory
        self.commands = Commands(config=config)
        fetcher = partial(fetch_channel_videos, timeout=config.fetch_timeout)
        self.cache_manager = CacheManager(
            cache_path=config.cache_path,
            sources_provider=partial(read_subscription_sources, config),
            aggregate=partial(fetch_feeds, max_workers=config.max_workers, fetcher=fetcher),
        )

    def run(self):
        """
        Run the interactive browser.
        """
        # Loaded before taking over the terminal so setup errors print on the normal screen.
        videos = self.cache_manager.load(force_refresh=False)
        with self.terminal_factory() as terminal:
            self.commands.output = terminal.stdout
            browser = Browser(
                terminal=terminal,
                cache_manager=self.cache_manager,
                commands=self.commands,
                state=SessionState(videos=videos),
            )
            browser.run()

    def download(self, count: int) -> int:
        """
        Refresh the video list and download the most recent videos.

        Returns:
            int: The number of videos that failed to download.
        """
        videos = self.cache_manager.load(force_refresh=True)
        failures = 0
        for video in sort_videos(videos.videos)[:count]:
            if not video.video_id:
                continue
            logging.info(f"Downloading \"{video.title}\" ({video.video_id}).")
            result = self.commands.download(video.video_id)
            if not result.ok:
                logging.error(result.message)
                failures += 1
        return failures

def main(argv: Optional[List[str]] = None) -> int:
    cli_args = parse_cli_arguments(argv)
    try:
        config = load_config(cli_args)
        count = download_count(cli_args)
        setup_logging(config, verbose=cli_args.verbose, interactive=count is None)
        app = Main(config=config)
        if count is not None:
            return 1 if app.download(count) else 0
        app.run()
    except SetupError as e:
        print(e, file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130
    return 0

if __name__ == "__main__":
    sys.exit(main())
