"""Read the list of feeds the user is subscribed to."""

import os
import logging
import webbrowser
from typing import List

import listparser

from youtube_subscriptions.exceptions import SetupError
from youtube_subscriptions.models import AppConfig

TAKEOUT_URL = "https://www.youtube.com/subscription_manager?action_takeout=1"
CHANNEL_FEED_URL = "https://www.youtube.com/feeds/videos.xml?channel_id={}"

def missing_setup_message(path: str) -> str:
    return (
        "configuration is missing\n"
        f"please download: {TAKEOUT_URL} (a browser window should be opened with it).\n"
        f"make it available as {path}"
    )

def parse_subscriptions(opml: str) -> List[str]:
    """
    Extract the feed URLs of an OPML subscription export.
    """
    parsed = listparser.parse(opml)
    urls = []
    for feed in parsed.feeds:
        url = (feed.get("url") or "").strip()
        if url:
            urls.append(url)
    return urls

def read_subscription_sources(config: AppConfig) -> List[str]:
    """
    Read the feed URLs from the subscription export and the configured channel ids.

    Raises:
        SetupError: The subscription export is missing, unreadable or lists no feed.
    """
    path = config.subscriptions_path
    if not os.path.exists(path):
        try:
            webbrowser.open(TAKEOUT_URL)
        except webbrowser.Error as e:
            logging.warning(f"Failed to open \"{TAKEOUT_URL}\": {e}")
        raise SetupError(missing_setup_message(path))

    try:
        with open(path, "r", encoding="utf-8") as f:
            opml = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise SetupError(f"failed reading subscription_manager {path}: {e}") from e

    urls = parse_subscriptions(opml)
    if not urls and not config.channel_ids:
        raise SetupError(
            f"failed to parse subscription_manager {path}: no subscriptions found\n"
            f"please download it again: {TAKEOUT_URL}"
        )
    urls.extend(CHANNEL_FEED_URL.format(channel_id) for channel_id in config.channel_ids)
    logging.info(f"Found {len(urls)} subscriptions.")
    return urls
