import re
import logging
from datetime import timezone
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional

import requests
import feedparser
from dateutil import parser as date_parser

from youtube_subscriptions.models import Video, Videos

# Publication dates already in this form sort lexically and are kept verbatim.
ISO_8601_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}")

ChannelFetcher = Callable[[str], List[Video]]

def normalize_published(value: str) -> str:
    """
    Return the publication date as an ISO 8601 string.

    YouTube feeds already publish ISO 8601 dates; RSS feeds use RFC 822 dates
    which are converted to UTC. Unparsable dates become an empty string.
    """
    value = value.strip()
    if not value or ISO_8601_PATTERN.match(value):
        return value
    try:
        parsed = date_parser.parse(value)
    except (ValueError, OverflowError):
        logging.warning(f"Could not parse publication date \"{value}\".")
        return ""
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).isoformat()

def first_url(media: object) -> str:
    """
    The URL of the first element of a feedparser media list.
    """
    if isinstance(media, list) and media and isinstance(media[0], dict):
        return media[0].get("url", "")
    return ""

def entry_to_video(channel: str, entry: feedparser.FeedParserDict) -> Video:
    return Video(
        channel=channel,
        title=entry.get("title", ""),
        thumbnail=first_url(entry.get("media_thumbnail")),
        url=first_url(entry.get("media_content")) or entry.get("link", ""),
        published=normalize_published(entry.get("published", entry.get("updated", ""))),
        description=entry.get("media_description") or entry.get("summary", ""),
    )

def fetch_channel_videos(
    channel_url: str,
    timeout: Optional[float] = None,
) -> List[Video]:
    """
    Fetch the videos of a channel feed.

    Every failure (network, HTTP status, malformed feed) results in an empty
    list so that one broken feed does not empty the whole video list.
    """
    logging.debug(f"Fetching feed from {channel_url}.")
    try:
        response = requests.get(channel_url, timeout=timeout)
    except requests.RequestException as e:
        logging.warning(f"Failed to fetch the feed from {channel_url}: {e}")
        return []

    if response.status_code != 200:
        logging.warning(f"Failed to fetch the feed from {channel_url}. Code: {response.status_code}")
        return []

    parsed_feed = feedparser.parse(response.content)
    if parsed_feed.bozo and not parsed_feed.entries:
        logging.warning(f"Malformed feed from {channel_url}: {parsed_feed.get('bozo_exception')}")
        return []

    channel = parsed_feed.feed.get("title", "")
    videos = [entry_to_video(channel, entry) for entry in parsed_feed.entries]
    logging.debug(f"Fetched {len(videos)} videos from {channel_url}.")
    return videos

def fetch_feeds(
    channel_urls: Iterable[str],
    max_workers: Optional[int] = None,
    fetcher: ChannelFetcher = fetch_channel_videos,
) -> Videos:
    """
    Fetch every channel feed concurrently and merge their videos.

    The merge waits for every feed. Videos published by several feeds are kept
    once per feed.
    """
    channel_urls = list(channel_urls)
    logging.info(f"Fetching {len(channel_urls)} feeds.")

    def fetch(channel_url: str) -> List[Video]:
        try:
            return fetcher(channel_url)
        except Exception:
            logging.exception(f"Unexpected error while fetching {channel_url}.")
            return []

    videos: List[Video] = []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        for channel_videos in executor.map(fetch, channel_urls):
            videos.extend(channel_videos)

    logging.info(f"Fetched {len(videos)} videos from {len(channel_urls)} feeds.")
    return Videos(videos=videos)
