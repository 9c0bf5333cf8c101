import pytest
import requests
from unittest.mock import MagicMock, patch

from youtube_subscriptions.logics.fetch_feeds import (
    fetch_channel_videos,
    fetch_feeds,
    normalize_published,
)
from youtube_subscriptions.models import Videos
from tests.test_utils import generate_test_video, youtube_feed

def response(status_code: int = 200, text: str = "") -> MagicMock:
    mock_response = MagicMock()
    mock_response.status_code = status_code
    mock_response.content = text.encode("utf-8")
    return mock_response

@patch("requests.get")
def test_fetch_channel_videos(mock_get):
    mock_get.return_value = response(text=youtube_feed("Test Channel", ["abc1", "abc2"]))

    videos = fetch_channel_videos("https://www.youtube.com/feeds/videos.xml?channel_id=test")

    assert len(videos) == 2
    for index, video in enumerate(videos):
        video_id = f"abc{index + 1}"
        assert video.channel == "Test Channel"
        assert video.title == f"Video {video_id}"
        assert video.thumbnail == f"https://i1.ytimg.com/vi/{video_id}/hqdefault.jpg"
        assert video.url == f"https://www.youtube.com/v/{video_id}?version=3"
        assert video.published == f"2021-01-0{index + 1}T10:00:00+00:00"
        assert video.description == f"Description {video_id}"
        assert video.video_id == video_id

@patch("requests.get")
def test_fetch_channel_videos_passes_timeout(mock_get):
    mock_get.return_value = response(text=youtube_feed("Test Channel", []))

    fetch_channel_videos("https://example.com/feed", timeout=5)

    mock_get.assert_called_once_with("https://example.com/feed", timeout=5)

@pytest.mark.parametrize(
    "mock_response",
    [
        response(status_code=404),
        response(status_code=500, text=youtube_feed("Test Channel", ["abc1"])),
        response(text="this is not a feed"),
        response(text=youtube_feed("Empty Channel", [])),
    ]
)
@patch("requests.get")
def test_fetch_channel_videos_failures_are_empty(mock_get, mock_response):
    mock_get.return_value = mock_response

    assert fetch_channel_videos("https://example.com/feed") == []

@patch("requests.get")
def test_fetch_channel_videos_network_error_is_empty(mock_get):
    mock_get.side_effect = requests.ConnectionError("unreachable")

    assert fetch_channel_videos("https://example.com/feed") == []

@pytest.mark.parametrize(
    "value, expected",
    [
        ("2021-01-03T10:00:00+00:00", "2021-01-03T10:00:00+00:00"),
        ("Fri, 01 Jan 2021 00:00:00 GMT", "2021-01-01T00:00:00+00:00"),
        ("Fri, 01 Jan 2021 02:00:00 +0200", "2021-01-01T00:00:00+00:00"),
        ("", ""),
        ("not a date", ""),
    ]
)
def test_normalize_published(value, expected):
    assert normalize_published(value) == expected

def test_fetch_feeds_merges_every_feed():
    feeds = {
        "https://example.com/a": [generate_test_video(1, channel="A"), generate_test_video(2, channel="A")],
        "https://example.com/b": [generate_test_video(3, channel="B")],
        "https://example.com/c": [],
    }

    videos = fetch_feeds(feeds.keys(), fetcher=lambda url: feeds[url])

    assert isinstance(videos, Videos)
    assert sorted(video.title for video in videos.videos) == [
        "Test Video 1", "Test Video 2", "Test Video 3",
    ]

def test_fetch_feeds_keeps_duplicates():
    video = generate_test_video(1)

    videos = fetch_feeds(
        ["https://example.com/a", "https://example.com/b"],
        fetcher=lambda url: [video],
    )

    assert videos.videos == [video, video]

def test_fetch_feeds_isolates_failing_feed():
    def fetcher(url):
        if url == "https://example.com/broken":
            raise ValueError("failed to parse XML")
        return [generate_test_video(int(url[-1]))]

    videos = fetch_feeds(
        ["https://example.com/1", "https://example.com/broken", "https://example.com/2"],
        max_workers=2,
        fetcher=fetcher,
    )

    assert sorted(video.title for video in videos.videos) == ["Test Video 1", "Test Video 2"]

def test_fetch_feeds_without_feeds():
    assert fetch_feeds([]).videos == []
