from typing import List, Sequence

from youtube_subscriptions.models import Video

def sort_videos(videos: Sequence[Video]) -> List[Video]:
    """
    Sort the videos from the most recent to the oldest.
    """
    return sorted(videos, key=lambda video: video.published, reverse=True)

def matches(video: Video, text: str) -> bool:
    return text in video.title or text in video.channel

def filter_videos(videos: Sequence[Video], filter_text: str) -> List[Video]:
    """
    Keep the videos whose title or channel contains the filter text (case sensitive).
    """
    if not filter_text:
        return list(videos)
    return [video for video in videos if matches(video, filter_text)]

def filtered_count(videos: Sequence[Video], filter_text: str) -> int:
    return len(filter_videos(videos, filter_text))

def to_show_videos(
    videos: Sequence[Video],
    start: int,
    window_size: int,
    filter_text: str = "",
) -> List[Video]:
    """
    The page of videos to show.

    Videos are sorted newest first and filtered, then the page
    `[start, start + window_size)` is taken and reversed: the oldest video of
    the page comes first.
    """
    if window_size <= 0:
        return []
    filtered = filter_videos(sort_videos(videos), filter_text)
    end = min(start + window_size, len(filtered))
    page = filtered[start:end]
    page.reverse()
    return page

def find_video(toshow: Sequence[Video], text: str) -> int:
    """
    Index of the first shown video whose title or channel contains the text, 0 if none does.
    """
    for index, video in enumerate(toshow):
        if matches(video, text):
            return index
    return 0

def next_start(start: int, page_size: int, total: int) -> int:
    """
    Start of the page of older videos; unchanged unless a full page remains.
    """
    if start + 2 * page_size <= total:
        return start + page_size
    return start

def previous_start(start: int, page_size: int) -> int:
    """
    Start of the page of newer videos, never before the first video.
    """
    return max(0, start - page_size)
