import json
import os
import pytest

from youtube_subscriptions.config import download_count, load_config, parse_cli_arguments
from youtube_subscriptions.exceptions import SetupError

@pytest.fixture(autouse=True)
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    for key in list(os.environ):
        if key.startswith("YTS_"):
            monkeypatch.delenv(key)
    return tmp_path

def write_config(path, values):
    path.write_text(json.dumps(values))
    return str(path)

@pytest.mark.parametrize(
    "argv, expected_count",
    [
        ([], None),
        (["10"], 10),
        (["ten"], None),
        (["-v", "3"], 3),
    ]
)
def test_download_count(argv, expected_count):
    assert download_count(parse_cli_arguments(argv)) == expected_count

def test_defaults_without_config_file(home):
    config = load_config(parse_cli_arguments(["-c", str(home / "missing.json")]))

    assert config.video_path == "/tmp"
    assert config.subscriptions_path == str(home / ".config" / "youtube-subscriptions" / "subscription_manager")
    assert config.log_file == str(home / ".cache" / "youtube-subscriptions" / "yts.log")
    assert os.path.isdir(home / ".cache" / "youtube-subscriptions")

def test_config_file_with_home_placeholder(home):
    path = write_config(home / "config.json", {
        "video_path": "__HOME/videos",
        "cache_path": "__HOME/cache/yts.json",
        "channel_ids": ["AAA"],
        "mpv_mode": False,
    })

    config = load_config(parse_cli_arguments(["--config", path]))

    assert config.video_path == str(home / "videos")
    assert config.cache_path == str(home / "cache" / "yts.json")
    assert config.channel_ids == ["AAA"]
    assert config.mpv_mode is False
    assert os.path.isdir(home / "videos")
    assert os.path.isdir(home / "cache")

def test_environment_overrides_config_file(home, monkeypatch):
    path = write_config(home / "config.json", {"video_extension": "mkv", "video_path": "__HOME/a"})
    monkeypatch.setenv("YTS_VIDEO_PATH", "__HOME/b")
    monkeypatch.setenv("YTS_MAX_WORKERS", "4")

    config = load_config(parse_cli_arguments(["-c", path]))

    assert config.video_extension == "mkv"
    assert config.video_path == str(home / "b")
    assert config.max_workers == 4

def test_config_path_from_environment(home, monkeypatch):
    path = write_config(home / "other.json", {"video_extension": "webm"})
    monkeypatch.setenv("YTS_CONFIG", path)

    config = load_config(parse_cli_arguments([]))

    assert config.video_extension == "webm"

@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[1, 2]",
        json.dumps({"mpv_mode": "sometimes"}),
    ]
)
def test_invalid_config_file(home, content):
    path = home / "config.json"
    path.write_text(content)

    with pytest.raises(SetupError):
        load_config(parse_cli_arguments(["-c", str(path)]))

def test_uncreatable_video_path(home):
    (home / "file").write_text("")
    path = write_config(home / "config.json", {"video_path": "__HOME/file/videos"})

    with pytest.raises(SetupError):
        load_config(parse_cli_arguments(["-c", path]))
