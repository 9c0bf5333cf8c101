import os
import json
import logging
from typing import Any, Dict, List, Optional
from argparse import ArgumentParser, Namespace as ArgNamespace

from dotenv import load_dotenv
from pydantic import ValidationError

from youtube_subscriptions.exceptions import SetupError
from youtube_subscriptions.models import AppEnvSettings, AppConfig

# Placeholder for the home directory in configured paths.
HOME_PLACEHOLDER = "__HOME"

DEFAULT_CONFIG_PATH = os.path.join("~", ".config", "youtube-subscriptions", "config.json")

# Config fields holding a path that may contain the home placeholder.
PATH_FIELDS = ("video_path", "cache_path", "subscriptions_path", "log_file")

def parse_cli_arguments(argv: Optional[List[str]] = None) -> ArgNamespace:
    """
    Parse the command line arguments.
    """
    parser = ArgumentParser(
        description="Browse the latest videos of your YouTube subscriptions in a terminal.",
    )
    parser.add_argument(
        "count",
        nargs="?",
        type=str,
        help="Download the COUNT most recent videos and exit instead of starting the browser.",
    )
    parser.add_argument(
        "-c", "--config",
        type=str,
        help="The JSON config file to use.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Write debug messages to the log file.",
    )
    return parser.parse_args(argv)

def download_count(cli_args: ArgNamespace) -> Optional[int]:
    """
    The number of videos to download in non-interactive mode, or None to start the browser.
    """
    if cli_args.count is None:
        return None
    try:
        return int(cli_args.count)
    except ValueError:
        logging.warning(f"Ignoring non numeric argument \"{cli_args.count}\", starting the browser.")
        return None

def read_config_file(path: str) -> Dict[str, Any]:
    """
    Read the JSON config file, an empty config when it does not exist.
    """
    if not os.path.exists(path):
        logging.info(f"No config file at \"{path}\", using defaults.")
        return {}
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise SetupError(f"error parsing configuration {path}: {e}") from e
    if not isinstance(data, dict):
        raise SetupError(f"error parsing configuration {path}: expected a JSON object")
    return data

def expand_home(path: str, home: str) -> str:
    return path.replace(HOME_PLACEHOLDER, home)

def prepare_directories(config: AppConfig):
    """
    Create the directories the app writes to.
    """
    directories = {
        "video path": config.video_path,
        "cache directory": os.path.dirname(config.cache_path),
        "log directory": os.path.dirname(config.log_file),
    }
    for name, directory in directories.items():
        if not directory:
            continue
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as e:
            raise SetupError(f"error while creating {name} {directory}: {e}") from e

def load_config(cli_args: Optional[ArgNamespace] = None) -> AppConfig:
    """
    Load the configuration.

    Values come from, by decreasing priority: the command line, the environment
    (`YTS_*` variables, `.env`), the JSON config file and the defaults.
    """
    load_dotenv()
    env_settings = AppEnvSettings()
    home = os.path.expanduser("~")

    config_path = (
        (cli_args.config if cli_args else None)
        or env_settings.config
        or DEFAULT_CONFIG_PATH
    )
    values = read_config_file(os.path.expanduser(config_path))
    values.update(env_settings.model_dump(exclude={"config"}, exclude_none=True))

    for field in PATH_FIELDS:
        if isinstance(values.get(field), str):
            values[field] = expand_home(values[field], home)

    try:
        config = AppConfig(**values)
    except ValidationError as e:
        raise SetupError(f"error parsing configuration {config_path}: {e}") from e

    # Defaults carry the placeholder too.
    config = config.model_copy(
        update={field: expand_home(getattr(config, field), home) for field in PATH_FIELDS}
    )
    prepare_directories(config)
    return config
