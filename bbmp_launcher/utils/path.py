"""
Utilities for handling user directories, file names and URL parsing.
"""

import os
import re
import sys
from pathlib import Path
from urllib.parse import unquote, urlsplit

from pathvalidate import sanitize_filename

APP_DIR_NAME = "bbmp-launcher"
DEFAULT_JAR_NAME = "bbmp.jar"
CUSTOM_VERSION_LABEL = "custom"

_VERSION_LABEL_REGEX = re.compile(r"v[\d._-]+", re.IGNORECASE)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / APP_DIR_NAME


def get_data_dir() -> Path:
    """Returns the per-user directory holding downloaded jars and the runtime."""
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    elif sys.platform == "darwin":
        base_dir = Path("~/Library/Application Support")
    else:
        base_dir = Path(os.getenv("XDG_DATA_HOME", "~/.local/share"))
    return base_dir.expanduser() / APP_DIR_NAME


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


def filename_from_url(url: str, default: str = DEFAULT_JAR_NAME) -> str:
    """
    Returns the last path segment of a URL as a safe local file name, or
    ``default`` when the URL ends with a slash or has no path.
    """
    segment = unquote(urlsplit(url).path.rsplit("/", 1)[-1])
    return sanitize_filename(segment, platform="auto") or default


def guess_version_label(filename: str) -> str:
    """
    Best-effort version label scanned from the whole file name. Separators
    after the digits are kept, so ``bbmp-v2.1.jar`` yields ``v2.1.``. Falls back to ``custom`` so a label is always present.
    """
    match = _VERSION_LABEL_REGEX.search(filename)
    return match.group(0) if match else CUSTOM_VERSION_LABEL


def safe_tag(version_tag: str, default: str = "latest") -> str:
    """A release tag usable inside a file name: separators and reserved characters removed."""
    return sanitize_filename(version_tag, platform="universal") or default
