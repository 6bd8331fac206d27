"""
File extension constants and shared settings for exifsort.
"""

import logging
import subprocess
from functools import lru_cache

from rich.console import Console

PROGRAM = "exifsort"

# File extension constants
JPG_EXTENSIONS = (".jpg", ".jpeg")
RAW_EXTENSIONS = (
    ".raw", ".cr2", ".cr3", ".nef", ".nrw", ".arw", ".srf", ".sr2", ".dng",
    ".orf", ".pef", ".rw2", ".raf", ".srw", ".x3f", ".erf", ".mrw", ".3fr",
    ".fff", ".rwl", ".dcr", ".kdc", ".awr",
)
PHOTO_EXTENSIONS = JPG_EXTENSIONS + RAW_EXTENSIONS
MOVIE_EXTENSIONS = (
    ".mp4", ".mov", ".m4v", ".3gp", ".3g2",
    ".avi", ".mts", ".m2ts", ".mkv", ".wmv", ".webm",
)
VALID_EXTENSIONS = PHOTO_EXTENSIONS + MOVIE_EXTENSIONS

# Sentinel folder for files without a usable capture date
UNDATED_DIR = "0000"

_console = None


def get_console() -> Console:
    """Return the console shared by logging, progress and summary output."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def get_logger() -> logging.Logger:
    return logging.getLogger(PROGRAM)


def check_tool_availability(cmd: str, version_flag: str = "-ver") -> bool:
    """Check whether an external command can be executed."""
    try:
        subprocess.run([cmd, version_flag], capture_output=True, check=True)
        return True
    except (FileNotFoundError, subprocess.CalledProcessError):
        return False


@lru_cache(maxsize=None)
def exiftool_available() -> bool:
    return check_tool_availability("exiftool", "-ver")
