"""
exifsort - Sort photos and videos into YYYY/MM-DD folders by capture date.

Capture dates come from EXIF, XMP and QuickTime metadata read with exiftool.
Files without a usable date are kept apart under a 0000 folder that mirrors
their original subfolder. MIT License.
"""

__version__ = "1.0.0"


# Public API
from .classifier import FileTransferPlan, destination_subpath
from .cli import main
from .config import Config
from .core import ExifSorter
from .file_operations import ConflictOutcome, compare_files
from .metadata import MetadataRecordSet, read_metadata
from .resolver import get_capture_date, resolve_capture_date
from .timestamps import DateParseError, parse_date

__all__ = [
    "main", "Config", "ExifSorter", "FileTransferPlan", "destination_subpath",
    "ConflictOutcome", "compare_files", "MetadataRecordSet", "read_metadata",
    "get_capture_date", "resolve_capture_date", "DateParseError", "parse_date",
]
