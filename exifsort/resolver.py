"""
Capture date resolution from decoded metadata.

Each date source is a probe with a ``try_resolve(records)`` method. The
resolver asks the probes in priority order and keeps the first date found.
"""

from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Sequence, Tuple

from .constants import get_logger
from .metadata import (EXIF_SUBIFD, QUICKTIME_MOVIE_HEADER, QUICKTIME_TRACK_HEADER,
                       TAG_CREATE_DATE, TAG_DATETIME_ORIGINAL, TAG_TRACK_CREATE_DATE,
                       XMP, MetadataDecodeError, MetadataRecordSet, read_metadata)
from .timestamps import DateParseError, parse_date

logger = get_logger()

XMP_NAMESPACES = {
    "xmp": "http://ns.adobe.com/xap/1.0/",
    "photoshop": "http://ns.adobe.com/photoshop/1.0/",
    "exif": "http://ns.adobe.com/exif/1.0/",
}

XMP_DATE_PROPERTIES = (
    "xmp:CreateDate",
    "xmp:DateCreated",
    "photoshop:DateCreated",
    "exif:DateTimeOriginal",
    "xmp:MetadataDate",
)

# QuickTime counts from 1904; an unset header decodes to 1904 or the Unix epoch
MIN_VIDEO_YEAR = 1970


class DateSource:
    """A single metadata location that may carry a capture date."""

    name = "unknown"

    def try_resolve(self, records: MetadataRecordSet) -> Optional[datetime]:
        raise NotImplementedError


class ExifOriginalDateSource(DateSource):
    """EXIF DateTimeOriginal from the first EXIF sub-IFD."""

    name = "EXIF DateTimeOriginal"

    def try_resolve(self, records: MetadataRecordSet) -> Optional[datetime]:
        exif = records.first(EXIF_SUBIFD)
        if exif is None:
            return None
        value = exif.get(TAG_DATETIME_ORIGINAL)
        return value if isinstance(value, datetime) else None


class XmpDateSource(DateSource):
    """First parseable date among the known XMP date properties."""

    name = "XMP"

    def __init__(self, properties: Sequence[str] = XMP_DATE_PROPERTIES):
        self.properties = tuple(properties)

    def try_resolve(self, records: MetadataRecordSet) -> Optional[datetime]:
        xmp = records.first(XMP)
        if xmp is None:
            return None

        for prop in self.properties:
            key = self.property_key(prop)
            if key is None:
                continue
            value = xmp.get(key)
            if not isinstance(value, str) or not value:
                continue
            try:
                return parse_date(value)
            except DateParseError:
                logger.debug(f"Ignoring unparseable {prop}: {value!r}")
                continue

        return None

    @staticmethod
    def property_key(prop: str) -> Optional[str]:
        """Map 'prefix:Name' to the '{uri}Name' key used in XMP records."""
        prefix, _, local_name = prop.partition(":")
        uri = XMP_NAMESPACES.get(prefix)
        if uri is None or not local_name:
            return None
        return f"{{{uri}}}{local_name}"


class QuickTimeDateSource(DateSource):
    """Creation date from a QuickTime movie or track header."""

    def __init__(self, namespace: str, tag: str):
        self.namespace = namespace
        self.tag = tag
        self.name = f"{namespace} {tag}"

    def try_resolve(self, records: MetadataRecordSet) -> Optional[datetime]:
        header = records.first(self.namespace)
        if header is None:
            return None
        value = header.get(self.tag)
        if isinstance(value, datetime) and value.year > MIN_VIDEO_YEAR:
            return value
        return None


DEFAULT_DATE_SOURCES: Tuple[DateSource, ...] = (
    ExifOriginalDateSource(),
    XmpDateSource(),
    QuickTimeDateSource(QUICKTIME_MOVIE_HEADER, TAG_CREATE_DATE),
    QuickTimeDateSource(QUICKTIME_TRACK_HEADER, TAG_TRACK_CREATE_DATE),
)


def resolve_capture_date(records: MetadataRecordSet,
                         sources: Sequence[DateSource] = DEFAULT_DATE_SOURCES) -> Optional[datetime]:
    """Return the capture date from the highest-priority source that has one."""
    for source in sources:
        date = source.try_resolve(records)
        if date is not None:
            logger.debug(f"Capture date from {source.name}: {date}")
            return date
    return None


def get_capture_date(file_path: Path,
                     reader: Callable[[Path], MetadataRecordSet] = read_metadata,
                     sources: Sequence[DateSource] = DEFAULT_DATE_SOURCES) -> Optional[datetime]:
    """Read a file's metadata and resolve its capture date.

    Never raises a metadata decode failure: a file whose metadata cannot be
    read resolves to None, the same as a file without date metadata.
    """
    try:
        records = reader(file_path)
    except MetadataDecodeError as e:
        logger.debug(f"No readable metadata for {file_path}: {e}")
        return None

    return resolve_capture_date(records, sources)
