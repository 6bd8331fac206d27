"""
Metadata decoding via exiftool.

The decoder turns exiftool's grouped JSON output into a read-only
``MetadataRecordSet``: records grouped by namespace, each record a mapping
from tag (or XMP property) name to a raw string or a native ``datetime``.
"""

import base64
import json
import re
import subprocess
import xml.etree.ElementTree as ET
from datetime import datetime
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .constants import exiftool_available, get_logger
from .timestamps import parse_exif_timestamp

# Namespaces of a MetadataRecordSet
EXIF_SUBIFD = "EXIF/SubIFD"
XMP = "XMP"
QUICKTIME_MOVIE_HEADER = "QuickTime/MovieHeader"
QUICKTIME_TRACK_HEADER = "QuickTime/TrackHeader"

# Tag names as reported by exiftool
TAG_DATETIME_ORIGINAL = "DateTimeOriginal"
TAG_CREATE_DATE = "CreateDate"
TAG_TRACK_CREATE_DATE = "TrackCreateDate"

EXIFTOOL_TAGS = (
    "-XMP",
    f"-ExifIFD:{TAG_DATETIME_ORIGINAL}",
    f"-QuickTime:{TAG_CREATE_DATE}",
    f"-{TAG_TRACK_CREATE_DATE}",
)

RDF_NS = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"

MetadataValue = Union[str, datetime]
MetadataRecord = Mapping[str, MetadataValue]

logger = get_logger()


class MetadataDecodeError(Exception):
    """Raised when a file's metadata cannot be read or decoded."""


class MetadataRecordSet:
    """Immutable collection of metadata records grouped by namespace."""

    def __init__(self, records: Optional[Mapping[str, Iterable[Mapping[str, MetadataValue]]]] = None):
        self._records: Mapping[str, Tuple[MetadataRecord, ...]] = MappingProxyType({
            namespace: tuple(MappingProxyType(dict(record)) for record in group)
            for namespace, group in (records or {}).items()
        })

    @property
    def namespaces(self) -> Tuple[str, ...]:
        return tuple(self._records)

    def records(self, namespace: str) -> Tuple[MetadataRecord, ...]:
        """Return all records for a namespace, in decode order."""
        return self._records.get(namespace, ())

    def first(self, namespace: str) -> Optional[MetadataRecord]:
        """Return the first record for a namespace, or None."""
        records = self.records(namespace)
        return records[0] if records else None

    def __bool__(self) -> bool:
        return any(self._records.values())

    def __repr__(self) -> str:
        counts = ", ".join(f"{ns}={len(group)}" for ns, group in self._records.items())
        return f"MetadataRecordSet({counts})"

    @classmethod
    def from_exiftool(cls, data: Dict[str, Any]) -> "MetadataRecordSet":
        """Build a record set from one exiftool ``-json -G1`` object.

        An XMP packet that is not valid XML is left out of the record set.
        """
        exif: Dict[str, MetadataValue] = {}
        movie: Dict[str, MetadataValue] = {}
        tracks: Dict[int, Dict[str, MetadataValue]] = {}
        xmp_packet = None

        for key, value in data.items():
            group, _, tag = key.rpartition(":")
            if tag == "XMP":
                xmp_packet = value
            elif group == "ExifIFD":
                exif[tag] = _native_value(value)
            elif group == "QuickTime":
                movie[tag] = _native_value(value)
            else:
                match = re.fullmatch(r'Track(\d+)', group)
                if match:
                    tracks.setdefault(int(match.group(1)), {})[tag] = _native_value(value)

        records: Dict[str, List[Dict[str, MetadataValue]]] = {}
        if exif:
            records[EXIF_SUBIFD] = [exif]
        if xmp_packet:
            try:
                records[XMP] = [parse_xmp_packet(xmp_packet)]
            except MetadataDecodeError as e:
                # The other namespaces are still usable
                logger.debug(str(e))
        if movie:
            records[QUICKTIME_MOVIE_HEADER] = [movie]
        if tracks:
            records[QUICKTIME_TRACK_HEADER] = [tracks[n] for n in sorted(tracks)]

        return cls(records)


def _native_value(value: Any) -> MetadataValue:
    """Convert raw exiftool date strings to datetimes; keep other values as text."""
    text = str(value)
    return parse_exif_timestamp(text) or text


def parse_xmp_packet(packet: Union[str, bytes]) -> Dict[str, str]:
    """Flatten an XMP packet into ``{'{namespace-uri}Name': value}`` pairs.

    Simple properties are read from rdf:Description attributes and from child
    elements. For rdf:Seq/Bag/Alt containers the first rdf:li value is used.
    """
    if isinstance(packet, str) and packet.startswith("base64:"):
        packet = base64.b64decode(packet[len("base64:"):])
    if isinstance(packet, bytes):
        packet = packet.decode("utf-8", errors="replace")

    # Strip the <?xpacket?> wrapper and anything outside the root element
    start = packet.find("<x:xmpmeta")
    if start == -1:
        start = packet.find("<rdf:RDF")
    if start > 0:
        packet = packet[start:]
    packet = re.sub(r'<\?xpacket[^>]*\?>', '', packet).strip()

    try:
        root = ET.fromstring(packet)
    except ET.ParseError as e:
        raise MetadataDecodeError(f"Invalid XMP packet: {e}") from e

    properties: Dict[str, str] = {}
    for description in root.iter(f"{{{RDF_NS}}}Description"):
        for name, value in description.attrib.items():
            if not name.startswith(f"{{{RDF_NS}}}"):
                properties.setdefault(name, value)

        for child in description:
            items = list(child.iter(f"{{{RDF_NS}}}li"))
            text = items[0].text if items else child.text
            if text and text.strip():
                properties.setdefault(child.tag, text.strip())

    return properties


def run_exiftool(file_path: Path) -> Dict[str, Any]:
    """Run exiftool on a single file and return its JSON object."""
    result = subprocess.run([
        "exiftool",
        "-q",
        "-json",
        "-G1",  # Group names: ExifIFD, XMP, QuickTime, Track1...
        "-a",   # Keep duplicate tags from separate tracks
        "-n",   # Raw values, no print conversion
        "-b",   # Include the raw XMP packet
        *EXIFTOOL_TAGS,
        str(file_path)],
        capture_output=True, text=True, check=True
    )
    return json.loads(result.stdout)[0]


def read_metadata(file_path: Path) -> MetadataRecordSet:
    """Decode the metadata of a media file.

    Raises:
        MetadataDecodeError: if exiftool is unavailable, fails, or returns
            output that cannot be decoded.
    """
    if not exiftool_available():
        raise MetadataDecodeError("exiftool is not installed")

    try:
        data = run_exiftool(file_path)
    except subprocess.CalledProcessError as e:
        raise MetadataDecodeError(f"exiftool failed for {file_path}: {e}") from e
    except (json.JSONDecodeError, IndexError) as e:
        raise MetadataDecodeError(f"Could not parse exiftool output for {file_path}: {e}") from e

    records = MetadataRecordSet.from_exiftool(data)
    logger.debug(f"Metadata for {file_path}: {records!r}")
    return records
