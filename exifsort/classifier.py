"""
Destination layout for classified media files.

Dated files go to ``<dest>/<YYYY>/<MM>-<DD>/<filename>``. Files without a
capture date go to ``<dest>/0000/<relative source dir>/<filename>``.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path, PurePath
from typing import Optional, Union

from .constants import UNDATED_DIR


class TransferAction(Enum):
    MOVE = "move"
    COPY = "copy"


@dataclass(frozen=True)
class FileTransferPlan:
    """A single planned move or copy."""
    source: Path
    destination: Path
    action: TransferAction
    dry_run: bool = False


def destination_subpath(date: Optional[datetime],
                        relative_dir: Union[str, PurePath] = "") -> PurePath:
    """Return the destination subdirectory for a file.

    Args:
        date: Resolved capture date, or None if the file has none
        relative_dir: The file's directory relative to the input root
    """
    if date is not None:
        return PurePath(f"{date.year:04d}", f"{date.month:02d}-{date.day:02d}")

    relative = PurePath(relative_dir)
    if str(relative) in ("", "."):
        return PurePath(UNDATED_DIR)
    return PurePath(UNDATED_DIR) / relative


def plan_transfer(source: Path, dest_root: Path, subpath: PurePath,
                  copy: bool = False, dry_run: bool = False) -> FileTransferPlan:
    """Build the transfer plan placing ``source`` under ``dest_root/subpath``."""
    return FileTransferPlan(
        source=source,
        destination=dest_root / subpath / source.name,
        action=TransferAction.COPY if copy else TransferAction.MOVE,
        dry_run=dry_run,
    )
