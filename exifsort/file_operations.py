"""
File comparison and transfer operations for media organization.
"""

import hashlib
import shutil
from enum import Enum
from pathlib import Path

from rich.markup import escape

from .classifier import FileTransferPlan, TransferAction
from .constants import get_console, get_logger

CHUNK_SIZE = 1024 * 1024


class ConflictOutcome(Enum):
    """Result of comparing an incoming file with an existing destination file."""
    NO_CONFLICT = "no_conflict"
    IDENTICAL = "identical"
    DIFFERENT = "different"


def file_digest(file_path: Path) -> str:
    """Return the SHA-256 hex digest of a file's full contents."""
    digest = hashlib.sha256()
    with open(file_path, 'rb') as f:
        while True:
            chunk = f.read(CHUNK_SIZE)
            if not chunk:
                break
            digest.update(chunk)
    return digest.hexdigest()


def compare_files(existing: Path, incoming: Path) -> ConflictOutcome:
    """Decide whether an incoming file duplicates an existing destination file.

    Sizes are compared first; only same-sized files are hashed. Neither file
    is modified.
    """
    if not existing.exists():
        return ConflictOutcome.NO_CONFLICT

    # Quick size check
    if existing.stat().st_size != incoming.stat().st_size:
        return ConflictOutcome.DIFFERENT

    if file_digest(existing) == file_digest(incoming):
        return ConflictOutcome.IDENTICAL
    return ConflictOutcome.DIFFERENT


class FileOperations:
    """Performs planned moves and copies, with dry-run support."""

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run
        self.console = get_console()
        self.logger = get_logger()

    def ensure_directory(self, directory: Path) -> None:
        """Create directory and parents if needed. Safe if it already exists."""
        if not self.dry_run:
            directory.mkdir(parents=True, exist_ok=True)

    def transfer(self, plan: FileTransferPlan) -> None:
        """Carry out a transfer plan and report it on the console.

        Raises:
            OSError: if the directory cannot be created or the move/copy fails.
        """
        if plan.dry_run or self.dry_run:
            self.console.print(f"[yellow]\\[DRY RUN][/yellow] Would {plan.action.value}: "
                               f"{escape(str(plan.source))} -> {escape(str(plan.destination))}")
            self.logger.info(f"[DRY RUN] Would {plan.action.value}: {plan.source} -> {plan.destination}")
            return

        self.ensure_directory(plan.destination.parent)

        if plan.action is TransferAction.MOVE:
            shutil.move(str(plan.source), str(plan.destination))
        else:
            shutil.copy2(str(plan.source), str(plan.destination))

        # Verify the operation
        if not plan.destination.exists():
            raise FileNotFoundError(f"File not found after {plan.action.value}: {plan.destination}")

        verb = "Moved" if plan.action is TransferAction.MOVE else "Copied"
        self.console.print(f"{verb}: {escape(plan.source.name)} -> {escape(str(plan.destination.parent))}")
        self.logger.info(f"{plan.source} -> {plan.destination}")
