"""
Core media sorting functionality.
"""

from pathlib import Path
from typing import Callable, List, Optional

from rich.progress import Progress
from rich.table import Table

from .classifier import destination_subpath, plan_transfer
from .constants import VALID_EXTENSIONS, get_console, get_logger
from .file_operations import ConflictOutcome, FileOperations, compare_files
from .metadata import MetadataRecordSet, read_metadata
from .resolver import get_capture_date
from .stats import FileResult, FileStatus, RunStats
from .timestamps import to_timezone


class ExifSorter:
    """Sorts media files into date folders based on capture-time metadata."""

    def __init__(self, source: Path, dest: Path, dry_run: bool = False,
                 copy_files: bool = False, timezone: Optional[str] = None,
                 metadata_reader: Callable[[Path], MetadataRecordSet] = read_metadata):
        self.source = source
        self.dest = dest
        self.dry_run = dry_run
        self.copy_files = copy_files
        self.timezone = timezone
        self.metadata_reader = metadata_reader
        self.console = get_console()
        self.logger = get_logger()
        self.file_ops = FileOperations(dry_run=dry_run)
        self.unreadable_dirs: List[Path] = []

    @property
    def mode(self) -> str:
        mode = "COPY" if self.copy_files else "MOVE"
        return f"{mode} (DRY RUN)" if self.dry_run else mode

    def find_source_files(self, directory: Optional[Path] = None) -> List[Path]:
        """List supported media files depth-first: a folder's files, then its subfolders.

        Folders that cannot be listed are logged, remembered in
        ``unreadable_dirs`` and counted as errors by ``process_files``.
        """
        if directory is None:
            directory = self.source
            self.unreadable_dirs = []

        try:
            entries = sorted(directory.iterdir())
            files = [p for p in entries
                     if p.is_file() and p.suffix.lower() in VALID_EXTENSIONS]
            subdirs = [p for p in entries if p.is_dir() and not p.is_symlink()]
        except OSError as e:
            self.logger.error(f"Cannot read directory {directory}: {e}")
            self.unreadable_dirs.append(directory)
            return []

        for subdir in subdirs:
            files.extend(self.find_source_files(subdir))

        return files

    def process_file(self, file_path: Path) -> FileResult:
        """Classify one file and transfer it unless its destination is taken."""
        warnings = 0

        capture_date = get_capture_date(file_path, self.metadata_reader)
        if capture_date is None:
            self.logger.warning(f"No date metadata found: {file_path}")
            warnings += 1
        else:
            capture_date = to_timezone(capture_date, self.timezone)

        relative_dir = file_path.parent.relative_to(self.source)
        subpath = destination_subpath(capture_date, relative_dir)
        plan = plan_transfer(file_path, self.dest, subpath,
                             copy=self.copy_files, dry_run=self.dry_run)

        if plan.destination.exists():
            outcome = compare_files(plan.destination, file_path)
            if outcome is ConflictOutcome.IDENTICAL:
                self.logger.warning(f"Identical file already exists, skipping: {plan.destination}")
                return FileResult(file_path, FileStatus.SKIPPED, warnings + 1, plan.destination)
            if outcome is ConflictOutcome.DIFFERENT:
                self.logger.error(f"Destination exists with different content: {plan.destination}")
                return FileResult(file_path, FileStatus.ERROR, warnings, plan.destination)

        try:
            self.file_ops.transfer(plan)
        except OSError as e:
            self.logger.error(f"Failed to {plan.action.value} {file_path}: {e}")
            return FileResult(file_path, FileStatus.ERROR, warnings, plan.destination)

        return FileResult(file_path, FileStatus.PROCESSED, warnings, plan.destination)

    def process_files(self, files: List[Path], show_progress: bool = True) -> RunStats:
        """Process files in order and fold their results into run statistics.

        Folders found unreadable by the last discovery count as one error each.
        """
        self.logger.info(f"Starting to process {len(files)} files")
        stats = RunStats(FileResult(d, FileStatus.ERROR) for d in self.unreadable_dirs)

        with Progress(console=self.console, disable=not show_progress, transient=True) as progress:
            task = progress.add_task("Processing files...", total=len(files))
            for file_path in files:
                progress.update(task, description=f"Processing: {file_path.name}")
                try:
                    result = self.process_file(file_path)
                except Exception as e:
                    self.logger.error(f"Error processing {file_path}: {e}")
                    result = FileResult(file_path, FileStatus.ERROR)

                stats.add(result)
                progress.advance(task)

        return stats

    def run(self, show_progress: bool = True) -> RunStats:
        """Find and process all media files under the source directory."""
        self.logger.info(f"Starting sort: {self.source} -> {self.dest} [{self.mode}]")
        return self.process_files(self.find_source_files(), show_progress=show_progress)

    def print_summary(self, stats: RunStats) -> None:
        """Print processing summary."""
        action = "Copied" if self.copy_files else "Moved"
        if self.dry_run:
            action = f"{action} (dry run)"

        table = Table(title="Processing Summary")
        table.add_column("Category", style="cyan")
        table.add_column("Count", style="green")

        table.add_row(action, str(stats.processed))
        table.add_row("Skipped", str(stats.skipped))
        table.add_row("Warnings", str(stats.warnings))
        table.add_row("Errors", str(stats.errors))

        self.console.print(table)
