"""
Command-line interface for exifsort.
"""

import argparse
import logging
import sys
import zoneinfo
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler

from .config import Config
from .constants import PROGRAM, exiftool_available, get_console, get_logger
from .core import ExifSorter


def configure_logging(console: Console, verbose: bool = False,
                      log_file: Optional[Path] = None) -> logging.Logger:
    """Route the program logger to the console and an optional log file."""
    logger = get_logger()
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # Only WARNING and ERROR to console unless verbose
    console_handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(name)s] %(levelname)s: %(message)s'
        ))
        logger.addHandler(file_handler)

    return logger


def create_parser(config: Config) -> argparse.ArgumentParser:
    """Create argument parser with dynamic defaults from config."""
    last_source = config.get_last_source()
    last_dest = config.get_last_dest()
    timezone = config.get_timezone()

    source_help = "Input directory containing photos and videos to sort"
    dest_help = "Output directory for the sorted YYYY/MM-DD folders"
    timezone_help = "Convert capture dates with a UTC offset to this timezone"

    if last_source:
        source_help += f" (default: {last_source})"
    if last_dest:
        dest_help += f" (default: {last_dest})"
    if timezone:
        timezone_help += f" (default: {timezone})"
    else:
        timezone_help += " (default: keep the recorded local time)"

    parser = argparse.ArgumentParser(
        prog=PROGRAM,
        description="Sort photos and videos into YYYY/MM-DD folders by capture-date metadata",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Files without a usable capture date go to <dest>/0000/<original subfolder>.

Examples:
  {PROGRAM} ~/Import ~/Pictures/Sorted
  {PROGRAM} --copy --dry-run ~/Import ~/Pictures/Sorted
        """
    )

    parser.add_argument("source", nargs="?", help=source_help)
    parser.add_argument("dest", nargs="?", help=dest_help)
    parser.add_argument(
        "--copy", "-c", action="store_true",
        help="Copy files instead of moving them"
    )
    parser.add_argument(
        "--dry-run", "-n", action="store_true",
        help="Show what would happen without changing any files"
    )
    parser.add_argument(
        "--timezone", "--tz", type=str, metavar="TIMEZONE",
        help=timezone_help
    )
    parser.add_argument(
        "--log-file", type=Path, metavar="PATH",
        help="Also write a detailed log to this file"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable verbose logging"
    )
    parser.add_argument(
        "--version", "-V", action="store_true",
        help=f"Display the version number of {PROGRAM} and exit"
    )

    return parser


def show_processing_plan(source: Path, dest: Path, mode: str,
                         timezone: Optional[str], console: Console) -> None:
    """Display the processing plan before execution."""
    console.print("\n[bold]Processing Plan:[/bold]")
    console.print(f"  Source:          [blue]{source}[/blue]")
    console.print(f"  Destination:     [blue]{dest}[/blue]")
    console.print(f"  Processing Mode: [cyan]{mode}[/cyan]")
    if timezone:
        console.print(f"  Timezone:        [cyan]{timezone}[/cyan]")
    console.print()


def main(argv: Optional[List[str]] = None, config_path: Optional[Path] = None) -> int:
    """Main entry point. Returns 1 if any file failed, else 0.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])
        config_path: Optional path to config file (for testing)
    """
    config = Config(config_path=config_path)
    parser = create_parser(config)
    args = parser.parse_args(argv)
    console = get_console()

    if args.version:
        from . import __version__
        console.print(__version__)
        return 0

    source_path = args.source or config.get_last_source()
    dest_path = args.dest or config.get_last_dest()
    if not source_path or not dest_path:
        parser.error("Source and destination directories are required")

    source = Path(source_path).expanduser().resolve()
    dest = Path(dest_path).expanduser().resolve()

    if not source.exists():
        console.print(f"[red]Error: Source directory does not exist: {source}[/red]")
        return 1

    if not source.is_dir():
        console.print(f"[red]Error: Source is not a directory: {source}[/red]")
        return 1

    if source == dest or source in dest.parents or dest in source.parents:
        console.print("[red]Error: Identical or overlapping source/dest folders:[/red]")
        console.print(f" - Source:      {source}")
        console.print(f" - Destination: {dest}")
        return 1

    timezone = args.timezone or config.get_timezone()
    if timezone:
        try:
            zoneinfo.ZoneInfo(timezone)
        except (zoneinfo.ZoneInfoNotFoundError, ValueError):
            console.print(f"[red]Error: Unknown timezone: {timezone}[/red]")
            return 1

    config.update_paths(str(source), str(dest))
    if args.timezone:
        config.update_timezone(args.timezone)

    logger = configure_logging(console, verbose=args.verbose, log_file=args.log_file)
    if not exiftool_available():
        logger.warning("exiftool not found: all files will be treated as undated")

    sorter = ExifSorter(
        source=source,
        dest=dest,
        dry_run=args.dry_run,
        copy_files=args.copy or config.get_copy_mode(),
        timezone=timezone,
    )
    show_processing_plan(source, dest, sorter.mode, timezone, console)

    files = sorter.find_source_files()
    if not files and not sorter.unreadable_dirs:
        console.print("[yellow]No media files found in source directory[/yellow]")
        return 0

    console.print(f"Found {len(files)} media files to process")

    try:
        stats = sorter.process_files(files)
    except KeyboardInterrupt:
        console.print("\n[red]Operation cancelled by user[/red]")
        return 1

    sorter.print_summary(stats)

    if stats.has_errors():
        console.print(f"\n[red]✗ Completed with {stats.errors} error(s)[/red]")
        return 1

    console.print("\n[green]✓ Processing completed successfully![/green]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
