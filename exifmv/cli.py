"""
Command-line interface for exifmv.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress

from .config import Config, DuplicatePolicy, RunConfig
from .constants import PROGRAM, get_console, get_logger
from .core import ExifMover
from .errors import ConfigurationError, ExifmvError, format_error_chain
from .file_operations import RelocationOutcome
from .progress import ProgressContext
from .timestamps import DayWrapOffset


def positive_int(value: str) -> int:
    """Parse a positive integer argument (e.g., for --jobs)."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid number: {value}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"Must be at least 1: {value}")
    return number


def create_parser(config: Config) -> argparse.ArgumentParser:
    """Create argument parser with help text showing config-file defaults."""
    day_wrap = config.get_day_wrap()
    day_wrap_help = ("Offset H:M added to capture times before picking the day folder, "
                     "e.g. 4:00 files shots taken from 20:00 on under the next day")
    day_wrap_help += f" (default: {day_wrap or '0:00'})"

    parser = argparse.ArgumentParser(
        prog=PROGRAM,
        description="Move images and videos into a year/month/day folder hierarchy "
                    "based on their EXIF capture time",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  {PROGRAM} ~/Import ~/Pictures
  {PROGRAM} -r --dry-run ~/Import ~/Pictures
  {PROGRAM} -r --trash-source --day-wrap 4:00 ~/Pictures ~/Pictures
        """
    )

    parser.add_argument(
        "source", nargs="?", default=".",
        help="Where to search for images (default: current directory)"
    )
    parser.add_argument(
        "dest", nargs="?", default=".",
        help="Where to move the images (default: current directory)"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Log every decision, not just moves and deletions"
    )
    parser.add_argument(
        "--recursive", "-r", action="store_true",
        help="Recurse into subdirectories"
    )
    parser.add_argument(
        "--dry-run", "-n", action="store_true",
        help="Report what would happen without touching the filesystem"
    )
    parser.add_argument(
        "--make-lowercase", "-l", action="store_true",
        help="Change file names (and sidecar suffixes) to lowercase"
    )
    parser.add_argument(
        "--dereference", "-L", action="store_true",
        help="Follow symbolic links while searching"
    )
    parser.add_argument(
        "--halt-on-errors", "-H", action="store_true",
        help="Exit on the first file that cannot be relocated"
    )
    parser.add_argument(
        "--day-wrap", "-w", metavar="H:M",
        help=day_wrap_help
    )
    policy = parser.add_mutually_exclusive_group()
    policy.add_argument(
        "--remove-source", action="store_true",
        help="Delete a source file if an identically sized file exists at its destination"
    )
    policy.add_argument(
        "--trash-source", action="store_true",
        help="Move a source file to the trash if an identically sized file exists at its destination"
    )
    parser.add_argument(
        "--cleanup", "-c", action="store_true",
        help="Remove empty directories (incl. hidden files) left behind in the source"
    )
    parser.add_argument(
        "--jobs", "-j", type=positive_int, metavar="N",
        help="Number of files processed in parallel (default: CPU count)"
    )
    parser.add_argument(
        "--config", type=Path, metavar="PATH",
        help=f"Configuration file (default: ~/.{PROGRAM}/config.yml)"
    )
    parser.add_argument(
        "--version", "-V", action="store_true",
        help=f"Display the version number of {PROGRAM} and exit"
    )

    return parser


def build_run_config(args: argparse.Namespace, config: Config) -> RunConfig:
    """Merge command-line flags over config-file defaults into a RunConfig."""
    day_wrap_text = args.day_wrap or config.get_day_wrap()
    day_wrap = DayWrapOffset.parse(day_wrap_text) if day_wrap_text else DayWrapOffset()

    if args.remove_source:
        policy = DuplicatePolicy.REMOVE
    elif args.trash_source:
        policy = DuplicatePolicy.TRASH
    else:
        policy = config.get_duplicate_policy()

    jobs = args.jobs or config.get_jobs() or os.cpu_count() or 1

    return RunConfig(
        source=Path(args.source).expanduser().resolve(),
        dest=Path(args.dest).expanduser().resolve(),
        verbose=args.verbose or config.get_flag('verbose'),
        recursive=args.recursive or config.get_flag('recursive'),
        dry_run=args.dry_run,
        make_lowercase=args.make_lowercase or config.get_flag('make_lowercase'),
        dereference=args.dereference or config.get_flag('dereference'),
        halt_on_errors=args.halt_on_errors or config.get_flag('halt_on_errors'),
        cleanup=args.cleanup or config.get_flag('cleanup'),
        day_wrap=day_wrap,
        duplicate_policy=policy,
        jobs=jobs,
    )


def setup_logging(console: Console, verbose: bool) -> logging.Logger:
    """Route the program logger through rich on the shared console."""
    logger = get_logger()
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    console_handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    console_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(console_handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    return logger


def show_processing_plan(run_config: RunConfig, console: Console) -> None:
    """Display the processing plan before execution."""
    mode = "DRY RUN" if run_config.dry_run else "MOVE"

    console.print("\n[bold]Processing Plan:[/bold]")
    console.print(f"  Source:          [blue]{run_config.source}[/blue]")
    console.print(f"  Destination:     [blue]{run_config.dest}[/blue]")
    console.print(f"  Processing Mode: [cyan]{mode}[/cyan]")
    console.print(f"  Recursive:       [cyan]{'Yes' if run_config.recursive else 'No'}[/cyan]")
    console.print(f"  Duplicates:      [cyan]{run_config.duplicate_policy.value}[/cyan]")
    console.print(f"  Day Wrap:        [cyan]{run_config.day_wrap}[/cyan]")
    if run_config.make_lowercase:
        console.print("  Lowercase Names: [cyan]Yes[/cyan]")
    console.print()


def report_error(exc: BaseException, console: Console) -> None:
    """Print an error and its causes, one per line."""
    for line in format_error_chain(exc).splitlines():
        console.print(f"[red]{escape(line)}[/red]", highlight=False)


def main(argv: Optional[List[str]] = None, config_path: Optional[Path] = None) -> int:
    """Main entry point.

    Args:
        argv: Command-line arguments (default: sys.argv[1:])
        config_path: Optional path to config file (for testing)
    """
    console = get_console()

    # --config has to be known before the parser's defaults can be filled in
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument("--config", type=Path)
    known, _ = pre_parser.parse_known_args(argv)
    config = Config(config_path=known.config or config_path)

    parser = create_parser(config)
    args = parser.parse_args(argv)

    if args.version:
        from . import __version__
        print(__version__)
        return 0

    try:
        run_config = build_run_config(args, config)
    except ConfigurationError as e:
        report_error(e, console)
        return 1

    setup_logging(console, run_config.verbose)

    if not run_config.source.is_dir():
        console.print(f"[red]error: Source directory does not exist: {escape(str(run_config.source))}[/red]")
        return 1

    show_processing_plan(run_config, console)
    mover = ExifMover(run_config)

    try:
        with Progress(console=console, transient=True) as progress:
            task = progress.add_task("Searching for files...", total=None)
            mover.run(ProgressContext(progress, task))
    except KeyboardInterrupt:
        console.print("\n[red]Operation cancelled by user[/red]")
        return 1
    except ExifmvError as e:
        mover.print_summary()
        report_error(e, console)
        return 1

    mover.print_summary()
    if mover.stats_manager.has_errors():
        failed = mover.stats_manager.get_count(RelocationOutcome.FAILED)
        console.print(f"\n[green]✓ Processing completed[/green] [yellow]({failed} files could not be relocated)[/yellow]")
    else:
        console.print("\n[green]✓ Processing completed[/green]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
