"""Console output for snpvcf.

Log records, progress bars and status lines all go to one rich console
on stderr, leaving stdout free for VCF text and JSON reports.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from typing import TypeVar

    T = TypeVar("T")

console = Console(stderr=True)

# Set once the RichHandler is attached to the root logger
_logging_configured = False


def setup_logging(
    level: int = logging.INFO,
    show_time: bool = True,
    show_path: bool = False,
) -> None:
    """Attach a RichHandler to the root logger.

    Third-party loggers stay at WARNING; the snpvcf logger gets `level`.
    After the first call only that level is changed, so `--verbose` can
    be applied on top of the import-time default.

    Args:
        level: Level for snpvcf loggers.
        show_time: Prefix records with a timestamp.
        show_path: Append the emitting source file and line.
    """
    global _logging_configured

    if _logging_configured:
        logging.getLogger("snpvcf").setLevel(level)
        return

    handler = RichHandler(
        console=console,
        show_time=show_time,
        show_path=show_path,
        rich_tracebacks=True,
        tracebacks_show_locals=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.WARNING)
    root_logger.addHandler(handler)

    snpvcf_logger = logging.getLogger("snpvcf")
    snpvcf_logger.setLevel(level)

    _logging_configured = True


def get_logger(name: str) -> logging.Logger:
    """Logger under the snpvcf namespace.

    Names outside the namespace are prefixed, so `get_logger("builder")`
    and `get_logger("snpvcf.builder")` return the same logger.
    """
    if not _logging_configured:
        setup_logging()

    if name.startswith("snpvcf.") or name == "snpvcf":
        return logging.getLogger(name)
    return logging.getLogger(f"snpvcf.{name}")


def create_progress() -> Progress:
    """Progress bar on the shared console, cleared when it finishes."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def track_progress(
    iterable: Iterable[T],
    total: int | None = None,
    description: str = "Processing",
) -> Iterator[T]:
    """Yield from `iterable`, advancing a progress bar after each item.

    Example:
        >>> for chrom, text in track_progress(vcfs.items(), total=len(vcfs)):
        ...     write_vcf(text, out_dir / batch_filename(name, chrom))
    """
    with create_progress() as progress:
        task = progress.add_task(description, total=total)
        for item in iterable:
            yield item
            progress.advance(task)


def print_info(message: str) -> None:
    """Blue INFO line."""
    console.print(f"[blue]INFO:[/blue] {message}")


def print_warning(message: str) -> None:
    """Yellow WARNING line, for problems that do not stop the command."""
    console.print(f"[yellow]WARNING:[/yellow] {message}")


def print_success(message: str) -> None:
    """Green SUCCESS line."""
    console.print(f"[green]SUCCESS:[/green] {message}")


def print_stats(stats: dict[str, int | float | str], title: str = "Statistics") -> None:
    """Render name/value pairs as a two-column table.

    Integers get thousands separators and floats four decimals.
    """
    from rich.table import Table

    table = Table(title=title, show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    for key, value in stats.items():
        if isinstance(value, float):
            table.add_row(key, f"{value:,.4f}")
        elif isinstance(value, int):
            table.add_row(key, f"{value:,}")
        else:
            table.add_row(key, str(value))

    console.print(table)


def log_step(step: int, total: int, description: str) -> None:
    """Numbered progress line such as "[2/3] Generating VCF"."""
    console.print(f"[bold cyan][{step}/{total}][/bold cyan] {description}")


def print_file_created(path: str | Path) -> None:
    """List an output file by name."""
    console.print(f"  [dim]Created:[/dim] {Path(path).name}")
