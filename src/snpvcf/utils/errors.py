"""Exceptions and user-friendly error messages for snpvcf.

Every fatal condition in the package is raised as a subclass of
SnpVcfError so that the CLI can report it in a single formatted panel.
Per-line and per-variant problems are not exceptions: they are logged
and the offending line or variant is skipped.
"""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.panel import Panel

console = Console(stderr=True)


class SnpVcfError(Exception):
    """Base exception for snpvcf errors with user-friendly formatting."""

    def __init__(self, message: str, suggestion: str | None = None):
        """Initialize error with message and optional suggestion.

        Args:
            message: Main error message.
            suggestion: Optional suggestion for how to fix the error.
        """
        self.message = message
        self.suggestion = suggestion
        super().__init__(message)

    def display(self) -> None:
        """Display the error in a formatted panel."""
        content = f"[red bold]Error:[/red bold] {self.message}"
        if self.suggestion:
            content += f"\n\n[yellow]Suggestion:[/yellow] {self.suggestion}"
        console.print(Panel(content, title="snpvcf Error", border_style="red"))


class GenomeFileError(SnpVcfError):
    """Raised when a genome file cannot be read at all."""


class GenomeParseError(SnpVcfError):
    """Raised for a single malformed 23andMe data line."""


class ReferenceLoadError(SnpVcfError):
    """Raised when the reference database cannot be loaded."""


class ReferenceFetchError(ReferenceLoadError):
    """Raised when the compressed reference payload cannot be fetched."""


class ReferenceDecompressionError(ReferenceLoadError):
    """Raised when the Brotli payload cannot be decompressed."""


class ReferenceFormatError(ReferenceLoadError):
    """Raised when the decompressed payload is not a valid database."""


class OutputError(SnpVcfError):
    """Raised when output cannot be written."""


class ValidationError(SnpVcfError):
    """Raised when user-supplied input fails validation."""


def format_file_not_found(path: str | Path, file_type: str = "File") -> str:
    """Format a file not found error message.

    Args:
        path: Path to the missing file.
        file_type: Type of file (e.g., "Genome file", "Reference database").

    Returns:
        Formatted error message.
    """
    path = Path(path)
    msg = f"{file_type} not found: {path}"

    if not path.parent.exists():
        msg += f"\n\nThe parent directory does not exist: {path.parent}"
        msg += "\nCheck the path for typos."

    return msg


def format_output_error(path: str | Path, reason: str) -> str:
    """Format an error for output path issues.

    Args:
        path: Output path that caused the error.
        reason: Reason for the error.

    Returns:
        Formatted error message.
    """
    msg = f"Cannot write output to: {path}\n\n"
    msg += f"Reason: {reason}\n\n"
    msg += "Suggestions:\n"
    msg += "  - Check that you have write permissions to the directory\n"
    msg += "  - Ensure the parent directory exists\n"
    msg += "  - Check available disk space"

    return msg


def format_no_variants_error(with_reference: bool) -> str:
    """Format an error for a VCF that would contain no variant lines.

    Args:
        with_reference: Whether a reference database was in use.

    Returns:
        Formatted error message with suggestions.
    """
    msg = "No variants would be written to the VCF.\n\n"
    if with_reference:
        msg += "None of the genome's SNPs matched the reference database.\n\n"
        msg += "Suggestions:\n"
        msg += "  - Check that the reference database uses the same genome build\n"
        msg += "  - Check that the genome file uses rsIDs in its first column"
    else:
        msg += "Every SNP had a no-call, indel or otherwise invalid genotype.\n\n"
        msg += "Suggestions:\n"
        msg += "  - Check that the file is a 23andMe raw data export\n"
        msg += "  - Check the selected chromosome"

    return msg
