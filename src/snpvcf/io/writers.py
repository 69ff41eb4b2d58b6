"""Output writers for snpvcf.

This module provides functions for writing generated VCF text to disk,
either as a single file or as the per-chromosome batch expected by
imputation servers.
"""

from __future__ import annotations

import gzip
from pathlib import Path
from typing import TYPE_CHECKING

from snpvcf.io.compression import COMPRESSION_METHODS, write_bgzf
from snpvcf.utils.errors import OutputError, format_output_error
from snpvcf.utils.logging import get_logger, track_progress
from snpvcf.utils.validation import sanitize_sample_name, validate_output_dir

if TYPE_CHECKING:
    from collections.abc import Mapping

    from snpvcf.core.analysis import GenomeSummary

logger = get_logger(__name__)

NO_COMPRESSION = "none"


def batch_filename(sample_name: str, chromosome: str) -> str:
    """File name for one chromosome of a batch upload.

    Examples:
        >>> batch_filename("alice", "7")
        'B.alice_merged_6samples_chr7.vcf.gz'
    """
    return f"B.{sanitize_sample_name(sample_name)}_merged_6samples_chr{chromosome}.vcf.gz"


def infer_compression(path: str | Path) -> str:
    """Pick a compression method from the file suffix (.gz means BGZF)."""
    return "bgzf" if Path(path).suffix == ".gz" else NO_COMPRESSION


def write_vcf(
    content: str,
    path: str | Path,
    compression: str | None = None,
) -> Path:
    """Write VCF text to a file.

    Args:
        content: VCF text.
        path: Output file path.
        compression: "none", "gzip" or "bgzf". Inferred from the file
            suffix when not given.

    Returns:
        Path to the written file.

    Raises:
        OutputError: If the file cannot be written.
        ValueError: For an unknown compression method.
    """
    path = Path(path)
    if compression is None:
        compression = infer_compression(path)
    if compression != NO_COMPRESSION and compression not in COMPRESSION_METHODS:
        raise ValueError(f"Unknown compression method: {compression}")

    logger.info(f"Writing VCF to {path}")
    try:
        if compression == "bgzf":
            write_bgzf(content, path)
        elif compression == "gzip":
            with gzip.open(path, "wt", encoding="utf-8") as f:
                f.write(content)
        else:
            path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise OutputError(format_output_error(path, str(e))) from e

    return path


def write_batch_vcfs(
    vcfs: Mapping[str, str],
    out_dir: str | Path,
    sample_name: str,
) -> list[Path]:
    """Write per-chromosome VCFs as BGZF files.

    Args:
        vcfs: Mapping of chromosome to VCF text (from generate_batch_vcf).
        out_dir: Output directory, created if needed.
        sample_name: Sample name used in the file names.

    Returns:
        Paths of the written files, in chromosome order.

    Raises:
        ValidationError: If the output directory is not usable.
        OutputError: If a file cannot be written.
    """
    out_dir = validate_output_dir(out_dir)

    written = []
    for chromosome, content in track_progress(
        vcfs.items(), total=len(vcfs), description="Writing VCFs"
    ):
        path = out_dir / batch_filename(sample_name, chromosome)
        written.append(write_vcf(content, path, compression="bgzf"))

    logger.info(f"Wrote {len(written)} BGZF file(s) to {out_dir}")
    return written


def write_summary(summary: GenomeSummary, path: str | Path) -> Path:
    """Write a genome summary report to a text file.

    Raises:
        OutputError: If the file cannot be written.
    """
    path = Path(path)
    try:
        path.write_text(summary.to_text(), encoding="utf-8")
    except OSError as e:
        raise OutputError(format_output_error(path, str(e))) from e

    logger.info(f"Summary written to {path}")
    return path
