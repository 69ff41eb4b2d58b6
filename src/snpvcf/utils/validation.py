"""Input validation utilities for snpvcf.

This module provides functions for validating genotypes, chromosome
names, sample names and output paths, and for checking that a written
VCF can be read back by htslib.
"""

from __future__ import annotations

import re
from pathlib import Path

from snpvcf.utils.errors import ValidationError
from snpvcf.utils.logging import get_logger

logger = get_logger(__name__)

VALID_NUCLEOTIDES = frozenset("ACGT")

# 23andMe marks no-calls, insertions and deletions with these characters
NON_SNP_ALLELES = frozenset("-ID")

HUMAN_CHROMOSOMES = tuple([str(i) for i in range(1, 23)] + ["X", "Y", "MT"])

DEFAULT_SAMPLE_NAME = "mygenome"


def is_valid_nucleotide(allele: str) -> bool:
    """Check if a single character is one of A, C, G, T.

    Examples:
        >>> is_valid_nucleotide("A")
        True
        >>> is_valid_nucleotide("D")
        False
    """
    return allele in VALID_NUCLEOTIDES and len(allele) == 1


def split_genotype(genotype: str) -> tuple[str, str] | None:
    """Split a diploid SNP genotype into its two alleles.

    Args:
        genotype: Genotype string as found in a 23andMe export (e.g. "AG").

    Returns:
        Tuple of the two alleles, or None when the genotype is not a
        two-character call made only of A, C, G and T (haploid calls,
        no-calls "--", indels "II"/"DI" and anything else).

    Examples:
        >>> split_genotype("AG")
        ('A', 'G')
        >>> split_genotype("--") is None
        True
        >>> split_genotype("A") is None
        True
    """
    if len(genotype) != 2:
        return None

    allele1, allele2 = genotype[0], genotype[1]
    if allele1 in NON_SNP_ALLELES or allele2 in NON_SNP_ALLELES:
        return None
    if not is_valid_nucleotide(allele1) or not is_valid_nucleotide(allele2):
        return None

    return allele1, allele2


def validate_chromosome(chromosome: str) -> str:
    """Validate a human chromosome name as used in 23andMe files.

    Accepts an optional "chr" prefix and "M" for the mitochondrion.

    Returns:
        The normalized chromosome name ("1".."22", "X", "Y", "MT").

    Raises:
        ValidationError: If the name is not a human chromosome.
    """
    name = re.sub(r"^chr", "", chromosome.strip(), flags=re.IGNORECASE).upper()
    if name == "M":
        name = "MT"
    if name.isdigit():
        name = str(int(name))

    if name not in HUMAN_CHROMOSOMES:
        raise ValidationError(
            f"Unknown chromosome: {chromosome!r}",
            suggestion="Use 1-22, X, Y or MT.",
        )
    return name


def sanitize_sample_name(name: str | None) -> str:
    """Make a sample name safe for use in file names.

    Any character outside [A-Za-z0-9_-] becomes an underscore; an empty
    name falls back to "mygenome".

    Examples:
        >>> sanitize_sample_name("Jane Doe")
        'Jane_Doe'
        >>> sanitize_sample_name("  ")
        'mygenome'
    """
    stripped = (name or "").strip()
    if not stripped:
        return DEFAULT_SAMPLE_NAME
    return re.sub(r"[^A-Za-z0-9_-]", "_", stripped)


def validate_output_dir(out_dir: str | Path) -> Path:
    """Validate an output directory, creating it if necessary.

    Args:
        out_dir: Directory that will receive output files.

    Returns:
        Resolved Path object.

    Raises:
        ValidationError: If the directory cannot be created or is not writable.
    """
    out_path = Path(out_dir).resolve()

    if out_path.exists() and not out_path.is_dir():
        raise ValidationError(f"Output path is not a directory: {out_path}")

    try:
        out_path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ValidationError(
            f"Cannot create output directory: {out_path}\nError: {e}"
        ) from e

    test_file = out_path / ".snpvcf_write_test"
    try:
        test_file.touch()
        test_file.unlink()
    except OSError as e:
        raise ValidationError(
            f"Output directory is not writable: {out_path}\nError: {e}",
            suggestion="Check file permissions.",
        ) from e

    return out_path


def validate_vcf(vcf_path: str | Path) -> dict:
    """Read a written VCF back with htslib and summarize it.

    Args:
        vcf_path: Path to a plain or BGZF-compressed VCF file.

    Returns:
        dict with keys: samples, contigs, n_records

    Raises:
        ValidationError: If the file is missing or htslib cannot parse it.
    """
    from cyvcf2 import VCF

    vcf_path = Path(vcf_path)
    if not vcf_path.exists():
        raise ValidationError(f"VCF file not found: {vcf_path}")

    try:
        vcf = VCF(str(vcf_path))
    except Exception as e:
        raise ValidationError(f"Cannot read VCF file: {e}") from e

    try:
        samples = list(vcf.samples)
        contigs = [
            header["ID"]
            for header in vcf.header_iter()
            if header["HeaderType"] == "CONTIG"
        ]
        n_records = sum(1 for _ in vcf)
    finally:
        vcf.close()

    logger.debug(f"Validated {vcf_path}: {len(samples)} samples, {n_records} records")

    return {
        "samples": samples,
        "contigs": contigs,
        "n_records": n_records,
    }
