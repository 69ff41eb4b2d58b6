"""VCF generation for snpvcf.

This module converts parsed genome data into VCF v4.2 text suitable for
imputation servers. Two modes are supported:

* Reference mode (preferred): REF/ALT come from the reference database.
  SNPs absent from the reference, or with an incomplete REF/ALT, are
  left out, so the output is an inner join against the reference panel.
  Five anonymized reference samples are written before the user's
  genotype to satisfy minimum sample counts.
* Fallback mode: REF/ALT are inferred from the observed genotype. The
  result is readable but not suitable for imputation.

Variants that cannot be represented are omitted, never written with
placeholder alleles.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import TYPE_CHECKING

from snpvcf.utils.logging import get_logger
from snpvcf.utils.sorting import sort_chromosomes, sort_snps
from snpvcf.utils.validation import split_genotype

if TYPE_CHECKING:
    from snpvcf.core.models import GenomeData, Snp
    from snpvcf.reference.database import SnpReference
    from snpvcf.reference.loader import ReferenceContext

logger = get_logger(__name__)

SOURCE_TAG = "snpvcf-23andMe-Converter"

SOURCE_NOTE_REFERENCE = (
    "REF/ALT alleles taken from the reference genome database; "
    "genotypes coded relative to the reference ALT allele"
)
SOURCE_NOTE_INFERRED = (
    "REF/ALT alleles inferred from observed genotypes without a reference database "
    "(first allele used as REF); not suitable for imputation"
)

REFERENCE_SAMPLE_NAMES = ("samp1", "samp2", "samp3", "samp4", "samp5")
USER_SAMPLE_NAME_REFERENCE = "samp51"
USER_SAMPLE_NAME = "SAMPLE"

# Chromosomes accepted by the imputation server for batch output
BATCH_CHROMOSOMES = tuple(str(i) for i in range(1, 23))

MISSING = "."
MISSING_GENOTYPE = "./."

FIXED_COLUMNS = ("#CHROM", "POS", "ID", "REF", "ALT", "QUAL", "FILTER", "INFO", "FORMAT")


class GenerationStats:
    """Track what happened to each SNP during VCF generation."""

    def __init__(self) -> None:
        """Initialize generation statistics."""
        self.total_snps = 0
        self.invalid_genotype = 0
        self.missing_reference = 0
        self.incomplete_reference = 0
        self.written = 0

    @property
    def skipped(self) -> int:
        """Number of SNPs left out of the output."""
        return self.invalid_genotype + self.missing_reference + self.incomplete_reference

    def merge(self, other: GenerationStats) -> None:
        """Add the counts of another generation run."""
        self.total_snps += other.total_snps
        self.invalid_genotype += other.invalid_genotype
        self.missing_reference += other.missing_reference
        self.incomplete_reference += other.incomplete_reference
        self.written += other.written

    def to_dict(self) -> dict[str, int]:
        """Convert stats to dictionary for display."""
        return {
            "SNPs considered": self.total_snps,
            "Invalid genotype (skipped)": self.invalid_genotype,
            "Not in reference (skipped)": self.missing_reference,
            "Incomplete reference (skipped)": self.incomplete_reference,
            "Variants written": self.written,
        }


def parse_genotype(genotype: str) -> tuple[str, str, str]:
    """Infer REF, ALT and GT from a genotype without a reference.

    The first allele is taken as REF. A homozygous call has no ALT.

    Args:
        genotype: 23andMe genotype (e.g. "AG").

    Returns:
        (REF, ALT, GT). Invalid genotypes return (".", ".", "./."),
        which marks the variant for omission.

    Examples:
        >>> parse_genotype("AA")
        ('A', '.', '0/0')
        >>> parse_genotype("AG")
        ('A', 'G', '0/1')
        >>> parse_genotype("--")
        ('.', '.', './.')
    """
    alleles = split_genotype(genotype)
    if alleles is None:
        return MISSING, MISSING, MISSING_GENOTYPE

    allele1, allele2 = alleles
    if allele1 == allele2:
        return allele1, MISSING, "0/0"
    return allele1, allele2, "0/1"


def reference_genotype(genotype: str, reference: SnpReference) -> str | None:
    """Code a genotype relative to the reference ALT allele.

    Each allele is "1" if it equals ALT and "0" otherwise. The result is
    unphased; allele order follows the input.

    Args:
        genotype: 23andMe genotype (e.g. "AG").
        reference: Reference information for the SNP.

    Returns:
        GT string such as "0/1", or None for an invalid genotype.
    """
    alleles = split_genotype(genotype)
    if alleles is None:
        return None

    alt = reference.alt_allele
    return "/".join("1" if allele == alt else "0" for allele in alleles)


class VcfGenerator:
    """Generate VCF text from genome data.

    Args:
        genome: Parsed genome data.
        reference: Loaded reference database context. When omitted the
            generator runs in fallback mode.
        file_date: Date for the ##fileDate header; defaults to the
            current UTC date at generation time.
    """

    def __init__(
        self,
        genome: GenomeData,
        reference: ReferenceContext | None = None,
        file_date: date | None = None,
    ) -> None:
        self.genome = genome
        self.reference = reference
        self.file_date = file_date
        self.stats = GenerationStats()

    @property
    def uses_reference(self) -> bool:
        """True when REF/ALT come from a reference database."""
        return self.reference is not None

    @property
    def sample_columns(self) -> tuple[str, ...]:
        """Sample column names for the header row."""
        if self.uses_reference:
            return (*REFERENCE_SAMPLE_NAMES, USER_SAMPLE_NAME_REFERENCE)
        return (USER_SAMPLE_NAME,)

    def generate_vcf(self, chromosome: str | None = None) -> str:
        """Generate VCF content for one chromosome or the whole genome.

        Args:
            chromosome: Optional chromosome filter (e.g. "1", "X").

        Returns:
            Complete VCF text, header included.
        """
        if chromosome is None:
            snps = self.genome.snps
        else:
            snps = self.genome.get_snps_by_chromosome(chromosome)

        content, stats = self._generate(snps)
        self.stats = stats

        logger.info(
            f"Generated VCF ({'reference' if self.uses_reference else 'fallback'} mode"
            f"{', chr' + chromosome if chromosome else ''}): "
            f"{stats.written:,} variants written, {stats.skipped:,} skipped"
        )
        return content

    def generate_batch_vcf(self) -> dict[str, str]:
        """Generate one VCF per autosome.

        Only chromosomes 1-22 are produced; X, Y and MT are excluded.
        A chromosome is included only if its VCF has at least one
        variant line.

        Returns:
            Mapping of chromosome name to VCF text, in chromosome order.
        """
        results: dict[str, str] = {}
        total = GenerationStats()

        for chromosome in BATCH_CHROMOSOMES:
            snps = self.genome.get_snps_by_chromosome(chromosome)
            if not snps:
                continue

            content, stats = self._generate(snps)
            total.merge(stats)
            if stats.written > 0:
                results[chromosome] = content
            else:
                logger.debug(f"chr{chromosome}: no variants to write, skipped")

        self.stats = total
        logger.info(
            f"Generated {len(results)} chromosome VCF(s): "
            f"{total.written:,} variants written, {total.skipped:,} skipped"
        )
        return results

    def _generate(self, snps: tuple[Snp, ...] | list[Snp]) -> tuple[str, GenerationStats]:
        stats = GenerationStats()
        lines = self.header_lines()

        for snp in sort_snps(snps):
            stats.total_snps += 1
            line = self._variant_line(snp, stats)
            if line is not None:
                lines.append(line)
                stats.written += 1

        return "\n".join(lines) + "\n", stats

    def header_lines(self) -> list[str]:
        """Build the VCF meta-information and column header lines."""
        file_date = self.file_date or datetime.now(timezone.utc).date()
        source_note = SOURCE_NOTE_REFERENCE if self.uses_reference else SOURCE_NOTE_INFERRED

        lines = [
            "##fileformat=VCFv4.2",
            f"##fileDate={file_date.strftime('%Y%m%d')}",
            f"##source={SOURCE_TAG}",
            f"##sourceNote={source_note}",
            f"##reference={self.genome.metadata.build}",
        ]

        for chrom in sort_chromosomes(self.genome.chromosome_counts()):
            lines.append(f"##contig=<ID={chrom}>")

        lines.extend(
            [
                '##INFO=<ID=NS,Number=1,Type=Integer,Description="Number of samples with data">',
                '##FORMAT=<ID=GT,Number=1,Type=String,Description="Genotype">',
                '##FILTER=<ID=PASS,Description="All filters passed">',
                "\t".join(FIXED_COLUMNS + self.sample_columns),
            ]
        )
        return lines

    def _variant_line(self, snp: Snp, stats: GenerationStats) -> str | None:
        """Format one variant line, or return None if the SNP is omitted."""
        if self.reference is None:
            ref, alt, gt = parse_genotype(snp.genotype)
            if ref == MISSING or gt == MISSING_GENOTYPE:
                stats.invalid_genotype += 1
                logger.debug(f"{snp.rsid}: invalid genotype {snp.genotype!r}, skipped")
                return None
            samples = [gt]
        else:
            info = self.reference.lookup(snp.rsid)
            if info is None:
                stats.missing_reference += 1
                logger.debug(f"{snp.rsid}: not in reference database, skipped")
                return None
            if not info.is_complete:
                stats.incomplete_reference += 1
                logger.debug(f"{snp.rsid}: incomplete reference alleles, skipped")
                return None

            gt = reference_genotype(snp.genotype, info)
            if gt is None:
                stats.invalid_genotype += 1
                logger.debug(f"{snp.rsid}: invalid genotype {snp.genotype!r}, skipped")
                return None

            ref, alt = info.ref_allele, info.alt_allele
            samples = [*info.sample_genotypes, gt]

        fields = [
            snp.chromosome,
            str(snp.position),
            snp.rsid,
            ref,
            alt,
            MISSING,
            "PASS",
            f"NS={len(samples)}",
            "GT",
            *samples,
        ]
        return "\t".join(fields)
