"""Summary statistics for genome data.

This module provides the genome-wide QC summary (heterozygosity,
Ts/Tv ratio, allele composition, per-chromosome counts) shown by the
``summary`` command.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from snpvcf.utils.sorting import sort_chromosomes
from snpvcf.utils.validation import NON_SNP_ALLELES

if TYPE_CHECKING:
    from collections.abc import Iterable

    from snpvcf.core.models import GenomeData, Snp


@dataclass
class GenomeSummary:
    """Genome-wide summary statistics.

    Attributes:
        total_snps: Number of SNPs in the genome.
        heterozygosity_rate: Proportion of heterozygous SNPs.
        ts_tv_ratio: Transition/transversion ratio.
        allele_frequencies: Frequency of each allele character.
        chromosome_counts: Number of SNPs per chromosome.
    """

    total_snps: int
    heterozygosity_rate: float
    ts_tv_ratio: float
    allele_frequencies: dict[str, float]
    chromosome_counts: dict[str, int]

    def to_text(self) -> str:
        """Format summary as human-readable text.

        Returns:
            Multi-line string with summary information.
        """
        lines = [
            "Genome Data Summary",
            "===================",
            "",
            f"Total SNPs: {self.total_snps}",
            f"Heterozygosity Rate: {self.heterozygosity_rate:.4f} "
            f"({self.heterozygosity_rate * 100:.2f}%)",
            f"Transition/Transversion Ratio: {self.ts_tv_ratio:.4f}",
            "",
            "Allele Frequencies:",
        ]

        by_frequency = sorted(
            self.allele_frequencies.items(), key=lambda item: (-item[1], item[0])
        )
        for allele, freq in by_frequency:
            lines.append(f"  {allele}: {freq:.4f} ({freq * 100:.2f}%)")

        lines.extend(["", "SNPs per Chromosome:"])
        for chrom in sort_chromosomes(self.chromosome_counts):
            lines.append(f"  Chr {chrom}: {self.chromosome_counts[chrom]}")

        return "\n".join(lines) + "\n"

    def to_dict(self) -> dict[str, Any]:
        """Convert summary to a JSON-serializable dictionary."""
        return {
            "total_snps": self.total_snps,
            "heterozygosity_rate": self.heterozygosity_rate,
            "ts_tv_ratio": self.ts_tv_ratio,
            "allele_frequencies": dict(sorted(self.allele_frequencies.items())),
            "chromosome_counts": {
                chrom: self.chromosome_counts[chrom]
                for chrom in sort_chromosomes(self.chromosome_counts)
            },
        }


class GenomeAnalyzer:
    """Compute summary statistics for a parsed genome."""

    def __init__(self, genome: GenomeData) -> None:
        self.genome = genome

    def calculate_allele_frequencies(self) -> dict[str, float]:
        """Frequency of each allele character across all genotypes.

        No-call, insertion and deletion markers are not counted.

        Returns:
            Mapping of allele to frequency; empty for an empty genome.
        """
        counts: Counter[str] = Counter()
        for snp in self.genome.snps:
            counts.update(a for a in snp.genotype if a not in NON_SNP_ALLELES)

        total = sum(counts.values())
        if total == 0:
            return {}
        return {allele: count / total for allele, count in counts.items()}

    def transition_transversion_ratio(self) -> float:
        """Transition/transversion ratio of the genome."""
        return self.genome.transition_transversion_ratio()

    def generate_summary(self) -> GenomeSummary:
        """Generate a summary report of the genome data."""
        return GenomeSummary(
            total_snps=self.genome.total_snps(),
            heterozygosity_rate=self.genome.heterozygosity_rate(),
            ts_tv_ratio=self.transition_transversion_ratio(),
            allele_frequencies=self.calculate_allele_frequencies(),
            chromosome_counts=self.genome.chromosome_counts(),
        )


def chromosome_stats(genome: GenomeData, chromosome: str) -> dict[str, Any]:
    """Heterozygosity statistics for a single chromosome.

    Args:
        genome: Parsed genome.
        chromosome: Chromosome name.

    Returns:
        dict with keys: chromosome, total_snps, heterozygous_count,
        heterozygosity_rate
    """
    snps = genome.get_snps_by_chromosome(chromosome)
    total = len(snps)
    het_count = sum(1 for snp in snps if snp.is_heterozygous)

    return {
        "chromosome": chromosome,
        "total_snps": total,
        "heterozygous_count": het_count,
        "heterozygosity_rate": het_count / total if total else 0.0,
    }


def lookup_trait_snps(genome: GenomeData, rsids: Iterable[str]) -> list[Snp]:
    """Find the SNPs for a list of rsIDs.

    Args:
        genome: Parsed genome.
        rsids: rsIDs of interest.

    Returns:
        The SNPs found, in the order requested; missing rsIDs are skipped.
    """
    found = []
    for rsid in rsids:
        snp = genome.find_snp(rsid)
        if snp is not None:
            found.append(snp)
    return found
