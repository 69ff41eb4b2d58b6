"""Genome data model and analysis."""

from snpvcf.core.analysis import (
    GenomeAnalyzer,
    GenomeSummary,
    chromosome_stats,
    lookup_trait_snps,
)
from snpvcf.core.models import GenomeData, GenomeMetadata, Snp

__all__ = [
    "GenomeAnalyzer",
    "GenomeData",
    "GenomeMetadata",
    "GenomeSummary",
    "Snp",
    "chromosome_stats",
    "lookup_trait_snps",
]
