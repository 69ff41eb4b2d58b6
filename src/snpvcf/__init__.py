"""
snpvcf: convert consumer genome exports to VCF.

This package parses 23andMe-style raw data files, computes simple QC
statistics, and writes VCF v4.2 files for imputation servers, using a
compact binary reference database for REF/ALT alleles.
"""

__version__ = "1.0.0"
__author__ = "snpvcf Authors"

from snpvcf.core.models import GenomeData, GenomeMetadata, Snp

__all__ = ["GenomeData", "GenomeMetadata", "Snp", "__version__"]
