"""I/O utilities for snpvcf."""

from snpvcf.io.compression import compress_vcf
from snpvcf.io.vcf import VcfGenerator, parse_genotype
from snpvcf.io.writers import (
    batch_filename,
    write_batch_vcfs,
    write_summary,
    write_vcf,
)

__all__ = [
    # VCF
    "VcfGenerator",
    "parse_genotype",
    # Compression
    "compress_vcf",
    # Writers
    "batch_filename",
    "write_batch_vcfs",
    "write_summary",
    "write_vcf",
]
