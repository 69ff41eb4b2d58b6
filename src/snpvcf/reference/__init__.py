"""Binary reference database and its loader."""

from snpvcf.reference.database import (
    DatabaseStats,
    ReferenceDatabase,
    ReferenceEntry,
    SnpReference,
    decode_chromosome,
    decode_nucleotide,
    decode_sample_genotypes,
)
from snpvcf.reference.loader import (
    ReferenceContext,
    compress_reference,
    load_reference,
    load_reference_database,
)

__all__ = [
    # Database
    "DatabaseStats",
    "ReferenceDatabase",
    "ReferenceEntry",
    "SnpReference",
    "decode_chromosome",
    "decode_nucleotide",
    "decode_sample_genotypes",
    # Loader
    "ReferenceContext",
    "compress_reference",
    "load_reference",
    "load_reference_database",
]
