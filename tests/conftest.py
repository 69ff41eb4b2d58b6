"""Pytest configuration and fixtures for snpvcf tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from snpvcf.core.models import GenomeData
from snpvcf.reference.database import ReferenceDatabase, ReferenceEntry
from snpvcf.reference.loader import ReferenceContext, compress_reference

# Sample 23andMe export. Sorted order is
# 1:69869, 1:565508, 2:3000, 2:5000, 10:200, X:1000, X:2000, MT:100
SAMPLE_GENOME_CONTENT = """\
# This data file generated by 23andMe at: Mon Jan 01 00:00:00 2024
# file_id: abc123
# signature: sig456
# timestamp: 2024-01-01 00:00:00
#
# rsid	chromosome	position	genotype
rs548049170	1	69869	TT
rs9283150	1	565508	AG
rs1000	2	5000	CT
rs2000	2	3000	AC
i713426	X	2000	A
rs3000	X	1000	--
rs4000	MT	100	G
rs5000	10	200	II
"""

# Reference samples for rs548049170
SAMPLE_REFERENCE_GENOTYPES = ("0/0", "0/1", "1/1", "./.", "1/0")

SAMPLE_REFERENCE_ENTRIES = [
    ReferenceEntry(
        rsid="rs548049170",
        chromosome="1",
        position=69869,
        ref="C",
        alt="T",
        maf=0.05,
        sample_genotypes=SAMPLE_REFERENCE_GENOTYPES,
    ),
    ReferenceEntry(
        rsid="rs9283150",
        chromosome="1",
        position=565508,
        ref="A",
        alt="G",
        maf=0.2345,
        sample_genotypes=("0/0", "0/0", "0/1", "0/0", "1/1"),
    ),
    ReferenceEntry(
        rsid="rs1000",
        chromosome="2",
        position=5000,
        ref="C",
        alt="T",
        maf=0.5,
        sample_genotypes=("0/1", "0/1", "0/1", "0/1", "0/1"),
    ),
    ReferenceEntry(rsid="rs4000", chromosome="MT", position=100, ref="A", alt="G", maf=0.01),
    ReferenceEntry(rsid="rs9999", chromosome="3", position=123, ref="G", alt="A", maf=0.3),
]

SAMPLE_REFERENCE_TSV = """\
rsid\tchrom\tpos\tref\talt\tmaf\tsamp1\tsamp2\tsamp3\tsamp4\tsamp5
rs548049170\t1\t69869\tC\tT\t0.05\t0/0\t0/1\t1/1\t./.\t1/0
rs9283150\t1\t565508\tA\tG\t0.2345\t0/0\t0/0\t0/1\t0/0\t1/1
rs1000\t2\t5000\tC\tT\t0.5\t0/1\t0/1\t0/1\t0/1\t0/1
"""


@pytest.fixture
def sample_genome() -> GenomeData:
    """Parse the sample genome text.

    Returns:
        GenomeData with 8 SNPs.
    """
    return GenomeData.from_string(SAMPLE_GENOME_CONTENT)


@pytest.fixture
def sample_genome_path(tmp_path: Path) -> Path:
    """Create a temporary 23andMe export with sample data.

    Returns:
        Path to the temporary genome file.
    """
    genome_path = tmp_path / "genome.txt"
    genome_path.write_text(SAMPLE_GENOME_CONTENT)
    return genome_path


@pytest.fixture
def sample_database() -> ReferenceDatabase:
    """Build an in-memory reference database with 5 SNPs."""
    return ReferenceDatabase.from_entries(
        SAMPLE_REFERENCE_ENTRIES, version="test-1", build="GRCh37"
    )


@pytest.fixture
def sample_reference(sample_database: ReferenceDatabase) -> ReferenceContext:
    """Reference context over the sample database."""
    return ReferenceContext.from_database(sample_database)


@pytest.fixture
def sample_reference_path(tmp_path: Path, sample_database: ReferenceDatabase) -> Path:
    """Write the sample database as a Brotli blob.

    Returns:
        Path to the compressed database.
    """
    ref_path = tmp_path / "reference.bin.br"
    ref_path.write_bytes(compress_reference(sample_database))
    return ref_path


@pytest.fixture
def sample_reference_tsv_path(tmp_path: Path) -> Path:
    """Create a temporary reference annotation table.

    Returns:
        Path to the TSV file.
    """
    tsv_path = tmp_path / "reference.tsv"
    tsv_path.write_text(SAMPLE_REFERENCE_TSV)
    return tsv_path


@pytest.fixture
def empty_genome_path(tmp_path: Path) -> Path:
    """Create a genome file with only header lines.

    Returns:
        Path to the temporary genome file.
    """
    genome_path = tmp_path / "empty.txt"
    genome_path.write_text("# file_id: empty\n# rsid\tchromosome\tposition\tgenotype\n")
    return genome_path
