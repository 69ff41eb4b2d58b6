"""Tests for the genome data model and the 23andMe parser."""

from __future__ import annotations

from pathlib import Path

import pytest

from snpvcf.core.models import DEFAULT_BUILD, GenomeData, Snp
from snpvcf.utils.errors import GenomeFileError, GenomeParseError


def _genome(*genotypes: str) -> GenomeData:
    lines = [f"rs{i}\t1\t{100 + i}\t{gt}" for i, gt in enumerate(genotypes, 1)]
    return GenomeData.from_string("\n".join(lines))


class TestSnp:
    """Tests for Snp parsing and genotype properties."""

    def test_from_line(self) -> None:
        """Test parsing a valid data line."""
        snp = Snp.from_line("rs548049170\t1\t69869\tTT")

        assert snp.rsid == "rs548049170"
        assert snp.chromosome == "1"
        assert snp.position == 69869
        assert snp.genotype == "TT"

    def test_from_line_wrong_field_count(self) -> None:
        """Test that a line without 4 fields is rejected."""
        with pytest.raises(GenomeParseError, match="expected 4"):
            Snp.from_line("rs1\t1\t100")

    def test_from_line_bad_position(self) -> None:
        """Test that a non-numeric position is rejected."""
        with pytest.raises(GenomeParseError, match="position"):
            Snp.from_line("rs1\t1\tabc\tAA")

    def test_from_line_negative_position(self) -> None:
        """Test that a negative position is rejected."""
        with pytest.raises(GenomeParseError):
            Snp.from_line("rs1\t1\t-5\tAA")

    def test_from_line_position_overflow(self) -> None:
        """Test that positions beyond 64 bits are rejected."""
        with pytest.raises(GenomeParseError):
            Snp.from_line(f"rs1\t1\t{2**64}\tAA")

    def test_from_line_max_position(self) -> None:
        """Test that the largest 64-bit position is accepted."""
        assert Snp.from_line(f"rs1\t1\t{2**64 - 1}\tAA").position == 2**64 - 1

    @pytest.mark.parametrize(
        "genotype,het,hom",
        [
            ("AG", True, False),
            ("AA", False, True),
            ("--", False, True),
            ("DI", True, False),
            ("A", False, False),
            ("", False, False),
            ("AGT", False, False),
        ],
    )
    def test_zygosity(self, genotype: str, het: bool, hom: bool) -> None:
        """Test heterozygous/homozygous classification."""
        snp = Snp("rs1", "1", 1, genotype)

        assert snp.is_heterozygous is het
        assert snp.is_homozygous is hom

    def test_zygosity_exclusive_for_all_pairs(self) -> None:
        """Every 2-character genotype is exactly one of het or hom."""
        alphabet = "ACGT-DI"
        for a in alphabet:
            for b in alphabet:
                snp = Snp("rs1", "1", 1, a + b)
                assert snp.is_heterozygous != snp.is_homozygous

    def test_is_transition(self) -> None:
        """Test transition classification."""
        assert Snp("rs1", "1", 1, "AG").is_transition
        assert Snp("rs1", "1", 1, "TC").is_transition
        assert not Snp("rs1", "1", 1, "AC").is_transition
        assert not Snp("rs1", "1", 1, "AA").is_transition


class TestGenomeDataParsing:
    """Tests for GenomeData.from_string and from_file."""

    def test_parses_snps_in_file_order(self, sample_genome: GenomeData) -> None:
        """Test SNP count and order."""
        assert sample_genome.total_snps() == 8
        assert sample_genome.snps[0].rsid == "rs548049170"
        assert sample_genome.snps[-1].rsid == "rs5000"

    def test_metadata(self, sample_genome: GenomeData) -> None:
        """Test metadata extraction from comment lines."""
        meta = sample_genome.metadata

        assert meta.file_id == "abc123"
        assert meta.signature == "sig456"
        assert meta.timestamp == "2024-01-01 00:00:00"
        assert meta.build == DEFAULT_BUILD

    def test_metadata_absent(self) -> None:
        """Test defaults when the header carries no metadata."""
        genome = GenomeData.from_string("rs1\t1\t100\tAA\n")

        assert genome.metadata.file_id is None
        assert genome.metadata.signature is None
        assert genome.metadata.timestamp is None

    def test_skips_column_header_line(self) -> None:
        """Test that an uncommented rsid header line is skipped."""
        genome = GenomeData.from_string("rsid\tchromosome\tposition\tgenotype\nrs1\t1\t100\tAA\n")

        assert genome.total_snps() == 1
        assert genome.warnings == ()

    def test_blank_and_whitespace_lines(self) -> None:
        """Test that blank lines are ignored and data lines are trimmed."""
        genome = GenomeData.from_string("\n   \nrs1\t1\t100\tAA  \r\n\n")

        assert genome.total_snps() == 1
        assert genome.snps[0].genotype == "AA"

    def test_malformed_lines_are_skipped_with_warning(self) -> None:
        """Test that malformed lines do not abort parsing."""
        content = "rs1\t1\t100\tAA\nrs2\t1\tnotanumber\tAG\nrs3\t1\nrs4\t2\t400\tCT\n"
        genome = GenomeData.from_string(content)

        assert [snp.rsid for snp in genome.snps] == ["rs1", "rs4"]
        assert len(genome.warnings) == 2
        assert genome.warnings[0].startswith("Line 2:")
        assert genome.warnings[1].startswith("Line 3:")

    def test_duplicates_are_kept(self) -> None:
        """Test that duplicate rsIDs are not merged."""
        genome = GenomeData.from_string("rs1\t1\t100\tAA\nrs1\t1\t100\tAG\n")

        assert genome.total_snps() == 2
        assert genome.find_snp("rs1").genotype == "AA"

    def test_empty_content(self) -> None:
        """Test parsing empty input."""
        genome = GenomeData.from_string("")

        assert genome.total_snps() == 0
        assert genome.heterozygosity_rate() == 0.0
        assert genome.transition_transversion_ratio() == 0.0

    def test_from_file(self, sample_genome_path: Path) -> None:
        """Test reading a genome file from disk."""
        genome = GenomeData.from_file(sample_genome_path)

        assert genome.total_snps() == 8

    def test_from_file_missing(self, tmp_path: Path) -> None:
        """Test error when the genome file does not exist."""
        with pytest.raises(GenomeFileError, match="Genome file not found"):
            GenomeData.from_file(tmp_path / "missing.txt")

    def test_from_file_not_utf8(self, tmp_path: Path) -> None:
        """Test error when the file is binary."""
        path = tmp_path / "genome.txt.gz"
        path.write_bytes(b"\x1f\x8b\x08\x00\xff\xfe\xfd")

        with pytest.raises(GenomeFileError, match="Failed to read"):
            GenomeData.from_file(path)


class TestGenomeDataQueries:
    """Tests for GenomeData query methods."""

    def test_get_snps_by_chromosome(self, sample_genome: GenomeData) -> None:
        """Test filtering by chromosome keeps file order."""
        snps = sample_genome.get_snps_by_chromosome("2")

        assert [snp.rsid for snp in snps] == ["rs1000", "rs2000"]
        assert sample_genome.get_snps_by_chromosome("22") == []

    def test_find_snp(self, sample_genome: GenomeData) -> None:
        """Test finding a SNP by rsID."""
        assert sample_genome.find_snp("rs9283150").genotype == "AG"
        assert sample_genome.find_snp("rs0") is None

    def test_chromosome_counts(self, sample_genome: GenomeData) -> None:
        """Test SNP counts per chromosome."""
        assert sample_genome.chromosome_counts() == {"1": 2, "2": 2, "X": 2, "MT": 1, "10": 1}

    def test_heterozygosity_rate(self) -> None:
        """Test heterozygosity over AA, AG, TT, CT is exactly one half."""
        assert _genome("AA", "AG", "TT", "CT").heterozygosity_rate() == 0.5

    def test_ts_tv_ratio(self) -> None:
        """Test 4 transitions over 2 transversions gives 2.0."""
        genome = _genome("AG", "GA", "CT", "TC", "AC", "GT", "AA")

        assert genome.transition_transversion_ratio() == 2.0

    def test_ts_tv_ratio_no_transversions(self) -> None:
        """Test that zero transversions gives 0.0 rather than an error."""
        assert _genome("AG", "CT").transition_transversion_ratio() == 0.0

    def test_genome_is_immutable(self, sample_genome: GenomeData) -> None:
        """Test that parsed genome data cannot be modified."""
        with pytest.raises(AttributeError):
            sample_genome.snps = ()  # type: ignore[misc]
