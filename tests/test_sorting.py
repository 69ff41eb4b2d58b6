"""Tests for chromosome ordering."""

from __future__ import annotations

import pytest

from snpvcf.core.models import Snp
from snpvcf.utils.sorting import compare_chromosomes, sort_chromosomes, sort_snps


class TestCompareChromosomes:
    """Tests for compare_chromosomes."""

    @pytest.mark.parametrize(
        "a,b",
        [
            ("1", "2"),
            ("2", "10"),
            ("22", "X"),
            ("X", "Y"),
            ("Y", "MT"),
            ("MT", "Un"),
            ("9", "Un"),
        ],
    )
    def test_ordering(self, a: str, b: str) -> None:
        """Test that a sorts before b, and the reverse compares positive."""
        assert compare_chromosomes(a, b) < 0
        assert compare_chromosomes(b, a) > 0

    def test_equal(self) -> None:
        """Test that identical names compare equal."""
        assert compare_chromosomes("7", "7") == 0
        assert compare_chromosomes("X", "X") == 0

    def test_m_is_mitochondrial(self) -> None:
        """Test that M ranks with MT after Y."""
        assert compare_chromosomes("Y", "M") < 0

    def test_unknown_names_sort_lexically(self) -> None:
        """Test that unrecognised names fall back to string order."""
        assert compare_chromosomes("GL000192.1", "Un") < 0


class TestSortChromosomes:
    """Tests for sort_chromosomes."""

    def test_full_karyotype(self) -> None:
        """Test sorting a shuffled human karyotype."""
        chroms = ["MT", "X", "10", "Y", "2", "1", "22", "3"]

        assert sort_chromosomes(chroms) == ["1", "2", "3", "10", "22", "X", "Y", "MT"]

    def test_empty(self) -> None:
        """Test sorting an empty list."""
        assert sort_chromosomes([]) == []


class TestSortSnps:
    """Tests for sort_snps."""

    def test_positions_ascending_within_chromosome(self) -> None:
        """Test that SNPs at 300, 100, 200 come out as 100, 200, 300."""
        snps = [Snp(f"rs{p}", "1", p, "AA") for p in (300, 100, 200)]

        assert [snp.position for snp in sort_snps(snps)] == [100, 200, 300]

    def test_chromosome_then_position(self) -> None:
        """Test ordering across chromosomes."""
        snps = [
            Snp("a", "X", 5, "AA"),
            Snp("b", "10", 1, "AA"),
            Snp("c", "2", 9, "AA"),
            Snp("d", "2", 3, "AA"),
            Snp("e", "MT", 1, "AA"),
        ]

        assert [snp.rsid for snp in sort_snps(snps)] == ["d", "c", "b", "a", "e"]

    def test_stable_for_ties(self) -> None:
        """Test that equal keys keep their input order."""
        snps = [Snp("first", "1", 100, "AA"), Snp("second", "1", 100, "AG")]

        assert [snp.rsid for snp in sort_snps(snps)] == ["first", "second"]
