"""Chromosome ordering utilities.

Human chromosomes sort numerically 1-22, then X, Y and MT. The same
ordering is used for the summary report, the VCF contig header and the
variant lines, so it lives here rather than in either consumer.
"""

from __future__ import annotations

from functools import cmp_to_key
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from snpvcf.core.models import Snp

_SPECIAL_ORDER = {"X": 0, "Y": 1, "MT": 2, "M": 2}
_OTHER_RANK = 99


def _as_number(chrom: str) -> int | None:
    """Return the chromosome as an int if it is purely numeric."""
    if chrom.isascii() and chrom.isdigit():
        return int(chrom)
    return None


def compare_chromosomes(a: str, b: str) -> int:
    """Compare two chromosome names.

    Numeric names compare numerically and always sort before non-numeric
    ones. Non-numeric names order X < Y < MT/M < anything else, with
    remaining ties broken lexically.

    Args:
        a: First chromosome name.
        b: Second chromosome name.

    Returns:
        Negative if a sorts first, positive if b sorts first, 0 if equal.

    Examples:
        >>> compare_chromosomes("10", "2") > 0
        True
        >>> compare_chromosomes("22", "X") < 0
        True
        >>> compare_chromosomes("Y", "MT") < 0
        True
    """
    a_num = _as_number(a)
    b_num = _as_number(b)

    if a_num is not None and b_num is not None:
        return (a_num > b_num) - (a_num < b_num)
    if a_num is not None:
        return -1
    if b_num is not None:
        return 1

    a_rank = _SPECIAL_ORDER.get(a, _OTHER_RANK)
    b_rank = _SPECIAL_ORDER.get(b, _OTHER_RANK)
    if a_rank != b_rank:
        return (a_rank > b_rank) - (a_rank < b_rank)
    return (a > b) - (a < b)


chromosome_sort_key = cmp_to_key(compare_chromosomes)


def sort_chromosomes(chroms: Iterable[str]) -> list[str]:
    """Return chromosomes in genomic order.

    Examples:
        >>> sort_chromosomes(["X", "10", "2", "MT", "1"])
        ['1', '2', '10', 'X', 'MT']
    """
    return sorted(chroms, key=chromosome_sort_key)


def sort_snps(snps: Iterable[Snp]) -> list[Snp]:
    """Sort SNPs by chromosome, then by position ascending.

    The sort is stable, so SNPs sharing a chromosome and position keep
    their input order.
    """
    return sorted(
        snps,
        key=lambda snp: (chromosome_sort_key(snp.chromosome), snp.position),
    )
