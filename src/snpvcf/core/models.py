"""Data models for snpvcf.

This module defines the genome data model and the parser for
23andMe-style raw data exports:

    # file_id: ...
    # rsid	chromosome	position	genotype
    rs548049170	1	69869	TT

Malformed data lines are skipped with a warning; only an unreadable
file is fatal.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path

from snpvcf.utils.errors import GenomeFileError, GenomeParseError, format_file_not_found
from snpvcf.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BUILD = "GRCh37/hg19"

MAX_POSITION = 2**64 - 1

_TRANSITIONS = frozenset({("A", "G"), ("G", "A"), ("C", "T"), ("T", "C")})

_METADATA_PREFIXES = {
    "# file_id:": "file_id",
    "# signature:": "signature",
    "# timestamp:": "timestamp",
}


def _parse_position(value: str) -> int:
    """Parse an unsigned 64-bit position.

    Raises:
        ValueError: If the value is not a decimal integer in [0, 2**64).
    """
    if not value.isascii() or not value.isdigit():
        raise ValueError(f"invalid position: {value!r}")
    position = int(value)
    if position > MAX_POSITION:
        raise ValueError(f"position out of range: {value}")
    return position


@dataclass(frozen=True)
class Snp:
    """Single SNP call from a genome export.

    Attributes:
        rsid: SNP identifier (rsID or vendor-internal ID such as "i713426").
        chromosome: Chromosome name ("1".."22", "X", "Y", "MT").
        position: 1-based position on the chromosome.
        genotype: Observed genotype (e.g. "AG"); may be "--", a single
            allele on haploid chromosomes, or an indel code.
    """

    rsid: str
    chromosome: str
    position: int
    genotype: str

    @classmethod
    def from_line(cls, line: str) -> Snp:
        """Parse one tab-separated data line.

        Args:
            line: "rsid<TAB>chromosome<TAB>position<TAB>genotype".

        Returns:
            Parsed Snp.

        Raises:
            GenomeParseError: On a wrong field count or unparsable position.

        Example:
            >>> Snp.from_line("rs548049170\\t1\\t69869\\tTT").position
            69869
        """
        parts = line.split("\t")
        if len(parts) != 4:
            raise GenomeParseError(
                f"expected 4 tab-separated fields, got {len(parts)}"
            )

        rsid, chromosome, position_str, genotype = parts
        try:
            position = _parse_position(position_str)
        except ValueError as e:
            raise GenomeParseError(f"failed to parse position: {e}") from e

        return cls(rsid=rsid, chromosome=chromosome, position=position, genotype=genotype)

    @property
    def is_heterozygous(self) -> bool:
        """True for a two-character genotype with differing alleles."""
        return len(self.genotype) == 2 and self.genotype[0] != self.genotype[1]

    @property
    def is_homozygous(self) -> bool:
        """True for a two-character genotype with identical alleles."""
        return len(self.genotype) == 2 and self.genotype[0] == self.genotype[1]

    @property
    def is_transition(self) -> bool:
        """True for a heterozygous A<->G or C<->T genotype."""
        return self.is_heterozygous and (self.genotype[0], self.genotype[1]) in _TRANSITIONS


@dataclass(frozen=True)
class GenomeMetadata:
    """Metadata extracted from the genome file header.

    Attributes:
        file_id: Vendor file identifier, if present.
        signature: Vendor signature, if present.
        timestamp: Export timestamp, if present.
        build: Reference genome build the coordinates refer to.
    """

    file_id: str | None = None
    signature: str | None = None
    timestamp: str | None = None
    build: str = DEFAULT_BUILD


@dataclass(frozen=True)
class GenomeData:
    """Parsed genome export.

    SNPs keep file order and duplicate rsIDs are not merged. The object
    is never modified after parsing.

    Attributes:
        snps: SNP calls in file order.
        metadata: Header metadata.
        warnings: Messages for data lines that were skipped while parsing.
    """

    snps: tuple[Snp, ...] = ()
    metadata: GenomeMetadata = field(default_factory=GenomeMetadata)
    warnings: tuple[str, ...] = ()

    @classmethod
    def from_string(cls, content: str) -> GenomeData:
        """Parse genome data from the full text of a 23andMe export.

        Args:
            content: File content.

        Returns:
            Parsed GenomeData.
        """
        snps: list[Snp] = []
        warnings: list[str] = []
        meta: dict[str, str] = {}

        for line_no, line in enumerate(content.splitlines(), 1):
            trimmed = line.strip()

            if not trimmed:
                continue

            if trimmed.startswith("#"):
                for prefix, key in _METADATA_PREFIXES.items():
                    if trimmed.startswith(prefix):
                        meta[key] = trimmed[len(prefix):].strip()
                        break
                continue

            # Column header line
            if trimmed.startswith("rsid"):
                continue

            try:
                snps.append(Snp.from_line(trimmed))
            except GenomeParseError as e:
                message = f"Line {line_no}: skipped malformed SNP line {trimmed!r} ({e.message})"
                logger.warning(message)
                warnings.append(message)

        logger.info(f"Parsed {len(snps):,} SNPs from genome data")
        if warnings:
            logger.warning(f"Skipped {len(warnings):,} malformed line(s)")

        return cls(
            snps=tuple(snps),
            metadata=GenomeMetadata(**meta),
            warnings=tuple(warnings),
        )

    @classmethod
    def from_file(cls, path: str | Path) -> GenomeData:
        """Import genome data from a 23andMe text file.

        Args:
            path: Path to the raw data export.

        Returns:
            Parsed GenomeData.

        Raises:
            GenomeFileError: If the file cannot be read.
        """
        path = Path(path)
        logger.info(f"Importing 23andMe genome data from {path}")

        if not path.exists():
            raise GenomeFileError(format_file_not_found(path, "Genome file"))

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise GenomeFileError(
                f"Failed to read genome data file {path}: {e}",
                suggestion="Make sure the file is an uncompressed 23andMe text export.",
            ) from e

        return cls.from_string(content)

    def get_snps_by_chromosome(self, chromosome: str) -> list[Snp]:
        """Return all SNPs on a chromosome, in file order."""
        return [snp for snp in self.snps if snp.chromosome == chromosome]

    def find_snp(self, rsid: str) -> Snp | None:
        """Return the first SNP with the given rsID, or None."""
        for snp in self.snps:
            if snp.rsid == rsid:
                return snp
        return None

    def total_snps(self) -> int:
        """Return the number of SNPs."""
        return len(self.snps)

    def heterozygosity_rate(self) -> float:
        """Proportion of heterozygous SNPs (0.0 for an empty genome)."""
        if not self.snps:
            return 0.0
        heterozygous = sum(1 for snp in self.snps if snp.is_heterozygous)
        return heterozygous / len(self.snps)

    def chromosome_counts(self) -> dict[str, int]:
        """Return the number of SNPs on each chromosome."""
        return dict(Counter(snp.chromosome for snp in self.snps))

    def transition_transversion_ratio(self) -> float:
        """Transition/transversion ratio over heterozygous SNPs.

        Transitions are A<->G and C<->T; every other differing pair is a
        transversion.

        Returns:
            Transitions divided by transversions, or 0.0 when there are
            no transversions.
        """
        transitions = 0
        transversions = 0
        for snp in self.snps:
            if not snp.is_heterozygous:
                continue
            if snp.is_transition:
                transitions += 1
            else:
                transversions += 1

        if transversions == 0:
            return 0.0
        return transitions / transversions
