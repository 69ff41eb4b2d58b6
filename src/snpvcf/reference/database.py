"""Binary reference database for SNP annotation.

The reference database stores, for every known SNP, the reference and
alternate allele, the population minor allele frequency and the
genotypes of five anonymized reference samples. Each SNP is a packed
20-byte little-endian record:

    offset  size  field
    0       4     rsid_index        offset of the rsID in the name table
    4       1     chromosome        1-22, 23=X, 24=Y, 25=MT
    5       4     position          1-based coordinate
    9       1     ref_alt_flags     bits 7-6 REF, bits 5-4 ALT, bits 3-0 reserved
    10      2     maf               minor allele frequency x 10000
    12      8     sample_genotypes  5 samples x 8 bits

Records are held in a numpy structured array and the bit fields are
read through the accessor functions below, never through struct
layout. rsIDs are resolved through an index built over the whole
NUL-separated name table; the stored rsid_index is informational only.

Decoders never raise: unknown codes decode to "N", "Unknown" or "./.".
"""

from __future__ import annotations

import struct
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from snpvcf.utils.errors import ReferenceFormatError
from snpvcf.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = get_logger(__name__)

RECORD_DTYPE = np.dtype(
    [
        ("rsid_index", "<u4"),
        ("chromosome", "u1"),
        ("position", "<u4"),
        ("ref_alt_flags", "u1"),
        ("maf", "<u2"),
        ("sample_genotypes", "<u8"),
    ]
)

RECORD_SIZE = RECORD_DTYPE.itemsize

MAGIC = b"SNPREF01"

N_REFERENCE_SAMPLES = 5

MAF_SCALE = 10000

MAX_RECORD_POSITION = 2**32 - 1

NUCLEOTIDES = "ACGT"
UNKNOWN_NUCLEOTIDE = "N"
UNKNOWN_CHROMOSOME = "Unknown"
MISSING_GENOTYPE = "./."

# Allele codes inside a sample slot
ALLELE_MISSING = 2
ALLELE_UNUSED = 3
_NO_CALL_CODES = (ALLELE_MISSING, ALLELE_UNUSED)

_SPECIAL_CHROMOSOMES = {23: "X", 24: "Y", 25: "MT"}
_SPECIAL_CHROMOSOME_CODES = {"X": 23, "Y": 24, "MT": 25, "M": 25}

_U64 = struct.Struct("<Q")


# ---------------------------------------------------------------------------
# Bit-field accessors
# ---------------------------------------------------------------------------


def ref_allele_code(ref_alt_flags: int) -> int:
    """Reference allele code, bits 7-6 of ref_alt_flags."""
    return (int(ref_alt_flags) >> 6) & 0x03


def alt_allele_code(ref_alt_flags: int) -> int:
    """Alternate allele code, bits 5-4 of ref_alt_flags."""
    return (int(ref_alt_flags) >> 4) & 0x03


def reserved_flags(ref_alt_flags: int) -> int:
    """Reserved flag bits, bits 3-0 of ref_alt_flags."""
    return int(ref_alt_flags) & 0x0F


def sample_slot(packed: int, sample: int) -> int:
    """8-bit slot of one sample, bits 8*i to 8*i+7 of sample_genotypes."""
    return (int(packed) >> (sample * 8)) & 0xFF


def slot_alleles(slot: int) -> tuple[int, int]:
    """Allele codes of a sample slot: bits 0-1 (allele 1), bits 2-3 (allele 2)."""
    return slot & 0x03, (slot >> 2) & 0x03


# ---------------------------------------------------------------------------
# Decoders
# ---------------------------------------------------------------------------


def decode_nucleotide(code: int) -> str:
    """Decode a 2-bit nucleotide code.

    Examples:
        >>> [decode_nucleotide(c) for c in range(5)]
        ['A', 'C', 'G', 'T', 'N']
    """
    if 0 <= code < len(NUCLEOTIDES):
        return NUCLEOTIDES[code]
    return UNKNOWN_NUCLEOTIDE


def decode_chromosome(code: int) -> str:
    """Decode a chromosome code.

    Examples:
        >>> decode_chromosome(7), decode_chromosome(23), decode_chromosome(25)
        ('7', 'X', 'MT')
        >>> decode_chromosome(0)
        'Unknown'
    """
    if 1 <= code <= 22:
        return str(code)
    return _SPECIAL_CHROMOSOMES.get(code, UNKNOWN_CHROMOSOME)


def decode_sample_genotypes(packed: int) -> tuple[str, ...]:
    """Decode the five reference sample genotypes.

    Genotypes are written with the raw allele codes, which count ALT
    alleles ("0/1" means one REF and one ALT). A sample with either
    allele code set to missing (2) or unused (3) decodes to "./.".

    Args:
        packed: The 64-bit sample_genotypes field.

    Returns:
        Tuple of five genotype strings.
    """
    genotypes = []
    for sample in range(N_REFERENCE_SAMPLES):
        allele1, allele2 = slot_alleles(sample_slot(packed, sample))
        if allele1 in _NO_CALL_CODES or allele2 in _NO_CALL_CODES:
            genotypes.append(MISSING_GENOTYPE)
        else:
            genotypes.append(f"{allele1}/{allele2}")
    return tuple(genotypes)


# ---------------------------------------------------------------------------
# Encoders (used when building a database)
# ---------------------------------------------------------------------------


def encode_nucleotide(allele: str) -> int:
    """Encode A, C, G or T as a 2-bit code.

    Raises:
        ValueError: For any other allele.
    """
    code = NUCLEOTIDES.find(allele.upper()) if len(allele) == 1 else -1
    if code < 0:
        raise ValueError(f"cannot encode allele {allele!r}")
    return code


def encode_chromosome(chromosome: str) -> int:
    """Encode a chromosome name ("1".."22", "X", "Y", "MT").

    Raises:
        ValueError: For an unknown chromosome.
    """
    if chromosome.isdigit() and 1 <= int(chromosome) <= 22:
        return int(chromosome)
    if chromosome in _SPECIAL_CHROMOSOME_CODES:
        return _SPECIAL_CHROMOSOME_CODES[chromosome]
    raise ValueError(f"cannot encode chromosome {chromosome!r}")


def encode_ref_alt_flags(ref: str, alt: str) -> int:
    """Pack REF and ALT alleles into the ref_alt_flags byte."""
    return (encode_nucleotide(ref) << 6) | (encode_nucleotide(alt) << 4)


def encode_sample_genotypes(genotypes: Sequence[str]) -> int:
    """Pack five genotype strings ("0/0", "0/1", "1/0", "1/1", "./.").

    Raises:
        ValueError: For a wrong sample count or an unknown genotype.
    """
    if len(genotypes) != N_REFERENCE_SAMPLES:
        raise ValueError(
            f"expected {N_REFERENCE_SAMPLES} sample genotypes, got {len(genotypes)}"
        )

    packed = 0
    for sample, genotype in enumerate(genotypes):
        if genotype in (MISSING_GENOTYPE, "."):
            allele1 = allele2 = ALLELE_MISSING
        else:
            parts = genotype.replace("|", "/").split("/")
            if len(parts) != 2 or any(p not in ("0", "1") for p in parts):
                raise ValueError(f"cannot encode genotype {genotype!r}")
            allele1, allele2 = int(parts[0]), int(parts[1])
        packed |= (allele1 | (allele2 << 2)) << (sample * 8)
    return packed


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SnpReference:
    """Decoded reference information for one SNP.

    Attributes:
        ref_allele: Reference allele ("N" if the code is unknown).
        alt_allele: Alternate allele ("N" if the code is unknown).
        maf: Minor allele frequency in [0, 1].
        chromosome: Chromosome name.
        position: 1-based position.
        sample_genotypes: Genotypes of the five reference samples.
    """

    ref_allele: str
    alt_allele: str
    maf: float
    chromosome: str
    position: int
    sample_genotypes: tuple[str, ...]

    @property
    def is_complete(self) -> bool:
        """True when both REF and ALT decoded to a real nucleotide."""
        return UNKNOWN_NUCLEOTIDE not in (self.ref_allele, self.alt_allele)


@dataclass(frozen=True)
class DatabaseStats:
    """Reference database statistics."""

    version: str
    build: str
    snp_count: int
    total_size: int

    def to_dict(self) -> dict[str, int | str]:
        """Convert stats to dictionary for display."""
        return {
            "version": self.version,
            "build": self.build,
            "snp_count": self.snp_count,
            "size_bytes": self.total_size,
        }


@dataclass(frozen=True)
class ReferenceEntry:
    """One SNP as supplied to the database builder."""

    rsid: str
    chromosome: str
    position: int
    ref: str
    alt: str
    maf: float
    sample_genotypes: tuple[str, ...] = (MISSING_GENOTYPE,) * N_REFERENCE_SAMPLES


@dataclass(frozen=True, eq=False)
class ReferenceDatabase:
    """Reference database deserialized from its binary form.

    Attributes:
        version: Database version identifier.
        build: Reference genome build.
        snp_count: Number of SNPs.
        records: Structured array of RECORD_DTYPE records.
        rsid_table: NUL-separated rsID names, one per record.
    """

    version: str
    build: str
    snp_count: int
    records: np.ndarray
    rsid_table: str

    def __len__(self) -> int:
        return len(self.records)

    def build_index(self) -> dict[str, int]:
        """Map each rsID in the name table to its record position.

        Empty segments are skipped. If a name occurs more than once the
        first position is kept.
        """
        index: dict[str, int] = {}
        names = (name for name in self.rsid_table.split("\0") if name)
        for position, rsid in enumerate(names):
            index.setdefault(rsid, position)
        return index

    def lookup(self, rsid: str, index: dict[str, int]) -> SnpReference | None:
        """Look up reference information for an rsID.

        Args:
            rsid: SNP identifier.
            index: Index returned by build_index().

        Returns:
            Decoded reference, or None if the rsID is not in the index or
            its position is outside the record array.
        """
        position = index.get(rsid)
        if position is None or position >= len(self.records):
            return None

        record = self.records[position]
        flags = int(record["ref_alt_flags"])
        return SnpReference(
            ref_allele=decode_nucleotide(ref_allele_code(flags)),
            alt_allele=decode_nucleotide(alt_allele_code(flags)),
            maf=int(record["maf"]) / MAF_SCALE,
            chromosome=decode_chromosome(int(record["chromosome"])),
            position=int(record["position"]),
            sample_genotypes=decode_sample_genotypes(int(record["sample_genotypes"])),
        )

    def stats(self) -> DatabaseStats:
        """Return database statistics.

        total_size approximates the in-memory footprint as the record
        bytes plus the name table length.
        """
        return DatabaseStats(
            version=self.version,
            build=self.build,
            snp_count=self.snp_count,
            total_size=int(self.records.nbytes) + len(self.rsid_table.encode("utf-8")),
        )

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[ReferenceEntry],
        version: str = "1.0",
        build: str = "GRCh37",
    ) -> ReferenceDatabase:
        """Build a database from reference entries.

        Raises:
            ValueError: If an entry has an empty rsID, an unknown
                chromosome, a non-ACGT allele, a MAF outside [0, 1] or
                an invalid sample genotype.
        """
        rows = []
        names = []
        offset = 0
        for entry in entries:
            if not entry.rsid or "\0" in entry.rsid:
                raise ValueError(f"invalid rsID {entry.rsid!r}")
            if not 0.0 <= entry.maf <= 1.0:
                raise ValueError(f"MAF out of range for {entry.rsid}: {entry.maf}")
            if not 0 <= entry.position <= MAX_RECORD_POSITION:
                raise ValueError(f"position out of range for {entry.rsid}: {entry.position}")

            rows.append(
                (
                    offset,
                    encode_chromosome(entry.chromosome),
                    entry.position,
                    encode_ref_alt_flags(entry.ref, entry.alt),
                    round(entry.maf * MAF_SCALE),
                    encode_sample_genotypes(entry.sample_genotypes),
                )
            )
            names.append(entry.rsid)
            offset += len(entry.rsid.encode("utf-8")) + 1

        records = np.array(rows, dtype=RECORD_DTYPE)
        records.setflags(write=False)
        return cls(
            version=version,
            build=build,
            snp_count=len(rows),
            records=records,
            rsid_table="\0".join(names),
        )

    def to_bytes(self) -> bytes:
        """Serialize to the uncompressed binary container.

        Layout (little-endian, u64 length prefixes):
        magic, version, build, snp_count, record count + records,
        rsID table.
        """
        return b"".join(
            [
                MAGIC,
                _pack_str(self.version),
                _pack_str(self.build),
                _U64.pack(self.snp_count),
                _U64.pack(len(self.records)),
                self.records.astype(RECORD_DTYPE, copy=False).tobytes(),
                _pack_str(self.rsid_table),
            ]
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> ReferenceDatabase:
        """Deserialize the uncompressed binary container.

        Raises:
            ReferenceFormatError: If the data is truncated, has a bad
                magic number, inconsistent counts or trailing bytes.
        """
        reader = _Reader(data)
        if reader.take(len(MAGIC)) != MAGIC:
            raise ReferenceFormatError(
                "Not a snpvcf reference database (bad magic number)"
            )

        version = reader.take_str()
        build = reader.take_str()
        snp_count = reader.take_u64()
        n_records = reader.take_u64()
        if n_records != snp_count:
            raise ReferenceFormatError(
                f"Record count {n_records} does not match SNP count {snp_count}"
            )

        raw_records = reader.take(n_records * RECORD_SIZE)
        records = np.frombuffer(raw_records, dtype=RECORD_DTYPE, count=n_records)
        rsid_table = reader.take_str()
        reader.expect_end()

        logger.debug(f"Deserialized reference database {version} ({snp_count:,} SNPs)")
        return cls(
            version=version,
            build=build,
            snp_count=snp_count,
            records=records,
            rsid_table=rsid_table,
        )


def _pack_str(value: str) -> bytes:
    encoded = value.encode("utf-8")
    return _U64.pack(len(encoded)) + encoded


class _Reader:
    """Bounds-checked cursor over the decompressed payload."""

    def __init__(self, data: bytes) -> None:
        self.data = memoryview(data)
        self.offset = 0

    def take(self, size: int) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise ReferenceFormatError(
                f"Reference database is truncated: needed {size} bytes at "
                f"offset {self.offset}, only {len(self.data) - self.offset} left"
            )
        chunk = self.data[self.offset:end].tobytes()
        self.offset = end
        return chunk

    def take_u64(self) -> int:
        return _U64.unpack(self.take(_U64.size))[0]

    def take_str(self) -> str:
        raw = self.take(self.take_u64())
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ReferenceFormatError(f"Invalid UTF-8 string in reference database: {e}") from e

    def expect_end(self) -> None:
        remaining = len(self.data) - self.offset
        if remaining:
            raise ReferenceFormatError(
                f"Reference database has {remaining} unexpected trailing bytes"
            )
