"""Building reference databases from TSV annotation tables.

The input table has a header row and one SNP per line:

    rsid  chrom  pos  ref  alt  maf  samp1  samp2  samp3  samp4  samp5

The sample columns are optional; absent samples are stored as missing.
"""

from __future__ import annotations

from pathlib import Path

from snpvcf.reference.database import (
    MISSING_GENOTYPE,
    N_REFERENCE_SAMPLES,
    DatabaseStats,
    ReferenceDatabase,
    ReferenceEntry,
)
from snpvcf.reference.loader import compress_reference
from snpvcf.utils.errors import OutputError, ValidationError, format_output_error
from snpvcf.utils.logging import get_logger

logger = get_logger(__name__)

REQUIRED_COLUMNS = ("rsid", "chrom", "pos", "ref", "alt", "maf")

SAMPLE_COLUMNS = tuple(f"samp{i}" for i in range(1, N_REFERENCE_SAMPLES + 1))


def read_reference_tsv(path: str | Path) -> list[ReferenceEntry]:
    """Read reference entries from a TSV file.

    Invalid lines are skipped with a warning.

    Args:
        path: Path to the annotation table.

    Returns:
        List of ReferenceEntry objects in file order.

    Raises:
        ValidationError: If the file is missing or lacks required columns.
    """
    path = Path(path)
    logger.info(f"Reading reference annotations from {path}")

    if not path.exists():
        raise ValidationError(f"Reference table not found: {path}")

    entries = []

    with open(path, encoding="utf-8") as f:
        header = f.readline().strip().split("\t")

        missing = [col for col in REQUIRED_COLUMNS if col not in header]
        if missing:
            raise ValidationError(
                f"Missing required columns in {path.name}: {', '.join(missing)}",
                suggestion="Expected tab-separated columns: "
                + ", ".join(REQUIRED_COLUMNS + SAMPLE_COLUMNS),
            )

        col_idx = {col: i for i, col in enumerate(header)}

        for line_num, line in enumerate(f, start=2):
            line = line.strip()
            if not line:
                continue

            fields = line.split("\t")

            try:
                samples = tuple(
                    fields[col_idx[col]] if col in col_idx else MISSING_GENOTYPE
                    for col in SAMPLE_COLUMNS
                )
                entries.append(
                    ReferenceEntry(
                        rsid=fields[col_idx["rsid"]],
                        chromosome=fields[col_idx["chrom"]],
                        position=int(fields[col_idx["pos"]]),
                        ref=fields[col_idx["ref"]],
                        alt=fields[col_idx["alt"]],
                        maf=float(fields[col_idx["maf"]]),
                        sample_genotypes=samples,
                    )
                )
            except (IndexError, ValueError) as e:
                logger.warning(f"Skipping invalid line {line_num}: {e}")
                continue

    logger.info(f"Read {len(entries):,} reference entries from {path}")
    return entries


def build_reference_file(
    tsv_path: str | Path,
    output_path: str | Path,
    version: str = "1.0",
    build: str = "GRCh37",
) -> DatabaseStats:
    """Build a Brotli-compressed reference database from a TSV table.

    Entries that cannot be encoded (unknown chromosome, non-ACGT allele,
    bad genotype) are skipped with a warning.

    Args:
        tsv_path: Annotation table.
        output_path: Destination of the compressed database.
        version: Version string stored in the database.
        build: Genome build stored in the database.

    Returns:
        Statistics of the written database.

    Raises:
        ValidationError: If the table cannot be read.
        OutputError: If the database cannot be written.
    """
    encodable = []
    seen: set[str] = set()
    for entry in read_reference_tsv(tsv_path):
        if entry.rsid in seen:
            logger.warning(f"Skipping duplicate rsID {entry.rsid}")
            continue
        try:
            ReferenceDatabase.from_entries([entry])
        except ValueError as e:
            logger.warning(f"Skipping {entry.rsid}: {e}")
            continue
        seen.add(entry.rsid)
        encodable.append(entry)

    database = ReferenceDatabase.from_entries(encodable, version=version, build=build)

    output_path = Path(output_path)
    try:
        output_path.write_bytes(compress_reference(database))
    except OSError as e:
        raise OutputError(format_output_error(output_path, str(e))) from e

    logger.info(f"Wrote reference database with {database.snp_count:,} SNPs to {output_path}")
    return database.stats()
