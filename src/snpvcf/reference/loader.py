"""Loading the Brotli-compressed reference database.

The database is shipped as a single Brotli-compressed blob, either on
disk or behind an HTTP(S) URL. Loading is all-or-nothing: fetch,
decompress and deserialize either all succeed and return a
ReferenceContext, or a single ReferenceLoadError is raised.

The context is owned by the caller and passed explicitly to the VCF
generator; there is no module-level cache.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import brotli
import requests

from snpvcf.reference.database import ReferenceDatabase, SnpReference
from snpvcf.utils.errors import (
    ReferenceDecompressionError,
    ReferenceFetchError,
    ReferenceFormatError,
    format_file_not_found,
)
from snpvcf.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 60

BROTLI_QUALITY = 11


@dataclass(frozen=True, eq=False)
class ReferenceContext:
    """A loaded reference database together with its rsID index.

    Attributes:
        database: The deserialized reference database.
        index: rsID to record position, from database.build_index().
    """

    database: ReferenceDatabase
    index: dict[str, int] = field(repr=False)

    @classmethod
    def from_database(cls, database: ReferenceDatabase) -> ReferenceContext:
        """Build the rsID index for a database and wrap both."""
        return cls(database=database, index=database.build_index())

    def lookup(self, rsid: str) -> SnpReference | None:
        """Look up reference information for an rsID."""
        return self.database.lookup(rsid, self.index)

    def __contains__(self, rsid: object) -> bool:
        return rsid in self.index


def _is_url(source: str | Path) -> bool:
    return isinstance(source, str) and source.startswith(("http://", "https://"))


def fetch_reference_bytes(source: str | Path, timeout: float = DEFAULT_TIMEOUT) -> bytes:
    """Fetch the compressed reference payload.

    Args:
        source: Local path or http(s) URL.
        timeout: HTTP timeout in seconds.

    Returns:
        The compressed bytes.

    Raises:
        ReferenceFetchError: If the file cannot be read or the request fails.
    """
    if _is_url(source):
        logger.info(f"Downloading reference database from {source}")
        try:
            response = requests.get(source, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ReferenceFetchError(
                f"Failed to download reference database from {source}: {e}",
                suggestion="Check the URL and your network connection.",
            ) from e
        return response.content

    path = Path(source)
    if not path.exists():
        raise ReferenceFetchError(format_file_not_found(path, "Reference database"))

    logger.info(f"Reading reference database from {path}")
    try:
        return path.read_bytes()
    except OSError as e:
        raise ReferenceFetchError(f"Failed to read reference database {path}: {e}") from e


def decompress_reference(payload: bytes) -> bytes:
    """Decompress a Brotli payload.

    Raises:
        ReferenceDecompressionError: If the payload is not valid Brotli data.
    """
    try:
        return brotli.decompress(payload)
    except brotli.error as e:
        raise ReferenceDecompressionError(
            f"Failed to decompress reference database: {e}",
            suggestion="The file may be truncated or not Brotli-compressed.",
        ) from e


def compress_reference(database: ReferenceDatabase, quality: int = BROTLI_QUALITY) -> bytes:
    """Serialize and Brotli-compress a database for distribution."""
    return brotli.compress(database.to_bytes(), quality=quality)


def load_reference_database(
    source: str | Path,
    timeout: float = DEFAULT_TIMEOUT,
) -> ReferenceDatabase:
    """Fetch, decompress and deserialize a reference database.

    Args:
        source: Local path or http(s) URL of the compressed database.
        timeout: HTTP timeout in seconds.

    Returns:
        The loaded database.

    Raises:
        ReferenceLoadError: On any fetch, decompression or format failure.
    """
    payload = fetch_reference_bytes(source, timeout=timeout)
    raw = decompress_reference(payload)
    try:
        database = ReferenceDatabase.from_bytes(raw)
    except ReferenceFormatError as e:
        raise ReferenceFormatError(
            f"Failed to deserialize reference database {source}: {e.message}",
            suggestion="Rebuild the database with 'snpvcf build-reference'.",
        ) from e

    logger.info(
        f"Loaded reference database {database.version} "
        f"({database.build}, {database.snp_count:,} SNPs)"
    )
    return database


def load_reference(source: str | Path, timeout: float = DEFAULT_TIMEOUT) -> ReferenceContext:
    """Load a reference database and build its index.

    Raises:
        ReferenceLoadError: On any fetch, decompression or format failure.
    """
    return ReferenceContext.from_database(load_reference_database(source, timeout=timeout))
