"""Compression of VCF text for upload.

Imputation servers expect BGZF (block gzip) files, which are valid gzip
streams made of independently compressed blocks so that tabix indexes
can seek into them. Plain gzip is also offered for other consumers.
"""

from __future__ import annotations

import gzip
import io
from pathlib import Path

from Bio import bgzf

COMPRESSION_METHODS = ("gzip", "bgzf")

GZIP_MAGIC = b"\x1f\x8b"


class _BgzfBuffer(io.BytesIO):
    """In-memory sink that keeps its content after BgzfWriter closes it."""

    payload = b""

    def close(self) -> None:
        self.payload = self.getvalue()
        super().close()


def bgzf_compress(text: str) -> bytes:
    """Compress text into BGZF blocks, EOF marker included."""
    sink = _BgzfBuffer()
    writer = bgzf.BgzfWriter(fileobj=sink, mode="wb")
    writer.write(text.encode("utf-8"))
    writer.close()
    return sink.payload


def compress_vcf(text: str, method: str = "bgzf") -> bytes:
    """Compress VCF text.

    Args:
        text: VCF content.
        method: "gzip" or "bgzf".

    Returns:
        Compressed bytes, starting with the gzip magic 1f 8b.

    Raises:
        ValueError: For an unknown method.
    """
    if method == "gzip":
        return gzip.compress(text.encode("utf-8"))
    if method == "bgzf":
        return bgzf_compress(text)
    raise ValueError(
        f"Unknown compression method {method!r}; expected one of {', '.join(COMPRESSION_METHODS)}"
    )


def write_bgzf(text: str, path: str | Path) -> Path:
    """Write text to a BGZF-compressed file."""
    path = Path(path)
    with bgzf.BgzfWriter(str(path), mode="wb") as writer:
        writer.write(text.encode("utf-8"))
    return path


def is_gzip(data: bytes) -> bool:
    """True if the data starts with the gzip magic bytes."""
    return data[:2] == GZIP_MAGIC
