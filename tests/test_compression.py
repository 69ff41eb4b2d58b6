"""Tests for gzip and BGZF compression."""

from __future__ import annotations

import gzip
from pathlib import Path

import pytest
from Bio import bgzf

from snpvcf.io.compression import (
    GZIP_MAGIC,
    bgzf_compress,
    compress_vcf,
    is_gzip,
    write_bgzf,
)

# Empty BGZF block that terminates every BGZF file
BGZF_EOF = bytes.fromhex("1f8b08040000000000ff0600424302001b0003000000000000000000")

VCF_TEXT = "##fileformat=VCFv4.2\n#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\n1\t100\trs1\tA\tG\t.\tPASS\t.\n"


class TestCompressVcf:
    """Tests for compress_vcf."""

    @pytest.mark.parametrize("method", ["gzip", "bgzf"])
    def test_gzip_magic_and_roundtrip(self, method: str) -> None:
        """Test output starts with 1f 8b and decompresses with gzip."""
        data = compress_vcf(VCF_TEXT, method=method)

        assert data[:2] == GZIP_MAGIC
        assert is_gzip(data)
        assert gzip.decompress(data).decode("utf-8") == VCF_TEXT

    def test_default_is_bgzf(self) -> None:
        """Test the default method writes BGZF blocks."""
        assert compress_vcf(VCF_TEXT) == bgzf_compress(VCF_TEXT)

    def test_bgzf_block_structure(self) -> None:
        """Test the BC extra subfield and the EOF marker block."""
        data = bgzf_compress(VCF_TEXT)

        assert data[12:14] == b"BC"
        assert data.endswith(BGZF_EOF)

    def test_bgzf_empty_text(self) -> None:
        """Test compressing empty text still gives a valid stream."""
        data = bgzf_compress("")

        assert is_gzip(data)
        assert gzip.decompress(data) == b""

    def test_bgzf_large_text_spans_blocks(self) -> None:
        """Test text larger than one BGZF block."""
        text = "1\t100\trs1\tA\tG\t.\tPASS\t.\n" * 10000

        assert gzip.decompress(bgzf_compress(text)).decode("utf-8") == text

    def test_unknown_method(self) -> None:
        """Test that unknown methods are rejected."""
        with pytest.raises(ValueError, match="Unknown compression method"):
            compress_vcf(VCF_TEXT, method="zstd")

    def test_is_gzip(self) -> None:
        """Test gzip magic detection."""
        assert not is_gzip(VCF_TEXT.encode())
        assert not is_gzip(b"")


class TestWriteBgzf:
    """Tests for write_bgzf."""

    def test_readable_by_bgzf_reader(self, tmp_path: Path) -> None:
        """Test the written file reads back through Bio.bgzf."""
        path = write_bgzf(VCF_TEXT, tmp_path / "out.vcf.gz")

        with bgzf.BgzfReader(str(path), "r") as reader:
            assert reader.read(len(VCF_TEXT) + 1) == VCF_TEXT

    def test_matches_in_memory_compression(self, tmp_path: Path) -> None:
        """Test file and in-memory output are identical."""
        path = write_bgzf(VCF_TEXT, tmp_path / "out.vcf.gz")

        assert path.read_bytes() == bgzf_compress(VCF_TEXT)
