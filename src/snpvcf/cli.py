"""Command-line interface for snpvcf.

This module defines the Click-based CLI for the snpvcf package,
providing commands for summarizing 23andMe genome exports and
converting them to VCF.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import NoReturn

import click
from rich.console import Console
from rich.table import Table

from snpvcf import __version__
from snpvcf.core.analysis import GenomeAnalyzer, chromosome_stats, lookup_trait_snps
from snpvcf.core.models import GenomeData
from snpvcf.io.compression import is_gzip
from snpvcf.io.vcf import VcfGenerator
from snpvcf.io.writers import write_batch_vcfs, write_summary, write_vcf
from snpvcf.reference.builder import build_reference_file
from snpvcf.reference.loader import load_reference
from snpvcf.utils.errors import SnpVcfError, format_no_variants_error
from snpvcf.utils.logging import (
    log_step,
    print_file_created,
    print_info,
    print_stats,
    print_success,
    print_warning,
    setup_logging,
)
from snpvcf.utils.sorting import sort_chromosomes
from snpvcf.utils.validation import sanitize_sample_name, validate_chromosome, validate_vcf

console = Console(stderr=True)

# Context settings for all commands
CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

REFERENCE_ENVVAR = "SNPVCF_REFERENCE"

genome_argument = click.argument(
    "genome",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    metavar="GENOME",
)


def _fail(error: SnpVcfError, ctx: click.Context) -> NoReturn:
    error.display()
    if ctx.obj.get("verbose"):
        console.print_exception()
    raise SystemExit(1) from error


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(version=__version__, prog_name="snpvcf")
@click.option(
    "--verbose", "-v", is_flag=True, default=False, help="Enable verbose output"
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """snpvcf: convert 23andMe genome exports to VCF.

    Parse raw genome data, report QC statistics and write VCF v4.2
    files ready for imputation servers.

    \b
    Quick start:
        snpvcf summary genome.txt
        snpvcf vcf genome.txt -r reference.bin.br -o genome.vcf.gz

    \b
    Common workflows:
        snpvcf lookup genome.txt rs53576           # Show SNP genotypes
        snpvcf batch genome.txt -r ref.br -o out   # Per-chromosome upload files
        snpvcf reference-stats ref.br              # Inspect a reference database

    The reference database location can also be set with the
    SNPVCF_REFERENCE environment variable.
    """
    import logging

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.INFO
    setup_logging(level=level)


@cli.command()
@genome_argument
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the summary as JSON.")
@click.option(
    "--out",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    metavar="FILE",
    help="Also write the text report to FILE.",
)
@click.pass_context
def summary(ctx: click.Context, genome: Path, as_json: bool, out: Path | None) -> None:
    """Summarize a genome file.

    Reports the SNP count, heterozygosity rate, transition/transversion
    ratio, allele composition and SNPs per chromosome.

    \b
    Example:
        snpvcf summary genome_John_Doe_v5_Full.txt
    """
    try:
        data = GenomeData.from_file(genome)
        report = GenomeAnalyzer(data).generate_summary()

        if as_json:
            click.echo(json.dumps(report.to_dict(), indent=2))
        else:
            click.echo(report.to_text(), nl=False)

        if data.warnings:
            print_warning(f"{len(data.warnings):,} malformed line(s) were skipped")

        if out is not None:
            write_summary(report, out)
            print_file_created(out)

    except SnpVcfError as e:
        _fail(e, ctx)


@cli.command()
@genome_argument
@click.argument("rsids", nargs=-1, required=True, metavar="RSID...")
@click.pass_context
def lookup(ctx: click.Context, genome: Path, rsids: tuple[str, ...]) -> None:
    """Show the genotype of one or more SNPs.

    \b
    Example:
        snpvcf lookup genome.txt rs53576 rs1815739
    """
    try:
        data = GenomeData.from_file(genome)
    except SnpVcfError as e:
        _fail(e, ctx)

    found = lookup_trait_snps(data, rsids)

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("rsID")
    table.add_column("Chromosome")
    table.add_column("Position", justify="right")
    table.add_column("Genotype")
    table.add_column("Zygosity")

    for snp in found:
        if snp.is_heterozygous:
            zygosity = "heterozygous"
        elif snp.is_homozygous:
            zygosity = "homozygous"
        else:
            zygosity = "-"
        table.add_row(snp.rsid, snp.chromosome, f"{snp.position:,}", snp.genotype, zygosity)

    console.print(table)

    missing = [rsid for rsid in rsids if rsid not in {snp.rsid for snp in found}]
    if missing:
        print_warning(f"Not found: {', '.join(missing)}")
    if not found:
        raise SystemExit(1)


@cli.command("chrom-stats")
@genome_argument
@click.argument("chromosome", metavar="CHR")
@click.pass_context
def chrom_stats(ctx: click.Context, genome: Path, chromosome: str) -> None:
    """Show heterozygosity statistics for one chromosome.

    \b
    Example:
        snpvcf chrom-stats genome.txt X
    """
    try:
        chromosome = validate_chromosome(chromosome)
        data = GenomeData.from_file(genome)
    except SnpVcfError as e:
        _fail(e, ctx)

    stats = chromosome_stats(data, chromosome)
    print_stats(
        {
            "Total SNPs": stats["total_snps"],
            "Heterozygous": stats["heterozygous_count"],
            "Heterozygosity rate": stats["heterozygosity_rate"],
        },
        title=f"Chromosome {chromosome}",
    )


@cli.command()
@genome_argument
@click.option(
    "--reference",
    "-r",
    envvar=REFERENCE_ENVVAR,
    metavar="PATH_OR_URL",
    help="Brotli-compressed reference database. Without it REF/ALT are inferred "
    "from the genotypes and the VCF is not suitable for imputation.",
)
@click.option(
    "--chromosome",
    "-c",
    metavar="CHR",
    help="Only output this chromosome (1-22, X, Y, MT).",
)
@click.option(
    "--out",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    metavar="FILE",
    help="Output file. Defaults to standard output.",
)
@click.option(
    "--compression",
    type=click.Choice(["none", "gzip", "bgzf"]),
    default=None,
    help="Output compression. Defaults to BGZF for .gz files, none otherwise.",
)
@click.pass_context
def vcf(
    ctx: click.Context,
    genome: Path,
    reference: str | None,
    chromosome: str | None,
    out: Path | None,
    compression: str | None,
) -> None:
    """Convert a genome file to VCF.

    \b
    Examples:
      Imputation-ready VCF for chromosome 20:
        snpvcf vcf genome.txt -r reference.bin.br -c 20 -o chr20.vcf.gz

      Quick inspection without a reference:
        snpvcf vcf genome.txt -c MT
    """
    try:
        if chromosome is not None:
            chromosome = validate_chromosome(chromosome)

        data = GenomeData.from_file(genome)
        context = load_reference(reference) if reference else None
        if context is None:
            print_warning("No reference database given: REF/ALT will be inferred from genotypes")

        generator = VcfGenerator(data, reference=context)
        content = generator.generate_vcf(chromosome)

        if generator.stats.written == 0:
            raise SnpVcfError(format_no_variants_error(context is not None))

        if out is None:
            click.echo(content, nl=False)
        else:
            write_vcf(content, out, compression=compression)
            print_stats(generator.stats.to_dict(), title="VCF Generation")
            print_file_created(out)

    except SnpVcfError as e:
        _fail(e, ctx)


@cli.command()
@genome_argument
@click.option(
    "--reference",
    "-r",
    required=True,
    envvar=REFERENCE_ENVVAR,
    metavar="PATH_OR_URL",
    help="Brotli-compressed reference database.",
)
@click.option(
    "--out",
    "-o",
    required=True,
    type=click.Path(file_okay=False, path_type=Path),
    metavar="DIR",
    help="Output directory for the per-chromosome files.",
)
@click.option(
    "--sample-name",
    default="mygenome",
    show_default=True,
    help="Sample name used in the output file names.",
)
@click.pass_context
def batch(
    ctx: click.Context,
    genome: Path,
    reference: str,
    out: Path,
    sample_name: str,
) -> None:
    """Write one BGZF VCF per autosome for imputation upload.

    Files are named B.{SAMPLE}_merged_6samples_chr{N}.vcf.gz and carry
    five anonymized reference samples plus your genome. Chromosomes X,
    Y and MT are not written, nor are chromosomes with no matching SNPs.

    \b
    Example:
        snpvcf batch genome.txt -r reference.bin.br -o upload --sample-name alice
    """
    try:
        log_step(1, 3, "Loading genome data")
        data = GenomeData.from_file(genome)

        log_step(2, 3, "Loading reference database")
        context = load_reference(reference)

        log_step(3, 3, "Generating per-chromosome VCFs")
        generator = VcfGenerator(data, reference=context)
        vcfs = generator.generate_batch_vcf()

        if not vcfs:
            raise SnpVcfError(format_no_variants_error(True))

        paths = write_batch_vcfs(vcfs, out, sample_name)

        print_stats(generator.stats.to_dict(), title="VCF Generation")
        for path in paths:
            print_file_created(path)
        print_success(
            f"Wrote {len(paths)} file(s) for sample {sanitize_sample_name(sample_name)}"
        )

    except SnpVcfError as e:
        _fail(e, ctx)


@cli.command("reference-stats")
@click.argument("reference", metavar="PATH_OR_URL")
@click.pass_context
def reference_stats(ctx: click.Context, reference: str) -> None:
    """Show version, build and size of a reference database."""
    try:
        context = load_reference(reference)
    except SnpVcfError as e:
        _fail(e, ctx)

    stats = context.database.stats()
    print_stats(
        {
            "Version": stats.version,
            "Build": stats.build,
            "SNPs": stats.snp_count,
            "Size (bytes)": stats.total_size,
        },
        title="Reference Database",
    )


@cli.command("reference-lookup")
@click.argument("reference", metavar="PATH_OR_URL")
@click.argument("rsids", nargs=-1, required=True, metavar="RSID...")
@click.pass_context
def reference_lookup(ctx: click.Context, reference: str, rsids: tuple[str, ...]) -> None:
    """Show reference alleles and MAF for one or more rsIDs."""
    try:
        context = load_reference(reference)
    except SnpVcfError as e:
        _fail(e, ctx)

    table = Table(show_header=True, header_style="bold cyan")
    for column in ("rsID", "Chrom", "Position", "REF", "ALT", "MAF", "Samples"):
        table.add_column(column)

    missing = []
    for rsid in rsids:
        info = context.lookup(rsid) if rsid in context else None
        if info is None:
            missing.append(rsid)
            continue
        table.add_row(
            rsid,
            info.chromosome,
            f"{info.position:,}",
            info.ref_allele,
            info.alt_allele,
            f"{info.maf:.4f}",
            " ".join(info.sample_genotypes),
        )

    console.print(table)
    if missing:
        print_warning(f"Not in reference database: {', '.join(missing)}")


@cli.command("build-reference")
@click.argument(
    "table",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    metavar="TSV",
)
@click.option(
    "--out",
    "-o",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    metavar="FILE",
    help="Output path of the Brotli-compressed database.",
)
@click.option(
    "--version",
    "db_version",
    default="1.0",
    show_default=True,
    help="Database version string.",
)
@click.option("--build", default="GRCh37", show_default=True, help="Reference genome build.")
@click.pass_context
def build_reference(
    ctx: click.Context,
    table: Path,
    out: Path,
    db_version: str,
    build: str,
) -> None:
    """Build a reference database from a TSV annotation table.

    The table needs the columns rsid, chrom, pos, ref, alt and maf, and
    optionally samp1..samp5 with genotypes such as 0/1 or ./.
    """
    try:
        stats = build_reference_file(table, out, version=db_version, build=build)
    except SnpVcfError as e:
        _fail(e, ctx)

    print_stats({"SNPs": stats.snp_count, "Size (bytes)": stats.total_size}, title="Reference Database")
    print_file_created(out)


@cli.command()
@click.argument(
    "vcf_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    metavar="VCF",
)
@click.pass_context
def check(ctx: click.Context, vcf_file: Path) -> None:
    """Check that a written VCF can be read by htslib.

    \b
    Example:
        snpvcf check upload/B.alice_merged_6samples_chr1.vcf.gz
    """
    try:
        result = validate_vcf(vcf_file)
    except SnpVcfError as e:
        _fail(e, ctx)

    with vcf_file.open("rb") as f:
        compressed = is_gzip(f.read(2))

    print_stats(
        {
            "Compressed": "yes" if compressed else "no",
            "Samples": len(result["samples"]),
            "Contigs": ", ".join(sort_chromosomes(result["contigs"])),
            "Records": result["n_records"],
        },
        title=vcf_file.name,
    )
    print_info(f"Sample columns: {', '.join(result['samples'])}")


def main() -> None:
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
