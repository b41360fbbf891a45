"""Command-line interface for exonmap.

Commands:
    info: Show exons, introns, coding region and UTRs of a transcript
    convert: Convert positions between genomic, cDNA and CDS coordinates
    seq: Write transcript sequences (cDNA, CDS, UTRs, protein) as FASTA

Example:
    $ exonmap info -g genes.gff3 -t mRNA1
    $ exonmap convert -g genes.gff3 -t mRNA1 --from genomic --to cds 1050 1200
    $ exonmap seq -g genes.gff3 -t mRNA1 --genome genome.fa --kind protein
"""

from __future__ import annotations

from functools import partial
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from exonmap import __version__
from exonmap.config import Config
from exonmap.core.mapper import CDNA, CDS, GENOMIC
from exonmap.core.models import strand_symbol
from exonmap.core.transcript import Transcript
from exonmap.errors import ConfigurationError, ExonMapError
from exonmap.io.fasta import GenomeAccessor
from exonmap.io.gff import GFF3TranscriptReader
from exonmap.utils.logging import get_logger, setup_logging
from exonmap.utils.sequences import translate

console = Console()
err_console = Console(stderr=True)

logger = get_logger(__name__)

FASTA_LINE_WIDTH = 60

SEQUENCE_KINDS = {
    "cdna": Transcript.seq,
    "cds": Transcript.cds_seq,
    "utr5": Transcript.five_prime_utr_seq,
    "utr3": Transcript.three_prime_utr_seq,
    "protein": Transcript.protein_seq,
}


def _fail(message: str) -> None:
    err_console.print(f"[red]Error:[/red] {message}")
    raise SystemExit(1)


def _load_transcript(
    ctx: click.Context,
    gff: Path,
    transcript_id: str,
    genome: GenomeAccessor | None = None,
) -> Transcript:
    """Load one transcript from a GFF3 file, exiting on failure."""
    config: Config = ctx.obj["config"]
    reader = GFF3TranscriptReader(
        gff,
        fetch_sequence=genome.fetch_sequence if genome is not None else None,
        translator=partial(
            translate, table=config.sequence.genetic_code, to_stop=config.sequence.to_stop
        ),
        strict=config.mapping.strict_rank_order,
    )
    try:
        transcript = reader.get_transcript(transcript_id)
    except ExonMapError as e:
        _fail(f"Could not load {gff.name}: {e}")
    if transcript is None:
        _fail(f"Transcript '{transcript_id}' not found in {gff.name}")
    return transcript


@click.group()
@click.version_option(version=__version__, prog_name="exonmap")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug output.")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-error output.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML configuration file.",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, quiet: bool, config_path: Path | None) -> None:
    """exonmap: transcript coordinate mapping between genome, cDNA and CDS."""
    try:
        config = Config.load(config_path)
    except ConfigurationError as e:
        _fail(str(e))

    verbosity = config.logging.verbosity
    if verbose:
        verbosity = 2
    elif quiet:
        verbosity = 0
    setup_logging(verbosity=verbosity, log_file=config.logging.log_file)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["quiet"] = quiet


gff_option = click.option(
    "--gff",
    "-g",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="GFF3 annotation file.",
)
transcript_option = click.option(
    "--transcript", "-t", "transcript_id", required=True, help="Transcript ID."
)


# =============================================================================
# info command
# =============================================================================


@main.command()
@gff_option
@transcript_option
@click.pass_context
def info(ctx: click.Context, gff: Path, transcript_id: str) -> None:
    """Show the structure of a transcript."""
    tx = _load_transcript(ctx, gff, transcript_id)

    console.print(f"[bold]{tx.id}[/bold] {tx.seq_region}:{tx.seq_region_start}-{tx.seq_region_end} "
                  f"({strand_symbol(tx.strand)})")
    console.print(f"  cDNA length: {tx.cdna_length:,} nt")

    exon_table = Table(title="Exons")
    for column in ("Rank", "ID", "Start", "End", "Length", "cDNA start", "cDNA end"):
        exon_table.add_column(column, justify="right" if column != "ID" else "left")
    for exon in tx.exons:
        first = exon.end if tx.strand == -1 else exon.start
        last = exon.start if tx.strand == -1 else exon.end
        exon_table.add_row(
            str(tx.rank_of(exon)),
            exon.id,
            str(exon.start),
            str(exon.end),
            str(exon.length),
            str(tx.genomic_to_cdna(first)),
            str(tx.genomic_to_cdna(last)),
        )
    console.print(exon_table)

    try:
        introns = list(tx.introns())
    except ExonMapError as e:
        _fail(str(e))
    if introns:
        intron_table = Table(title="Introns")
        for column in ("Previous exon", "Next exon", "Start", "End", "Length"):
            intron_table.add_column(column)
        for intron in introns:
            intron_table.add_row(
                intron.previous_exon.id,
                intron.next_exon.id,
                str(intron.seq_region_start),
                str(intron.seq_region_end),
                str(intron.length),
            )
        console.print(intron_table)

    if not tx.is_coding:
        console.print("[dim]Non-coding transcript[/dim]")
        return

    console.print("[bold]Coding region:[/bold]")
    console.print(f"  cDNA:    {tx.coding_region_cdna_start}-{tx.coding_region_cdna_end}")
    console.print(f"  Genomic: {tx.coding_region_genomic_start}-{tx.coding_region_genomic_end}")
    console.print(f"  Length:  {tx.cds_length:,} nt")
    console.print(f"  5' UTR:  {tx.five_prime_utr_range() or '-'}")
    console.print(f"  3' UTR:  {tx.three_prime_utr_range() or '-'}")


# =============================================================================
# convert command
# =============================================================================


@main.command()
@gff_option
@transcript_option
@click.option(
    "--from",
    "source",
    type=click.Choice([GENOMIC, CDNA, CDS]),
    required=True,
    help="Coordinate system of the input positions.",
)
@click.option(
    "--to",
    "target",
    type=click.Choice([GENOMIC, CDNA, CDS]),
    required=True,
    help="Coordinate system to convert to.",
)
@click.argument("positions", type=int, nargs=-1, required=True)
@click.pass_context
def convert(
    ctx: click.Context,
    gff: Path,
    transcript_id: str,
    source: str,
    target: str,
    positions: tuple[int, ...],
) -> None:
    """Convert POSITIONS between coordinate systems.

    Prints one tab-separated line per position. Positions that cannot be
    converted print NA with the reason, and the exit status is 1.
    """
    tx = _load_transcript(ctx, gff, transcript_id)

    failed = 0
    for position in positions:
        try:
            result = tx.mapper.convert(position, source, target)
        except ExonMapError as e:
            failed += 1
            logger.debug(f"{source} {position} -> {target} failed: {e}")
            click.echo(f"{position}\tNA\t{e}")
        else:
            click.echo(f"{position}\t{result}")

    if failed:
        logger.warning(f"{failed} of {len(positions)} positions could not be converted")
        raise SystemExit(1)


# =============================================================================
# seq command
# =============================================================================


@main.command()
@gff_option
@transcript_option
@click.option(
    "--genome",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Reference genome FASTA file (indexed on first use).",
)
@click.option(
    "--kind",
    type=click.Choice(list(SEQUENCE_KINDS)),
    default="cdna",
    show_default=True,
    help="Which sequence to write.",
)
@click.pass_context
def seq(ctx: click.Context, gff: Path, transcript_id: str, genome: Path, kind: str) -> None:
    """Write a transcript sequence as FASTA."""
    with GenomeAccessor(genome) as accessor:
        tx = _load_transcript(ctx, gff, transcript_id, accessor)
        if tx.seq_region is not None and tx.seq_region.name not in accessor:
            _fail(f"Sequence '{tx.seq_region}' of {tx.id} is not in {genome.name}")
        try:
            sequence = SEQUENCE_KINDS[kind](tx)
        except (ExonMapError, KeyError, ValueError) as e:
            _fail(str(e))

    if sequence is None:
        _fail(f"Transcript '{transcript_id}' is non-coding, no {kind} sequence")

    click.echo(f">{tx.id} {kind}")
    for i in range(0, len(sequence), FASTA_LINE_WIDTH):
        click.echo(sequence[i : i + FASTA_LINE_WIDTH])


if __name__ == "__main__":
    main()
