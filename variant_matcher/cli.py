"""Typer CLI for variant matching.

Usage:
    # Match summary statistics against reference variants by position
    variant-matcher match -q sumstats.tsv -r info_snp.tsv -o matched.tsv

    # Match by rsid, without trying strand flips
    variant-matcher match -q sumstats.tsv -r info_snp.tsv -o matched.tsv --by-rsid --no-strand-flip

    # Convert reference positions from hg18 to hg19
    variant-matcher modify-build -i info_snp.tsv -o info_hg19.tsv --liftover ./liftOver \\
        --chain hg18ToHg19.over.chain.gz --reverse-chain hg19ToHg18.over.chain.gz
"""

from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console

app = typer.Typer(
    name="variant-matcher",
    help="Match variants between summary statistics and reference panels, handling strand flips and reversed alleles",
    add_completion=False,
)

console = Console()


@app.command()
def match(
    query: Annotated[
        Path,
        typer.Option(
            "--query", "-q",
            help="Summary statistics table (chr, pos or rsid, a0, a1, beta)",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    reference: Annotated[
        Path,
        typer.Option(
            "--reference", "-r",
            help="Reference variant table (chr, pos, rsid, a0, a1)",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    output: Annotated[
        Path,
        typer.Option(
            "--output", "-o",
            help="Output table for matched variants (.csv, .tsv, optionally .gz)",
        ),
    ],
    strand_flip: Annotated[
        bool,
        typer.Option(
            "--strand-flip/--no-strand-flip",
            help="Try strand flips (ambiguous A/T and C/G SNPs are removed)",
        ),
    ] = True,
    by_rsid: Annotated[
        bool,
        typer.Option(
            "--by-rsid",
            help="Join on chromosome and rsid instead of chromosome and position",
        ),
    ] = False,
    keep_duplicates: Annotated[
        bool,
        typer.Option(
            "--keep-duplicates",
            help="Keep several matches at the same physical position",
        ),
    ] = False,
    min_prop: Annotated[
        float,
        typer.Option(
            "--min-prop",
            help="Minimum proportion of the smallest table that must be matched (default: 0.2)",
            min=0.0,
            max=1.0,
        ),
    ] = 0.2,
    provenance: Annotated[
        bool,
        typer.Option(
            "--provenance",
            help="Keep the _FLIP_ and _REV_ columns in the output",
        ),
    ] = False,
    workers: Annotated[
        int,
        typer.Option(
            "--workers", "-j",
            help="Worker processes for the per-chromosome join (default: 1)",
            min=1,
        ),
    ] = 1,
    report_file: Annotated[
        Path | None,
        typer.Option(
            "--report-file",
            help="Path for JSON report file",
        ),
    ] = None,
    log_dir: Annotated[
        Path | None,
        typer.Option(
            "--log-dir",
            help="Directory for log files (default: output directory)",
            file_okay=False,
            dir_okay=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose", "-v",
            help="Show progress messages",
        ),
    ] = False,
) -> None:
    """Match summary statistics against reference variants.

    Variants are matched on chromosome, position (or rsid) and alleles,
    trying every combination of strand flip and reversed reference allele.
    Effects ("beta") of reversed variants are multiplied by -1.
    """
    from variant_matcher.config import Config, MatchOptions
    from variant_matcher.logging_config import setup_logging
    from variant_matcher.main import run_match

    try:
        options = MatchOptions(
            try_strand_flip=strand_flip,
            join_by_position=not by_rsid,
            remove_duplicates=not keep_duplicates,
            match_min_prop=min_prop,
            include_provenance=provenance,
            n_workers=workers,
        )
    except ValidationError as e:
        console.print(f"[red]ERROR:[/red] {e}")
        raise typer.Exit(code=1)

    config = Config(
        query_file=query,
        reference_file=reference,
        output_file=output,
        options=options,
        report_file=report_file,
        log_dir=log_dir,
        verbose=verbose,
    )

    errors = config.validate()
    if errors:
        for error in errors:
            console.print(f"[red]ERROR:[/red] {error}")
        raise typer.Exit(code=1)

    log_file = setup_logging(config)
    if verbose:
        console.print(f"Log file: {log_file}\n")

    try:
        run_match(config)
    except Exception as e:
        console.print(f"[red]ERROR:[/red] {e}")
        if verbose:
            import traceback
            console.print(traceback.format_exc())
        raise typer.Exit(code=1)


@app.command("modify-build")
def modify_build(
    input_file: Annotated[
        Path,
        typer.Option(
            "--input", "-i",
            help="Table with columns chr and pos",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    output: Annotated[
        Path,
        typer.Option(
            "--output", "-o",
            help="Output table with positions in the new build",
        ),
    ],
    liftover: Annotated[
        Path,
        typer.Option(
            "--liftover",
            help="Path to the liftOver executable",
            exists=True,
            dir_okay=False,
        ),
    ],
    chain: Annotated[
        Path,
        typer.Option(
            "--chain",
            help="Chain file to the new build (e.g. hg18ToHg19.over.chain.gz)",
            exists=True,
            dir_okay=False,
        ),
    ],
    reverse_chain: Annotated[
        Path | None,
        typer.Option(
            "--reverse-chain",
            help="Chain file back to the original build; discards positions that do not round-trip",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
) -> None:
    """Convert positions to another genome build with liftOver."""
    from variant_matcher.io_utils import read_table, write_table
    from variant_matcher.liftover import modify_build as lift

    try:
        info_snp = read_table(input_file)
        lifted = lift(info_snp, liftover, chain, reverse_chain)
    except (ValueError, RuntimeError, FileNotFoundError) as e:
        console.print(f"[red]ERROR:[/red] {e}")
        raise typer.Exit(code=1)

    write_table(lifted, output)
    n_unmapped = int(lifted["pos"].isna().sum())
    console.print(f"{n_unmapped:,} variants have not been mapped.")
    console.print(f"[green]Wrote {len(lifted):,} variants to {output}[/green]")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
