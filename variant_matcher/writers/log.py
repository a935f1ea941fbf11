"""Console summary of a matching run."""

from rich.console import Console
from rich.table import Table

from variant_matcher.models import MatchReport


def print_summary(report: MatchReport, console: Console | None = None) -> None:
    """Print summary statistics to the console.

    Args:
        report: Report collected during matching
        console: Rich console to print to (default: a new stdout console)
    """
    console = console or Console()

    table = Table(title="Matching summary", show_header=False)
    table.add_column("Stage")
    table.add_column("Variants", justify="right")

    table.add_row("Variants to be matched", f"{report.n_query:,}")
    table.add_row("Reference variants", f"{report.n_reference:,}")
    table.add_row("Sharing chr/position", f"{report.n_prefiltered:,}")
    table.add_row("Invalid alleles removed", f"{report.invalid_alleles:,}")
    table.add_row("Ambiguous SNPs removed", f"{report.ambiguous_removed:,}")
    table.add_row("Joined rows", f"{report.n_joined:,}")
    table.add_row("Hypothesis collisions", f"{report.hypothesis_collisions:,}")
    table.add_row("Multi-mapped variants", f"{report.multi_mapped:,}")
    table.add_row("Duplicates removed", f"{report.duplicates_removed:,}")
    table.add_row("Matched", f"{report.n_matched:,}")
    table.add_row("  flipped", f"{report.n_flipped:,}")
    table.add_row("  reversed", f"{report.n_reversed:,}")
    table.add_row("Not matched", f"{report.n_unmatched:,}")
    table.add_row("Match rate", f"{report.match_rate:.1%}")

    console.print(table)
