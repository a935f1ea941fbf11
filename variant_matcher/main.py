"""Main orchestration for a matching run from files.

Coordinates reading both tables, matching, writing the matched table, the
optional JSON report and the console summary.
"""

import logging

from rich.console import Console

from variant_matcher.config import Config
from variant_matcher.io_utils import read_table, write_table
from variant_matcher.matcher import match
from variant_matcher.models import MatchResult
from variant_matcher.writers.log import print_summary
from variant_matcher.writers.report import ReportWriter

logger = logging.getLogger(__name__)

console = Console()


def run_match(config: Config) -> MatchResult:
    """Run the full matching pipeline described by `config`.

    Main entry point that coordinates:
    1. Reading the query and reference tables
    2. Matching variants
    3. Writing the matched table
    4. Writing the JSON report (if configured)

    Args:
        config: Configuration with file paths and options

    Returns:
        MatchResult from the matching step

    Raises:
        FileNotFoundError: If input files don't exist
        MatchError: If matching fails (schema, empty result, threshold)
    """
    report_writer = ReportWriter(config) if config.report_file else None

    console.print(f"Reading {config.query_file.name}")
    query = read_table(config.query_file)
    console.print(f"Loaded {len(query):,} variants to be matched\n")

    console.print(f"Reading {config.reference_file.name}")
    reference = read_table(config.reference_file)
    console.print(f"Loaded {len(reference):,} reference variants\n")

    with console.status("Matching variants..."):
        result = match(query, reference, config.options)

    write_table(result.table, config.output_file)
    logger.info(f"Wrote {len(result.table):,} matched variants to {config.output_file}")

    if report_writer and config.report_file:
        report_writer.write(config.report_file, result.report, result.table)

    print_summary(result.report, console)

    console.print("\n[bold]Output files generated:[/bold]")
    console.print(f"  Matched variants:   {config.output_file}")
    if config.report_file:
        console.print(f"  Report file:        {config.report_file}")

    return result
