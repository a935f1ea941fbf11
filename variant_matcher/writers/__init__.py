"""Output writers for JSON reports and console summaries."""

from variant_matcher.writers.log import print_summary
from variant_matcher.writers.report import ReportWriter

__all__ = ["ReportWriter", "print_summary"]
