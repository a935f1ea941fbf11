"""JSON report writer for matching runs.

Creates a JSON report containing run metadata, options and the counts of
every matching stage for audit and reproducibility.
"""

import json
import tempfile
from datetime import datetime
from pathlib import Path

import pandas as pd

from variant_matcher import __version__
from variant_matcher.config import Config
from variant_matcher.models import CHR, MatchReport
from variant_matcher.utils import chromosome_order


class ReportWriter:
    """Collects run metadata and writes the JSON report.

    Usage:
        writer = ReportWriter(config)
        result = match(...)
        writer.write(config.report_file, result.report, result.table)
    """

    def __init__(self, config: Config) -> None:
        """Initialize report writer.

        Args:
            config: Run configuration
        """
        self.config = config
        self.start_time = datetime.now()

    def build(self, report: MatchReport, table: pd.DataFrame) -> dict:
        """Assemble the JSON-serializable report."""
        end_time = datetime.now()
        duration = (end_time - self.start_time).total_seconds()

        metadata = {
            "version": __version__,
            "tool": "variant-matcher",
            "timestamp": end_time.isoformat(),
            "duration_seconds": duration,
            "input_files": {
                "query_file": str(self.config.query_file),
                "reference_file": str(self.config.reference_file),
            },
            "output_file": str(self.config.output_file),
            "options": self.config.options.model_dump(),
        }

        counts = table[CHR].value_counts(sort=False)
        order = chromosome_order(counts.index.to_series()).to_numpy().argsort(kind="stable")
        per_chromosome = {str(chrom): int(count) for chrom, count in counts.iloc[order].items()}

        return {
            "metadata": metadata,
            "statistics": report.to_dict(),
            "matched_per_chromosome": per_chromosome,
        }

    def write(self, output_path: Path, report: MatchReport, table: pd.DataFrame) -> Path:
        """Write complete JSON report atomically.

        Writes to a temporary file first, then renames to prevent
        partial files on interruption.
        """
        report_dict = self.build(report, table)

        output_path.parent.mkdir(parents=True, exist_ok=True)

        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=output_path.parent,
            suffix=".json.tmp",
            delete=False,
        ) as tmp:
            json.dump(report_dict, tmp, indent=2)
            tmp_path = Path(tmp.name)

        tmp_path.replace(output_path)
        return output_path
