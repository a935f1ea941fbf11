"""Configuration for variant matching.

`MatchOptions` holds the matching parameters and is validated by pydantic.
`Config` describes a full command-line run (input/output files plus options).
"""

from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from variant_matcher.models import A0, A1, CHR, POS, RSID


class MatchOptions(BaseModel):
    """Options controlling how variants are matched."""

    model_config = ConfigDict(frozen=True)

    try_strand_flip: bool = Field(
        default=True,
        description="Try strand-flipped alleles; ambiguous A/T and C/G variants are removed",
    )
    join_by_position: bool = Field(
        default=True,
        description="Join on chromosome and position, otherwise on chromosome and rsid",
    )
    remove_duplicates: bool = Field(
        default=True,
        description="Keep only the first match at each physical position",
    )
    match_min_prop: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Minimum proportion of the smallest table that must be matched",
    )
    include_provenance: bool = Field(
        default=False,
        description="Keep the _FLIP_ and _REV_ columns in the result",
    )
    n_workers: int = Field(
        default=1,
        ge=1,
        description="Worker processes for the per-chromosome join (1 = serial)",
    )

    @property
    def id_column(self) -> str:
        """Second join column: position or rsid."""
        return POS if self.join_by_position else RSID

    @property
    def join_key(self) -> list[str]:
        """Columns both tables are joined on."""
        return [CHR, self.id_column, A0, A1]


@dataclass
class Config:
    """Configuration for a matching run from files.

    Attributes:
        query_file: Summary statistics table (chr, pos/rsid, a0, a1, beta)
        reference_file: Reference variant table (chr, pos, [rsid], a0, a1)
        output_file: Where to write the matched table
        options: Matching options
        report_file: Optional JSON report path
        log_dir: Directory for rotating log files (default: output directory)
        verbose: Show progress messages on the console
    """

    query_file: Path
    reference_file: Path
    output_file: Path
    options: MatchOptions = field(default_factory=MatchOptions)

    report_file: Path | None = None
    log_dir: Path | None = None
    verbose: bool = False

    def __post_init__(self) -> None:
        """Coerce paths and set defaults."""
        if isinstance(self.query_file, str):
            self.query_file = Path(self.query_file)
        if isinstance(self.reference_file, str):
            self.reference_file = Path(self.reference_file)
        if isinstance(self.output_file, str):
            self.output_file = Path(self.output_file)
        if isinstance(self.report_file, str):
            self.report_file = Path(self.report_file)

        if self.log_dir is None:
            self.log_dir = self.output_file.parent
        elif isinstance(self.log_dir, str):
            self.log_dir = Path(self.log_dir)

    @property
    def job_name(self) -> str:
        """Log file prefix from both input file names, e.g. "match_sumstats_vs_info_snp"."""
        query_stem = self.query_file.name.split(".")[0]
        reference_stem = self.reference_file.name.split(".")[0]
        return f"match_{query_stem}_vs_{reference_stem}"

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors.

        Returns:
            List of error messages (empty if valid)
        """
        errors: list[str] = []

        if not self.query_file.exists():
            errors.append(f"Query file not found: {self.query_file}")

        if not self.reference_file.exists():
            errors.append(f"Reference file not found: {self.reference_file}")

        if not self.output_file.parent.exists():
            errors.append(f"Output directory does not exist: {self.output_file.parent}")

        if self.report_file is not None and not self.report_file.parent.exists():
            errors.append(f"Report directory does not exist: {self.report_file.parent}")

        return errors
