"""I/O utilities for delimited variant tables.

Tables may be tab-, comma- or whitespace-delimited and optionally gzipped;
compression is detected from magic bytes rather than trusted from the
extension.

Example:
    sumstats = read_table(Path("sumstats.tsv.gz"))
"""

from pathlib import Path

import pandas as pd

# Gzip magic bytes (first two bytes of gzip file)
GZIP_MAGIC = b"\x1f\x8b"


def is_gzipped(filepath: Path) -> bool:
    """Detect if a file is gzip-compressed.

    Checks magic bytes first (reliable), falls back to extension if file
    is too small or unreadable.

    Example:
        >>> is_gzipped(Path("data.tab.gz"))
        True
    """
    try:
        with open(filepath, "rb") as f:
            magic = f.read(2)
            if len(magic) >= 2:
                return magic == GZIP_MAGIC
    except OSError:
        pass

    return filepath.suffix == ".gz"


def _separator(filepath: Path) -> str:
    suffixes = [s for s in filepath.suffixes if s != ".gz"]
    if suffixes and suffixes[-1] == ".csv":
        return ","
    if suffixes and suffixes[-1] in (".tsv", ".tab", ".txt"):
        return "\t"
    return r"\s+"


def read_table(filepath: Path, sep: str | None = None) -> pd.DataFrame:
    """Read a delimited table with a header line.

    Args:
        filepath: Path to file (may be gzipped)
        sep: Column separator (default: from the extension; .csv is
            comma-separated, .tsv/.tab/.txt tab-separated, anything else
            whitespace-separated)

    Returns:
        DataFrame with chromosome and allele columns read as strings
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"Table not found: {filepath}")

    return pd.read_csv(
        filepath,
        sep=sep or _separator(filepath),
        compression="gzip" if is_gzipped(filepath) else None,
        dtype={"chr": str, "a0": str, "a1": str, "rsid": str},
    )


def write_table(table: pd.DataFrame, filepath: Path) -> Path:
    """Write a table, tab-separated unless the extension is .csv.

    Output is gzipped when the file name ends in .gz.
    """
    filepath = Path(filepath)
    sep = "," if _separator(filepath) == "," else "\t"
    table.to_csv(
        filepath,
        sep=sep,
        index=False,
        compression="gzip" if filepath.suffix == ".gz" else None,
    )
    return filepath
