"""Genome build conversion with the UCSC liftOver executable.

Positions are written to a temporary BED file, converted with liftOver and
read back. Lifted positions are discarded when:
- the same input variant was lifted to several places
- the variant landed on a different chromosome
- (with a reverse chain) lifting back does not give the original position

Chain files must be available locally, e.g. hg18ToHg19.over.chain.gz from
the UCSC goldenPath downloads.
"""

import logging
import os
import stat
import subprocess
import tempfile
from pathlib import Path

import numpy as np
import pandas as pd

from variant_matcher.models import CHR, POS

logger = logging.getLogger(__name__)


def make_executable(path: Path) -> None:
    """Add execute permission for the owner if missing."""
    mode = path.stat().st_mode
    if not mode & stat.S_IXUSR:
        os.chmod(path, mode | stat.S_IXUSR)


def _ucsc_chrom(chrom: pd.Series) -> pd.Series:
    # "01" -> "chr1", "X" -> "chrX"
    return "chr" + chrom.astype(str).str.replace(r"^0", "", regex=True)


def _run_liftover(liftover: Path, bed: Path, chain: Path, work_dir: Path) -> pd.DataFrame:
    """Run liftOver on a BED file and return the lifted records."""
    lifted = work_dir / "lifted.BED"
    unmapped = work_dir / "unmapped.txt"

    # usage: liftOver oldFile map.chain newFile unMapped
    cmd = [str(liftover), str(bed), str(chain), str(lifted), str(unmapped)]
    logger.debug(f"Running: {' '.join(cmd)}")

    try:
        subprocess.run(cmd, capture_output=True, text=True, check=True)
    except subprocess.CalledProcessError as e:
        raise RuntimeError(f"liftOver failed with exit code {e.returncode}:\n{e.stderr}")
    except FileNotFoundError:
        raise RuntimeError(f"liftOver executable not found: {liftover}")

    if not lifted.exists() or lifted.stat().st_size == 0:
        return pd.DataFrame({
            "chrom": pd.Series(dtype=str),
            "start": pd.Series(dtype=np.int64),
            "end": pd.Series(dtype=np.int64),
            "id": pd.Series(dtype=np.int64),
        })

    return pd.read_csv(
        lifted,
        sep=r"\s+",
        header=None,
        usecols=[0, 1, 2, 3],
        names=["chrom", "start", "end", "id"],
        dtype={"chrom": str, "start": np.int64, "end": np.int64, "id": np.int64},
    )


def _lift_positions(
    chrom: pd.Series,
    pos: pd.Series,
    liftover: Path,
    chain: Path,
) -> pd.Series:
    """Lift positions with one chain file; unmapped positions are <NA>."""
    bed = pd.DataFrame({
        "chrom": _ucsc_chrom(chrom),
        "start": pos - 1,
        "end": pos,
        "id": np.arange(len(pos)),
    }).dropna()
    bed = bed.astype({"start": np.int64, "end": np.int64})

    with tempfile.TemporaryDirectory() as tmp:
        work_dir = Path(tmp)
        bed_file = work_dir / "positions.BED"
        bed.to_csv(bed_file, sep=" ", header=False, index=False)
        lifted = _run_liftover(liftover, bed_file, chain, work_dir)

    expected_chrom = bed.set_index("id")["chrom"]
    is_bad = lifted["id"].duplicated(keep=False) | (
        lifted["chrom"].to_numpy() != expected_chrom.reindex(lifted["id"]).to_numpy()
    )
    lifted = lifted[~is_bad.to_numpy()]

    new_pos = pd.Series(pd.NA, index=range(len(pos)), dtype="Int64")
    new_pos.iloc[lifted["id"].to_numpy()] = lifted["end"].to_numpy()
    return new_pos


def modify_build(
    info_snp: pd.DataFrame,
    liftover: Path,
    chain: Path,
    reverse_chain: Path | None = None,
) -> pd.DataFrame:
    """Convert the "pos" column of `info_snp` to another genome build.

    Args:
        info_snp: Table with columns "chr" and "pos"
        liftover: Path to the liftOver executable
        chain: Chain file from the current build to the new one
            (e.g. hg18ToHg19.over.chain.gz)
        reverse_chain: Chain file back to the current build; when given,
            positions that do not survive the round trip are discarded

    Returns:
        Copy of `info_snp` with "pos" in the new build (nullable integer,
        <NA> where the variant could not be mapped)

    Raises:
        ValueError: If "chr" or "pos" is missing
        FileNotFoundError: If the executable or a chain file is missing
        RuntimeError: If liftOver fails
    """
    if not {CHR, POS}.issubset(info_snp.columns):
        raise ValueError("Expecting variables 'chr' and 'pos' in input 'info_snp'.")

    liftover = Path(liftover).resolve()
    for path in [liftover, Path(chain)] + ([Path(reverse_chain)] if reverse_chain else []):
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
    make_executable(liftover)

    chrom = info_snp[CHR].reset_index(drop=True)
    pos0 = info_snp[POS].reset_index(drop=True).astype("Int64")

    new_pos = _lift_positions(chrom, pos0, liftover, Path(chain))

    if reverse_chain is not None:
        back = _lift_positions(chrom, new_pos, liftover, Path(reverse_chain))
        round_trip_ok = (back == pos0).fillna(False).astype(bool)
        new_pos = new_pos.where(round_trip_ok, pd.NA)

    logger.info(f"{int(new_pos.isna().sum()):,} variants have not been mapped.")

    result = info_snp.copy()
    result[POS] = new_pos.array
    return result
