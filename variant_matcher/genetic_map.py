"""Interpolation of physical positions (bp) to genetic positions (cM).

Uses the 1000 Genomes interpolated genetic maps
(https://github.com/joepickrell/1000-genomes-genetic-maps), one file per
chromosome with columns rsid, position and genetic position. Files must
already be present in `map_dir`, plain or gzipped.
"""

import logging
from pathlib import Path
from typing import Literal

import numpy as np
import pandas as pd
from scipy.interpolate import PchipInterpolator

from variant_matcher.io_utils import is_gzipped
from variant_matcher.utils import normalize_chromosome

logger = logging.getLogger(__name__)

MapType = Literal["OMNI", "hapmap"]


def map_file(map_dir: Path, chrom: str, map_type: MapType = "OMNI") -> Path:
    """Locate the map file for one chromosome, preferring the uncompressed one.

    Raises:
        FileNotFoundError: If neither the plain nor the gzipped file exists
    """
    suffix = ".OMNI" if map_type == "OMNI" else ""
    basename = f"chr{normalize_chromosome(chrom)}{suffix}.interpolated_genetic_map"

    for candidate in (map_dir / basename, map_dir / f"{basename}.gz"):
        if candidate.exists():
            return candidate

    raise FileNotFoundError(
        f"Genetic map not found: {map_dir / basename}. Download it from "
        "https://github.com/joepickrell/1000-genomes-genetic-maps first."
    )


def read_genetic_map(path: Path) -> pd.DataFrame:
    """Read a map file into columns rsid, pos, gen_pos (sorted by pos)."""
    genetic_map = pd.read_csv(
        path,
        sep=r"\s+",
        header=None,
        names=["rsid", "pos", "gen_pos"],
        dtype={"rsid": str, "pos": np.int64, "gen_pos": np.float64},
        compression="gzip" if is_gzipped(path) else None,
    )
    return genetic_map.sort_values("pos", kind="mergesort").reset_index(drop=True)


def nearest_genetic_pos(genetic_map: pd.DataFrame, pos: np.ndarray) -> np.ndarray:
    """Genetic position of the map entry physically closest to each position."""
    map_pos = genetic_map["pos"].to_numpy()
    map_gen = genetic_map["gen_pos"].to_numpy()
    if len(map_pos) == 1:
        return np.full(len(pos), map_gen[0])

    right = np.clip(np.searchsorted(map_pos, pos), 1, len(map_pos) - 1)
    left = right - 1
    use_left = np.abs(pos - map_pos[left]) <= np.abs(map_pos[right] - pos)
    return map_gen[np.where(use_left, left, right)]


def spline_fill(pos: np.ndarray, gen_pos: np.ndarray) -> np.ndarray:
    """Fill missing genetic positions by monotone spline over known ones.

    Ties in physical position are averaged before fitting. With fewer than two
    known points nothing can be interpolated and gaps stay NaN.
    """
    known = ~np.isnan(gen_pos)
    if known.all() or known.sum() < 2:
        return gen_pos

    anchors = (
        pd.DataFrame({"pos": pos[known], "gen_pos": gen_pos[known]})
        .groupby("pos", sort=True)["gen_pos"]
        .mean()
    )
    if len(anchors) < 2:
        return gen_pos

    spline = PchipInterpolator(anchors.index.to_numpy(dtype=float), anchors.to_numpy(), extrapolate=True)
    filled = gen_pos.copy()
    filled[~known] = spline(pos[~known].astype(float))
    return filled


def as_genetic_pos(
    chrom: pd.Series,
    pos: pd.Series,
    map_dir: Path,
    rsid: pd.Series | None = None,
    map_type: MapType = "OMNI",
) -> np.ndarray:
    """Interpolate physical positions to genetic positions.

    Args:
        chrom: Chromosome of each variant
        pos: Physical position (bp) of each variant
        map_dir: Directory holding the (possibly gzipped) map files
        rsid: If given, variants are matched by rsid and those not found are
            filled by monotone spline interpolation over the matched ones;
            otherwise the nearest physical position is used
        map_type: Maps interpolated from "OMNI" (default) or "hapmap"

    Returns:
        Genetic positions (cM), in input order

    Raises:
        ValueError: If the inputs have different lengths
        FileNotFoundError: If a chromosome's map file is missing
    """
    chrom = pd.Series(chrom).reset_index(drop=True)
    pos = pd.Series(pos).reset_index(drop=True)
    if len(chrom) != len(pos):
        raise ValueError(f"'chrom' and 'pos' must have the same length ({len(chrom)} != {len(pos)})")
    if rsid is not None:
        rsid = pd.Series(rsid).reset_index(drop=True)
        if len(rsid) != len(pos):
            raise ValueError(f"'rsid' and 'pos' must have the same length ({len(rsid)} != {len(pos)})")

    map_dir = Path(map_dir)
    gen_pos = np.full(len(pos), np.nan)

    for chr_val, ind in chrom.groupby(chrom, sort=False).groups.items():
        ind = np.asarray(ind)
        genetic_map = read_genetic_map(map_file(map_dir, str(chr_val), map_type))
        pos_chr = pos.to_numpy(dtype=np.int64)[ind]

        if rsid is None:
            gen_pos[ind] = nearest_genetic_pos(genetic_map, pos_chr)
        else:
            lookup = genetic_map.drop_duplicates("rsid").set_index("rsid")["gen_pos"]
            matched = rsid.iloc[ind].map(lookup).to_numpy(dtype=float)
            n_missing = int(np.isnan(matched).sum())
            if n_missing:
                logger.debug(f"chr{chr_val}: interpolating {n_missing:,} variants not found by rsid")
            gen_pos[ind] = spline_fill(pos_chr, matched)

    return gen_pos
