"""Estimation of ancestry proportions from allele frequencies.

Frequencies are projected onto a PCA space, then expressed as a mixture of
reference population frequencies with non-negative weights summing to 1.
Match the summary statistics against the reference variants first (and
reverse frequencies of reversed variants accordingly).
"""

import logging

import numpy as np
import pandas as pd
from scipy.optimize import minimize

logger = logging.getLogger(__name__)


def _assert_no_missing(name: str, values: np.ndarray) -> None:
    if np.isnan(values).any():
        raise ValueError(f"'{name}' should not have missing values.")


def nearest_positive_definite(matrix: np.ndarray, eps: float = 1e-10) -> np.ndarray:
    """Nearest symmetric positive definite matrix by eigenvalue clipping.

    Raises:
        ValueError: If the matrix has no positive eigenvalue
    """
    sym = (matrix + matrix.T) / 2
    eigval, eigvec = np.linalg.eigh(sym)
    if eigval.max() <= 0:
        raise ValueError("Could not find nearest positive definite matrix.")
    eigval = np.maximum(eigval, eps * eigval.max())
    return (eigvec * eigval) @ eigvec.T


def solve_simplex_qp(dmat: np.ndarray, dvec: np.ndarray) -> np.ndarray:
    """Minimize 1/2 w'Dw - d'w subject to w >= 0 and sum(w) == 1."""
    k = len(dvec)

    def objective(w):
        return 0.5 * w @ dmat @ w - dvec @ w

    def gradient(w):
        return dmat @ w - dvec

    res = minimize(
        objective,
        x0=np.full(k, 1.0 / k),
        jac=gradient,
        method="SLSQP",
        bounds=[(0.0, 1.0)] * k,
        constraints=[{"type": "eq", "fun": lambda w: w.sum() - 1.0, "jac": lambda w: np.ones(k)}],
        options={"ftol": 1e-14, "maxiter": 1000},
    )
    if not res.success:
        raise RuntimeError(f"Quadratic program did not converge: {res.message}")

    # Clean tiny bound violations from the solver
    w = np.clip(res.x, 0.0, None)
    return w / w.sum()


def ancestry_summary(
    freq: np.ndarray | pd.Series,
    info_freq_ref: pd.DataFrame,
    projection: np.ndarray | pd.DataFrame,
    correction: np.ndarray | pd.Series,
) -> pd.Series:
    """Estimate ancestry proportions.

    Args:
        freq: Allele frequencies to decompose, one per variant
        info_freq_ref: Reference frequencies, one row per variant and one
            column per population
        projection: Loadings of each variant on each PC
        correction: Shrinkage correction coefficient for each PC

    Returns:
        Ancestry proportions indexed by population, rounded to 7 decimals

    Raises:
        ValueError: On missing values, inconsistent dimensions, or when the
            frequencies look globally reversed relative to the reference
    """
    freq = np.asarray(freq, dtype=float)
    info_freq_ref = pd.DataFrame(info_freq_ref)
    X0 = info_freq_ref.to_numpy(dtype=float)
    projection = np.asarray(projection, dtype=float)
    correction = np.asarray(correction, dtype=float)

    _assert_no_missing("freq", freq)
    _assert_no_missing("info_freq_ref", X0)
    _assert_no_missing("projection", projection)

    if not (len(freq) == X0.shape[0] == projection.shape[0]):
        raise ValueError(
            f"Incompatible dimensions: {len(freq)} frequencies, {X0.shape[0]} reference rows, "
            f"{projection.shape[0]} projection rows."
        )
    if len(correction) != projection.shape[1]:
        raise ValueError(
            f"Incompatible dimensions: {len(correction)} corrections for {projection.shape[1]} PCs."
        )

    correlations = [np.corrcoef(X0[:, j], freq)[0, 1] for j in range(X0.shape[1])]
    if np.mean(correlations) < -0.2:
        raise ValueError("Frequencies seem all reversed; switch reference allele?")

    # project allele frequencies onto the PCA space
    X = projection.T @ X0
    y = (projection.T @ freq) * correction

    dmat = nearest_positive_definite(X.T @ X)
    weights = solve_simplex_qp(dmat, X.T @ y)

    cor_pred = np.corrcoef(X0 @ weights, freq)[0, 1]
    if cor_pred < 0.99:
        logger.warning("The solution does not perfectly match the frequencies.")

    return pd.Series(np.round(weights, 7), index=info_freq_ref.columns)
