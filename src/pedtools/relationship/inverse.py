"""Sparse inverse of the numerator relationship matrix.

Henderson (1976) showed that A-inverse can be written down directly from the
pedigree: every individual k with parents s and d adds the outer product

    b_k * w w',   w = [1, -1/2, -1/2] over (k, s, d)

restricted to the known codes, where 1/b_k is k's Mendelian sampling
variance. Unknown-parent groups (Quaas 1976) are handled by keeping their
codes above n in the triplet while treating them as unknown parents in b_k,
which augments A-inverse with group rows and columns.

Contributions are collected as coordinate triplets and summed when the
matrix is compressed, so the dense A is never formed.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import scipy.sparse
from loguru import logger

from pedtools.pedigree.types import Pedigree

HENDERSON_WEIGHTS = np.array([1.0, -0.5, -0.5])
SIRE_MGS_WEIGHTS = np.array([1.0, -0.5, -0.25])


def _assemble(
    triplets: np.ndarray,
    weights: np.ndarray,
    b: np.ndarray,
    m: int,
) -> scipy.sparse.csc_matrix:
    """Sum b * w_i * w_j over every pair of known codes in each triplet."""
    rows: list[np.ndarray] = []
    cols: list[np.ndarray] = []
    vals: list[np.ndarray] = []
    for a in range(3):
        for c in range(3):
            ra = triplets[:, a]
            rc = triplets[:, c]
            mask = (ra >= 1) & (rc >= 1)
            rows.append(ra[mask] - 1)
            cols.append(rc[mask] - 1)
            vals.append(b[mask] * weights[a] * weights[c])

    coo = scipy.sparse.coo_matrix(
        (np.concatenate(vals), (np.concatenate(rows), np.concatenate(cols))),
        shape=(m, m),
    )
    # duplicate coordinates are summed on conversion
    return coo.tocsc()


def get_nrminv(
    ped: Pedigree,
    f: np.ndarray | Sequence[float] | None = None,
    rank: int = 0,
) -> scipy.sparse.csc_matrix:
    """Compute A-inverse by Henderson's rules, with optional UPG rows.

    Args:
        ped: Pedigree; parent codes above ``n`` are unknown-parent groups.
            The order of individuals does not matter.
        f: Inbreeding coefficients of the ``n`` individuals (zero if omitted).
        rank: Minimum dimension of the result.

    Returns:
        Sparse symmetric (m, m) matrix with ``m = max(n, max code, rank)``.

    Raises:
        ValueError: If ``f`` does not have length ``n``.

    Example:
        >>> ped = Pedigree.from_pairs([(0, 0), (0, 0), (1, 2)])
        >>> get_nrminv(ped).toarray()
        array([[ 1.5,  0.5, -1. ],
               [ 0.5,  1.5, -1. ],
               [-1. , -1. ,  2. ]])
    """
    n = ped.n
    m = max(n, ped.max_code, int(rank))

    if f is None:
        f = np.zeros(n, dtype=np.float64)
    else:
        f = np.asarray(f, dtype=np.float64)
        if f.shape != (n,):
            raise ValueError(
                f"dimension mismatch between pedigree ({n}) and "
                f"inbreeding coefficients ({f.shape[0] if f.ndim else 0})"
            )

    sire_known = (ped.sire >= 1) & (ped.sire <= n)
    dam_known = (ped.dam >= 1) & (ped.dam <= n)
    fs = np.where(sire_known, f[np.where(sire_known, ped.sire - 1, 0)], 0.0)
    fd = np.where(dam_known, f[np.where(dam_known, ped.dam - 1, 0)], 0.0)
    ms = np.where(sire_known, 0.0, 1.0)
    md = np.where(dam_known, 0.0, 1.0)
    b = 4.0 / ((1.0 - fs) * (1.0 + ms) + (1.0 - fd) * (1.0 + md))

    codes = np.arange(1, n + 1)
    triplets = np.column_stack([codes, ped.sire, ped.dam])
    Ainv = _assemble(triplets, HENDERSON_WEIGHTS, b, m)

    logger.debug(
        f"A-inverse: {n:,} individuals, {m - n:,} extra rows (groups/rank), "
        f"{Ainv.nnz:,} non-zeros"
    )
    return Ainv


def get_mgsnrminv(
    ped: Pedigree,
    males: np.ndarray | Sequence[bool] | None = None,
    rank: int = 0,
) -> scipy.sparse.csc_matrix:
    """Compute A-inverse for a sire / maternal-grandsire model.

    Expects a pedigree folded by mgs_ped. A male's breeding value is
    ``a = a_sire / 2 + a_mgs / 4 + m`` with Mendelian variance

        1 - 1/4 [sire known] - 1/16 [mgs known]

    i.e. 11/16, 3/4, 15/16 or 1. Inbreeding is ignored.

    Args:
        ped: Sire / maternal-grandsire pedigree.
        males: Optional boolean mask; only males contribute when given.
        rank: Minimum dimension of the result.

    Returns:
        Sparse symmetric (m, m) matrix with ``m = max(n, max code, rank)``.

    Raises:
        ValueError: If ``males`` does not have length ``n``.
    """
    n = ped.n
    m = max(n, ped.max_code, int(rank))

    sire_known = (ped.sire >= 1) & (ped.sire <= n)
    mgs_known = (ped.dam >= 1) & (ped.dam <= n)
    variance = 1.0 - 0.25 * sire_known - 0.0625 * mgs_known
    b = 1.0 / variance

    codes = np.arange(1, n + 1)
    triplets = np.column_stack([codes, ped.sire, ped.dam])
    if males is not None:
        males = np.asarray(males, dtype=bool)
        if males.shape != (n,):
            raise ValueError(
                f"dimension mismatch between pedigree ({n}) and males "
                f"({males.shape[0] if males.ndim else 0})"
            )
        triplets = triplets[males]
        b = b[males]

    return _assemble(triplets, SIRE_MGS_WEIGHTS, b, m)
