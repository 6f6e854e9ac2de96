"""Dense numerator relationship matrix by the tabular method.

With ancestor-first codes, the leading i x i block of A only depends on
individuals coded before i, so A can be grown one individual at a time:

    A[i, j] = A[j, i] = (A[j, sire_i] + A[j, dam_i]) / 2    for j < i
    A[i, i] = 1 + A[sire_i, dam_i] / 2

Unknown parents and UPG codes contribute zero. Time and memory are O(n^2).
"""

from __future__ import annotations

import time

import numpy as np
from loguru import logger

from pedtools.core.memory import (
    check_memory_available,
    estimate_nrm_memory,
    log_memory_snapshot,
)
from pedtools.pedigree.check import check_ped
from pedtools.pedigree.order import find_ped_order, permute_ped
from pedtools.pedigree.types import Pedigree


def _tabular_method_dense(ped: Pedigree) -> np.ndarray:
    """Build A for an ancestor-first pedigree."""
    n = ped.n
    A = np.zeros((n, n), dtype=np.float64)
    for i in range(n):
        s = int(ped.sire[i]) - 1
        d = int(ped.dam[i]) - 1
        s_known = 0 <= s < n
        d_known = 0 <= d < n

        row = np.zeros(i, dtype=np.float64)
        if s_known:
            row += A[s, :i]
        if d_known:
            row += A[d, :i]
        row *= 0.5
        A[i, :i] = row
        A[:i, i] = row

        A[i, i] = 1.0 + (0.5 * A[s, d] if s_known and d_known else 0.0)
    return A


def get_nrm(
    ped: Pedigree,
    check: bool = False,
    sort_here: bool = False,
    check_memory: bool = True,
) -> np.ndarray:
    """Compute the dense additive (numerator) relationship matrix.

    Args:
        ped: Pedigree, coded ancestor-first unless ``sort_here`` is set.
        check: Validate the pedigree first (including chronological order
            unless ``sort_here``) and raise if it fails.
        sort_here: Build A on an internally reordered copy and return it in
            the input order. Needs memory for two n x n matrices.
        check_memory: Check available memory before allocating.

    Returns:
        Symmetric (n, n) float64 matrix with ``A[i, i] = 1 + f[i]``.

    Raises:
        ValueError: If the check fails.
        MemoryError: If check_memory=True and the matrix does not fit.

    Example:
        >>> ped = Pedigree.from_pairs([(0, 0), (0, 0), (1, 2)])
        >>> get_nrm(ped)
        array([[1. , 0. , 0.5],
               [0. , 1. , 0.5],
               [0.5, 0.5, 1. ]])
    """
    n = ped.n

    if check:
        result = check_ped(ped, parents_first=not sort_here)
        if not result:
            suffix = "" if sort_here else ", or not sorted"
            raise ValueError(f"error in pedigree{suffix}: {result.message}")

    if check_memory:
        est = estimate_nrm_memory(n, sort_here=sort_here)
        check_memory_available(
            est.total_gb,
            safety_margin=0.1,
            operation=f"dense A-matrix ({n:,} x {n:,})",
        )
    log_memory_snapshot(f"before_nrm_{n}animals")

    start = time.perf_counter()
    if sort_here:
        work = ped.normalized()
        order = find_ped_order(work)
        permute_ped(order.invp, work)
        A_sorted = _tabular_method_dense(work)
        idx = order.invp - 1
        A = A_sorted[np.ix_(idx, idx)]
        del A_sorted
    else:
        A = _tabular_method_dense(ped)

    logger.info(
        f"A-matrix: {n:,} individuals, computed in {time.perf_counter() - start:.2f}s"
    )
    return A
