"""Derived pedigrees: ancestor subsets and sire/maternal-grandsire folding."""

from __future__ import annotations

from collections import deque
from collections.abc import Sequence

import numpy as np
from loguru import logger

from pedtools.pedigree.order import extract_ped, find_ped_order
from pedtools.pedigree.types import CODE_DTYPE, Pedigree, Permutation


def _ancestor_depths(ped: Pedigree, ids: Sequence[int]) -> np.ndarray:
    """Shortest number of generations from ``ids`` to each ancestor (-1 if none)."""
    n = ped.n
    depth = np.full(n, -1, dtype=CODE_DTYPE)
    queue: deque[int] = deque()
    for code in ids:
        if depth[code - 1] < 0:
            depth[code - 1] = 0
            queue.append(code)
    while queue:
        code = queue.popleft()
        for parent in ped.parents(code):
            if 1 <= parent <= n and depth[parent - 1] < 0:
                depth[parent - 1] = depth[code - 1] + 1
                queue.append(parent)
    return depth


def subset_ped(
    ped: Pedigree,
    ids: Sequence[int],
    generations: int | None = None,
) -> tuple[Permutation, Pedigree]:
    """Extract the ancestors of ``ids`` as a new, ancestor-first pedigree.

    Without ``generations`` the subset is closed under ancestry, so
    inbreeding coefficients computed on it equal those of the full pedigree.
    With ``generations=g``, ancestors more than ``g`` generations back along
    their shortest path are dropped and the links to them become unknown.

    Args:
        ped: Source pedigree.
        ids: 1-based codes of the individuals of interest.
        generations: Optional maximum number of generations to keep.

    Returns:
        Tuple of (permutation relating old and new codes, sub-pedigree).

    Raises:
        ValueError: If an id is outside ``1..n`` or ``generations`` is negative.
    """
    n = ped.n
    ids = [int(i) for i in ids]
    for code in ids:
        if code < 1 or code > n:
            raise ValueError(f"starting ID out of range: {code} (valid 1..{n})")

    source = ped
    if generations is not None:
        if generations < 0:
            raise ValueError(f"generations must be >= 0, got {generations}")
        depth = _ancestor_depths(ped, ids)
        kept = np.concatenate([[False], (depth >= 0) & (depth <= generations)])

        def _mask(parents: np.ndarray) -> np.ndarray:
            real = (parents >= 1) & (parents <= n)
            keep = ~real | kept[np.where(real, parents, 0)]
            return np.where(keep & (parents != 0), parents, 0)

        source = Pedigree(_mask(ped.sire), _mask(ped.dam))

    order = find_ped_order(source, ids)
    subped, _ = extract_ped(order.invp, source)
    logger.info(
        f"Subset pedigree: {subped.n:,} of {n:,} individuals "
        f"from {len(ids):,} starting IDs"
    )
    return order, subped


def mgs_ped(ped: Pedigree, males: Sequence[bool] | np.ndarray | None = None) -> Pedigree:
    """Fold a pedigree into sire / maternal-grandsire form.

    Each record keeps its sire; the dam slot is replaced by the dam's sire.
    An unknown dam gives an unknown grandsire, and a UPG dam passes through
    as the grandsire group. With ``males``, records of non-males are cleared.

    Args:
        ped: Full pedigree including females.
        males: Optional boolean mask of length ``n`` flagging males.

    Returns:
        New pedigree with (sire, maternal grandsire) as parents.

    Raises:
        ValueError: If ``males`` does not have length ``n``.

    Example:
        >>> ped = Pedigree.from_pairs([(0, 0), (0, 0), (1, 0), (2, 3)])
        >>> mgs_ped(ped).dam
        array([0, 0, 0, 1])
    """
    n = ped.n
    real_dam = (ped.dam >= 1) & (ped.dam <= n)
    grandsire = np.zeros(n, dtype=CODE_DTYPE)
    grandsire[real_dam] = ped.sire[ped.dam[real_dam] - 1]
    grandsire = np.where(ped.dam > n, ped.dam, grandsire)
    sire = ped.sire.copy()

    if males is not None:
        males = np.asarray(males, dtype=bool)
        if males.shape != (n,):
            raise ValueError(
                f"dimension mismatch between pedigree ({n}) and males "
                f"({males.shape[0] if males.ndim else 0})"
            )
        sire[~males] = 0
        grandsire[~males] = 0

    return Pedigree(sire, grandsire)
