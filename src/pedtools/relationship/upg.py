"""Q and P matrices for unknown-parent group models (Quaas 1988).

With every unknown parent replaced by a group code above n, breeding values
decompose as ``a = Q g + ...`` where row i of Q holds the fraction of i's
genes that originates in each group. P links progeny to their parents
(0.5 per known parent), and for a fully assigned pedigree

    Q = (I - P_animals)^-1 P_groups
"""

from __future__ import annotations

import numpy as np
from loguru import logger

from pedtools.core.progress import maybe_progress
from pedtools.pedigree.types import MAX_GENERATIONS, Pedigree


def _group_contributions(
    code: int,
    sire: list[int],
    dam: list[int],
    n: int,
    out: np.ndarray,
) -> None:
    """Add the group fractions of individual ``code`` into ``out``.

    The gene fraction halves with each generation walked back; paths that
    end in a group credit it, paths that end in an unknown parent are lost.
    """
    stack = [(code, 1.0, 0)]
    while stack:
        current, g, gen = stack.pop()
        if current > n:
            out[current - n - 1] += g
        elif current > 0:
            if gen > MAX_GENERATIONS:
                raise RuntimeError(
                    f"too many generations back from individual {code} "
                    f"(more than {MAX_GENERATIONS}); the pedigree may contain a loop"
                )
            half = 0.5 * g
            stack.append((dam[current], half, gen + 1))
            stack.append((sire[current], half, gen + 1))


def get_qm(ped: Pedigree, show_progress: bool = False) -> np.ndarray:
    """Compute the Q-matrix relating individuals to unknown-parent groups.

    Args:
        ped: Pedigree whose unknown parents carry group codes above ``n``.
        show_progress: Show a progress bar over individuals.

    Returns:
        (n, n_upg) float64 matrix; column ``g`` belongs to code ``n + g + 1``.

    Raises:
        ValueError: If the pedigree has no group codes.
        RuntimeError: If an ancestry is deeper than MAX_GENERATIONS.

    Example:
        >>> ped = Pedigree.from_pairs([(5, 6), (1, 6), (5, 6), (2, 3)])
        >>> get_qm(ped)
        array([[0.5  , 0.5  ],
               [0.25 , 0.75 ],
               [0.5  , 0.5  ],
               [0.375, 0.625]])
    """
    n = ped.n
    n_upg = ped.n_upg
    if n_upg < 1:
        raise ValueError("no groups in the pedigree (no codes above n)")

    sire = [0] + ped.sire.tolist()
    dam = [0] + ped.dam.tolist()
    Q = np.zeros((n, n_upg), dtype=np.float64)
    for i in maybe_progress(range(1, n + 1), n, "Q-matrix", show_progress):
        _group_contributions(i, sire, dam, n, Q[i - 1])

    logger.debug(f"Q-matrix: {n:,} individuals x {n_upg:,} groups")
    return Q


def get_pm(ped: Pedigree, verbose: bool = True) -> np.ndarray:
    """Compute the P-matrix linking progeny to their parents.

    If any parent is still unknown (code 0) the pedigree is not fully
    assigned to groups. The matrix is then n x n and group codes are left
    out; otherwise it is n x (n + n_upg) with group columns after the
    animal columns.

    Args:
        ped: Pedigree, usually with group codes above ``n``.
        verbose: Log a warning when unknown parents are found.

    Returns:
        Float64 matrix with 0.5 per parent at each (progeny, parent)
        position, so 1.0 where both parents are the same group.
    """
    n = ped.n
    incomplete = n > 0 and min(int(ped.sire.min()), int(ped.dam.min())) < 1
    if incomplete:
        if verbose:
            logger.warning("pedigree with 0 index; not all animals assigned to UPG")
        n_cols = n
    else:
        n_cols = n + ped.n_upg

    P = np.zeros((n, n_cols), dtype=np.float64)
    rows = np.arange(n)
    for parents in (ped.sire, ped.dam):
        linked = (parents >= 1) & (parents <= n_cols)
        # sire and dam may share a group code
        np.add.at(P, (rows[linked], parents[linked] - 1), 0.5)
    return P
