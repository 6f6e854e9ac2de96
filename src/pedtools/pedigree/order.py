"""Ancestor-first ordering and relabelling of pedigrees.

find_ped_order traces every individual back through its sire and then its
dam, handing out new codes on the way back down so that each ancestor is
coded before any of its descendants. The resulting Permutation can be
applied in place with permute_ped (full relabelling only) or used to cut
a smaller pedigree with extract_ped.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from loguru import logger

from pedtools.pedigree.types import (
    CODE_DTYPE,
    MAX_GENERATIONS,
    IdTable,
    Pedigree,
    Permutation,
)


def _trace_family(
    ped: Pedigree,
    code: int,
    last_code: int,
    perm: np.ndarray,
    invp: np.ndarray,
) -> int:
    """Assign new codes to ``code`` and its untraced ancestors.

    Parents are traced sire first, then dam; an individual is coded only
    after both of its parents. ``invp`` doubles as the visited marker.

    Returns:
        The last new code handed out.
    """
    n = ped.n
    stack = [(code, 0)]
    while stack:
        current, gen = stack[-1]
        if invp[current - 1] > 0:
            stack.pop()
            continue
        if gen > MAX_GENERATIONS:
            raise RuntimeError(
                f"too many generations back from individual {code} "
                f"(more than {MAX_GENERATIONS}); the pedigree may contain a loop"
            )

        pending = 0
        for parent in ped.parents(current):
            if 1 <= parent <= n and invp[parent - 1] == 0:
                pending = parent
                break
        if pending:
            stack.append((pending, gen + 1))
            continue

        stack.pop()
        last_code += 1
        invp[current - 1] = last_code
        perm[last_code - 1] = current
    return last_code


def find_ped_order(ped: Pedigree, start: Sequence[int] | None = None) -> Permutation:
    """Find a permutation in which ancestors precede their progeny.

    By default every individual is a starting point. With ``start``, only
    those individuals and their ancestors are traced; everyone else keeps 0
    in both ``perm`` and ``invp``.

    Args:
        ped: Pedigree to order.
        start: Optional 1-based codes to trace from, in the order given.

    Returns:
        Permutation with ``perm[new - 1] = old`` and ``invp[old - 1] = new``.

    Raises:
        ValueError: If a starting code is outside ``1..n``.
        RuntimeError: If an ancestry is deeper than MAX_GENERATIONS.

    Example:
        >>> ped = Pedigree.from_pairs([(2, 3), (0, 0), (0, 0)])
        >>> find_ped_order(ped).perm
        array([2, 3, 1])
    """
    n = ped.n
    perm = np.zeros(n, dtype=CODE_DTYPE)
    invp = np.zeros(n, dtype=CODE_DTYPE)

    if start is None:
        starts: Sequence[int] = range(1, n + 1)
    else:
        starts = [int(s) for s in start]
        for s in starts:
            if s < 1 or s > n:
                raise ValueError(f"starting ID out of range: {s} (valid 1..{n})")

    last_code = 0
    for code in starts:
        last_code = _trace_family(ped, code, last_code, perm, invp)

    logger.debug(f"Pedigree order: {last_code:,} of {n:,} individuals coded")
    return Permutation(perm=perm, invp=invp)


def _translate_parents(parents: np.ndarray, invp: np.ndarray, n: int) -> np.ndarray:
    # 0 stays 0, UPG codes above n pass through, real codes go through invp.
    real = (parents >= 1) & (parents <= n)
    out = np.where(parents > n, parents, 0)
    out[real] = invp[parents[real] - 1]
    return out


def _translate_code(code: int, invp: np.ndarray, n: int, upg_shift: int = 0) -> int:
    if code < 1:
        return 0
    if code > n:
        return code + upg_shift
    return int(invp[code - 1])


def permute_ped(
    invp: np.ndarray,
    ped: Pedigree,
    idtable: IdTable | None = None,
) -> tuple[Pedigree, IdTable | None]:
    """Relabel a pedigree in place according to ``invp``.

    Individual ``old`` becomes ``invp[old - 1]``; parent codes are translated
    the same way, except 0 (unknown) and UPG codes above ``n`` which are kept.
    The optional id table is relabelled with the same rule. Nothing is
    modified unless ``invp`` is a complete permutation.

    Args:
        invp: Inverse permutation from find_ped_order.
        ped: Pedigree to relabel; its arrays are overwritten.
        idtable: Optional id table to relabel alongside the pedigree.

    Returns:
        Tuple of (ped, idtable) after relabelling; idtable is None if not given.

    Raises:
        ValueError: If ``invp`` does not match the pedigree size, or is not a
            bijection over ``1..n`` (use extract_ped for subsets).
    """
    invp = np.asarray(invp, dtype=CODE_DTYPE)
    n = ped.n
    if invp.shape != (n,):
        raise ValueError(
            f"dimension mismatch between pedigree ({n}) and invp ({invp.shape[0]})"
        )
    if not np.array_equal(np.sort(invp), np.arange(1, n + 1)):
        raise ValueError(
            "incomplete permutation vector; use extract_ped to extract "
            "the subset pedigree"
        )

    new_sire = np.empty(n, dtype=CODE_DTYPE)
    new_dam = np.empty(n, dtype=CODE_DTYPE)
    new_sire[invp - 1] = _translate_parents(ped.sire, invp, n)
    new_dam[invp - 1] = _translate_parents(ped.dam, invp, n)

    new_table = None
    if idtable is not None:
        new_table = {
            key: _translate_code(code, invp, n) for key, code in idtable.items()
        }

    ped.sire[:] = new_sire
    ped.dam[:] = new_dam
    if idtable is not None:
        idtable.clear()
        idtable.update(new_table)
    return ped, idtable


def extract_ped(
    invp: np.ndarray,
    ped: Pedigree,
    idtable: IdTable | None = None,
) -> tuple[Pedigree, IdTable | None]:
    """Cut and relabel a sub-pedigree according to ``invp``.

    Like permute_ped, but ``invp`` may leave individuals out (entry 0). The
    output holds the ``m`` individuals whose new code lies in ``1..m``.
    Parents that were left out become unknown, and UPG codes are shifted
    from above ``n`` to above ``m`` (``old - n + m``).

    Args:
        invp: Inverse permutation, typically from find_ped_order with ``start``.
        ped: Source pedigree (not modified).
        idtable: Optional id table; left-out individuals are dropped from it.

    Returns:
        Tuple of (new pedigree, new id table or None).

    Raises:
        ValueError: If ``invp`` does not match the pedigree size.
    """
    invp = np.asarray(invp, dtype=CODE_DTYPE)
    n = ped.n
    if invp.shape != (n,):
        raise ValueError(
            f"dimension mismatch between pedigree ({n}) and invp ({invp.shape[0]})"
        )
    m = int(np.count_nonzero((invp >= 1) & (invp <= n)))
    shift = m - n

    new_sire = np.zeros(m, dtype=CODE_DTYPE)
    new_dam = np.zeros(m, dtype=CODE_DTYPE)
    selected = np.flatnonzero((invp >= 1) & (invp <= m))
    targets = invp[selected] - 1
    for parents, out in ((ped.sire, new_sire), (ped.dam, new_dam)):
        translated = _translate_parents(parents[selected], invp, n)
        out[targets] = np.where(translated > n, translated + shift, translated)

    new_table = None
    if idtable is not None:
        new_table = {}
        for key, code in idtable.items():
            new_code = _translate_code(code, invp, n, upg_shift=shift)
            if code >= 1 and new_code == 0:
                continue
            new_table[key] = new_code
        new_table.setdefault("0", 0)

    logger.debug(f"Extracted {m:,} of {n:,} individuals")
    return Pedigree(new_sire, new_dam), new_table


def invsubidx(subidx: Sequence[int] | np.ndarray, n: int) -> np.ndarray:
    """Invert a partial index list.

    ``subidx[new - 1] = old`` need not cover every code; the result satisfies
    ``invs[old - 1] = new`` and holds 0 for codes missing from ``subidx``.

    Args:
        subidx: 1-based old codes in their new order; entries < 1 are skipped.
        n: Largest old code.

    Returns:
        Integer array of length ``n``.

    Example:
        >>> invsubidx([3, 1], 4)
        array([2, 0, 1, 0])
    """
    subidx = np.asarray(subidx, dtype=CODE_DTYPE)
    invs = np.zeros(n, dtype=CODE_DTYPE)
    positions = np.flatnonzero(subidx > 0)
    invs[subidx[positions] - 1] = positions + 1
    return invs


def get_upg_range(ped: Pedigree) -> range:
    """Return the range of codes used for unknown-parent groups.

    Example:
        >>> ped = Pedigree.from_pairs([(5, 6), (1, 6), (5, 6), (2, 3)])
        >>> get_upg_range(ped)
        range(5, 7)
    """
    return ped.upg_range
