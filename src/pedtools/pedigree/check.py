"""Structural validation of pedigrees.

Three checks run in order and stop at the first violation:

1. Role consistency: no code is used as a sire in one record and as a dam
   in another.
2. Loops: no individual appears among its own ancestors.
3. Chronological order (optional): every ancestor has a smaller code than
   its descendants, which the inbreeding and tabular algorithms require.

Findings are returned as a CheckResult rather than raised, so callers decide
whether a bad pedigree is fatal. Only traversals deeper than MAX_GENERATIONS
raise, since that signals input the loop check cannot reason about.
"""

from __future__ import annotations

import numpy as np
from loguru import logger

from pedtools.pedigree.types import MAX_GENERATIONS, CheckResult, Pedigree


def _check_roles(ped: Pedigree) -> CheckResult | None:
    n = ped.n
    is_sire = np.zeros(n + 1, dtype=bool)
    known_sire = ped.sire[(ped.sire >= 1) & (ped.sire <= n)]
    is_sire[known_sire] = True

    dam_known = (ped.dam >= 1) & (ped.dam <= n)
    clashes = np.flatnonzero(dam_known & is_sire[np.where(dam_known, ped.dam, 0)])
    if clashes.size == 0:
        return None
    code = int(ped.dam[clashes[0]])
    return CheckResult(
        passed=False,
        kind="role",
        code=code,
        message=f"sire/dam found in the alternative sex: {code}",
    )


def has_loop(ped: Pedigree, code: int, seen: np.ndarray | None = None) -> bool:
    """Return True if ``code`` is one of its own ancestors.

    Walks the ancestors of ``code`` depth-first with an explicit stack. Each
    ancestor is expanded once, so shared ancestors cost nothing extra and
    loops that do not pass through ``code`` terminate.

    Args:
        ped: Pedigree to inspect.
        code: 1-based code of the individual.
        seen: Optional integer array of length ``n + 1`` shared between
            walks. An ancestor counts as visited when its entry equals
            ``code``, so the array never needs clearing as long as each
            walk uses a different code.

    Returns:
        True if ``code`` reappears in its ancestry.

    Raises:
        RuntimeError: If the ancestry is deeper than MAX_GENERATIONS.
    """
    n = ped.n
    if seen is None:
        seen = np.zeros(n + 1, dtype=np.int64)
    stack = [(code, 0)]
    while stack:
        current, gen = stack.pop()
        if gen > MAX_GENERATIONS:
            raise RuntimeError(
                f"too many generations back from individual {code} "
                f"(more than {MAX_GENERATIONS})"
            )
        for parent in ped.parents(current):
            if parent < 1 or parent > n:
                continue
            if parent == code:
                return True
            if seen[parent] != code:
                seen[parent] = code
                stack.append((parent, gen + 1))
    return False


def _check_loops(ped: Pedigree) -> CheckResult | None:
    seen = np.zeros(ped.n + 1, dtype=np.int64)
    for code in range(1, ped.n + 1):
        if has_loop(ped, code, seen):
            return CheckResult(
                passed=False,
                kind="loop",
                code=code,
                message=f"pedigree loops found: {code}",
            )
    return None


def _check_order(ped: Pedigree) -> CheckResult | None:
    # The first individual with a larger-coded ancestor is also the first one
    # with a larger-coded parent: along any ancestor chain that climbs above
    # the start, the first climbing step belongs to a smaller code.
    n = ped.n
    codes = np.arange(1, n + 1)
    late_sire = (ped.sire >= 1) & (ped.sire <= n) & (ped.sire > codes)
    late_dam = (ped.dam >= 1) & (ped.dam <= n) & (ped.dam > codes)
    bad = np.flatnonzero(late_sire | late_dam)
    if bad.size == 0:
        return None
    code = int(bad[0]) + 1
    return CheckResult(
        passed=False,
        kind="order",
        code=code,
        message=f"pedigree not chronologically sorted: {code}",
    )


def check_ped(
    ped: Pedigree,
    parents_first: bool = False,
    warn: bool = True,
) -> CheckResult:
    """Check a pedigree for apparent structural errors.

    Args:
        ped: Pedigree to validate.
        parents_first: Also require ancestors to precede their progeny.
        warn: Log the first violation at WARNING level.

    Returns:
        CheckResult; truthy when the pedigree passed.

    Raises:
        RuntimeError: If an ancestry is deeper than MAX_GENERATIONS.

    Example:
        >>> ped = Pedigree.from_pairs([(0, 0), (0, 0), (1, 2)])
        >>> bool(check_ped(ped, parents_first=True))
        True
    """
    checks = [_check_roles, _check_loops]
    if parents_first:
        checks.append(_check_order)

    for run_check in checks:
        result = run_check(ped)
        if result is not None:
            if warn:
                logger.warning(result.message)
            return result

    logger.debug(f"Pedigree check passed: {ped.n:,} individuals")
    return CheckResult(passed=True)
