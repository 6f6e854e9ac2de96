"""Pedigree data structures.

A pedigree of ``n`` individuals is stored as two integer arrays, ``sire`` and
``dam``, where array position ``k`` holds the parents of the individual coded
``k + 1``. Parent codes follow one convention everywhere in the package:

- ``0``: unknown parent
- ``1..n``: a real individual of the same pedigree
- ``> n``: an unknown-parent group (UPG) placeholder

Permutation vectors hold 1-based codes the same way: ``perm[new - 1] = old``
and ``invp[old - 1] = new``, with ``0`` meaning "not included".
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np

# Deepest ancestor chain any traversal follows before giving up. Deeper
# chains come from loops or corrupted input rather than real pedigrees.
MAX_GENERATIONS = 64

# External identity -> integer code, always containing "0" -> 0.
IdTable = dict[str, int]

CODE_DTYPE = np.int64


@dataclass
class Pedigree:
    """Parent codes of a densely coded pedigree.

    Attributes:
        sire: Sire code of each individual, shape (n,).
        dam: Dam code of each individual, shape (n,).

    Raises:
        ValueError: If the arrays are not 1-D or differ in length.

    Example:
        >>> ped = Pedigree.from_pairs([(0, 0), (0, 0), (1, 2)])
        >>> ped.n
        3
    """

    sire: np.ndarray
    dam: np.ndarray

    def __post_init__(self) -> None:
        self.sire = np.asarray(self.sire, dtype=CODE_DTYPE)
        self.dam = np.asarray(self.dam, dtype=CODE_DTYPE)
        if self.sire.ndim != 1 or self.dam.ndim != 1:
            raise ValueError(
                f"sire and dam must be 1-D arrays, got shapes "
                f"{self.sire.shape} and {self.dam.shape}"
            )
        if self.sire.shape != self.dam.shape:
            raise ValueError(
                f"dimension mismatch between sire ({self.sire.shape[0]}) "
                f"and dam ({self.dam.shape[0]})"
            )

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[int, int]]) -> Pedigree:
        """Build a pedigree from ``(sire, dam)`` pairs in code order."""
        rows = [tuple(p) for p in pairs]
        if not rows:
            return cls(np.zeros(0, dtype=CODE_DTYPE), np.zeros(0, dtype=CODE_DTYPE))
        arr = np.asarray(rows, dtype=CODE_DTYPE)
        return cls(arr[:, 0].copy(), arr[:, 1].copy())

    @classmethod
    def from_matrix(cls, pedlist: np.ndarray) -> Pedigree:
        """Build a pedigree from a 2 x n matrix (row 0 sires, row 1 dams)."""
        pedlist = np.asarray(pedlist)
        if pedlist.ndim != 2 or pedlist.shape[0] != 2:
            raise ValueError(f"pedigree matrix must be 2 x n, got {pedlist.shape}")
        return cls(pedlist[0].copy(), pedlist[1].copy())

    @property
    def n(self) -> int:
        """Number of real individuals."""
        return int(self.sire.shape[0])

    @property
    def max_code(self) -> int:
        """Largest code in the pedigree, counting individuals and parents."""
        if self.n == 0:
            return 0
        return max(self.n, int(self.sire.max()), int(self.dam.max()))

    @property
    def n_upg(self) -> int:
        """Number of unknown-parent group codes above ``n``."""
        return self.max_code - self.n

    @property
    def upg_range(self) -> range:
        """Codes reserved for unknown-parent groups (may be empty)."""
        return range(self.n + 1, self.max_code + 1)

    def __len__(self) -> int:
        return self.n

    def parents(self, code: int) -> tuple[int, int]:
        """Return ``(sire, dam)`` of the individual with 1-based ``code``."""
        return int(self.sire[code - 1]), int(self.dam[code - 1])

    def copy(self) -> Pedigree:
        return Pedigree(self.sire.copy(), self.dam.copy())

    def as_matrix(self) -> np.ndarray:
        """Return the 2 x n parent matrix (row 0 sires, row 1 dams)."""
        return np.vstack([self.sire, self.dam])

    def normalized(self) -> Pedigree:
        """Copy with every parent code outside ``1..n`` replaced by 0.

        UPG placeholders become unknown parents, which is what the inbreeding
        and tabular algorithms expect.
        """
        n = self.n
        sire = np.where((self.sire >= 1) & (self.sire <= n), self.sire, 0)
        dam = np.where((self.dam >= 1) & (self.dam <= n), self.dam, 0)
        return Pedigree(sire, dam)


class Permutation(NamedTuple):
    """Ancestor-first relabelling of a pedigree.

    Attributes:
        perm: ``perm[new - 1] = old``; 0 where no individual got that code.
        invp: ``invp[old - 1] = new``; 0 for individuals left out.
    """

    perm: np.ndarray
    invp: np.ndarray

    @property
    def n_included(self) -> int:
        """Number of individuals that received a new code."""
        return int(np.count_nonzero(self.invp))

    @property
    def is_complete(self) -> bool:
        """Whether every individual was relabelled."""
        return self.n_included == self.invp.shape[0]


@dataclass
class CheckResult:
    """Outcome of a pedigree validation.

    Attributes:
        passed: Whether every requested check succeeded.
        kind: Violation kind: "role", "loop", "order", or None when passed.
        code: Offending individual's code, or None when passed.
        message: Human-readable description of the result.

    Example:
        >>> result = check_ped(ped)
        >>> if not result:
        ...     print(f"{result.kind} at {result.code}: {result.message}")
    """

    passed: bool
    kind: str | None = None
    code: int | None = None
    message: str = "pedigree OK"

    def __bool__(self) -> bool:
        return self.passed
