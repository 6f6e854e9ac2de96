"""Pedigree data model, validation and ordering.

Key functions:
- check_ped: Role, loop and chronological-order checks
- find_ped_order: Ancestor-first permutation
- permute_ped: Relabel a pedigree (and id table) in place
- extract_ped: Cut a relabelled sub-pedigree
- subset_ped: Ancestors of selected individuals, optionally depth-limited
- mgs_ped: Sire / maternal-grandsire folding
"""

from pedtools.pedigree.check import check_ped, has_loop
from pedtools.pedigree.order import (
    extract_ped,
    find_ped_order,
    get_upg_range,
    invsubidx,
    permute_ped,
)
from pedtools.pedigree.subset import mgs_ped, subset_ped
from pedtools.pedigree.types import (
    MAX_GENERATIONS,
    CheckResult,
    IdTable,
    Pedigree,
    Permutation,
)

__all__ = [
    "MAX_GENERATIONS",
    "CheckResult",
    "IdTable",
    "Pedigree",
    "Permutation",
    "check_ped",
    "extract_ped",
    "find_ped_order",
    "get_upg_range",
    "has_loop",
    "invsubidx",
    "mgs_ped",
    "permute_ped",
    "subset_ped",
]
