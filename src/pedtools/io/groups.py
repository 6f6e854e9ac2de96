"""Unknown-parent group assignment for character-ID pedigrees."""

from __future__ import annotations

from collections.abc import Hashable, Mapping

import numpy as np
from loguru import logger

from pedtools.pedigree.types import CODE_DTYPE, IdTable, Pedigree


def set_upg(
    ped: Pedigree,
    idtable: IdTable,
    upgtable: Mapping[str, Hashable],
    sort_keys: bool = False,
) -> tuple[Pedigree, IdTable]:
    """Replace placeholder parent IDs by unknown-parent group codes.

    Pedigree files often write a group label (e.g. birth-year cohort) in
    place of an unknown parent. After reading, those labels are ordinary
    founders. This recodes the pedigree so that they disappear as
    individuals and become group codes above the real individuals.

    Args:
        ped: Pedigree as returned by read_ped.
        idtable: Id table as returned by read_ped.
        upgtable: Maps placeholder IDs to a group. Placeholders sharing a
            group share one code. Entries absent from ``idtable`` are ignored.
        sort_keys: Recode in sorted ID order instead of table order.

    Returns:
        ``(Pedigree, IdTable)`` with real individuals coded ``1..m`` and
        groups coded ``m + 1, m + 2, ...`` in order of first occurrence.

    Raises:
        ValueError: If every individual is a placeholder.
    """
    ids = [id_ for id_ in idtable if id_ != "0"]
    if sort_keys:
        ids.sort()

    n = ped.n
    n_upg = sum(1 for id_ in ids if id_ in upgtable)
    m = n - n_upg
    if m < 1:
        raise ValueError("no real animals")

    new_table: IdTable = {"0": 0}
    group_codes: dict[Hashable, int] = {}
    last_code = 0
    last_group = m
    for id_ in ids:
        if id_ in upgtable:
            group = upgtable[id_]
            if group not in group_codes:
                last_group += 1
                group_codes[group] = last_group
            new_table[id_] = group_codes[group]
        else:
            last_code += 1
            new_table[id_] = last_code

    inv_table = {code: id_ for id_, code in idtable.items()}
    sire = np.zeros(m, dtype=CODE_DTYPE)
    dam = np.zeros(m, dtype=CODE_DTYPE)
    for id_ in ids:
        if id_ in upgtable:
            continue
        old = idtable[id_]
        new = new_table[id_]
        sire[new - 1] = new_table[inv_table[int(ped.sire[old - 1])]]
        dam[new - 1] = new_table[inv_table[int(ped.dam[old - 1])]]

    logger.debug(
        f"Assigned {n_upg:,} placeholder IDs to {len(group_codes):,} groups; "
        f"{m:,} real individuals"
    )
    return Pedigree(sire, dam), new_table
