"""Pedigree text file reading.

Pedigree file format:
- Whitespace delimited, no header row, blank lines ignored
- At least three fields per line: animal, sire and dam ID (column positions
  configurable with ``order``)
- "0" denotes an unknown parent
- A later line for the same animal replaces the earlier one (with a warning)

Character IDs are coded 1, 2, ... in order of first appearance across the
three fields. Integer IDs are used as codes directly.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from pathlib import Path

import numpy as np
from loguru import logger

from pedtools.pedigree.types import CODE_DTYPE, IdTable, Pedigree


def _read_records(path: Path, order: Sequence[int]) -> Iterator[tuple[int, list[str]]]:
    """Yield ``(line number, [animal, sire, dam])`` tokens from a pedigree file."""
    needed = max(order)
    with open(path) as f:
        for lineno, line in enumerate(f, start=1):
            stripped = line.strip()
            if not stripped:
                continue
            tokens = stripped.split()
            if len(tokens) < needed:
                raise ValueError(
                    f"Pedigree file line {lineno} has {len(tokens)} columns "
                    f"but column {needed} was requested: {path}"
                )
            yield lineno, [tokens[k - 1] for k in order]


def _to_pedigree(records: list[tuple[int, int, int]], n: int) -> Pedigree:
    sire = np.zeros(n, dtype=CODE_DTYPE)
    dam = np.zeros(n, dtype=CODE_DTYPE)
    for animal, s, d in records:
        if animal < 1 or animal > n:
            raise ValueError(f"Invalid ID found: {animal} (valid 1..{n})")
        sire[animal - 1] = s
        dam[animal - 1] = d
    return Pedigree(sire, dam)


def _warn_duplicate(seen: set, animal: object) -> None:
    if animal in seen:
        logger.warning(
            f"ID: '{animal}' appears in this file again. "
            "The last definition will be used."
        )
    else:
        seen.add(animal)


def _read_ped_general(path: Path, order: Sequence[int]) -> tuple[Pedigree, IdTable]:
    idtable: IdTable = {"0": 0}
    seen: set[str] = set()
    records: list[tuple[int, int, int]] = []
    last_code = 0

    for _lineno, ids in _read_records(path, order):
        _warn_duplicate(seen, ids[0])
        codes = []
        for id_ in ids:
            if id_ not in idtable:
                last_code += 1
                idtable[id_] = last_code
            codes.append(idtable[id_])
        records.append((codes[0], codes[1], codes[2]))

    return _to_pedigree(records, last_code), idtable


def _read_ped_integer(path: Path, order: Sequence[int], has_upg: bool) -> Pedigree:
    seen: set[int] = set()
    records: list[tuple[int, int, int]] = []
    last_code = 0

    for lineno, ids in _read_records(path, order):
        try:
            codes = [int(id_) for id_ in ids]
        except ValueError as e:
            raise ValueError(
                f"Pedigree file line {lineno}: conversion error "
                f"(non-integer value found) in {ids}"
            ) from e
        _warn_duplicate(seen, codes[0])
        if has_upg:
            # group codes in the parent fields must stay above the animals
            last_code = max(last_code, codes[0])
        else:
            last_code = max(last_code, *codes)
        records.append((codes[0], codes[1], codes[2]))

    return _to_pedigree(records, last_code)


def read_ped(
    path: str | Path,
    integer: bool = False,
    order: Sequence[int] = (1, 2, 3),
    has_upg: bool = False,
) -> tuple[Pedigree, IdTable] | Pedigree:
    """Read a pedigree file.

    Args:
        path: Path to the pedigree file.
        integer: Treat IDs as integer codes. No id table is built, and every
            parent code up to the largest ID gets its own (founder) record.
        order: 1-based column positions of animal, sire and dam.
        has_upg: Integer mode only. Take the pedigree size from the animal
            column alone so that larger parent codes remain unknown-parent
            groups (as written by renumbering tools with UPGs).

    Returns:
        ``(Pedigree, IdTable)`` for character IDs, or a ``Pedigree`` for
        integer IDs.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If ``order`` is invalid, a line has too few columns, an
            integer ID cannot be parsed, an animal ID is out of range, or
            ``has_upg`` is set for character IDs.

    Example:
        Pedigree file contents:
        ```
        A 0 0
        B 0 0
        C A B
        ```

        >>> ped, idtable = read_ped("pedigree.txt")
        >>> ped.sire, ped.dam
        (array([0, 0, 1]), array([0, 0, 2]))
        >>> idtable
        {'0': 0, 'A': 1, 'B': 2, 'C': 3}
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Pedigree file not found: {path}")
    order = [int(k) for k in order]
    if len(order) != 3:
        raise ValueError(f"`order` needs three column positions, got {order}")
    if min(order) < 1:
        raise ValueError(f"`order` has 0 or negative value(s): {order}")
    if has_upg and not integer:
        raise ValueError(
            "has_upg applies to integer IDs only; "
            "use set_upg to assign groups in a character pedigree"
        )

    if integer:
        ped = _read_ped_integer(path, order, has_upg)
        logger.debug(f"Read {ped.n:,} individuals from {path}")
        return ped

    ped, idtable = _read_ped_general(path, order)
    logger.debug(f"Read {ped.n:,} individuals from {path}")
    return ped, idtable
