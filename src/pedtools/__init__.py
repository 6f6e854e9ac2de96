"""pedtools: pedigree processing for animal breeding.

pedtools validates and renumbers pedigrees and computes the quantities that
genetic evaluation needs from them: inbreeding coefficients, the numerator
relationship matrix A and its sparse inverse, and the Q and P matrices for
unknown-parent group models.

Key features:
- Role, loop and chronological-order checks
- Ancestor-first renumbering and sub-pedigree extraction
- Meuwissen & Luo inbreeding
- Henderson's rules for A-inverse, with unknown-parent groups

Example:
    >>> from pedtools import get_inb, get_nrminv, read_ped
    >>> ped, idtable = read_ped("pedigree.txt")
    >>> f = get_inb(ped, sort_here=True)
    >>> Ainv = get_nrminv(ped, f)
"""

from importlib.metadata import version

__version__ = version("pedtools")

from pedtools.utils.logging import setup_logging  # noqa: E402

# Configure loguru with sensible defaults on import
# Users can override by calling logger.remove()/add()
setup_logging()

from pedtools.inbreeding import get_inb  # noqa: E402
from pedtools.io import read_ped, set_upg  # noqa: E402
from pedtools.pedigree import (  # noqa: E402
    MAX_GENERATIONS,
    CheckResult,
    IdTable,
    Pedigree,
    Permutation,
    check_ped,
    extract_ped,
    find_ped_order,
    get_upg_range,
    has_loop,
    invsubidx,
    mgs_ped,
    permute_ped,
    subset_ped,
)
from pedtools.relationship import (  # noqa: E402
    get_mgsnrminv,
    get_nrm,
    get_nrminv,
    get_pm,
    get_qm,
)

__all__ = [
    "MAX_GENERATIONS",
    "CheckResult",
    "IdTable",
    "Pedigree",
    "Permutation",
    "__version__",
    "check_ped",
    "extract_ped",
    "find_ped_order",
    "get_inb",
    "get_mgsnrminv",
    "get_nrm",
    "get_nrminv",
    "get_pm",
    "get_qm",
    "get_upg_range",
    "has_loop",
    "invsubidx",
    "mgs_ped",
    "permute_ped",
    "read_ped",
    "set_upg",
    "subset_ped",
]
