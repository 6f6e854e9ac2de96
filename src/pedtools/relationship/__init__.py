"""Additive relationship matrices from pedigree.

Key functions:
- get_nrm: Dense A-matrix by the tabular method
- get_nrminv: Sparse A-inverse by Henderson's rules, with UPG rows
- get_mgsnrminv: Sparse A-inverse for sire / maternal-grandsire models
- get_qm: Q-matrix of group contributions (Quaas 1988)
- get_pm: P-matrix linking progeny to parents
"""

from pedtools.relationship.inverse import get_mgsnrminv, get_nrminv
from pedtools.relationship.tabular import get_nrm
from pedtools.relationship.upg import get_pm, get_qm

__all__ = [
    "get_mgsnrminv",
    "get_nrm",
    "get_nrminv",
    "get_pm",
    "get_qm",
]
