"""Inbreeding coefficients from pedigree.

Key functions:
- get_inb: Meuwissen and Luo (1992) inbreeding coefficients
"""

from pedtools.inbreeding.meuwissen_luo import SUPPORTED_METHODS, get_inb

__all__ = ["SUPPORTED_METHODS", "get_inb"]
