"""Pedigree file input and UPG assignment."""

from pedtools.io.groups import set_upg
from pedtools.io.pedfile import read_ped

__all__ = ["read_ped", "set_upg"]
