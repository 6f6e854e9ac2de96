"""Configuration dataclasses for pedtools runs.

OutputConfig controls where the command-line run log goes; PedigreeFileConfig
describes how a pedigree file is to be read.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class OutputConfig:
    """Output location and console verbosity for a command-line run.

    Results are printed to stdout; only the run log is written to disk.

    Attributes:
        outdir: Directory for the run log. Created on first write.
        prefix: Run name; "herd" produces "herd.log.txt".
        verbose: DEBUG-level console logging and progress bars.
    """

    outdir: Path = field(default_factory=lambda: Path("output"))
    prefix: str = "result"
    verbose: bool = False

    @property
    def log_path(self) -> Path:
        """Path of the run log, ``{outdir}/{prefix}.log.txt``."""
        return self.outdir / f"{self.prefix}.log.txt"

    def ensure_outdir(self) -> None:
        self.outdir.mkdir(parents=True, exist_ok=True)


@dataclass
class PedigreeFileConfig:
    """How to read a pedigree file.

    Attributes:
        path: Pedigree file.
        integer: IDs are integer codes rather than arbitrary strings.
        has_upg: Integer parent codes above the largest animal code are
            unknown-parent groups. Character pedigrees get groups through
            set_upg instead.
        order: 1-based columns of animal, sire and dam.

    Raises:
        ValueError: If ``has_upg`` is set without ``integer``.
    """

    path: Path
    integer: bool = False
    has_upg: bool = False
    order: tuple[int, int, int] = (1, 2, 3)

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        if self.has_upg and not self.integer:
            raise ValueError(
                "has_upg applies to integer IDs only; "
                "use set_upg to assign groups in a character pedigree"
            )
