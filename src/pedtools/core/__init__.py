"""Core services for pedtools.

This package contains run-level helpers shared by the engines and the CLI:
- config: Output and pedigree-file configuration dataclasses
- memory: Memory estimation and checks for dense matrices
- progress: Progress bars for long per-individual loops
"""

from pedtools.core.config import OutputConfig, PedigreeFileConfig
from pedtools.core.memory import (
    MemorySnapshot,
    NrmMemoryEstimate,
    check_memory_available,
    estimate_nrm_memory,
    get_memory_snapshot,
    log_memory_snapshot,
)
from pedtools.core.progress import maybe_progress, progress_iterator

__all__ = [
    "OutputConfig",
    "PedigreeFileConfig",
    "MemorySnapshot",
    "NrmMemoryEstimate",
    "check_memory_available",
    "estimate_nrm_memory",
    "get_memory_snapshot",
    "log_memory_snapshot",
    "maybe_progress",
    "progress_iterator",
]
