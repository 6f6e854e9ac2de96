"""Memory estimation and checking for dense relationship matrices.

The tabular A-matrix is O(n^2) in memory; these helpers let callers fail
fast with a clear message instead of being killed by the OOM killer.
"""

from typing import NamedTuple

import psutil
from loguru import logger


class NrmMemoryEstimate(NamedTuple):
    """Memory estimate for a dense relationship matrix.

    All values in GB.
    """

    matrix_gb: float  # n^2 * 8 bytes (float64)
    reorder_gb: float  # second n^2 copy when sorting internally, else 0
    total_gb: float
    available_gb: float
    sufficient: bool  # Whether available >= total * 1.1


def estimate_nrm_memory(n_animals: int, sort_here: bool = False) -> NrmMemoryEstimate:
    """Estimate peak memory (GB) for the dense tabular A-matrix.

    With ``sort_here`` the matrix is built in ancestor-first order and then
    reindexed to the input order, so two full matrices coexist.

    Args:
        n_animals: Number of individuals (matrix dimension).
        sort_here: Whether the caller asks for internal reordering.

    Returns:
        NrmMemoryEstimate with component sizes and availability.

    Example:
        >>> est = estimate_nrm_memory(50_000)
        >>> round(est.matrix_gb)
        20
    """
    matrix_gb = n_animals**2 * 8 / 1e9
    reorder_gb = matrix_gb if sort_here else 0.0
    total_gb = matrix_gb + reorder_gb
    available_gb = psutil.virtual_memory().available / 1e9
    return NrmMemoryEstimate(
        matrix_gb=matrix_gb,
        reorder_gb=reorder_gb,
        total_gb=total_gb,
        available_gb=available_gb,
        sufficient=total_gb * 1.1 < available_gb,
    )


def check_memory_available(
    required_gb: float,
    safety_margin: float = 0.1,
    operation: str = "operation",
) -> bool:
    """Check if sufficient memory is available, raise if not.

    Args:
        required_gb: Memory required in GB.
        safety_margin: Additional margin (0.1 = 10%).
        operation: Description for error message.

    Returns:
        True if sufficient memory available.

    Raises:
        MemoryError: If insufficient memory with detailed message.
    """
    available_gb = psutil.virtual_memory().available / 1e9
    required_with_margin = required_gb * (1 + safety_margin)

    if required_with_margin > available_gb:
        raise MemoryError(
            f"Insufficient memory for {operation}. "
            f"Need {required_gb:.1f}GB (+{safety_margin*100:.0f}% margin = "
            f"{required_with_margin:.1f}GB), but only {available_gb:.1f}GB available. "
            f"Use the sparse inverse (get_nrminv) or a smaller pedigree."
        )

    return True


class MemorySnapshot(NamedTuple):
    """Snapshot of current memory state for debugging.

    All values in GB.
    """

    rss_gb: float  # Resident Set Size (actual RAM used by process)
    available_gb: float  # Available system memory
    total_gb: float  # Total system memory
    percent_used: float  # Percentage of total system memory in use


def get_memory_snapshot() -> MemorySnapshot:
    """Get current memory usage snapshot."""
    vm = psutil.virtual_memory()
    return MemorySnapshot(
        rss_gb=psutil.Process().memory_info().rss / 1e9,
        available_gb=vm.available / 1e9,
        total_gb=vm.total / 1e9,
        percent_used=((vm.total - vm.available) / vm.total) * 100,
    )


def log_memory_snapshot(label: str = "", level: str = "DEBUG") -> MemorySnapshot:
    """Log current memory state with optional label.

    Args:
        label: Optional label for this snapshot (e.g., "before_nrm").
        level: Log level ("DEBUG", "INFO", "WARNING").

    Returns:
        MemorySnapshot for chaining/assertions.
    """
    snap = get_memory_snapshot()
    label_str = f" [{label}]" if label else ""
    logger.log(
        level,
        f"Memory{label_str}: RSS={snap.rss_gb:.1f}GB, "
        f"Available={snap.available_gb:.1f}GB/{snap.total_gb:.1f}GB "
        f"({snap.percent_used:.1f}% used)",
    )
    return snap
