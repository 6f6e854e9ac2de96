"""Pytest fixtures for the pedtools test suite."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import numpy as np
import pytest
from loguru import logger

from pedtools.pedigree import Pedigree

# =============================================================================
# Test Tier System
# =============================================================================
#
# tier0 - Fast unit tests
#   - Pure computation on tiny hand-made pedigrees, files only in tmp_path
#   - Run: pytest -m tier0
#
# tier1 - Reference-value tests
#   - Checks against published textbook pedigrees (Henderson 1976,
#     Quaas 1988) and hand-derived matrices
#   - Run: pytest -m tier1
#
# slow - Property tests over random pedigrees (hypothesis)
#   - Run: pytest -m "not slow" to skip
#
# Quick reference:
#   pytest -m tier0             # Fast tests only
#   pytest -m "tier0 or tier1"  # Fast + reference values
#   pytest                      # All tests
# =============================================================================

# Henderson (1976) example: 7 animals, coded ancestor-first.
HENDERSON_TEXT = "A 0 0\nB 0 0\nC A 0\nD A B\nE C D\nF A D\nG E F\n"

# Same pedigree written progeny-first: codes G1 E2 F3 A4 D5 C6 B7.
HENDERSON_REVERSED_TEXT = "G E F\nF A D\nE C D\nD A B\nC A 0\nB 0 0\nA 0 0\n"

HENDERSON_A = np.array(
    [
        [1.0, 0.0, 0.5, 0.5, 0.5, 0.75, 0.625],
        [0.0, 1.0, 0.0, 0.5, 0.25, 0.25, 0.25],
        [0.5, 0.0, 1.0, 0.25, 0.625, 0.375, 0.5],
        [0.5, 0.5, 0.25, 1.0, 0.625, 0.75, 0.6875],
        [0.5, 0.25, 0.625, 0.625, 1.125, 0.5625, 0.84375],
        [0.75, 0.25, 0.375, 0.75, 0.5625, 1.25, 0.90625],
        [0.625, 0.25, 0.5, 0.6875, 0.84375, 0.90625, 1.28125],
    ]
)

HENDERSON_F = np.array([0.0, 0.0, 0.0, 0.0, 0.125, 0.25, 0.28125])


@pytest.fixture
def henderson_ped() -> Pedigree:
    """Henderson (1976) 7-animal pedigree, ancestor-first."""
    return Pedigree(
        np.array([0, 0, 1, 1, 3, 1, 5]),
        np.array([0, 0, 0, 2, 4, 4, 6]),
    )


@pytest.fixture
def henderson_reversed_ped() -> Pedigree:
    """Henderson pedigree coded G1 E2 F3 A4 D5 C6 B7 (progeny first)."""
    return Pedigree(
        np.array([2, 6, 4, 0, 4, 4, 0]),
        np.array([3, 5, 5, 0, 7, 0, 0]),
    )


@pytest.fixture
def quaas_ped() -> Pedigree:
    """Quaas (1988) example: 4 animals, unknown parents in groups 5 and 6."""
    return Pedigree.from_pairs([(5, 6), (1, 6), (5, 6), (2, 3)])


@pytest.fixture
def fifteen_ped() -> Pedigree:
    """15-animal pedigree with several inbred individuals, ancestor-first."""
    return Pedigree(
        np.array([0, 0, 0, 0, 0, 0, 2, 1, 2, 7, 7, 11, 11, 9, 11]),
        np.array([0, 0, 0, 0, 0, 0, 5, 4, 3, 6, 4, 8, 10, 13, 10]),
    )


@pytest.fixture
def write_ped(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a helper writing pedigree text to a file under tmp_path."""

    def _write(text: str, name: str = "ped.txt") -> Path:
        path = tmp_path / name
        path.write_text(text)
        return path

    return _write


@pytest.fixture
def log_messages():
    """Capture loguru messages at WARNING and above."""
    messages: list[str] = []
    handler_id = logger.add(
        lambda msg: messages.append(msg.record["message"]), level="WARNING"
    )
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Create temporary output directory for test results."""
    out = tmp_path / "output"
    out.mkdir()
    return out
