"""Tests for pedigree file reading and UPG assignment."""

from pathlib import Path

import numpy as np
import pytest
from conftest import HENDERSON_A, HENDERSON_REVERSED_TEXT, HENDERSON_TEXT
from numpy.testing import assert_allclose, assert_array_equal

from pedtools.inbreeding import get_inb
from pedtools.io import read_ped, set_upg
from pedtools.relationship import get_nrminv

UPG_TEXT = "A x y\nB x y\nC A y\nD A B\nE C D\nF A D\nG E F\n"


@pytest.mark.tier0
class TestReadPedCharacter:
    """Tests for read_ped with character IDs."""

    def test_henderson(self, write_ped):
        ped, idtable = read_ped(write_ped(HENDERSON_TEXT))
        assert_array_equal(ped.sire, [0, 0, 1, 1, 3, 1, 5])
        assert_array_equal(ped.dam, [0, 0, 0, 2, 4, 4, 6])
        assert idtable == {
            "0": 0, "A": 1, "B": 2, "C": 3, "D": 4, "E": 5, "F": 6, "G": 7
        }

    def test_codes_by_first_appearance(self, write_ped):
        ped, idtable = read_ped(write_ped(HENDERSON_REVERSED_TEXT))
        assert [idtable[k] for k in "GEFADCB"] == [1, 2, 3, 4, 5, 6, 7]
        assert_array_equal(ped.sire, [2, 6, 4, 0, 4, 4, 0])
        assert_array_equal(ped.dam, [3, 5, 5, 0, 7, 0, 0])

    def test_parent_only_ids_become_founders(self, write_ped):
        ped, idtable = read_ped(write_ped("C A B\n"))
        assert ped.n == 3
        assert idtable == {"0": 0, "C": 1, "A": 2, "B": 3}
        assert_array_equal(ped.sire, [2, 0, 0])
        assert_array_equal(ped.dam, [3, 0, 0])

    def test_blank_lines_and_extra_columns(self, write_ped):
        ped, _ = read_ped(write_ped("A 0 0 1999\n\n   \nB A 0 2001 M\n"))
        assert ped.n == 2
        assert_array_equal(ped.sire, [0, 1])

    def test_column_order(self, write_ped):
        path = write_ped("2001 B A 0\n1999 A 0 0\n")
        ped, idtable = read_ped(path, order=(2, 3, 4))
        assert idtable["B"] == 1 and idtable["A"] == 2
        assert_array_equal(ped.sire, [2, 0])

    def test_duplicate_record_last_wins(self, write_ped, log_messages):
        ped, idtable = read_ped(write_ped("A 0 0\nB 0 0\nA B 0\n"))
        assert ped.n == 2
        assert ped.parents(idtable["A"]) == (2, 0)
        assert any(
            "ID: 'A' appears in this file again" in m for m in log_messages
        )

    def test_empty_file(self, write_ped):
        ped, idtable = read_ped(write_ped(""))
        assert ped.n == 0
        assert idtable == {"0": 0}

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError, match="not found"):
            read_ped(tmp_path / "missing.txt")

    def test_short_line(self, write_ped):
        with pytest.raises(ValueError, match="line 2 has 2 columns"):
            read_ped(write_ped("A 0 0\nB 0\n"))

    def test_bad_order(self, write_ped):
        path = write_ped(HENDERSON_TEXT)
        with pytest.raises(ValueError, match="0 or negative"):
            read_ped(path, order=(0, 1, 2))
        with pytest.raises(ValueError, match="three column positions"):
            read_ped(path, order=(1, 2))

    def test_zero_animal_id_rejected(self, write_ped):
        with pytest.raises(ValueError, match="Invalid ID"):
            read_ped(write_ped("A 0 0\n0 A 0\n"))


@pytest.mark.tier0
class TestReadPedInteger:
    """Tests for read_ped with integer IDs."""

    def test_henderson(self, write_ped):
        text = "1 0 0\n2 0 0\n3 1 0\n4 1 2\n5 3 4\n6 1 4\n7 5 6\n"
        ped = read_ped(write_ped(text), integer=True)
        assert_array_equal(ped.sire, [0, 0, 1, 1, 3, 1, 5])
        assert_array_equal(ped.dam, [0, 0, 0, 2, 4, 4, 6])

    def test_unlisted_codes_are_founders(self, write_ped):
        ped = read_ped(write_ped("5 1 3\n"), integer=True)
        assert ped.n == 5
        assert_array_equal(ped.sire, [0, 0, 0, 0, 1])
        assert_array_equal(ped.dam, [0, 0, 0, 0, 3])

    def test_has_upg_keeps_group_codes(self, write_ped):
        path = write_ped("1 5 6\n2 1 6\n3 5 6\n4 2 3\n")
        ped = read_ped(path, integer=True, has_upg=True)
        assert ped.n == 4
        assert_array_equal(ped.sire, [5, 1, 5, 2])
        assert ped.upg_range == range(5, 7)

    def test_without_has_upg_groups_are_founders(self, write_ped):
        path = write_ped("1 5 6\n2 1 6\n3 5 6\n4 2 3\n")
        ped = read_ped(path, integer=True)
        assert ped.n == 6
        assert ped.parents(5) == (0, 0)
        assert ped.n_upg == 0

    def test_non_integer(self, write_ped):
        with pytest.raises(ValueError, match="non-integer value found"):
            read_ped(write_ped("1 0 0\n2 A 0\n"), integer=True)

    def test_negative_animal_rejected(self, write_ped):
        with pytest.raises(ValueError, match="Invalid ID"):
            read_ped(write_ped("2 0 0\n-1 0 0\n"), integer=True)

    def test_has_upg_needs_integer_ids(self, write_ped):
        with pytest.raises(ValueError, match="integer IDs only"):
            read_ped(write_ped("A 0 0\nB A 0\n"), has_upg=True)


@pytest.mark.tier1
class TestSetUpg:
    """Tests for set_upg."""

    def test_groups_recoded_above_animals(self, write_ped):
        ped, idtable = read_ped(write_ped(UPG_TEXT))
        assert ped.n == 9

        new_ped, new_table = set_upg(ped, idtable, {"x": 1, "y": 2})

        assert new_ped.n == 7
        assert new_table == {
            "0": 0, "A": 1, "x": 8, "y": 9, "B": 2,
            "C": 3, "D": 4, "E": 5, "F": 6, "G": 7,
        }  # fmt: skip
        assert_array_equal(new_ped.sire, [8, 8, 1, 1, 3, 1, 5])
        assert_array_equal(new_ped.dam, [9, 9, 9, 2, 4, 4, 6])
        assert new_ped.upg_range == range(8, 10)

    def test_animal_block_of_ainv(self, write_ped):
        ped, idtable = read_ped(write_ped(UPG_TEXT))
        new_ped, _ = set_upg(ped, idtable, {"x": 1, "y": 2})
        Ainv = get_nrminv(new_ped, get_inb(new_ped)).toarray()
        assert Ainv.shape == (9, 9)
        assert_allclose(Ainv[:7, :7], np.linalg.inv(HENDERSON_A), atol=1e-12)

    def test_shared_group(self, write_ped):
        ped, idtable = read_ped(write_ped(UPG_TEXT))
        new_ped, new_table = set_upg(ped, idtable, {"x": "g", "y": "g"})
        assert new_table["x"] == new_table["y"] == 8
        assert new_ped.max_code == 8

    def test_sort_keys(self, write_ped):
        ped, idtable = read_ped(write_ped("b y 0\na x 0\n"))
        new_ped, new_table = set_upg(ped, idtable, {"x": 1, "y": 2}, sort_keys=True)
        assert new_table == {"0": 0, "a": 1, "b": 2, "x": 3, "y": 4}
        assert_array_equal(new_ped.sire, [3, 4])
        assert_array_equal(new_ped.dam, [0, 0])

    def test_unused_group_ids_ignored(self, write_ped):
        ped, idtable = read_ped(write_ped(UPG_TEXT))
        new_ped, new_table = set_upg(ped, idtable, {"x": 1, "y": 2, "z": 3})
        assert new_ped.n == 7
        assert "z" not in new_table

    def test_no_real_animals(self, write_ped):
        ped, idtable = read_ped(write_ped("x 0 0\n"))
        with pytest.raises(ValueError, match="no real animals"):
            set_upg(ped, idtable, {"x": 1})
