"""Tests for planbook/editing.py — prefill, validation and batch building."""

import pytest

from planbook.editing import EditSession, build_batch, prefill_for
from planbook.errors import ValidationError
from planbook.grid import Grid
from planbook.models import Activity, CellKey
from planbook.selection import SelectionEngine


def make_grid():
    return Grid.from_activities([
        Activity(18, 1, "Read"),
        Activity(18, 2, "Read"),
        Activity(19, 1, "Gym"),
    ])


def test_prefill_shared_value():
    assert prefill_for([CellKey(18, 1), CellKey(18, 2)], make_grid()) == "Read"


def test_prefill_differing_values():
    assert prefill_for([CellKey(18, 1), CellKey(19, 1)], make_grid()) == ""


def test_prefill_filled_and_empty_mix():
    assert prefill_for([CellKey(18, 1), CellKey(20, 5)], make_grid()) == ""


def test_prefill_empty_selection():
    assert prefill_for([], make_grid()) == ""


def test_build_batch_trims_and_sorts():
    batch = build_batch("  Gym ", [CellKey(19, 3), CellKey(18, 2)])
    assert batch == [Activity(18, 2, "Gym"), Activity(19, 3, "Gym")]


def test_build_batch_requires_text():
    with pytest.raises(ValidationError, match="required"):
        build_batch("   ", [CellKey(18, 2)])


def test_build_batch_requires_cells():
    with pytest.raises(ValidationError, match="No cells"):
        build_batch("Gym", [])


def test_session_open_and_commit():
    engine = SelectionEngine()
    engine.select([CellKey(18, 1), CellKey(18, 2)])
    session = EditSession(engine)
    assert session.open(engine.selection, make_grid()) == "Read"
    assert session.is_open
    batch = session.commit("Write")
    assert [a.activity_text for a in batch] == ["Write", "Write"]
    # committing does not close the session by itself
    assert session.is_open


def test_session_open_empty_selection():
    session = EditSession(SelectionEngine())
    assert session.open([], make_grid()) is None
    assert not session.is_open


def test_session_commit_blank_keeps_draft():
    engine = SelectionEngine()
    engine.select([CellKey(18, 1)])
    session = EditSession(engine)
    session.open(engine.selection, make_grid())
    with pytest.raises(ValidationError):
        session.commit("  ")
    assert session.is_open
    assert session.draft == "  "
    assert engine.selection == {CellKey(18, 1)}


def test_session_close_clears_selection():
    engine = SelectionEngine()
    engine.select([CellKey(18, 1)])
    session = EditSession(engine)
    session.open(engine.selection, make_grid())
    session.close()
    assert not session.is_open
    assert session.draft == ""
    assert session.cells == frozenset()
    assert engine.selection == frozenset()


def test_session_cancel():
    engine = SelectionEngine()
    engine.select([CellKey(20, 2)])
    session = EditSession(engine)
    session.open(engine.selection, Grid())
    session.cancel()
    assert not session.is_open
    assert engine.selection == frozenset()
