"""
IdentifierTable and IndexViewMap Tests.
"""
import pytest
from PySide6.QtWidgets import QWidget

from collectionview.ui.collection import IdentifierTable, IndexViewMap


class TestIdentifierTable:
    def test_unique_identifiers_kept(self):
        table = IdentifierTable.build(["a", "b", "c"])
        assert table.identifiers == ["a", "b", "c"]
        assert table.index_of("b") == 1
        assert table.identifier_at(2) == "c"
        assert len(table) == 3

    def test_duplicates_get_numeric_suffix(self):
        table = IdentifierTable.build(["a", "a", "a"])
        assert table.identifiers == ["a", "a2", "a3"]
        assert {table.index_of(key) for key in table.identifiers} == {0, 1, 2}

    def test_suffix_skips_taken_names(self):
        table = IdentifierTable.build(["a2", "a", "a"])
        assert table.identifiers == ["a2", "a", "a3"]

    def test_missing_identifier(self):
        table = IdentifierTable.build(["x"])
        assert table.index_of("y") is None
        assert "x" in table
        assert "y" not in table


class TestIndexViewMap:
    def test_set_and_lookup(self, qapp):
        views = IndexViewMap()
        view = QWidget()
        views.set(3, view)
        assert views.view_at(3) is view
        assert views.index_of(view) == 3
        assert 3 in views
        assert views.contains_view(view)

    def test_reassigning_view_drops_old_index(self, qapp):
        views = IndexViewMap()
        view = QWidget()
        views.set(1, view)
        views.set(4, view)
        assert views.view_at(1) is None
        assert views.index_of(view) == 4
        assert len(views) == 1

    def test_reassigning_index_drops_old_view(self, qapp):
        views = IndexViewMap()
        old, new = QWidget(), QWidget()
        views.set(2, old)
        views.set(2, new)
        assert not views.contains_view(old)
        assert views.view_at(2) is new

    def test_remove(self, qapp):
        views = IndexViewMap()
        a, b = QWidget(), QWidget()
        views.set(0, a)
        views.set(1, b)
        assert views.remove_index(0) is a
        assert views.remove_view(b) == 1
        assert len(views) == 0

    def test_generations(self, qapp):
        views = IndexViewMap()
        view = QWidget()
        views.set(0, view)
        following = views.next_generation()
        assert following.generation == views.generation + 1
        assert len(following) == 0
        assert views.view_at(0) is view
        assert following.view_at(0) is None

    def test_negative_index_rejected(self, qapp):
        with pytest.raises(ValueError):
            IndexViewMap().set(-1, QWidget())
