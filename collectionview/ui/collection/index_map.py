"""
IndexViewMap - visible index <-> view bookkeeping.

Forward (index -> view) and reverse (view -> index) dictionaries kept in
sync behind one API. Each reload builds a fresh map with the next
generation number, so an index remembered together with its generation
can be checked against CollectionView.generation before it is used.
"""
from typing import Dict, Generic, Iterator, List, Optional, Set, Tuple, TypeVar

from PySide6.QtWidgets import QWidget


V = TypeVar('V', bound=QWidget)


class IndexViewMap(Generic[V]):
    """
    Bidirectional map between item indexes and their on-screen views.

    A view is registered under at most one index and an index holds at
    most one view. Re-assigning either side drops the stale pairing.
    """

    def __init__(self, generation: int = 0):
        self._generation = generation
        self._views: Dict[int, V] = {}
        self._indexes: Dict[V, int] = {}

    @property
    def generation(self) -> int:
        return self._generation

    def next_generation(self) -> "IndexViewMap[V]":
        """Return an empty map for the next reload."""
        return IndexViewMap(self._generation + 1)

    def set(self, index: int, view: V):
        if index < 0:
            raise ValueError(f"Negative index {index}")
        old_view = self._views.pop(index, None)
        if old_view is not None:
            self._indexes.pop(old_view, None)
        old_index = self._indexes.pop(view, None)
        if old_index is not None:
            self._views.pop(old_index, None)
        self._views[index] = view
        self._indexes[view] = index

    def view_at(self, index: int) -> Optional[V]:
        return self._views.get(index)

    def index_of(self, view: V) -> Optional[int]:
        return self._indexes.get(view)

    def remove_index(self, index: int) -> Optional[V]:
        view = self._views.pop(index, None)
        if view is not None:
            self._indexes.pop(view, None)
        return view

    def remove_view(self, view: V) -> Optional[int]:
        index = self._indexes.pop(view, None)
        if index is not None:
            self._views.pop(index, None)
        return index

    def contains_view(self, view: V) -> bool:
        return view in self._indexes

    def __contains__(self, index: int) -> bool:
        return index in self._views

    def __len__(self) -> int:
        return len(self._views)

    def __iter__(self) -> Iterator[int]:
        return iter(list(self._views))

    def items(self) -> List[Tuple[int, V]]:
        return list(self._views.items())

    def indexes(self) -> Set[int]:
        return set(self._views)

    def views(self) -> List[V]:
        return list(self._views.values())
