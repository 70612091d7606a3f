"""
CollectionDelegate - drag and reorder decisions.

A CollectionView without a delegate never starts a drag.
"""
from typing import Callable, Optional

from loguru import logger
from PySide6.QtWidgets import QWidget

from collectionview.ui.collection.provider import ArrayCollectionProvider


class CollectionDelegate:
    """
    Optional hooks consulted by the MoveManager.

    Defaults refuse everything, so subclasses opt in.
    """

    def will_drag(self, view: QWidget, index: int) -> bool:
        """Return True to let the long-pressed item float and follow the pointer."""
        return False

    def move_item(self, from_index: int, to_index: int) -> bool:
        """
        Apply a reorder to the data source.

        Return True once the data reflects the move; the collection view
        then reloads and the dragged view keeps its identity.
        """
        return False

    def did_drag(self, view: QWidget, index: int):
        pass


class ReorderDelegate(CollectionDelegate):
    """
    Drag-to-reorder for an ArrayCollectionProvider.

    Example:
        collection.delegate = ReorderDelegate(provider)
    """

    def __init__(
        self,
        provider: ArrayCollectionProvider,
        can_drag: Optional[Callable[[int], bool]] = None,
        on_drop: Optional[Callable[[QWidget, int], None]] = None,
    ):
        self.provider = provider
        self._can_drag = can_drag
        self._on_drop = on_drop

    def will_drag(self, view: QWidget, index: int) -> bool:
        if self._can_drag is None:
            return True
        return self._can_drag(index)

    def move_item(self, from_index: int, to_index: int) -> bool:
        moved = self.provider.move(from_index, to_index)
        if moved:
            logger.debug(f"Moved item {from_index} -> {to_index}")
        return moved

    def did_drag(self, view: QWidget, index: int):
        if self._on_drop is not None:
            self._on_drop(view, index)
