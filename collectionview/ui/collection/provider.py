"""
CollectionProvider - what a CollectionView asks its data source for.

Required capabilities are abstract: item count, frame, identifier and view
per index. Everything else is an optional hook with a working default, so a
provider overrides only what it cares about.
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Generic, List, Optional, Sequence, Type, TypeVar, Union

from PySide6.QtCore import QMarginsF, QRectF, QSizeF
from PySide6.QtWidgets import QWidget

from collectionview.ui.collection.animators import CollectionAnimator
from collectionview.ui.collection.layouts import CollectionLayout, ListLayout
from collectionview.ui.collection.reuse_pool import ReusePool

if TYPE_CHECKING:
    from collectionview.ui.collection.collection_view import CollectionView


V = TypeVar('V', bound=QWidget)


class CollectionProvider(ABC):
    """
    Data source and per-view lifecycle hooks for a CollectionView.

    Required:
        item_count, frame, identifier, view

    Optional (defaults shown):
        insets -> no padding
        prepare(size), will_reload(), did_reload() -> nothing
        insert/delete/update -> forwarded to self.animator
        stop_animation(view) -> forwarded to self.animator.stop
        did_tap(view, index) -> nothing
    """

    def __init__(self, animator: CollectionAnimator | None = None):
        self.animator = animator or CollectionAnimator()
        self.collection_view: Optional['CollectionView'] = None

    # --- Required ---

    @abstractmethod
    def item_count(self) -> int:
        ...

    @abstractmethod
    def frame(self, index: int) -> QRectF:
        ...

    @abstractmethod
    def identifier(self, index: int) -> str:
        ...

    @abstractmethod
    def view(self, index: int) -> QWidget:
        """Return a view for index, recycled through dequeue() when possible."""
        ...

    # --- Optional ---

    def insets(self) -> QMarginsF:
        return QMarginsF()

    def prepare(self, size: QSizeF):
        """Called at the start of each reload with the viewport size."""
        pass

    def prepare_collection_view(self, collection_view: 'CollectionView'):
        self.animator.prepare(collection_view)

    def will_reload(self):
        pass

    def did_reload(self):
        pass

    def insert(self, view: QWidget, index: int, frame: QRectF):
        self.animator.insert(view, index, frame)

    def delete(self, view: QWidget, index: int, frame: QRectF):
        self.animator.delete(view, index, frame)

    def update(self, view: QWidget, index: int, frame: QRectF | None = None):
        """
        Update hook.

        Called without a frame when the view is (re)bound to index, and with
        a frame when it should move to that frame.
        """
        if frame is not None:
            self.animator.update(view, index, frame)

    def stop_animation(self, view: QWidget):
        self.animator.stop(view)

    def did_tap(self, view: QWidget, index: int):
        pass

    # --- Helpers ---

    @property
    def reuse_pool(self) -> ReusePool:
        if self.collection_view is not None:
            return self.collection_view.reuse_pool
        return ReusePool.shared()

    def dequeue(self, view_class: Type[V]) -> Optional[V]:
        return self.reuse_pool.dequeue(view_class)


class ArrayCollectionProvider(CollectionProvider, Generic[V]):
    """
    Provider over a Python list.

    Features:
    - Views built from view_class, recycled through the reuse pool
    - configure(view, item, index) binds an item to a view
    - Frames from a CollectionLayout (ListLayout by default)
    - move() for drag-reorder delegates

    Example:
        provider = ArrayCollectionProvider(
            ["a", "b", "c"],
            QLabel,
            configure=lambda view, item, index: view.setText(item),
            size=QSizeF(0, 44),
        )
    """

    def __init__(
        self,
        data: Sequence[Any] | None = None,
        view_class: Type[V] = QWidget,
        *,
        configure: Callable[[V, Any, int], None] | None = None,
        identifier: Callable[[Any, int], str] | None = None,
        size: Union[QSizeF, Callable[[Any, int, QSizeF], QSizeF]] = QSizeF(100, 44),
        layout: CollectionLayout | None = None,
        insets: QMarginsF | None = None,
        on_tap: Callable[[V, Any, int], None] | None = None,
        animator: CollectionAnimator | None = None,
    ):
        super().__init__(animator)
        self._data: List[Any] = list(data or [])
        self.view_class = view_class
        self._configure = configure
        self._identifier = identifier or (lambda item, index: str(item))
        self._size = size
        self.layout = layout or ListLayout()
        self._insets = insets or QMarginsF()
        self._on_tap = on_tap

    # --- Data ---

    @property
    def data(self) -> List[Any]:
        return self._data

    @data.setter
    def data(self, items: Sequence[Any]):
        self._data = list(items)

    def item_at(self, index: int) -> Any:
        return self._data[index]

    def move(self, from_index: int, to_index: int) -> bool:
        """Move one item; returns False for out of range indexes."""
        count = len(self._data)
        if not (0 <= from_index < count and 0 <= to_index < count):
            return False
        item = self._data.pop(from_index)
        self._data.insert(to_index, item)
        return True

    # --- Provider ---

    def item_count(self) -> int:
        return len(self._data)

    def identifier(self, index: int) -> str:
        return self._identifier(self._data[index], index)

    def insets(self) -> QMarginsF:
        return QMarginsF(self._insets)

    def prepare(self, size: QSizeF):
        inner = QSizeF(
            max(0.0, size.width() - self._insets.left() - self._insets.right()),
            max(0.0, size.height() - self._insets.top() - self._insets.bottom()),
        )
        self.layout.prepare(inner, len(self._data), self._size_for)

    def frame(self, index: int) -> QRectF:
        return self.layout.frame(index)

    def view(self, index: int) -> V:
        view = self.dequeue(self.view_class)
        if view is None:
            view = self.view_class()
        return view

    def update(self, view: V, index: int, frame: QRectF | None = None):
        if frame is None:
            if self._configure is not None:
                self._configure(view, self._data[index], index)
        else:
            super().update(view, index, frame)

    def did_tap(self, view: V, index: int):
        if self._on_tap is not None:
            self._on_tap(view, self._data[index], index)

    def _size_for(self, index: int, container: QSizeF) -> QSizeF:
        if callable(self._size):
            return self._size(self._data[index], index, container)
        return QSizeF(self._size)
