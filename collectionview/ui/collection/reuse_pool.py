"""
ReusePool - Retired item views kept for recycling.

Views leaving the screen are parked here keyed by their concrete class and
handed back to providers that need a view of the same class. The pool is
emptied by a single-shot idle timer after the last retirement, which bounds
the memory held after a fast scroll burst.
"""
from typing import ClassVar, Dict, List, Optional, Type, TypeVar

from loguru import logger
from PySide6.QtCore import QObject, QTimer
from PySide6.QtWidgets import QWidget


T = TypeVar('T', bound=QWidget)


class ReusePool(QObject):
    """
    Keyed stacks of retired views.

    Features:
    - One stack per view class, most recently queued view comes back first
    - prepare_for_reuse() hook called on dequeue when the view defines it
    - Whole pool purged when no view was queued for cleanup_ms

    Example:
        pool = ReusePool.shared()

        # item scrolled away
        pool.queue(view)

        # provider building a view for another item
        view = pool.dequeue(TileView) or TileView()
    """

    _shared: ClassVar[Optional["ReusePool"]] = None

    def __init__(self, cleanup_ms: int = 100, parent: QObject | None = None):
        """
        Initialize reuse pool.

        Args:
            cleanup_ms: Idle time after the last queue() before purging
            parent: Optional QObject parent
        """
        super().__init__(parent)
        self._views: Dict[Type[QWidget], List[QWidget]] = {}

        self._cleanup_timer = QTimer(self)
        self._cleanup_timer.setSingleShot(True)
        self._cleanup_timer.setInterval(cleanup_ms)
        self._cleanup_timer.timeout.connect(self.purge)

    @classmethod
    def shared(cls) -> "ReusePool":
        """Process-wide pool used by views that were not given their own."""
        if cls._shared is None:
            cls._shared = cls()
        return cls._shared

    @classmethod
    def reset_shared(cls):
        """Drop the process-wide pool (tests, application shutdown)."""
        if cls._shared is not None:
            cls._shared.purge()
            cls._shared = None

    @property
    def cleanup_ms(self) -> int:
        return self._cleanup_timer.interval()

    @cleanup_ms.setter
    def cleanup_ms(self, value: int):
        self._cleanup_timer.setInterval(value)

    @property
    def cleanup_pending(self) -> bool:
        """True while the idle purge timer is running."""
        return self._cleanup_timer.isActive()

    @property
    def total_count(self) -> int:
        return sum(len(stack) for stack in self._views.values())

    def count(self, view_class: Type[QWidget]) -> int:
        return len(self._views.get(view_class, []))

    def __contains__(self, view: QWidget) -> bool:
        return any(view in stack for stack in self._views.values())

    def queue(self, view: QWidget):
        """
        Retire a view into the pool.

        The view is detached from its parent and hidden first. Queueing a
        view that is already pooled only restarts the idle timer.
        """
        if view.parent() is not None:
            view.setParent(None)
        view.hide()

        stack = self._views.setdefault(type(view), [])
        if view not in stack:
            stack.append(view)
            logger.trace(f"Queued {type(view).__name__} ({len(stack)} pooled)")

        self._cleanup_timer.start()

    def dequeue(self, view_class: Type[T]) -> Optional[T]:
        """
        Take the most recently queued view of view_class.

        Returns:
            Recycled view, or None when the pool has none of that class
        """
        stack = self._views.get(view_class)
        if not stack:
            return None
        view = stack.pop()
        if hasattr(view, 'prepare_for_reuse'):
            view.prepare_for_reuse()
        logger.trace(f"Dequeued {view_class.__name__} ({len(stack)} left)")
        return view

    def purge(self):
        """Drop every pooled view."""
        self._cleanup_timer.stop()
        purged = 0
        for stack in self._views.values():
            for view in stack:
                view.deleteLater()
            purged += len(stack)
        self._views.clear()
        if purged:
            logger.debug(f"Purged {purged} pooled views")
