"""
CollectionView - Virtualized, identity-diffing item view engine.

Only items whose frame intersects the active rect get a view. Views that
leave the rect go to the reuse pool; on reload, items are matched to their
previous views by identifier so a moved, resized or re-indexed item keeps
the same widget instance.

Re-entrancy: everything runs on the GUI thread. reload_data() and
load_cells() set the reloading / loading flags; nested calls to either are
no-ops and index_of() refuses to answer while the index space is being
rebuilt.
"""
from typing import Callable, List, Optional

from loguru import logger
from PySide6.QtCore import QMarginsF, QObject, QPointF, QRectF, QSizeF, Signal
from PySide6.QtWidgets import QWidget

from collectionview.core.config import CollectionSettings, DragSettings
from collectionview.ui.collection.delegate import CollectionDelegate
from collectionview.ui.collection.errors import PreconditionError
from collectionview.ui.collection.identifiers import IdentifierTable
from collectionview.ui.collection.index_map import IndexViewMap
from collectionview.ui.collection.move_manager import MoveManager
from collectionview.ui.collection.provider import CollectionProvider
from collectionview.ui.collection.reuse_pool import ReusePool
from collectionview.ui.collection.surface import ScrollSurface
from collectionview.ui.collection.visible_indexes import VisibleIndexes


OffsetAdjustment = Callable[[], QPointF]


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


class CollectionView(QObject):
    """
    Virtualization engine bound to a ScrollSurface.

    Signals:
        reloaded()  emitted after every completed reload_data()

    Example:
        surface = QtScrollSurface()
        collection = CollectionView(surface)
        collection.provider = ArrayCollectionProvider(items, TileView, configure=bind_tile)
        collection.delegate = ReorderDelegate(collection.provider)
        collection.reload_data()
    """

    reloaded = Signal()

    def __init__(
        self,
        surface: ScrollSurface,
        provider: CollectionProvider | None = None,
        settings: CollectionSettings | None = None,
        drag_settings: DragSettings | None = None,
        reuse_pool: ReusePool | None = None,
        parent: QObject | None = None
    ):
        super().__init__(parent)
        self._settings = settings or CollectionSettings()
        self._surface = surface
        self._provider: Optional[CollectionProvider] = None
        self.delegate: Optional[CollectionDelegate] = None

        if reuse_pool is None:
            reuse_pool = ReusePool.shared()
            reuse_pool.cleanup_ms = self._settings.pool_cleanup_ms
        self._reuse_pool = reuse_pool

        # Geometry table and identity of the last reload
        self._frames: List[QRectF] = []
        self._identifiers = IdentifierTable()
        self._views: IndexViewMap[QWidget] = IndexViewMap()
        self._floating: set[QWidget] = set()
        self._visibility = VisibleIndexes(
            optimize_for_continuous_layout=self._settings.optimize_for_continuous_layout,
            max_reseeds=self._settings.max_visibility_reseeds,
        )

        self._reloading = False
        self._loading = False
        self._has_reloaded = False
        self._active_frame_slop: Optional[QMarginsF] = None
        self._minimum_content_size = QSizeF()
        self._last_reload_size: Optional[QSizeF] = None

        self.move_manager = MoveManager(self, drag_settings)

        surface.scrolled.connect(self._on_scrolled)
        surface.resized.connect(self._on_resized)
        surface.tapped.connect(self._on_tapped)

        if provider is not None:
            self.provider = provider

    # --- Properties ---

    @property
    def provider(self) -> Optional[CollectionProvider]:
        return self._provider

    @provider.setter
    def provider(self, provider: Optional[CollectionProvider]):
        if self._provider is not None:
            self._provider.collection_view = None
        self._provider = provider
        if provider is not None:
            provider.collection_view = self

    @property
    def surface(self) -> ScrollSurface:
        return self._surface

    @property
    def reuse_pool(self) -> ReusePool:
        return self._reuse_pool

    @property
    def settings(self) -> CollectionSettings:
        return self._settings

    @property
    def item_count(self) -> int:
        return len(self._frames)

    @property
    def has_reloaded(self) -> bool:
        return self._has_reloaded

    @property
    def reloading(self) -> bool:
        return self._reloading

    @property
    def generation(self) -> int:
        """Incremented by every reload; stamps the current index space."""
        return self._views.generation

    @property
    def visible_indexes(self) -> set[int]:
        return self._views.indexes()

    @property
    def visible_views(self) -> List[QWidget]:
        return self._views.views()

    @property
    def floating_views(self) -> set[QWidget]:
        return set(self._floating)

    @property
    def frames(self) -> List[QRectF]:
        return [QRectF(frame) for frame in self._frames]

    @property
    def active_frame_slop(self) -> Optional[QMarginsF]:
        return self._active_frame_slop

    @active_frame_slop.setter
    def active_frame_slop(self, slop: Optional[QMarginsF]):
        self._active_frame_slop = QMarginsF(slop) if slop is not None else None
        if not self._reloading:
            self.load_cells()

    @property
    def minimum_content_size(self) -> QSizeF:
        return QSizeF(self._minimum_content_size)

    @minimum_content_size.setter
    def minimum_content_size(self, size: QSizeF):
        self._minimum_content_size = QSizeF(size)
        current = self._surface.content_size()
        expanded = current.expandedTo(size)
        if expanded != current:
            self._surface.set_content_size(expanded)

    def active_frame(self) -> QRectF:
        """
        Rect used for visibility tests.

        The visible rect grows along each axis with scroll velocity
        (|v| / divisor, clamped to the min/max extension) so views are
        loaded a little ahead of fast scrolling, then the optional slop
        insets shrink it.
        """
        settings = self._settings
        velocity = self._surface.velocity()
        dx = _clamp(abs(velocity.x()) / settings.velocity_extension_divisor,
                    settings.active_frame_min_extension, settings.active_frame_max_extension)
        dy = _clamp(abs(velocity.y()) / settings.velocity_extension_divisor,
                    settings.active_frame_min_extension, settings.active_frame_max_extension)
        frame = self._surface.visible_rect().adjusted(-dx, -dy, dx, dy)
        slop = self._active_frame_slop
        if slop is not None:
            frame = frame.adjusted(slop.left(), slop.top(), -slop.right(), -slop.bottom())
        return frame

    # --- Reload ---

    def reload_data(self, offset_adjustment: OffsetAdjustment | None = None):
        """
        Rebuild frames and identifiers from the provider and reconcile views.

        Args:
            offset_adjustment: Called after the new content size is applied;
                returns the content offset to use (e.g. to keep the distance
                from the bottom edge). Views that continue across the reload
                are shifted by the resulting offset change.
        """
        provider = self._provider
        if provider is None:
            return
        if self._reloading:
            logger.debug("reload_data() during reload ignored")
            return

        provider.will_reload()
        provider.prepare(self._surface.viewport_size())
        provider.prepare_collection_view(self)
        self._reloading = True
        try:
            self._reload(provider, offset_adjustment)
        finally:
            self._reloading = False
        self._has_reloaded = True
        provider.did_reload()
        self.reloaded.emit()

    def _reload(self, provider: CollectionProvider, offset_adjustment: OffsetAdjustment | None):
        # 1. geometry table and identifiers
        item_count = provider.item_count()
        frames: List[QRectF] = []
        identifiers = IdentifierTable()
        left = top = right = bottom = 0.0
        for index in range(item_count):
            frame = QRectF(provider.frame(index)).normalized()
            identifiers.append(provider.identifier(index))
            left = min(left, frame.left())
            top = min(top, frame.top())
            right = max(right, frame.right())
            bottom = max(bottom, frame.bottom())
            frames.append(frame)

        # 2. insets translate every frame and pad the content size
        padding = provider.insets()
        if padding.left() != 0 or padding.top() != 0:
            frames = [frame.translated(padding.left(), padding.top()) for frame in frames]

        # 3. visibility index
        self._visibility.reload(frames)

        # 4. content size and caller offset adjustment
        old_offset = self._surface.content_offset()
        self._surface.set_content_size(QSizeF(
            max(self._minimum_content_size.width(), right - left + padding.left() + padding.right()),
            max(self._minimum_content_size.height(), bottom - top + padding.top() + padding.bottom()),
        ))
        if offset_adjustment is not None:
            self._surface.set_content_offset(offset_adjustment())
        offset_delta = self._surface.content_offset() - old_offset

        old_frames = self._frames
        old_identifiers = self._identifiers
        old_views = self._views

        # 5. visible identifiers before and after
        new_visible = self._visibility.visible_indexes(self.active_frame())
        for view in list(self._floating):
            identifier = old_identifiers.identifier_at(old_views.index_of(view))
            new_index = identifiers.index_of(identifier)
            if new_index is None:
                self._sink_floating(view)
            else:
                new_visible.add(new_index)

        new_visible_ids = {identifiers.identifier_at(index) for index in new_visible}
        old_visible_ids = {old_identifiers.identifier_at(index) for index in old_views.indexes()}

        # 6. partition
        deleted = old_visible_ids - new_visible_ids
        inserted = new_visible_ids - old_visible_ids
        continuing = new_visible_ids & old_visible_ids

        # 7. continuing views keep their instance
        new_views = old_views.next_generation()
        moved_views: List[QWidget] = []
        for identifier in sorted(continuing, key=identifiers.index_of):
            old_index = old_identifiers.index_of(identifier)
            new_index = identifiers.index_of(identifier)
            view = old_views.view_at(old_index)
            if view not in self._floating:
                # keeps the view where it was on screen when the offset moved
                view.move((QPointF(view.pos()) + offset_delta).toPoint())
                moved_views.append(view)
            new_views.set(new_index, view)
            provider.update(view, new_index)

        # 8. deleted views go back to the pool
        for identifier in sorted(deleted, key=old_identifiers.index_of):
            old_index = old_identifiers.index_of(identifier)
            self._disappear(old_views, old_index, old_frames[old_index])

        self._frames = frames
        self._identifiers = identifiers
        self._views = new_views

        for view in moved_views:
            self._stack(view, new_views.index_of(view))

        # 9. inserted views
        for identifier in sorted(inserted, key=identifiers.index_of):
            self._appear(identifiers.index_of(identifier))

        # 10. frames for everything not floating
        self._apply_frames(provider)

        logger.debug(
            f"Reloaded {item_count} items: {len(continuing)} kept, "
            f"{len(inserted)} inserted, {len(deleted)} deleted, "
            f"offset delta ({offset_delta.x():.1f}, {offset_delta.y():.1f})"
        )

    # --- Scroll driven loading ---

    def load_cells(self):
        """
        Bring the visible views in line with the active frame.

        Views entering the frame are requested from the provider, views
        leaving it are retired to the reuse pool. Frames are then applied
        to every non-floating view.
        """
        provider = self._provider
        if provider is None or self._loading or self._reloading:
            return
        self._loading = True
        try:
            provider.prepare_collection_view(self)
            if self._offset_in_range():
                floating = {self._views.index_of(view) for view in self._floating}
                indexes = self._visibility.visible_indexes(self.active_frame(), floating)
                current = self._views.indexes()
                for index in sorted(current - indexes):
                    self._disappear(self._views, index, self._frames[index])
                for index in sorted(indexes - current):
                    self._appear(index)
            self._apply_frames(provider)
        finally:
            self._loading = False

    def _offset_in_range(self) -> bool:
        slack = self._settings.offset_slack
        bounds = self._surface.offset_bounds().adjusted(-slack, -slack, slack, slack)
        return bounds.contains(self._surface.content_offset())

    def _apply_frames(self, provider: CollectionProvider):
        for index, view in self._views.items():
            if view not in self._floating:
                provider.update(view, index, self._frames[index])

    def _disappear(self, views: IndexViewMap, index: int, frame: QRectF):
        view = views.view_at(index)
        if view is None:
            return
        self._provider.delete(view, index, frame)
        views.remove_index(index)
        self._floating.discard(view)
        self._reuse_pool.queue(view)

    def _appear(self, index: int) -> Optional[QWidget]:
        provider = self._provider
        view = provider.view(index)
        provider.update(view, index)
        if self._views.contains_view(view):
            logger.warning(f"Provider returned a view that is already on screen for index {index}")
            return None
        self._views.set(index, view)
        self._stack(view, index)
        provider.insert(view, index, QRectF(self._frames[index]))
        return view

    def _stack(self, view: QWidget, index: int):
        """Parent view into the content layer under the next higher visible index."""
        content = self._surface.content_widget
        if view.parentWidget() is not content:
            view.setParent(content)

        above: Optional[QWidget] = None
        above_index = None
        for other_index, other in self._views.items():
            if other is view or other in self._floating or other_index <= index:
                continue
            if above_index is None or other_index < above_index:
                above, above_index = other, other_index

        if above is not None and above.parentWidget() is content:
            view.stackUnder(above)
        else:
            view.raise_()
        view.show()

    # --- Floating ---

    def is_floating(self, view: QWidget) -> bool:
        return view in self._floating

    def float_view(self, view: QWidget):
        """
        Detach a visible view into the overlay layer.

        The view keeps its screen position, is drawn above every other item
        and is left alone by reloads and scroll passes until unfloated.

        Raises:
            PreconditionError: view is not currently visible
        """
        if not self._views.contains_view(view):
            raise PreconditionError("Unable to float a view that is not on screen")
        if view in self._floating:
            return
        self._floating.add(view)
        if self._provider is not None:
            self._provider.stop_animation(view)
        position = self._surface.to_overlay(QPointF(view.pos()))
        view.setParent(self._surface.overlay_widget)
        view.move(position.toPoint())
        view.show()
        view.raise_()

    def unfloat_view(self, view: QWidget):
        """
        Return a floating view to the content layer.

        The view is re-stacked by index and sent to its current frame
        through the provider's update hook. No-op for views not floating.
        """
        if view not in self._floating:
            return
        index = self._views.index_of(view)
        if index is None:
            raise PreconditionError("Floating view is missing from the visible set")
        self._sink_floating(view)
        self._stack(view, index)
        if self._provider is not None:
            self._provider.update(view, index, QRectF(self._frames[index]))

    def _sink_floating(self, view: QWidget):
        self._floating.discard(view)
        position = self._surface.from_overlay(QPointF(view.pos()))
        view.setParent(self._surface.content_widget)
        view.move(position.toPoint())
        view.show()

    # --- Lookups ---

    def index_of(self, view: QWidget) -> Optional[int]:
        """
        Index of an on-screen view.

        Raises:
            PreconditionError: called while a reload is rebuilding indexes
        """
        if self._reloading:
            raise PreconditionError("index_of() called during reload; the index space is being rebuilt")
        return self._views.index_of(view)

    def view_at(self, index: int) -> Optional[QWidget]:
        return self._views.view_at(index)

    def frame_at(self, index: Optional[int]) -> Optional[QRectF]:
        if index is None or not 0 <= index < len(self._frames):
            return None
        return QRectF(self._frames[index])

    def identifier_at(self, index: int) -> Optional[str]:
        if not 0 <= index < len(self._identifiers):
            return None
        return self._identifiers.identifier_at(index)

    def index_for_identifier(self, identifier: str) -> Optional[int]:
        return self._identifiers.index_of(identifier)

    def index_for_point(self, point: QPointF) -> Optional[int]:
        """First index whose frame contains point (content coordinates)."""
        for index, frame in enumerate(self._frames):
            if frame.contains(point):
                return index
        return None

    # --- Surface events ---

    def _on_scrolled(self):
        if not self._reloading:
            self.load_cells()

    def _on_resized(self):
        size = self._surface.viewport_size()
        if size != self._last_reload_size:
            self._last_reload_size = QSizeF(size)
            self.reload_data()

    def _on_tapped(self, point: QPointF):
        if self._provider is None:
            return
        content_point = self._surface.from_overlay(point)
        candidates = sorted(self._views.items(), key=lambda pair: (pair[1] in self._floating, pair[0]), reverse=True)
        for index, view in candidates:
            target = point if view in self._floating else content_point
            if QRectF(view.geometry()).contains(target):
                self._provider.did_tap(view, index)
                return
