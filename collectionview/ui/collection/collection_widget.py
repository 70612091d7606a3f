"""
CollectionWidget - QWidget wrapper around QtScrollSurface + CollectionView.
"""
from typing import Optional

from PySide6.QtCore import QPointF, Signal
from PySide6.QtWidgets import QVBoxLayout, QWidget

from collectionview.core.config import AppConfig
from collectionview.ui.collection.collection_view import CollectionView, OffsetAdjustment
from collectionview.ui.collection.delegate import CollectionDelegate
from collectionview.ui.collection.provider import CollectionProvider
from collectionview.ui.collection.reuse_pool import ReusePool
from collectionview.ui.collection.surface import QtScrollSurface


class CollectionWidget(QWidget):
    """
    Drop-in widget hosting a virtualized collection.

    Signals:
        reloaded()  forwarded from the engine

    Example:
        widget = CollectionWidget()
        provider = ArrayCollectionProvider(items, TileView, configure=bind_tile)
        widget.set_provider(provider)
        widget.set_delegate(ReorderDelegate(provider))
    """

    reloaded = Signal()

    def __init__(
        self,
        parent: QWidget | None = None,
        config: AppConfig | None = None,
        reuse_pool: ReusePool | None = None
    ):
        super().__init__(parent)
        self._config = config or AppConfig()
        self._setup_ui(reuse_pool)

    def _setup_ui(self, reuse_pool: ReusePool | None):
        """Build the UI."""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        self.surface = QtScrollSurface(settings=self._config.drag, parent=self)
        layout.addWidget(self.surface.scroll_area)

        self.collection_view = CollectionView(
            self.surface,
            settings=self._config.collection,
            drag_settings=self._config.drag,
            reuse_pool=reuse_pool,
            parent=self,
        )
        self.collection_view.reloaded.connect(self.reloaded.emit)

    # --- Forwarding ---

    @property
    def provider(self) -> Optional[CollectionProvider]:
        return self.collection_view.provider

    def set_provider(self, provider: CollectionProvider, reload: bool = True):
        self.collection_view.provider = provider
        if reload:
            self.collection_view.reload_data()

    @property
    def delegate(self) -> Optional[CollectionDelegate]:
        return self.collection_view.delegate

    def set_delegate(self, delegate: Optional[CollectionDelegate]):
        self.collection_view.delegate = delegate

    def reload_data(self, offset_adjustment: OffsetAdjustment | None = None):
        self.collection_view.reload_data(offset_adjustment)

    def scroll_to(self, offset: QPointF):
        self.surface.set_content_offset(offset)

    def scroll_to_end(self):
        bounds = self.surface.offset_bounds()
        self.surface.set_content_offset(QPointF(bounds.left(), bounds.bottom()))
