"""
CollectionView Demo Application.

Reorderable tiles: long-press a tile and drag it to reorder, drag near an
edge to autoscroll. Toolbar buttons reload with shuffled, inserted or
removed items so the identity diff can be watched.
"""
import random
import sys
from typing import List

from loguru import logger
from PySide6.QtCore import QPointF, QSizeF, Qt
from PySide6.QtGui import QColor
from PySide6.QtWidgets import (
    QApplication, QCheckBox, QHBoxLayout, QLabel, QMainWindow,
    QPushButton, QSpinBox, QVBoxLayout, QWidget
)

from collectionview.core.config import AppConfig, ConfigManager
from collectionview.core.logging import setup_logging
from collectionview.ui.collection import (
    ArrayCollectionProvider, CollectionWidget, FlowLayout, ListLayout,
    ReorderDelegate, SmoothAnimator
)


class TileView(QLabel):
    """Colored tile showing the item identifier."""

    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent)
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setAutoFillBackground(True)

    def bind(self, item: str, index: int):
        self.setText(f"{item}\n#{index}")
        hue = (sum(ord(ch) for ch in item) * 37) % 360
        color = QColor.fromHsv(hue, 90, 235)
        self.setStyleSheet(
            f"background-color: {color.name()}; border-radius: 6px; "
            "color: #212529; font-weight: bold;"
        )

    def prepare_for_reuse(self):
        self.clear()
        self.setStyleSheet("")


class CollectionDemoWindow(QMainWindow):
    """
    Demo window for CollectionView.

    Features:
    - Configurable item count
    - Shuffle / insert / remove reloads
    - List or flow layout
    - Smooth or immediate frame updates
    """

    def __init__(self, config: AppConfig | None = None):
        super().__init__()
        self.setWindowTitle("CollectionView Demo")
        self.resize(900, 700)
        self._config = config or AppConfig()
        self._next_id = 0
        self._setup_ui()
        self._load_items(200)

    def _setup_ui(self):
        central = QWidget()
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        toolbar = QWidget()
        toolbar.setStyleSheet("background-color: #f8f9fa; border-bottom: 1px solid #dee2e6;")
        toolbar_layout = QHBoxLayout(toolbar)
        toolbar_layout.setContentsMargins(8, 4, 8, 4)
        toolbar_layout.setSpacing(12)

        toolbar_layout.addWidget(QLabel("Items:"))
        self.count_spin = QSpinBox()
        self.count_spin.setRange(0, 100000)
        self.count_spin.setValue(200)
        toolbar_layout.addWidget(self.count_spin)

        load_btn = QPushButton("Load")
        load_btn.clicked.connect(lambda: self._load_items(self.count_spin.value()))
        toolbar_layout.addWidget(load_btn)

        shuffle_btn = QPushButton("Shuffle")
        shuffle_btn.clicked.connect(self._shuffle)
        toolbar_layout.addWidget(shuffle_btn)

        insert_btn = QPushButton("Insert")
        insert_btn.clicked.connect(self._insert_random)
        toolbar_layout.addWidget(insert_btn)

        remove_btn = QPushButton("Remove")
        remove_btn.clicked.connect(self._remove_random)
        toolbar_layout.addWidget(remove_btn)

        self.flow_check = QCheckBox("Grid")
        self.flow_check.setChecked(True)
        self.flow_check.toggled.connect(self._on_layout_toggled)
        toolbar_layout.addWidget(self.flow_check)

        self.smooth_check = QCheckBox("Animate")
        self.smooth_check.setChecked(True)
        self.smooth_check.toggled.connect(self._on_animator_toggled)
        toolbar_layout.addWidget(self.smooth_check)

        toolbar_layout.addStretch()
        self.status_label = QLabel()
        toolbar_layout.addWidget(self.status_label)
        layout.addWidget(toolbar)

        self.collection = CollectionWidget(config=self._config)
        layout.addWidget(self.collection, 1)
        self.setCentralWidget(central)

        self.provider = ArrayCollectionProvider(
            [],
            TileView,
            configure=lambda view, item, index: view.bind(item, index),
            identifier=lambda item, index: item,
            size=QSizeF(120, 90),
            layout=FlowLayout(h_spacing=8, v_spacing=8),
            on_tap=self._on_tile_tapped,
            animator=SmoothAnimator(),
        )
        self.collection.set_delegate(ReorderDelegate(self.provider, on_drop=self._on_tile_dropped))
        self.collection.set_provider(self.provider, reload=False)
        self.collection.reloaded.connect(self._update_status)

    # --- Data ---

    def _new_items(self, count: int) -> List[str]:
        items = [f"item-{self._next_id + i}" for i in range(count)]
        self._next_id += count
        return items

    def _load_items(self, count: int):
        self.provider.data = self._new_items(count)
        self.collection.reload_data()
        logger.info(f"Demo: loaded {count} items")

    def _shuffle(self):
        data = list(self.provider.data)
        random.shuffle(data)
        self.provider.data = data
        self.collection.reload_data()

    def _insert_random(self):
        data = list(self.provider.data)
        data.insert(random.randint(0, len(data)), self._new_items(1)[0])
        self.provider.data = data
        self.collection.reload_data()

    def _remove_random(self):
        data = list(self.provider.data)
        if data:
            data.pop(random.randrange(len(data)))
        self.provider.data = data
        self.collection.reload_data()

    # --- Options ---

    def _on_layout_toggled(self, flow: bool):
        if flow:
            self.provider.layout = FlowLayout(h_spacing=8, v_spacing=8)
        else:
            self.provider.layout = ListLayout(spacing=4)
        self.collection.reload_data(lambda: QPointF(0, 0))

    def _on_animator_toggled(self, smooth: bool):
        self.provider.animator = SmoothAnimator() if smooth else SmoothAnimator(duration_ms=0)
        self.collection.reload_data()

    # --- Callbacks ---

    def _on_tile_tapped(self, view: TileView, item: str, index: int):
        self.status_label.setText(f"Tapped {item} at {index}")

    def _on_tile_dropped(self, view: TileView, index: int):
        self.status_label.setText(f"Dropped at {index}")

    def _update_status(self):
        view = self.collection.collection_view
        pool = view.reuse_pool
        self.status_label.setText(
            f"{view.item_count} items | {len(view.visible_indexes)} visible | {pool.total_count} pooled"
        )


def main(config_path: str = "collectionview.json") -> int:
    config = ConfigManager(config_path)
    general = config.data.general
    setup_logging(general.debug_mode, general.log_dir, trace_views=general.trace_views)
    app = QApplication.instance() or QApplication(sys.argv)
    window = CollectionDemoWindow(config.data)
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
