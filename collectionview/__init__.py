"""
collectionview - Virtualized item views for PySide6.

Renders only the items that intersect the viewport, recycles offscreen
widgets, keeps the same widget for the same item identifier across reloads,
and supports long-press drag-to-reorder with edge autoscroll.

Usage:
    from collectionview.ui.collection import CollectionWidget, ArrayCollectionProvider
"""
from collectionview.core.config import (
    ConfigManager,
    AppConfig,
    CollectionSettings,
    DragSettings,
    GeneralSettings,
)
from collectionview.core.events import ObserverEvent
from collectionview.core.logging import setup_logging

__version__ = "0.1.0"
