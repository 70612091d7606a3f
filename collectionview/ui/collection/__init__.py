"""
Collection Module - Virtualized item views.

- Visibility index with an incremental scan for scroll-ordered layouts
- Reuse pool recycling offscreen widgets by class
- Identifier based diffing across reloads (same item, same widget)
- Floating views and long-press drag-to-reorder with edge autoscroll

Usage:
    from collectionview.ui.collection import (
        CollectionWidget, ArrayCollectionProvider, ReorderDelegate
    )

    widget = CollectionWidget()
    provider = ArrayCollectionProvider(items, TileView, configure=bind_tile)
    widget.set_provider(provider)
    widget.set_delegate(ReorderDelegate(provider))
"""
from collectionview.ui.collection.errors import CollectionViewError, PreconditionError
from collectionview.ui.collection.identifiers import IdentifierTable
from collectionview.ui.collection.index_map import IndexViewMap
from collectionview.ui.collection.visible_indexes import VisibleIndexes, ScrollAxis, detect_axis
from collectionview.ui.collection.reuse_pool import ReusePool
from collectionview.ui.collection.animators import CollectionAnimator, SmoothAnimator, apply_frame
from collectionview.ui.collection.layouts import CollectionLayout, ListLayout, FlowLayout
from collectionview.ui.collection.provider import CollectionProvider, ArrayCollectionProvider
from collectionview.ui.collection.delegate import CollectionDelegate, ReorderDelegate
from collectionview.ui.collection.surface import ScrollSurface, QtScrollSurface
from collectionview.ui.collection.move_manager import (
    MoveManager, MoveContext, IdleState, ArmedState, DraggingState
)
from collectionview.ui.collection.collection_view import CollectionView
from collectionview.ui.collection.collection_widget import CollectionWidget

__all__ = [
    # Main widget
    "CollectionWidget",
    "CollectionView",
    # Data source
    "CollectionProvider",
    "ArrayCollectionProvider",
    "CollectionDelegate",
    "ReorderDelegate",
    # Layout and animation
    "CollectionLayout",
    "ListLayout",
    "FlowLayout",
    "CollectionAnimator",
    "SmoothAnimator",
    "apply_frame",
    # Host
    "ScrollSurface",
    "QtScrollSurface",
    # Virtualization
    "VisibleIndexes",
    "ScrollAxis",
    "detect_axis",
    "ReusePool",
    "IdentifierTable",
    "IndexViewMap",
    # Drag
    "MoveManager",
    "MoveContext",
    "IdleState",
    "ArmedState",
    "DraggingState",
    # Errors
    "CollectionViewError",
    "PreconditionError",
]
