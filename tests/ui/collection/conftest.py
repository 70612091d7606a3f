"""
Shared fixtures for collection view tests.

Defaults: a 300x300 viewport, no velocity extension of the active frame and
a private reuse pool, so rows of height 100 put exactly three items on screen.
"""
import pytest

from collectionview.core.config import CollectionSettings, DragSettings
from collectionview.ui.collection import CollectionView, ReusePool

from fakes import FakeSurface


@pytest.fixture
def surface(qapp):
    return FakeSurface()


@pytest.fixture
def pool(qapp):
    return ReusePool(cleanup_ms=100)


@pytest.fixture
def tight_settings():
    """No velocity extension: the active frame is exactly the viewport."""
    return CollectionSettings(active_frame_min_extension=0, active_frame_max_extension=0)


@pytest.fixture
def collection(surface, pool, tight_settings):
    return CollectionView(
        surface,
        settings=tight_settings,
        drag_settings=DragSettings(),
        reuse_pool=pool,
    )
