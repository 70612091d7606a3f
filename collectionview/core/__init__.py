"""
collectionview core - configuration, logging and plain events.
"""
from .events import ObserverEvent
from .config import (
    ConfigManager,
    AppConfig,
    CollectionSettings,
    DragSettings,
    GeneralSettings,
)
from .logging import setup_logging
