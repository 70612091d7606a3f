from typing import Any, Dict
import json
import os
from pydantic import BaseModel, Field
from loguru import logger
from .events import ObserverEvent

# --- Engine Settings Models ---
class CollectionSettings(BaseModel):
    """Virtualization and reuse tuning for a CollectionView."""
    pool_cleanup_ms: int = Field(100, ge=0, description="Idle time before the reuse pool is purged")
    active_frame_min_extension: float = 50.0
    active_frame_max_extension: float = 200.0
    velocity_extension_divisor: float = Field(10.0, gt=0)
    offset_slack: float = 10.0
    optimize_for_continuous_layout: bool = True
    max_visibility_reseeds: int = Field(1, ge=0)

class DragSettings(BaseModel):
    """Long-press drag and autoscroll tuning for the MoveManager."""
    long_press_ms: int = Field(500, ge=0)
    press_move_tolerance: float = 8.0
    autoscroll_margin: float = 80.0
    autoscroll_gain: float = 20.0
    reorder_cooldown_ms: int = Field(100, ge=0)
    drag_release_damping: float = 5.0

class GeneralSettings(BaseModel):
    debug_mode: bool = True
    log_dir: str = "logs"
    trace_views: bool = False

class AppConfig(BaseModel):
    general: GeneralSettings = Field(default_factory=GeneralSettings)
    collection: CollectionSettings = Field(default_factory=CollectionSettings)
    drag: DragSettings = Field(default_factory=DragSettings)


# --- Manager ---
class ConfigManager:
    """
    Loads, validates, persists and broadcasts AppConfig.

    JSON files are read and rewritten on every change. TOML files are read
    only (tomllib cannot write); changes to a TOML-backed config live in
    memory for the session.

    Example:
        config = ConfigManager("collectionview.json")
        config.on_changed.connect(lambda section, key, value: ...)
        config.update_many("drag", {"autoscroll_margin": 60, "autoscroll_gain": 30})
    """
    def __init__(self, filepath: str = "collectionview.json"):
        self.filepath = filepath
        self._data = AppConfig()
        self.on_changed = ObserverEvent("ConfigChanged")
        self._load()

    @property
    def data(self) -> AppConfig:
        return self._data

    @property
    def read_only(self) -> bool:
        return self.filepath.endswith(".toml")

    def _section(self, section: str) -> BaseModel:
        if section not in AppConfig.model_fields:
            raise ValueError(f"Invalid section: {section}")
        return getattr(self._data, section)

    def get(self, section: str, key: str) -> Any:
        return getattr(self._section(section), key)

    def update(self, section: str, key: str, value: Any):
        """Update a setting, validate via Pydantic, autosave, and emit change event."""
        self.update_many(section, {key: value})

    def update_many(self, section: str, values: Dict[str, Any]):
        """
        Validate several keys of one section together.

        Nothing is applied when any value fails validation. Saves once and
        emits on_changed for each key whose value actually changed.
        """
        current = self._section(section)
        unknown = [key for key in values if key not in type(current).model_fields]
        if unknown:
            raise ValueError(f"Invalid key: {unknown[0]} in section {section}")

        updated = type(current).model_validate({**current.model_dump(), **values})
        changed = [key for key in values if getattr(updated, key) != getattr(current, key)]
        if not changed:
            return
        setattr(self._data, section, updated)
        self._save()
        for key in changed:
            self.on_changed.emit(section, key, getattr(updated, key))

    def reset(self, section: str | None = None):
        """Restore defaults for one section, or for everything."""
        sections = [section] if section is not None else list(AppConfig.model_fields)
        for name in sections:
            defaults = type(self._section(name))().model_dump()
            self.update_many(name, defaults)

    def _read_raw(self) -> Dict[str, Any]:
        if self.read_only:
            import tomllib
            with open(self.filepath, "rb") as f:
                return tomllib.load(f)
        with open(self.filepath, "r", encoding="utf-8") as f:
            return json.load(f)

    def _load(self):
        """Load settings from JSON or TOML file if present; otherwise keep defaults."""
        if not os.path.isfile(self.filepath):
            self._save()
            return
        try:
            self._data = AppConfig.model_validate(self._read_raw())
        except Exception as e:
            logger.error(f"Failed to load config from {self.filepath}: {e}")
            self._save()

    def _save(self):
        if self.read_only:
            return
        try:
            dirname = os.path.dirname(self.filepath)
            if dirname:
                os.makedirs(dirname, exist_ok=True)
            with open(self.filepath, "w", encoding="utf-8") as f:
                json.dump(self._data.model_dump(), f, indent=4)
        except OSError as e:
            logger.error(f"Failed to save config to {self.filepath}: {e}")
