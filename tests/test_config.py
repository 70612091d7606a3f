import json

import pytest
from pydantic import ValidationError

from collectionview.core.config import AppConfig, CollectionSettings, ConfigManager, DragSettings


def test_config_read_default(tmp_path):
    config = ConfigManager(str(tmp_path / "settings.json"))
    assert config.data.collection.pool_cleanup_ms == 100
    assert config.data.drag.autoscroll_margin == 80.0
    assert config.get("drag", "long_press_ms") == 500


def test_config_created_on_first_load(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    ConfigManager(str(path))
    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved["collection"]["offset_slack"] == 10.0


def test_config_update_event(tmp_path):
    config = ConfigManager(str(tmp_path / "settings.json"))
    received = []

    def on_change(section, key, val):
        received.append((section, key, val))

    config.on_changed.connect(on_change)
    config.update("collection", "pool_cleanup_ms", 250)

    assert config.data.collection.pool_cleanup_ms == 250
    assert received == [("collection", "pool_cleanup_ms", 250)]


def test_config_update_persists(tmp_path):
    path = str(tmp_path / "settings.json")
    ConfigManager(path).update("drag", "autoscroll_gain", 35.0)
    assert ConfigManager(path).data.drag.autoscroll_gain == 35.0


def test_config_update_validates(tmp_path):
    config = ConfigManager(str(tmp_path / "settings.json"))
    with pytest.raises(ValidationError):
        config.update("collection", "max_visibility_reseeds", -1)
    assert config.data.collection.max_visibility_reseeds == 1


def test_config_unknown_keys_rejected(tmp_path):
    config = ConfigManager(str(tmp_path / "settings.json"))
    with pytest.raises(ValueError):
        config.update("nope", "x", 1)
    with pytest.raises(ValueError):
        config.update("drag", "nope", 1)


def test_config_corrupt_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    config = ConfigManager(str(path))
    assert config.data == AppConfig()


def test_config_toml(tmp_path):
    path = tmp_path / "settings.toml"
    path.write_text(
        "[collection]\noptimize_for_continuous_layout = false\n\n[drag]\nreorder_cooldown_ms = 50\n",
        encoding="utf-8",
    )
    config = ConfigManager(str(path))
    assert config.data.collection.optimize_for_continuous_layout is False
    assert config.data.drag.reorder_cooldown_ms == 50


def test_settings_bounds():
    with pytest.raises(ValidationError):
        CollectionSettings(velocity_extension_divisor=0)
    with pytest.raises(ValidationError):
        DragSettings(reorder_cooldown_ms=-5)


def test_config_update_many_is_atomic(tmp_path):
    config = ConfigManager(str(tmp_path / "settings.json"))
    received = []
    config.on_changed.connect(lambda *args: received.append(args))

    with pytest.raises(ValidationError):
        config.update_many("drag", {"autoscroll_margin": 60.0, "reorder_cooldown_ms": -1})
    assert config.data.drag.autoscroll_margin == 80.0

    config.update_many("drag", {"autoscroll_margin": 60.0, "autoscroll_gain": 20.0})
    assert received == [("drag", "autoscroll_margin", 60.0)]


def test_config_unchanged_value_does_not_emit(tmp_path):
    config = ConfigManager(str(tmp_path / "settings.json"))
    received = []
    config.on_changed.connect(lambda *args: received.append(args))
    config.update("collection", "offset_slack", 10.0)
    assert received == []


def test_config_reset(tmp_path):
    config = ConfigManager(str(tmp_path / "settings.json"))
    config.update("collection", "pool_cleanup_ms", 500)
    config.update("drag", "long_press_ms", 900)

    config.reset("collection")
    assert config.data.collection.pool_cleanup_ms == 100
    assert config.data.drag.long_press_ms == 900

    config.reset()
    assert config.data == AppConfig()


def test_config_toml_is_read_only(tmp_path):
    path = tmp_path / "settings.toml"
    path.write_text("[drag]\nlong_press_ms = 300\n", encoding="utf-8")
    config = ConfigManager(str(path))
    assert config.read_only

    config.update("drag", "long_press_ms", 400)

    assert config.data.drag.long_press_ms == 400
    assert "300" in path.read_text(encoding="utf-8")


def test_general_trace_views_setting(tmp_path):
    path = str(tmp_path / "settings.json")
    config = ConfigManager(path)
    assert config.data.general.trace_views is False

    config.update("general", "trace_views", True)
    assert ConfigManager(path).data.general.trace_views is True
