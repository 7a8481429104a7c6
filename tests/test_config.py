"""Tests for configuration loading."""

from pathlib import Path

import pytest
import yaml

from prodoc.config import ConfigManager, ProDocConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("PRODOC_CONFIG_DIR", "PRODOC_STORAGE_DIR", "PRODOC_STORAGE_KEY", "PRODOC_EXPORT_DIR",
                 "PRODOC_DEFAULT_TITLE", "PRODOC_HISTORY_LIMIT", "PRODOC_AUTOSAVE",
                 "PRODOC_AUTOSAVE_DEBOUNCE", "PRODOC_AUTOSAVE_INTERVAL"):
        monkeypatch.delenv(name, raising=False)


class TestConfigManager:
    """Defaults, file and environment layers."""

    def test_defaults(self, tmp_path):
        config = ConfigManager(tmp_path).load_config()

        assert config.history_limit == 50
        assert config.default_title == "Untitled Document"
        assert config.autosave.enabled is True
        assert config.autosave.debounce_seconds == 2.5
        assert config.autosave.interval_seconds == 15.0
        assert (config.zoom.minimum, config.zoom.maximum, config.zoom.step) == (50, 200, 10)
        assert config.export_dir is None

    def test_yaml_file(self, tmp_path):
        (tmp_path / "config.yaml").write_text(yaml.dump({
            "storage_key": "draft",
            "history_limit": 20,
            "autosave": {"enabled": False, "interval_seconds": 30},
            "zoom": {"step": 25},
        }))

        config = ConfigManager(tmp_path).load_config()

        assert config.storage_key == "draft"
        assert config.history_limit == 20
        assert config.autosave.enabled is False
        assert config.autosave.interval_seconds == 30.0
        assert config.autosave.debounce_seconds == 2.5
        assert config.zoom.step == 25

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        (tmp_path / "config.yaml").write_text(yaml.dump({"storage_key": "from-file"}))
        monkeypatch.setenv("PRODOC_STORAGE_KEY", "from-env")
        monkeypatch.setenv("PRODOC_STORAGE_DIR", str(tmp_path / "store"))
        monkeypatch.setenv("PRODOC_AUTOSAVE", "off")
        monkeypatch.setenv("PRODOC_AUTOSAVE_DEBOUNCE", "1.5")

        config = ConfigManager(tmp_path).load_config()

        assert config.storage_key == "from-env"
        assert config.storage_dir == tmp_path / "store"
        assert config.autosave.enabled is False
        assert config.autosave.debounce_seconds == 1.5

    def test_bad_numbers_in_environment_are_ignored(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PRODOC_HISTORY_LIMIT", "many")
        monkeypatch.setenv("PRODOC_AUTOSAVE_INTERVAL", "soon")

        config = ConfigManager(tmp_path).load_config()

        assert config.history_limit == 50
        assert config.autosave.interval_seconds == 15.0

    def test_config_dir_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PRODOC_CONFIG_DIR", str(tmp_path))
        assert ConfigManager().config_file == tmp_path / "config.yaml"

    def test_malformed_yaml_falls_back_to_defaults(self, tmp_path):
        (tmp_path / "config.yaml").write_text("storage_key: [unclosed")

        config = ConfigManager(tmp_path).load_config()

        assert config.storage_key == ProDocConfig().storage_key

    def test_create_default(self, tmp_path):
        manager = ConfigManager(tmp_path / "conf")

        path = manager.create_default_config()

        assert path == tmp_path / "conf" / "config.yaml"
        data = yaml.safe_load(path.read_text())
        assert data["history_limit"] == 50
        assert data["autosave"]["debounce_seconds"] == 2.5
        assert "export_dir" not in data

    def test_config_info(self, tmp_path):
        info = ConfigManager(tmp_path).get_config_info()

        assert info["config_file"] == str(tmp_path / "config.yaml")
        assert info["config_exists"] is False
        assert info["export_dir"] is None
        assert Path(info["storage_dir"]).name == "storage"
