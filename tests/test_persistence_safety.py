"""Tests for YAML persistence (backups, atomic writes, error translation)."""

from pathlib import Path

import pytest
import yaml

from keycast.exceptions import ConfigFileInvalidError, ConfigurationError, ConfigValidationError
from keycast.model_manager import YamlPersistence
from keycast.models import RouterConfig


VALID = """
out: [csv]
in:
  pad:
    - key: 1
      name: mute
      type: toggle
"""


class TestYamlPersistence:
    """Safety features and error handling of YamlPersistence."""

    def test_load(self, tmp_path: Path):
        path = tmp_path / "router.yaml"
        path.write_text(VALID, encoding="utf-8")

        config = YamlPersistence.load_yaml(path, RouterConfig)
        assert config.inputs["pad"][0].name == "mute"

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            YamlPersistence.load_yaml(tmp_path / "missing.yaml", RouterConfig)

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "router.yaml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(ConfigFileInvalidError):
            YamlPersistence.load_yaml(path, RouterConfig)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "router.yaml"
        path.write_text("- csv\n- osc://localhost:8000\n", encoding="utf-8")
        with pytest.raises(ConfigFileInvalidError):
            YamlPersistence.load_yaml(path, RouterConfig)

    def test_syntax_error(self, tmp_path: Path):
        path = tmp_path / "router.yaml"
        path.write_text("in: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigFileInvalidError) as exc_info:
            YamlPersistence.load_yaml(path, RouterConfig)
        assert exc_info.value.recovery_hint

    def test_schema_error(self, tmp_path: Path):
        path = tmp_path / "router.yaml"
        path.write_text("pulse:\n  - name: beat\n    bpm: 120\n    fps: 30\n", encoding="utf-8")
        with pytest.raises(ConfigValidationError):
            YamlPersistence.load_yaml(path, RouterConfig)

    def test_bare_on_off_keys(self, tmp_path: Path):
        path = tmp_path / "router.yaml"
        path.write_text(
            "in:\n  pad:\n    - key: 1\n      type: button\n      map:\n        on: go\n        off: stop\n",
            encoding="utf-8",
        )
        config = YamlPersistence.load_yaml(path, RouterConfig)
        assert config.inputs["pad"][0].map == {"on": "go", "off": "stop"}

    def test_save_creates_backup(self, tmp_path: Path):
        path = tmp_path / "router.yaml"
        YamlPersistence.save_yaml({"out": ["csv"]}, path, backup=False)
        YamlPersistence.save_yaml({"out": ["udp://localhost:9000"]}, path, backup=True)

        backup_path = path.with_suffix(".yaml.bak")
        assert backup_path.exists()
        assert yaml.safe_load(backup_path.read_text())["out"] == ["csv"]
        assert yaml.safe_load(path.read_text())["out"] == ["udp://localhost:9000"]

    def test_save_without_backup(self, tmp_path: Path):
        path = tmp_path / "router.yaml"
        YamlPersistence.save_yaml({"out": ["csv"]}, path, backup=False)
        YamlPersistence.save_yaml({"out": ["csv"]}, path, backup=False)
        assert not path.with_suffix(".yaml.bak").exists()

    def test_atomic_write_cleans_up_temp_file(self, tmp_path: Path):
        path = tmp_path / "router.yaml"
        YamlPersistence.save_yaml({"out": ["csv"]}, path)
        assert not path.with_suffix(".yaml.tmp").exists()

    def test_save_keeps_key_order(self, tmp_path: Path):
        path = tmp_path / "router.yaml"
        YamlPersistence.save_yaml({"out": [], "global": {}, "in": {}}, path)
        assert list(yaml.safe_load(path.read_text())) == ["out", "global", "in"]

    def test_round_trip_through_model(self, tmp_path: Path):
        source = tmp_path / "router.yaml"
        source.write_text(VALID, encoding="utf-8")
        config = YamlPersistence.load_yaml(source, RouterConfig)

        copy = tmp_path / "copy.yaml"
        YamlPersistence.save_yaml(config.model_dump(by_alias=True, exclude_none=True), copy)
        assert YamlPersistence.load_yaml(copy, RouterConfig) == config


    def test_unserializable_data_leaves_file_alone(self, tmp_path: Path):
        path = tmp_path / "router.yaml"
        YamlPersistence.save_yaml({"out": ["csv"]}, path, backup=False)
        with pytest.raises(ConfigurationError):
            YamlPersistence.save_yaml({"out": [object()]}, path)
        assert yaml.safe_load(path.read_text())["out"] == ["csv"]
