"""Unit tests for revstamp configuration loading and saving."""

import json

import pytest
from pydantic import ValidationError

from revstamp.config import Config, ConfigManager
from revstamp.exceptions import ConfigError, ExitCode
from revstamp.formatting.placeholders import FormatCatalogue


class TestConfig:
    def test_defaults(self):
        config = Config()
        assert config.format_catalogue is FormatCatalogue.CURRENT
        assert config.default_format is None
        assert config.tag_match is None
        assert config.remove_tag_v is False
        assert config.git_timeout == 10.0

    def test_catalogue_from_string(self):
        assert Config(format_catalogue="legacy").format_catalogue is (
            FormatCatalogue.LEGACY
        )

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            Config(git_timeout=0)


class TestConfigManager:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = ConfigManager(tmp_path / ".revstamp" / "config.json").load()
        assert config == Config()

    def test_save_and_load(self, tmp_path):
        config_path = tmp_path / ".revstamp" / "config.json"
        ConfigManager(config_path).save(
            Config(format_catalogue="legacy", default_format="{!}{commit:8}")
        )

        saved = json.loads(config_path.read_text())
        assert saved["format_catalogue"] == "legacy"

        config = ConfigManager(config_path).load()
        assert config.format_catalogue is FormatCatalogue.LEGACY
        assert config.default_format == "{!}{commit:8}"

    def test_invalid_file(self, tmp_path):
        config_path = tmp_path / ".revstamp" / "config.json"
        config_path.parent.mkdir()
        config_path.write_text('{"git_timeout": -1}')

        with pytest.raises(ConfigError) as exc_info:
            ConfigManager(config_path).load()
        assert exc_info.value.exit_code == ExitCode.CMDLINE_ERROR

    def test_malformed_json(self, tmp_path):
        config_path = tmp_path / ".revstamp" / "config.json"
        config_path.parent.mkdir()
        config_path.write_text("{not json")

        with pytest.raises(ConfigError):
            ConfigManager(config_path).load()

    def test_save_without_config(self, tmp_path):
        with pytest.raises(ConfigError):
            ConfigManager(tmp_path / "config.json").save()


class TestConfigDiscovery:
    """Test finding .revstamp/config.json by walking up the directory tree."""

    def test_find_config_in_parent(self, tmp_path):
        config_path = tmp_path / ".revstamp" / "config.json"
        ConfigManager(config_path).save(Config())
        nested = tmp_path / "src" / "app"
        nested.mkdir(parents=True)

        assert ConfigManager.find_config_path(nested) == config_path.resolve()

    def test_create_with_backtrack_defaults_to_start_directory(self, tmp_path):
        manager = ConfigManager.create_with_backtrack(tmp_path)
        assert manager.config_path == tmp_path / ".revstamp" / "config.json"
