"""
Tests for configuration loading.
"""

import json
import logging

import pytest
import yaml

from intelliimport.analysis.autoimport.similarity import is_pattern_in_symbol, is_prefix_of_symbol
from intelliimport.analysis.foundation.models import DEFAULT_IMPORT_GROUP_ORDER, ImportGroup
from intelliimport.config import (
    ConfigurationError,
    ConfigurationManager,
    IntelliImportConfig,
    load_config,
)


@pytest.fixture
def no_default_files(monkeypatch):
    monkeypatch.setattr(ConfigurationManager, "DEFAULT_CONFIG_PATHS", [])


def write_yaml(path, data):
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return str(path)


class TestDefaults:
    """Tests for the default configuration."""

    def test_default_options(self):
        """Test the engine options of the defaults."""
        options = IntelliImportConfig.default().to_options()
        assert options.pattern_matcher is is_pattern_in_symbol
        assert not options.allow_variable_in_all
        assert not options.lazy_edit
        assert options.import_group_order == DEFAULT_IMPORT_GROUP_ORDER

    def test_load_without_sources(self, clean_env, no_default_files):
        """Test that loading with nothing to read yields the defaults."""
        assert load_config().to_dict() == IntelliImportConfig.default().to_dict()

    def test_summary(self):
        """Test the human-readable summary."""
        summary = IntelliImportConfig.default().get_config_summary()
        assert "Pattern: subsequence" in summary
        assert "Order: builtin, thirdparty, local, local_relative" in summary


class TestFileConfig:
    """Tests for configuration files."""

    def test_yaml_file(self, tmp_path, clean_env):
        """Test loading a YAML file."""
        path = write_yaml(
            tmp_path / "intelliimport.yaml",
            {
                "matching": {"pattern": "prefix"},
                "candidates": {"excluded_names": ["os", "sys"], "allow_variable_in_all": True},
                "import_groups": {"order": ["local", "builtin", "thirdparty", "local_relative"]},
            },
        )
        config = IntelliImportConfig.from_file(path)
        assert config.candidate_settings.excluded_names == ["os", "sys"]

        options = config.to_options()
        assert options.pattern_matcher is is_prefix_of_symbol
        assert options.allow_variable_in_all
        assert options.group_rank(ImportGroup.LOCAL) == 0
        assert options.group_rank(ImportGroup.BUILT_IN) == 1

    def test_json_file(self, tmp_path, clean_env):
        """Test loading a JSON file."""
        path = tmp_path / "intelliimport.json"
        path.write_text(json.dumps({"edits": {"lazy_edit": True}}), encoding="utf-8")
        assert IntelliImportConfig.from_file(str(path)).edit_settings.lazy_edit

    def test_found_in_search_paths(self, tmp_path, clean_env, monkeypatch):
        """Test that the first existing default path is used."""
        path = write_yaml(tmp_path / ".intelliimport.yaml", {"edits": {"lazy_edit": True}})
        monkeypatch.setattr(ConfigurationManager, "DEFAULT_CONFIG_PATHS", [str(tmp_path / "missing.yaml"), path])
        assert load_config().edit_settings.lazy_edit

    def test_missing_file(self, tmp_path):
        """Test that an explicit missing file is an error."""
        with pytest.raises(ConfigurationError):
            IntelliImportConfig.from_file(str(tmp_path / "nope.yaml"))

    def test_invalid_yaml(self, tmp_path):
        """Test that malformed YAML is an error."""
        path = tmp_path / "bad.yaml"
        path.write_text("matching: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            IntelliImportConfig.from_file(str(path))

    def test_non_mapping_file(self, tmp_path):
        """Test that a file holding a list is rejected."""
        path = tmp_path / "list.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            IntelliImportConfig.from_file(str(path))

    def test_save_and_reload(self, tmp_path, clean_env):
        """Test that a saved YAML file loads back to the same settings."""
        config = IntelliImportConfig.default()
        config.matching_settings.pattern = "substring"
        config.candidate_settings.excluded_names = ["self"]
        path = str(tmp_path / "saved.yaml")
        config.to_file(path, format="yaml")
        assert IntelliImportConfig.from_file(path).to_dict() == config.to_dict()


class TestValidation:
    """Tests for configuration validation."""

    @pytest.mark.parametrize(
        "data",
        [
            {"matching": {"pattern": "regex"}},
            {"matching": {"case_sensitive": "yes"}},
            {"matching": []},
            {"candidates": {"excluded_names": "os"}},
            {"candidates": {"include_index_user_symbols": 1}},
            {"edits": {"lazy_edit": "true"}},
            {"import_groups": {"order": ["builtin", "local"]}},
            {"import_groups": {"order": ["builtin", "builtin", "local", "thirdparty"]}},
        ],
    )
    def test_invalid(self, data):
        """Test that malformed settings are rejected."""
        with pytest.raises(ConfigurationError):
            ConfigurationManager.validate_config(data)

    def test_validate_instance(self):
        """Test validating a config object."""
        config = IntelliImportConfig.default()
        config.matching_settings.pattern = "glob"
        with pytest.raises(ConfigurationError):
            config.validate()


class TestEnvConfig:
    """Tests for environment variables."""

    def test_env_values(self, clean_env, monkeypatch):
        """Test that every supported variable is read."""
        monkeypatch.setenv("INTELLIIMPORT_PATTERN", "Prefix")
        monkeypatch.setenv("INTELLIIMPORT_CASE_SENSITIVE", "yes")
        monkeypatch.setenv("INTELLIIMPORT_ALLOW_VARIABLE_IN_ALL", "0")
        monkeypatch.setenv("INTELLIIMPORT_EXCLUDED_NAMES", "os, sys,,")
        monkeypatch.setenv("INTELLIIMPORT_LAZY_EDIT", "true")
        monkeypatch.setenv("INTELLIIMPORT_IMPORT_GROUP_ORDER", "LOCAL,builtin,thirdparty,local_relative")
        assert ConfigurationManager.load_env_config() == {
            "matching": {"pattern": "prefix", "case_sensitive": True},
            "candidates": {"allow_variable_in_all": False, "excluded_names": ["os", "sys"]},
            "edits": {"lazy_edit": True},
            "import_groups": {"order": ["local", "builtin", "thirdparty", "local_relative"]},
        }

    def test_invalid_pattern_ignored(self, clean_env, monkeypatch, caplog):
        """Test that an unknown pattern warns and keeps the default."""
        monkeypatch.setenv("INTELLIIMPORT_PATTERN", "regex")
        with caplog.at_level(logging.WARNING):
            assert ConfigurationManager.load_env_config() == {}
        assert "INTELLIIMPORT_PATTERN" in caplog.text

    def test_env_overrides_file(self, tmp_path, clean_env, monkeypatch):
        """Test that environment variables take precedence over the file."""
        path = write_yaml(tmp_path / "c.yaml", {"matching": {"pattern": "prefix", "case_sensitive": True}})
        monkeypatch.setenv("INTELLIIMPORT_PATTERN", "substring")
        config = load_config(path)
        assert config.matching_settings.pattern == "substring"
        assert config.matching_settings.case_sensitive

    def test_merge_is_deep(self):
        """Test that nested sections are merged key by key."""
        merged = ConfigurationManager.merge_configs(
            {"matching": {"pattern": "prefix", "case_sensitive": True}},
            {"matching": {"pattern": "substring"}},
            {},
        )
        assert merged == {"matching": {"pattern": "substring", "case_sensitive": True}}
