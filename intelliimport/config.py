"""
Configuration system for IntelliImport

Provides configuration management with support for files and environment variables.
Includes validation, default value handling, and configuration merging.
"""

import os
import json
import yaml
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional, Any
import logging

from .analysis.autoimport.similarity import PATTERN_NAMES, get_pattern_matcher
from .analysis.foundation.models import AutoImportOptions, DEFAULT_IMPORT_GROUP_ORDER, ImportGroup

logger = logging.getLogger(__name__)

# Config-file spelling of each import group
IMPORT_GROUP_NAMES: Dict[str, ImportGroup] = {
    "builtin": ImportGroup.BUILT_IN,
    "thirdparty": ImportGroup.THIRD_PARTY,
    "local": ImportGroup.LOCAL,
    "local_relative": ImportGroup.LOCAL_RELATIVE,
}
_GROUP_NAME_BY_GROUP = {group: name for name, group in IMPORT_GROUP_NAMES.items()}

_TRUE_VALUES = ("1", "true", "yes", "on")


class ConfigurationError(Exception):
    """Raised when configuration validation fails."""

    pass


def _env_flag(name: str) -> Optional[bool]:
    value = os.getenv(name)
    if value is None or value == "":
        return None
    return value.strip().lower() in _TRUE_VALUES


def _env_list(name: str) -> Optional[List[str]]:
    value = os.getenv(name)
    if not value:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


class ConfigurationManager:
    """Manages configuration loading, validation, and merging."""

    DEFAULT_CONFIG_PATHS = [
        "intelliimport.json",
        "intelliimport.yaml",
        "intelliimport.yml",
        ".intelliimport.json",
        ".intelliimport.yaml",
        ".intelliimport.yml",
        os.path.expanduser("~/.intelliimport.json"),
        os.path.expanduser("~/.intelliimport.yaml"),
        os.path.expanduser("~/.intelliimport.yml"),
    ]

    @staticmethod
    def find_config_file(search_paths: Optional[List[str]] = None) -> Optional[str]:
        """Find the first existing configuration file."""
        paths = search_paths or ConfigurationManager.DEFAULT_CONFIG_PATHS

        for path in paths:
            if os.path.exists(path):
                return path
        return None

    @staticmethod
    def load_config_file(config_path: str) -> Dict[str, Any]:
        """Load configuration from file (JSON or YAML)."""
        if not os.path.exists(config_path):
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                if config_path.endswith((".yaml", ".yml")):
                    data = yaml.safe_load(f) or {}
                else:
                    data = json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Invalid configuration file format: {e}")
        except OSError as e:
            raise ConfigurationError(f"Error reading configuration file: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file must contain a mapping: {config_path}")
        return data

    @staticmethod
    def load_env_config() -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        # Matching settings
        matching: Dict[str, Any] = {}
        pattern = os.getenv("INTELLIIMPORT_PATTERN")
        if pattern:
            if pattern.lower() in PATTERN_NAMES:
                matching["pattern"] = pattern.lower()
            else:
                logger.warning("Invalid INTELLIIMPORT_PATTERN value, using default")

        case_sensitive = _env_flag("INTELLIIMPORT_CASE_SENSITIVE")
        if case_sensitive is not None:
            matching["case_sensitive"] = case_sensitive

        if matching:
            config["matching"] = matching

        # Candidate settings
        candidates: Dict[str, Any] = {}
        allow_variable_in_all = _env_flag("INTELLIIMPORT_ALLOW_VARIABLE_IN_ALL")
        if allow_variable_in_all is not None:
            candidates["allow_variable_in_all"] = allow_variable_in_all

        excluded_names = _env_list("INTELLIIMPORT_EXCLUDED_NAMES")
        if excluded_names is not None:
            candidates["excluded_names"] = excluded_names

        if candidates:
            config["candidates"] = candidates

        # Edit settings
        lazy_edit = _env_flag("INTELLIIMPORT_LAZY_EDIT")
        if lazy_edit is not None:
            config["edits"] = {"lazy_edit": lazy_edit}

        # Import group order
        order = _env_list("INTELLIIMPORT_IMPORT_GROUP_ORDER")
        if order is not None:
            config["import_groups"] = {"order": [name.lower() for name in order]}

        return config

    @staticmethod
    def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
        """Merge multiple configuration dictionaries, with later ones taking precedence."""
        result: Dict[str, Any] = {}

        for config in configs:
            if not config:
                continue

            for key, value in config.items():
                if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                    result[key] = ConfigurationManager.merge_configs(result[key], value)
                else:
                    result[key] = value

        return result

    @staticmethod
    def validate_config(config_data: Dict[str, Any]) -> None:
        """Validate configuration data."""
        for section in ("matching", "candidates", "edits", "import_groups"):
            if section in config_data and not isinstance(config_data[section], dict):
                raise ConfigurationError(f"{section} must be a mapping")

        # Validate matching settings
        if "matching" in config_data:
            matching = config_data["matching"]

            if "pattern" in matching and matching["pattern"] not in PATTERN_NAMES:
                raise ConfigurationError(f"pattern must be one of: {list(PATTERN_NAMES)}")

            if "case_sensitive" in matching and not isinstance(matching["case_sensitive"], bool):
                raise ConfigurationError("case_sensitive must be a boolean")

        # Validate candidate settings
        if "candidates" in config_data:
            candidates = config_data["candidates"]

            for key in ("allow_variable_in_all", "include_index_user_symbols"):
                if key in candidates and not isinstance(candidates[key], bool):
                    raise ConfigurationError(f"{key} must be a boolean")

            if "excluded_names" in candidates:
                names = candidates["excluded_names"]
                if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
                    raise ConfigurationError("excluded_names must be a list of strings")

        # Validate edit settings
        if "edits" in config_data:
            edits = config_data["edits"]
            if "lazy_edit" in edits and not isinstance(edits["lazy_edit"], bool):
                raise ConfigurationError("lazy_edit must be a boolean")

        # Validate import group order
        if "import_groups" in config_data:
            order = config_data["import_groups"].get("order")
            if order is not None:
                valid_names = sorted(IMPORT_GROUP_NAMES)
                if not isinstance(order, list) or sorted(order) != valid_names:
                    raise ConfigurationError(
                        f"import_groups.order must be a permutation of: {valid_names}"
                    )


@dataclass
class MatchingConfig:
    """Configuration for fuzzy name matching."""

    pattern: str = "subsequence"
    case_sensitive: bool = False


@dataclass
class CandidateConfig:
    """Configuration for candidate selection."""

    allow_variable_in_all: bool = False
    include_index_user_symbols: bool = False
    excluded_names: List[str] = field(default_factory=list)


@dataclass
class EditConfig:
    """Configuration for edit computation."""

    lazy_edit: bool = False


@dataclass
class ImportGroupConfig:
    """Order of import groups, first group sorts first."""

    order: List[ImportGroup] = field(default_factory=lambda: list(DEFAULT_IMPORT_GROUP_ORDER))


@dataclass
class IntelliImportConfig:
    """Main configuration class for IntelliImport."""

    matching_settings: MatchingConfig = field(default_factory=MatchingConfig)
    candidate_settings: CandidateConfig = field(default_factory=CandidateConfig)
    edit_settings: EditConfig = field(default_factory=EditConfig)
    import_group_settings: ImportGroupConfig = field(default_factory=ImportGroupConfig)

    @classmethod
    def default(cls) -> "IntelliImportConfig":
        """Create default configuration."""
        return cls()

    @classmethod
    def load(
        cls,
        config_path: Optional[str] = None,
        use_env: bool = True,
        validate: bool = True,
    ) -> "IntelliImportConfig":
        """
        Load configuration from multiple sources with precedence:
        1. Default values
        2. Configuration file
        3. Environment variables (if use_env=True)

        Args:
            config_path: Path to configuration file. If None, searches for default files.
            use_env: Whether to load environment variables
            validate: Whether to validate the configuration
        """
        configs_to_merge = []

        # Load from file
        file_config: Dict[str, Any] = {}
        if config_path:
            file_config = ConfigurationManager.load_config_file(config_path)
        else:
            found_config = ConfigurationManager.find_config_file()
            if found_config:
                file_config = ConfigurationManager.load_config_file(found_config)
                logger.info(f"Loaded configuration from: {found_config}")

        configs_to_merge.append(file_config)

        # Load from environment variables
        if use_env:
            configs_to_merge.append(ConfigurationManager.load_env_config())

        merged_config = ConfigurationManager.merge_configs(*configs_to_merge)

        if validate:
            ConfigurationManager.validate_config(merged_config)

        return cls.from_dict(merged_config)

    @classmethod
    def from_dict(cls, config_data: Dict[str, Any]) -> "IntelliImportConfig":
        """Build configuration objects from merged (and validated) data."""
        matching_config = MatchingConfig()
        for key, value in config_data.get("matching", {}).items():
            if hasattr(matching_config, key):
                setattr(matching_config, key, value)

        candidate_config = CandidateConfig()
        for key, value in config_data.get("candidates", {}).items():
            if hasattr(candidate_config, key):
                setattr(candidate_config, key, list(value) if key == "excluded_names" else value)

        edit_config = EditConfig()
        for key, value in config_data.get("edits", {}).items():
            if hasattr(edit_config, key):
                setattr(edit_config, key, value)

        import_group_config = ImportGroupConfig()
        order = config_data.get("import_groups", {}).get("order")
        if order is not None:
            try:
                import_group_config.order = [IMPORT_GROUP_NAMES[name] for name in order]
            except (KeyError, TypeError):
                raise ConfigurationError(f"Unknown import group in order: {order}")

        return cls(
            matching_settings=matching_config,
            candidate_settings=candidate_config,
            edit_settings=edit_config,
            import_group_settings=import_group_config,
        )

    @classmethod
    def from_file(cls, config_path: str) -> "IntelliImportConfig":
        """Load configuration from a JSON or YAML file."""
        return cls.load(config_path=config_path, use_env=False)

    @classmethod
    def from_env(cls) -> "IntelliImportConfig":
        """Load configuration from environment variables."""
        return cls.load(config_path=None, use_env=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "matching": asdict(self.matching_settings),
            "candidates": asdict(self.candidate_settings),
            "edits": asdict(self.edit_settings),
            "import_groups": {
                "order": [_GROUP_NAME_BY_GROUP[g] for g in self.import_group_settings.order],
            },
        }

    def to_file(self, config_path: str, format: str = "json") -> None:
        """
        Save configuration to file.

        Args:
            config_path: Path to save configuration
            format: File format ('json' or 'yaml')
        """
        config_data = self.to_dict()

        try:
            with open(config_path, "w", encoding="utf-8") as f:
                if format.lower() == "yaml":
                    yaml.dump(config_data, f, default_flow_style=False, indent=2)
                else:
                    json.dump(config_data, f, indent=2)
        except OSError as e:
            raise ConfigurationError(f"Error saving configuration file: {e}")

    def validate(self) -> None:
        """Validate the current configuration."""
        ConfigurationManager.validate_config(self.to_dict())

    def to_options(self) -> AutoImportOptions:
        """Engine options for these settings."""
        try:
            pattern_matcher = get_pattern_matcher(
                self.matching_settings.pattern, self.matching_settings.case_sensitive
            )
        except KeyError:
            raise ConfigurationError(f"Unknown pattern: {self.matching_settings.pattern}")

        return AutoImportOptions(
            pattern_matcher=pattern_matcher,
            allow_variable_in_all=self.candidate_settings.allow_variable_in_all,
            lazy_edit=self.edit_settings.lazy_edit,
            import_group_order=tuple(self.import_group_settings.order),
        )

    def get_config_summary(self) -> str:
        """Get a human-readable summary of the configuration."""
        order = ", ".join(_GROUP_NAME_BY_GROUP[g] for g in self.import_group_settings.order)
        return f"""IntelliImport Configuration Summary:
Matching:
  - Pattern: {self.matching_settings.pattern}
  - Case sensitive: {self.matching_settings.case_sensitive}

Candidates:
  - Allow variables in __all__: {self.candidate_settings.allow_variable_in_all}
  - Include index user symbols: {self.candidate_settings.include_index_user_symbols}
  - Excluded names: {len(self.candidate_settings.excluded_names)} names

Edits:
  - Lazy edit: {self.edit_settings.lazy_edit}

Import groups:
  - Order: {order}
"""


def load_config(config_path: Optional[str] = None, use_env: bool = True) -> IntelliImportConfig:
    """
    Load configuration from file and/or environment variables.

    Args:
        config_path: Path to configuration file
        use_env: Whether to load environment variables

    Returns:
        IntelliImportConfig: Loaded configuration
    """
    return IntelliImportConfig.load(config_path=config_path, use_env=use_env)
