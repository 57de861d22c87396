# anonymization/core/loader.py

"""Loader for fallback patterns, label and placeholder tables."""

import yaml
import logging
from pathlib import Path
from typing import Dict, List, Any, Optional, Union

from anonymization.core.definitions import PIIType
from anonymization.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "patterns.yaml"

REQUIRED_SECTIONS = ("patterns", "labels", "placeholders")


def read_config(path: Union[str, Path]) -> Dict[str, Any]:
    """Reads and validates a patterns file.

    Args:
        path: Location of the YAML file

    Returns:
        Parsed configuration dictionary

    Raises:
        ConfigurationError: If file is missing, invalid, or incomplete.
    """
    config_path = Path(path)

    if not config_path.exists():
        error_msg = f"Configuration file not found: {config_path}"
        logger.error(error_msg)
        raise ConfigurationError(error_msg)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"YAML parsing error: {e}", exc_info=True)
        raise ConfigurationError(f"Failed to parse {config_path.name}: {e}") from e

    if not config or not isinstance(config, dict):
        raise ConfigurationError("Configuration file is empty or invalid")

    _validate_config(config)
    return config


def _validate_config(config: Dict[str, Any]) -> None:
    """Validates required sections and type references.

    Raises:
        ConfigurationError: If sections are missing or name unknown types.
    """
    missing = [s for s in REQUIRED_SECTIONS if s not in config]
    if missing:
        error_msg = f"Missing required configuration sections: {missing}"
        logger.error(error_msg)
        raise ConfigurationError(error_msg)

    unknown = set(config["patterns"] or {}) - PIIType.ALL
    unknown |= set((config["labels"] or {}).get("mapping", {}).values()) - PIIType.ALL
    unknown |= set(config["placeholders"] or {}) - PIIType.ALL
    if unknown:
        raise ConfigurationError(f"Unknown PII types in configuration: {sorted(unknown)}")

    for entity_type, pattern_defs in (config["patterns"] or {}).items():
        for p in pattern_defs or []:
            if not {"name", "regex", "score"} <= set(p):
                raise ConfigurationError(
                    f"Pattern for '{entity_type}' needs name, regex and score: {p}"
                )


class PatternLoader:
    """Singleton loader for patterns and lookup tables.

    Loads configuration once from patterns.yaml and caches it for the
    application lifecycle.
    """

    _instance: Optional["PatternLoader"] = None
    _config: Dict[str, Any] = {}
    _loaded: bool = False

    def __new__(cls) -> "PatternLoader":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if not PatternLoader._loaded:
            self._load_config()

    def _load_config(self) -> None:
        PatternLoader._config = read_config(DEFAULT_CONFIG_PATH)
        PatternLoader._loaded = True
        logger.info(
            "Configuration loaded successfully",
            extra={
                "config_path": str(DEFAULT_CONFIG_PATH),
                "pattern_count": len(PatternLoader._config["patterns"]),
                "label_count": len(self.get_label_mapping()),
                "label_version": self.get_label_version(),
            },
        )

    @classmethod
    def get_instance(cls) -> "PatternLoader":
        """Returns the singleton instance of PatternLoader."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def get_pattern_types(self) -> List[str]:
        """Returns the PII types that have fallback patterns, in file order."""
        return list(self._config.get("patterns", {}))

    def get_patterns(self, entity_type: str) -> List[Dict[str, Any]]:
        """Returns regex patterns for a specific PII type.

        Args:
            entity_type: Canonical PII type (e.g., PIIType.EMAIL)

        Returns:
            List of pattern dictionaries with 'name', 'regex', 'score' keys
        """
        patterns = self._config.get("patterns", {}).get(entity_type, [])
        return patterns if patterns else []

    def get_label_mapping(self) -> Dict[str, str]:
        """Returns the model label -> PII type table."""
        return dict(self._config.get("labels", {}).get("mapping", {}))

    def get_label_version(self) -> int:
        return int(self._config.get("labels", {}).get("version", 0))

    def get_placeholders(self) -> Dict[str, str]:
        """Returns the PII type -> placeholder tag table."""
        return dict(self._config.get("placeholders", {}))
