"""Configuration loader - loads and merges secure store config files."""

import logging
import os
import re
from pathlib import Path
from typing import Any, Optional

import yaml

from securestore.config.exceptions import (
    ConfigNotFoundError,
    ConfigParseError,
    ConfigValidationError,
)
from securestore.config.settings import SecureStoreConfig

logger = logging.getLogger(__name__)

# Default paths relative to project root
CONFIG_DIR = Path(__file__).parent.parent.parent / "config"
CONFIG_FILE = "securestore.yaml"

BACKEND_ENV = "SECURESTORE_BACKEND"
EXTENSIONS_DIR_ENV = "SECURESTORE_EXTENSIONS_DIR"

ENV_PATTERN = re.compile(r"\$\{env:([^}]+)\}")


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries. Override wins on conflicts."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _resolve_env(value: Any) -> Any:
    """Recursively replace ${env:VAR} references with environment values."""
    if isinstance(value, dict):
        return {k: _resolve_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_env(item) for item in value]
    if not isinstance(value, str):
        return value

    def replace_match(match):
        var = match.group(1)
        if var not in os.environ:
            raise ConfigValidationError(f"Environment variable '{var}' is not set")
        return os.environ[var]

    return ENV_PATTERN.sub(replace_match, value)


def _resolve_document(config: dict) -> dict:
    """
    Resolve ${env:VAR} references in a merged config document.

    Backend sections other than the configured backend are left as written,
    so variables needed only by unused backends may stay unset. Without a
    configured backend every section is resolved.
    """
    section = config.get("secure_store")
    if not isinstance(section, dict) or not isinstance(section.get("backends"), dict):
        return _resolve_env(config)

    backends = section["backends"]
    resolved = _resolve_env({**config, "secure_store": {**section, "backends": {}}})
    selected = resolved["secure_store"].get("backend")
    resolved["secure_store"]["backends"] = {
        name: _resolve_env(props) if not selected or name == selected else props
        for name, props in backends.items()
    }
    return resolved


class ConfigLoader:
    """
    Loads secure store configuration.

    Load order (later wins):
        1. securestore.yaml (base settings)
        2. environments/{env}.yaml (optional environment overrides)
        3. SECURESTORE_BACKEND / SECURESTORE_EXTENSIONS_DIR variables
        4. Resolve ${env:VAR} patterns (only the selected backend's section)

    Usage:
        loader = ConfigLoader()
        config = loader.load(environment="prod")
    """

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir) if config_dir else CONFIG_DIR

    def _load_yaml(self, path: Path) -> dict:
        """Load and parse a YAML file."""
        if not path.exists():
            raise ConfigNotFoundError(f"Config file not found: {path}")

        try:
            with open(path) as f:
                content = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigParseError(f"Invalid YAML in {path}: {e}")

        if not isinstance(content, dict):
            raise ConfigParseError(f"Expected a mapping at the top of {path}")
        logger.debug(f"Loaded config: {path}")
        return content

    def _load_if_exists(self, path: Path) -> dict:
        """Load YAML file if it exists, otherwise return empty dict."""
        if path.exists():
            return self._load_yaml(path)
        return {}

    @staticmethod
    def _env_overrides() -> dict:
        overrides = {}
        if os.environ.get(BACKEND_ENV):
            overrides["backend"] = os.environ[BACKEND_ENV]
        if os.environ.get(EXTENSIONS_DIR_ENV):
            overrides["extensions_dir"] = os.environ[EXTENSIONS_DIR_ENV]
        return {"secure_store": overrides} if overrides else {}

    def load(self, environment: Optional[str] = None) -> SecureStoreConfig:
        """
        Load complete secure store configuration.

        Args:
            environment: Optional environment (e.g., "prod", "staging")

        Returns:
            Merged and resolved SecureStoreConfig
        """
        base_path = self.config_dir / CONFIG_FILE
        config = self._load_yaml(base_path)
        logger.info(f"Loaded secure store config: {base_path}")

        if environment:
            env_path = self.config_dir / "environments" / f"{environment}.yaml"
            env_config = self._load_if_exists(env_path)
            if env_config:
                config = _deep_merge(config, env_config)
                logger.info(f"Merged environment config: {env_path}")

        overrides = self._env_overrides()
        if overrides:
            config = _deep_merge(config, overrides)
            logger.debug(
                f"Applied environment overrides: {sorted(overrides['secure_store'])}"
            )

        config = _resolve_document(config)
        return SecureStoreConfig.from_dict(config)

    def health_check(self) -> bool:
        """Check if the config file is present."""
        return (self.config_dir / CONFIG_FILE).exists()
