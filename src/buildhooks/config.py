"""Configuration management for buildhooks.

Configuration Discovery Precedence (Highest to Lowest Priority):
===============================================================

1. **BUILDHOOKS_CONFIG_DIR Environment Variable** (Highest Priority)
   - Looks for: `${BUILDHOOKS_CONFIG_DIR}/buildhooks.yaml`
   - Use case: CI jobs, testing, custom deployments

2. **Current Working Directory**
   - Looks for: `./buildhooks.yaml`
   - Use case: Per-project configuration next to the pom.xml

3. **~/.buildhooks Directory** (Fallback)
   - Looks for: `~/.buildhooks/buildhooks.yaml`
   - Use case: Default user installations

The first existing `buildhooks.yaml` found in this order is used.
If none is found, default configuration is applied.

Example buildhooks.yaml:
-----------------------
buildhooks:
  debug: false
  maven_home: /opt/maven
  offline: false
  interactive_mode: false
  pom_file: ./pom.xml
  system_properties:
    maven.home: /usr/share/maven
"""

import logging
import os
import threading
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "buildhooks.yaml"


class BuildHooksConfig(BaseSettings):
    """Main configuration for buildhooks that reads from buildhooks.yaml.

    These values stand in for the collaborators a host build would inject:
    the Maven home, the host's system properties and the ambient Maven
    settings (offline / interactive) of the running build.
    """

    model_config = SettingsConfigDict(
        env_prefix="BUILDHOOKS_",
        case_sensitive=False,
        extra="ignore",
    )

    # Core settings
    debug: bool = False

    # Injected Maven home; first candidate in Maven home resolution
    maven_home: str | None = None

    # Host system properties (e.g. "maven.home")
    system_properties: dict[str, str] = Field(default_factory=dict)

    # Ambient Maven settings copied into nested invocations
    offline: bool = False
    interactive_mode: bool = False

    # POM of the project nested builds run against
    pom_file: Path = Field(default_factory=lambda: Path("./pom.xml"))

    # Path to the buildhooks config
    config_path: Path = Field(default_factory=lambda: Path(f"./{CONFIG_FILENAME}"))

    @classmethod
    def from_yaml(cls, yaml_path: Path, **kwargs: Any) -> "BuildHooksConfig":
        """Load configuration from a buildhooks.yaml file.

        Args:
            yaml_path: Path to the buildhooks.yaml file
            **kwargs: Additional keyword arguments

        Returns:
            BuildHooksConfig instance
        """
        values: dict[str, Any] = {}

        if yaml_path.exists():
            with yaml_path.open() as f:
                data = yaml.safe_load(f) or {}

            section = data.get("buildhooks", {}) or {}
            if not isinstance(section, dict):
                logger.warning(f"Invalid buildhooks section in {yaml_path}: {type(section)}")
                section = {}

            for key in cls.model_fields:
                if key in section:
                    values[key] = section[key]

            # Relative pom paths are resolved against the config file location
            if "pom_file" in values:
                pom_file = Path(values["pom_file"])
                if not pom_file.is_absolute():
                    values["pom_file"] = yaml_path.parent / pom_file

        values.update(kwargs)
        values["config_path"] = yaml_path
        return cls(**values)


# Global configuration instance
_config_instance: BuildHooksConfig | None = None
_config_lock = threading.Lock()


def get_config() -> BuildHooksConfig:
    """Get the configuration instance."""
    global _config_instance

    if _config_instance is None:
        with _config_lock:
            # Double-check locking pattern
            if _config_instance is None:
                _config_instance = _discover_config()

    return _config_instance


def _discover_config() -> BuildHooksConfig:
    candidates: list[tuple[Path, str]] = []

    # Priority 1: Environment variable
    env_config_dir = os.environ.get("BUILDHOOKS_CONFIG_DIR")
    if env_config_dir:
        candidates.append((Path(env_config_dir) / CONFIG_FILENAME, f"ENV:BUILDHOOKS_CONFIG_DIR={env_config_dir}"))

    # Priority 2: Working directory
    candidates.append((Path.cwd() / CONFIG_FILENAME, "CWD"))

    # Priority 3: Fallback to ~/.buildhooks directory
    candidates.append((Path.home() / ".buildhooks" / CONFIG_FILENAME, "HOME"))

    for path, source in candidates:
        if path.exists():
            logger.info(f"Loading buildhooks config from: {path} (source: {source})")
            return BuildHooksConfig.from_yaml(path)

    logger.info("No buildhooks.yaml found in any location, using defaults")
    return BuildHooksConfig()


def set_config_instance(config: BuildHooksConfig) -> None:
    """Set the global configuration instance (for testing)."""
    global _config_instance
    _config_instance = config


def clear_config_instance() -> None:
    """Clear the global configuration instance (for testing)."""
    global _config_instance
    _config_instance = None
