"""Configuration management for the plugin registry and the import sandbox."""

import os
import tomllib
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional, Dict, Any

from ..core.plugin.sandbox import SandboxLimits

DEFAULT_INDEX_URL = "https://raw.githubusercontent.com/yarnpkg/berry/master/plugins.yml"


@dataclass
class RegistryConfig:
    """Configuration for the remote plugin registry."""

    index_url: str = DEFAULT_INDEX_URL
    timeout: int = 30
    user_agent: str = "skein-cli"
    scope: str = "@yarnpkg"
    channel: str = "master"
    cli_package: str = "@yarnpkg/cli"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegistryConfig":
        """Create config from dictionary, ignoring unknown keys."""
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        config = cls(**known)
        if not config.index_url:
            raise ValueError("Registry index URL can't be empty")
        if int(config.timeout) <= 0:
            raise ValueError(f"Registry timeout must be positive, got {config.timeout}")
        config.timeout = int(config.timeout)
        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return asdict(self)


@dataclass
class Settings:
    """All settings used by the plugin commands."""

    registry: RegistryConfig = field(default_factory=RegistryConfig)
    sandbox: SandboxLimits = field(default_factory=SandboxLimits)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        """Create settings from the ``[registry]`` and ``[sandbox]`` tables."""
        registry = data.get("registry", {})
        sandbox = data.get("sandbox", {})
        if not isinstance(registry, dict) or not isinstance(sandbox, dict):
            raise ValueError("[registry] and [sandbox] must be tables")
        return cls(
            registry=RegistryConfig.from_dict(registry),
            sandbox=SandboxLimits.from_dict(sandbox),
        )

    @classmethod
    def from_file(cls, config_path: Path) -> "Settings":
        """Load settings from TOML file.

        Args:
            config_path: Path to TOML configuration file

        Returns:
            Settings instance

        Raises:
            ValueError: If file doesn't exist or has invalid format
        """
        if not config_path.exists():
            raise ValueError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, 'rb') as f:
                data = tomllib.load(f)
            return cls.from_dict(data)
        except (tomllib.TOMLDecodeError, TypeError, ValueError) as e:
            raise ValueError(f"Failed to parse TOML configuration file {config_path}: {e}")

    def apply_env(self) -> "Settings":
        """Override values from environment variables."""
        index_url = os.getenv("SKEIN_INDEX_URL")
        if index_url:
            self.registry.index_url = index_url

        try:
            timeout = os.getenv("SKEIN_TIMEOUT")
            if timeout:
                self.registry.timeout = int(timeout)
            sandbox_timeout = os.getenv("SKEIN_SANDBOX_TIMEOUT")
            if sandbox_timeout:
                self.sandbox.timeout = float(sandbox_timeout)
        except ValueError as e:
            raise ValueError(f"Invalid timeout in environment: {e}")

        return self


class ConfigManager:
    """Manages configuration loading."""

    DEFAULT_CONFIG_PATH = Path.home() / ".skein" / "config.toml"

    @classmethod
    def load_config(cls, config_path: Optional[Path] = None) -> Settings:
        """Load configuration from various sources.

        Priority order:
        1. Provided config_path
        2. Environment variables
        3. Default config file
        4. Built-in defaults

        Args:
            config_path: Optional path to config file

        Returns:
            Settings instance

        Raises:
            ValueError: If a config file is given but missing, or is invalid
        """
        if config_path is not None:
            return Settings.from_file(config_path)

        if cls.DEFAULT_CONFIG_PATH.exists():
            settings = Settings.from_file(cls.DEFAULT_CONFIG_PATH)
        else:
            settings = Settings()

        return settings.apply_env()

    @classmethod
    def get_default_config_path(cls) -> Path:
        """Get the default configuration file path."""
        return cls.DEFAULT_CONFIG_PATH
