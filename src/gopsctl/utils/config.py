"""
Configuration loader for gopsctl.

This module provides configuration management with:
- Multiple configuration sources (files, dicts, env vars)
- Schema validation
- Configuration merging
- Defaults management
"""

import os
import json
import yaml
from pathlib import Path
from typing import Optional, Dict, Any, List, Union
import toml
from pydantic import BaseModel, Field, field_validator, ValidationError, ConfigDict

from .logging import get_logger
from .errors import ConfigurationError


logger = get_logger("gopsctl.config")

ENV_PREFIX = "GOPSCTL_"


def user_config_dir() -> Path:
    """Per-user configuration root ($XDG_CONFIG_HOME or ~/.config)."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".config"


class ConfigSource(BaseModel):
    """Configuration source definition."""
    path: Optional[Path] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    priority: int = 0
    source_type: str = "dict"

    model_config = ConfigDict(arbitrary_types_allowed=True)


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "WARNING"
    format: str = "console"

    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    @field_validator('format')
    @classmethod
    def validate_format(cls, v):
        """Validate log format."""
        if v not in ("console", "json"):
            raise ValueError(f"Invalid log format: {v}")
        return v


class AgentConfig(BaseModel):
    """Agent discovery and connection configuration."""
    # None means $GOPS_CONFIG_DIR, then <user config dir>/gops
    config_dir: Optional[Path] = None
    host: str = "127.0.0.1"
    # None blocks until the agent answers
    timeout: Optional[float] = None

    @field_validator('config_dir')
    @classmethod
    def expand_config_dir(cls, v):
        """Expand ~ in the port file directory."""
        return v.expanduser() if v is not None else v

    @field_validator('timeout')
    @classmethod
    def validate_timeout(cls, v):
        """Timeout must be positive when set."""
        if v is not None and v <= 0:
            raise ValueError("timeout must be positive")
        return v

    def resolved_config_dir(self) -> Path:
        """Directory the agents write their port files into."""
        if self.config_dir is not None:
            return self.config_dir
        env_dir = os.environ.get("GOPS_CONFIG_DIR")
        if env_dir:
            return Path(env_dir)
        return user_config_dir() / "gops"


class DiscoveryConfig(BaseModel):
    """Process discovery configuration."""
    max_scan_bytes: int = 256 * 1024 * 1024  # 256MB
    chunk_size: int = 1024 * 1024  # 1MB

    @field_validator('max_scan_bytes', 'chunk_size')
    @classmethod
    def validate_positive(cls, v):
        """Scan sizes must be positive."""
        if v <= 0:
            raise ValueError("must be positive")
        return v


class ToolsConfig(BaseModel):
    """External tool configuration."""
    go_binary: str = "go"
    trace_seconds: int = 5


class GopsctlConfig(BaseModel):
    """Main gopsctl configuration."""
    app_name: str = "gopsctl"

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    agent: AgentConfig = Field(default_factory=AgentConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        validate_assignment=True
    )


class ConfigLoader:
    """Configuration loader with multiple source support."""

    def __init__(self, environ: Optional[Dict[str, str]] = None):
        """
        Initialize configuration loader.

        Args:
            environ: Environment mapping (defaults to os.environ)
        """
        self._sources: List[ConfigSource] = []
        self._environ = os.environ if environ is None else environ

    def add_source(
        self,
        source: Union[str, Path, Dict[str, Any]],
        priority: int = 0,
        source_type: Optional[str] = None
    ) -> None:
        """
        Add configuration source.

        Args:
            source: Configuration source (file path or dict)
            priority: Source priority (higher wins)
            source_type: Source type (auto-detected if None)
        """
        if isinstance(source, (str, Path)):
            path = Path(source)
            if not source_type:
                source_type = self._detect_source_type(path)

            self._sources.append(ConfigSource(
                path=path,
                priority=priority,
                source_type=source_type
            ))
        else:
            self._sources.append(ConfigSource(
                data=source,
                priority=priority,
                source_type="dict"
            ))

    def _detect_source_type(self, path: Path) -> str:
        """Detect configuration file type."""
        suffix = path.suffix.lower()
        if suffix == ".json":
            return "json"
        elif suffix in (".yaml", ".yml"):
            return "yaml"
        elif suffix == ".toml":
            return "toml"
        else:
            raise ConfigurationError(f"Unknown config file type: {suffix}")

    def load(self) -> GopsctlConfig:
        """
        Load configuration from all sources.

        Returns:
            Merged configuration
        """
        merged_data: Dict[str, Any] = {}

        # Lowest priority first so later merges win
        for source in sorted(self._sources, key=lambda s: s.priority):
            data = self._load_source(source)
            merged_data = self._deep_merge(merged_data, data)

        env_data = self._load_env_vars()
        merged_data = self._deep_merge(merged_data, env_data)

        try:
            config = GopsctlConfig(**merged_data)
        except ValidationError as e:
            errors = []
            for error in e.errors():
                field = ".".join(str(x) for x in error["loc"])
                errors.append(f"{field}: {error['msg']}")
            raise ConfigurationError(
                f"Configuration validation failed: {'; '.join(errors)}"
            ) from e

        logger.debug("configuration_loaded", sources=len(self._sources))
        return config

    def _load_source(self, source: ConfigSource) -> Dict[str, Any]:
        """Load data from a configuration source."""
        if source.path is None:
            return source.data

        if not source.path.exists():
            logger.debug("config_file_not_found", path=str(source.path))
            return {}

        try:
            content = source.path.read_text()
            if source.source_type == "json":
                data = json.loads(content)
            elif source.source_type == "yaml":
                data = yaml.safe_load(content) or {}
            elif source.source_type == "toml":
                data = toml.loads(content)
            else:
                raise ConfigurationError(f"Unknown source type: {source.source_type}")
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read {source.path}: {e}", cause=e
            ) from e
        except (ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Failed to parse {source.path}: {e}", cause=e
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {source.path} must contain a mapping")
        return data

    def _load_env_vars(self) -> Dict[str, Any]:
        """
        Load configuration from environment variables.

        GOPSCTL_AGENT__TIMEOUT=2.5 becomes {"agent": {"timeout": "2.5"}};
        pydantic coerces the leaf strings.
        """
        result: Dict[str, Any] = {}

        for key, value in self._environ.items():
            if not key.startswith(ENV_PREFIX):
                continue
            parts = key[len(ENV_PREFIX):].lower().split("__")
            current = result
            for part in parts[:-1]:
                current = current.setdefault(part, {})
                if not isinstance(current, dict):
                    raise ConfigurationError(
                        f"{key} conflicts with another {ENV_PREFIX} variable"
                    )
            if isinstance(current.get(parts[-1]), dict):
                raise ConfigurationError(
                    f"{key} conflicts with another {ENV_PREFIX} variable"
                )
            current[parts[-1]] = value

        return result

    def _deep_merge(self, base: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in update.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


def default_config_paths() -> List[Path]:
    """Standard configuration file locations, lowest priority first."""
    base = user_config_dir() / "gopsctl"
    return [
        base / "config.json",
        base / "config.yaml",
        base / "config.toml",
        Path("./gopsctl.toml"),
    ]


def load_config(
    config_paths: Optional[List[Union[str, Path]]] = None,
    extra_config: Optional[Dict[str, Any]] = None,
    environ: Optional[Dict[str, str]] = None
) -> GopsctlConfig:
    """
    Load configuration from standard locations.

    Args:
        config_paths: Additional configuration paths
        extra_config: Extra configuration to merge
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Loaded configuration
    """
    loader = ConfigLoader(environ=environ)

    for i, path in enumerate(default_config_paths()):
        if path.exists():
            loader.add_source(path, priority=10 + i)

    if config_paths:
        for i, path in enumerate(config_paths):
            loader.add_source(path, priority=20 + i)

    if extra_config:
        loader.add_source(extra_config, priority=100)

    return loader.load()


# Export public API
__all__ = [
    'GopsctlConfig',
    'LoggingConfig',
    'AgentConfig',
    'DiscoveryConfig',
    'ToolsConfig',
    'ConfigLoader',
    'load_config',
    'user_config_dir',
]
