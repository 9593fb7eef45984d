"""
Configuration management for the linker.

This module handles loading, saving, validating and displaying the tunable
parameters of the linking engine.
"""

import logging
import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class LinkerConfig:
    """Configuration for the linking engine."""

    # Isomorphism
    weight_epsilon: float = 0.001  # Per-edge weight tolerance

    # Indirect resolution
    activation_threshold: float = 0.5  # Scores must be strictly greater

    # Resources
    experience_capacity: int = 64  # Ring buffer size per component
    max_components: Optional[int] = None  # None = unbounded

    # Diagnostics
    log_level: str = "WARNING"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LinkerConfig':
        """Create from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known})

    def errors(self) -> List[str]:
        """List every validation problem with this configuration."""
        errors = []

        for name in ('weight_epsilon', 'activation_threshold'):
            value = getattr(self, name)
            if not _is_number(value):
                errors.append(f"{name} must be a number, got {value!r}")
            elif not 0.0 <= value < 1.0:
                errors.append(f"{name} must be within [0, 1), got {value}")

        if not _is_int(self.experience_capacity):
            errors.append(
                f"experience_capacity must be an integer, got {self.experience_capacity!r}"
            )
        elif self.experience_capacity < 1:
            errors.append(
                f"experience_capacity must be positive, got {self.experience_capacity}"
            )

        if self.max_components is not None:
            if not _is_int(self.max_components):
                errors.append(
                    f"max_components must be an integer or null, got {self.max_components!r}"
                )
            elif self.max_components < 1:
                errors.append(f"max_components must be positive or null, got {self.max_components}")

        if str(self.log_level).upper() not in LOG_LEVELS:
            errors.append(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level}")

        return errors

    def validate(self) -> bool:
        """Validate configuration parameters, reporting any errors."""
        errors = self.errors()
        for error in errors:
            logger.error(f"Configuration error: {error}")
        return not errors


class ConfigManager:
    """Manages linker configuration."""

    DEFAULT_CONFIG_FILE = ".isolink.yml"
    ENV_PREFIX = "ISOLINK_"

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize config manager.

        Args:
            config_path: Path to configuration file
        """
        self.console = Console()
        self.config_path = Path(config_path) if config_path else Path(self.DEFAULT_CONFIG_FILE)
        self._config: Optional[LinkerConfig] = None

    def load(self) -> LinkerConfig:
        """
        Load configuration from file or fall back to defaults.

        Returns:
            Loaded or default configuration

        Raises:
            yaml.YAMLError: If the file exists but is not valid YAML
        """
        if self._config is not None:
            return self._config

        if self.config_path.exists():
            with open(self.config_path, 'r') as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ValueError(f"Config file {self.config_path} must contain a mapping")
            self._config = LinkerConfig.from_dict(data)
            logger.info(f"Loaded config from {self.config_path}")
        else:
            self._config = LinkerConfig()
            logger.debug("Using default configuration")

        self._apply_env_overrides()

        return self._config

    def save(self, config: Optional[LinkerConfig] = None) -> None:
        """
        Save configuration to file.

        Args:
            config: Configuration to save (uses current if None)
        """
        config = config or self._config or LinkerConfig()

        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w') as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
        self._config = config
        logger.info(f"Saved config to {self.config_path}")

    def update(self, **kwargs) -> LinkerConfig:
        """
        Update configuration parameters.

        Args:
            **kwargs: Parameters to update

        Returns:
            Updated configuration

        Raises:
            AttributeError: If a parameter is unknown
        """
        config = self.load()

        for key, value in kwargs.items():
            if not hasattr(config, key):
                raise AttributeError(f"Unknown config parameter '{key}'")
            setattr(config, key, value)

        return config

    def reset(self) -> LinkerConfig:
        """Reset to default configuration."""
        self._config = LinkerConfig()
        return self._config

    def display(self, config: Optional[LinkerConfig] = None):
        """
        Display configuration in a formatted panel.

        Args:
            config: Configuration to display (uses current if None)
        """
        config = config or self.load()

        yaml_str = yaml.dump(config.to_dict(), default_flow_style=False, sort_keys=False)

        syntax = Syntax(yaml_str, "yaml", theme="monokai", line_numbers=True)
        panel = Panel(
            syntax,
            title="[bold cyan]Linker Configuration[/bold cyan]",
            border_style="cyan"
        )

        self.console.print(panel)

    def _apply_env_overrides(self):
        """Apply ISOLINK_* environment variable overrides."""
        if self._config is None:
            return

        converters = {
            'weight_epsilon': float,
            'activation_threshold': float,
            'experience_capacity': int,
            'max_components': _optional_int,
            'log_level': str.upper,
        }

        for name, convert in converters.items():
            raw = os.getenv(f"{self.ENV_PREFIX}{name.upper()}")
            if raw is None:
                continue
            try:
                setattr(self._config, name, convert(raw))
            except ValueError:
                raise ValueError(
                    f"Invalid value for {self.ENV_PREFIX}{name.upper()}: {raw!r}"
                ) from None
            logger.info(f"Applied env override: {name}={getattr(self._config, name)}")


def _optional_int(raw: str) -> Optional[int]:
    if raw.strip().lower() in ("", "none", "null"):
        return None
    return int(raw)


# Global config manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_path: Optional[Path] = None) -> ConfigManager:
    """
    Get global config manager instance.

    Args:
        config_path: Optional path to config file

    Returns:
        Config manager instance
    """
    global _config_manager

    if _config_manager is None or (config_path and Path(config_path) != _config_manager.config_path):
        _config_manager = ConfigManager(config_path)

    return _config_manager


def get_config(config_path: Optional[Path] = None) -> LinkerConfig:
    """Get current configuration."""
    return get_config_manager(config_path).load()


def save_config(config: LinkerConfig, config_path: Optional[Path] = None) -> None:
    """Save configuration."""
    get_config_manager(config_path).save(config)


def create_default_config_file(path: Optional[Path] = None) -> Path:
    """
    Write a default configuration file.

    Args:
        path: Path for config file

    Returns:
        Path written
    """
    path = Path(path or ConfigManager.DEFAULT_CONFIG_FILE)
    with open(path, 'w') as f:
        yaml.dump(LinkerConfig().to_dict(), f, default_flow_style=False, sort_keys=False)
    return path
