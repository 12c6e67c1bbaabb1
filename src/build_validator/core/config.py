"""Configuration access with command-line overrides."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..config import ValidatorConfig
from ..config import get_config as _get_global_config

if TYPE_CHECKING:
    from pathlib import Path

LOG = logging.getLogger(__name__)


@dataclass
class RunOptions:
    """Run options that can override configuration."""

    timeout: float | None = None
    color: bool | None = None
    progress: bool = True


class ConfigManager:
    """Configuration manager with override support."""

    def __init__(self, config_path: Path | None = None) -> None:
        """
        Initialize configuration manager.

        Args:
            config_path: Optional path to config file

        """
        self._config = ValidatorConfig.load_from_file(config_path) if config_path else _get_global_config()
        self._overrides: dict[str, Any] = {}

    @property
    def config(self) -> ValidatorConfig:
        """Get the base configuration."""
        return self._config

    def get_value(self, key_path: str, default: object = None) -> object:
        """Get configuration value with override support."""
        if key_path in self._overrides:
            return self._overrides[key_path]

        try:
            value = self._config
            for part in key_path.split("."):
                value = getattr(value, part)
        except AttributeError:
            return default
        else:
            return value

    def set_override(self, key_path: str, value: object) -> None:
        """Set a configuration override for this run."""
        LOG.debug("Override %s = %r", key_path, value)
        self._overrides[key_path] = value

    def apply_run_options(self, options: RunOptions) -> None:
        """Apply run options as configuration overrides."""
        if options.timeout is not None:
            self.set_override("global_.timeout", options.timeout)
        if options.color is not None:
            self.set_override("global_.color", options.color)
