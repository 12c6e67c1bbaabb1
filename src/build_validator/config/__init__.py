"""Configuration management for the build validator."""

from __future__ import annotations

from .constants import *  # noqa: F403, F401
from .settings import ValidatorConfig, get_config

__all__ = [
    "ValidatorConfig",
    "get_config",
]
