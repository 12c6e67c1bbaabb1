"""FFmpeg Build Validator - post-build checks for FFmpeg executables."""

from __future__ import annotations

__version__ = "0.1.0"
__description__ = "Post-build validation harness for FFmpeg executables"

# Public API exports
from .config import ValidatorConfig, get_config
from .core import (
    BuildValidator,
    CaptureError,
    Check,
    CheckOutcome,
    ConfigManager,
    ProcessRunner,
    Reporter,
    SubprocessRunner,
    TargetNotFoundError,
    Totals,
    ValidationError,
    build_catalogue,
)

__all__ = [
    # Configuration
    "ValidatorConfig",
    "get_config",
    "ConfigManager",
    # Core functionality
    "BuildValidator",
    "ProcessRunner",
    "SubprocessRunner",
    "Reporter",
    "build_catalogue",
    # Data classes
    "Check",
    "CheckOutcome",
    "Totals",
    # Exceptions
    "ValidationError",
    "TargetNotFoundError",
    "CaptureError",
]
