"""Core abstractions for validating an FFmpeg build."""

from .aggregator import ResultAggregator, Totals
from .base import (
    CaptureError,
    Check,
    CheckKind,
    CheckOutcome,
    RunContext,
    RunState,
    TargetNotFoundError,
    ValidationError,
)
from .capabilities import CapabilityIndex, Listing
from .catalogue import (
    Catalogue,
    CommandProbe,
    LinkageProbe,
    ListingGroupProbe,
    ListingProbe,
    TranscodeProbe,
    build_catalogue,
)
from .config import ConfigManager, RunOptions
from .process import ProcessResult, ProcessRunner, SubprocessRunner
from .reporter import Reporter
from .resolver import Target, resolve_target
from .runner import CheckRunner
from .validator import BuildValidator

__all__ = [
    "BuildValidator",
    "CapabilityIndex",
    "CaptureError",
    "Catalogue",
    "Check",
    "CheckKind",
    "CheckOutcome",
    "CheckRunner",
    "CommandProbe",
    "ConfigManager",
    "LinkageProbe",
    "Listing",
    "ListingGroupProbe",
    "ListingProbe",
    "ProcessResult",
    "ProcessRunner",
    "Reporter",
    "ResultAggregator",
    "RunContext",
    "RunOptions",
    "RunState",
    "SubprocessRunner",
    "Target",
    "TargetNotFoundError",
    "Totals",
    "TranscodeProbe",
    "ValidationError",
    "build_catalogue",
    "resolve_target",
]
