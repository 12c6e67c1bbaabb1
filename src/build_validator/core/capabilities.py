"""Per-run cache of the executable's capability listings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..config.constants import LISTING_LOG_TEMPLATE
from .base import CaptureError

if TYPE_CHECKING:
    from pathlib import Path

    from .process import ProcessRunner
    from .resolver import Target

LOG = logging.getLogger(__name__)

LISTING_FLAGS = {
    "codecs": "-codecs",
    "encoders": "-encoders",
    "decoders": "-decoders",
    "filters": "-filters",
    "hwaccels": "-hwaccels",
}


@dataclass(frozen=True)
class Listing:
    """Captured listing for one category, or the reason it is missing."""

    category: str
    text: str = ""
    error: str | None = None
    log_path: Path | None = None
    return_code: int = 0

    @property
    def available(self) -> bool:
        """Whether the listing was captured."""
        return self.error is None

    def contains(self, token: str) -> bool:
        """Case-sensitive substring match against the listing."""
        return self.available and token in self.text

    def matching_lines(self, token: str) -> list[str]:
        """Lines of the listing that contain the token."""
        return [line.strip() for line in self.text.splitlines() if token in line]

    def missing_detail(self, token: str) -> str:
        """Failure detail for a token absent from the listing."""
        detail = f"'{token}' not in {self.category} listing"
        if self.return_code != 0:
            detail += f" (listing exited with code {self.return_code})"
        return detail


class CapabilityIndex:
    """
    Lazily queries the executable once per listing category.

    Only stdout is indexed: the build banner on stderr repeats the configure
    flags (``--enable-nvenc`` and friends) and would make every token match.
    The listing log keeps both streams.
    """

    def __init__(self, runner: ProcessRunner, target: Target) -> None:
        self.runner = runner
        self.target = target
        self._listings: dict[str, Listing] = {}

    def get(self, category: str) -> Listing:
        """Return the listing for a category, querying the executable on first use."""
        if category in self._listings:
            return self._listings[category]

        if category not in LISTING_FLAGS:
            msg = f"Unknown listing category '{category}'. Available: {', '.join(LISTING_FLAGS)}"
            raise ValueError(msg)

        listing = self._capture(category)
        self._listings[category] = listing
        return listing

    def _capture(self, category: str) -> Listing:
        command = [str(self.target.executable), "-hide_banner", LISTING_FLAGS[category]]
        log_path = self.target.log_path(LISTING_LOG_TEMPLATE.format(category=category))

        try:
            result = self.runner.run(command)
        except CaptureError as e:
            LOG.warning("Failed to get %s listing: %s", category, e)
            log_path.write_text(f"{e}\n", encoding="utf-8")
            return Listing(category=category, error=str(e), log_path=log_path)

        result.write_log(log_path)
        if not result.ok:
            LOG.warning("%s listing exited with code %d", category, result.return_code)

        LOG.debug("Captured %s listing (%d lines)", category, len(result.stdout.splitlines()))
        return Listing(
            category=category, text=result.stdout, log_path=log_path, return_code=result.return_code
        )
