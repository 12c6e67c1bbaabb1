"""Declarative catalogue of build validation checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from ..config import ValidatorConfig


@dataclass(frozen=True)
class CommandProbe:
    """Run the executable with fixed arguments; pass on exit status 0."""

    name: str
    args: tuple[str, ...]
    log_name: str
    announce: str | None = None


@dataclass(frozen=True)
class ListingProbe:
    """Pass if a capability listing contains a token."""

    name: str
    category: str
    token: str
    match_log_name: str | None = None
    announce: str | None = None


@dataclass(frozen=True)
class ListingGroupProbe:
    """One check per token, all against a single capability listing."""

    category: str
    tokens: tuple[str, ...]
    name_template: str
    announce: str | None = None

    def check_name(self, token: str) -> str:
        return self.name_template.format(token=token)


@dataclass(frozen=True)
class TranscodeProbe:
    """Transcode a generated sample on the CPU path and the accelerated path."""

    cpu_name: str
    accel_name: str
    sample_tool: str
    sample_source: str
    cpu_args: tuple[str, ...]
    accel_encoder: str
    accel_args: tuple[str, ...]
    announce: str | None = None


@dataclass(frozen=True)
class LinkageProbe:
    """Inspect dynamically linked libraries for acceleration libraries."""

    linkage_name: str
    analysis_name: str
    tools: tuple[str, ...]
    fragments: tuple[str, ...]
    announce: str | None = None


Probe = Union[CommandProbe, ListingProbe, ListingGroupProbe, TranscodeProbe, LinkageProbe]


@dataclass(frozen=True)
class Catalogue:
    """Ordered, immutable sequence of probes."""

    probes: tuple[Probe, ...] = field(default_factory=tuple)

    def __iter__(self):
        return iter(self.probes)

    def __len__(self) -> int:
        return len(self.probes)


def build_catalogue(config: ValidatorConfig) -> Catalogue:
    """
    Build the default check catalogue.

    The single-invocation liveness probes come first so that grouped listing
    checks always run after the executable has been shown to start at all.
    """
    probes = config.probes
    transcode = config.transcode
    dependencies = config.dependencies

    return Catalogue(
        probes=(
            CommandProbe(
                name="Version check",
                args=("-version",),
                log_name="version.log",
                announce="Testing basic functionality...",
            ),
            CommandProbe(name="Codec enumeration", args=("-codecs",), log_name="codecs.log"),
            CommandProbe(name="Hardware accelerator enumeration", args=("-hwaccels",), log_name="hwaccels.log"),
            ListingProbe(
                name="NVENC encoder availability",
                category="encoders",
                token=probes.encoder_token,
                match_log_name="nvenc-encoders.log",
                announce="Checking CUDA support...",
            ),
            ListingProbe(name="CUVID decoder availability", category="decoders", token=probes.decoder_token),
            ListingGroupProbe(
                category="codecs",
                tokens=tuple(dict.fromkeys(probes.video_codecs)),
                name_template="{token} codec support",
                announce="Checking video codec support...",
            ),
            ListingGroupProbe(
                category="codecs",
                tokens=tuple(dict.fromkeys(probes.audio_codecs)),
                name_template="{token} audio codec support",
                announce="Checking audio codec support...",
            ),
            ListingGroupProbe(
                category="filters",
                tokens=tuple(dict.fromkeys(probes.filters)),
                name_template="{token} filter support",
                announce="Checking filter support...",
            ),
            TranscodeProbe(
                cpu_name="Basic H.264 encoding",
                accel_name="NVENC H.264 encoding",
                sample_tool=transcode.sample_tool,
                sample_source=transcode.sample_source,
                cpu_args=(
                    "-c:v",
                    transcode.cpu_encoder,
                    "-crf",
                    str(transcode.cpu_crf),
                    "-t",
                    str(transcode.duration),
                ),
                accel_encoder=transcode.accel_encoder,
                accel_args=(
                    "-c:v",
                    transcode.accel_encoder,
                    "-preset",
                    transcode.accel_preset,
                    "-t",
                    str(transcode.duration),
                ),
                announce="Testing basic transcoding...",
            ),
            LinkageProbe(
                linkage_name="CUDA library linkage",
                analysis_name="Dependency analysis",
                tools=tuple(dependencies.tools),
                fragments=tuple(dependencies.fragments),
                announce="Checking DLL dependencies...",
            ),
        )
    )
