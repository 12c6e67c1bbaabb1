"""Configuration management for the build validator."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

LOG = logging.getLogger(__name__)


# Configuration singleton
class _ConfigSingleton:
    """Configuration singleton holder."""

    _instance: ValidatorConfig | None = None

    @classmethod
    def get_instance(cls) -> ValidatorConfig:
        """Get the configuration instance."""
        if cls._instance is None:
            config_path = Path.cwd() / "config.yaml"
            if config_path.exists():
                cls._instance = ValidatorConfig.load_from_file(config_path)
            else:
                cls._instance = ValidatorConfig()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the configuration instance."""
        cls._instance = None


_config_singleton = _ConfigSingleton()


@dataclass
class ProbeConfig:
    """Capability probe configuration."""

    encoder_token: str = "nvenc"
    decoder_token: str = "cuvid"
    video_codecs: list[str] = field(
        default_factory=lambda: ["h264", "hevc", "av1", "vp9", "libx264", "libx265"]
    )
    audio_codecs: list[str] = field(default_factory=lambda: ["opus", "vorbis", "mp3", "aac"])
    filters: list[str] = field(default_factory=lambda: ["scale", "libplacebo", "scale_cuda"])


@dataclass
class TranscodeConfig:
    """Behavioural transcode probe configuration."""

    sample_tool: str = "ffmpeg"
    sample_source: str = "testsrc=duration=2:size=320x240:rate=1"
    cpu_encoder: str = "libx264"
    cpu_crf: int = 30
    accel_encoder: str = "h264_nvenc"
    accel_preset: str = "fast"
    duration: int = 1


@dataclass
class DependencyConfig:
    """Dependency-linkage probe configuration."""

    tools: list[str] = field(default_factory=lambda: ["ldd", "objdump"])
    fragments: list[str] = field(default_factory=lambda: ["cuda", "npp", "nvenc"])


@dataclass
class GlobalConfig:
    """Global settings."""

    timeout: float | None = None
    log_level: str = "WARNING"
    color: bool = True


@dataclass
class ValidatorConfig:
    """Main configuration class."""

    probes: ProbeConfig = field(default_factory=ProbeConfig)
    transcode: TranscodeConfig = field(default_factory=TranscodeConfig)
    dependencies: DependencyConfig = field(default_factory=DependencyConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    @classmethod
    def load_from_file(cls, config_path: Path) -> ValidatorConfig:
        """Load configuration from YAML file."""
        try:
            with config_path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}

            return cls._from_dict(data)
        except (OSError, yaml.YAMLError) as e:
            LOG.warning("Failed to load config from %s: %s", config_path, e)
            return cls()

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> ValidatorConfig:
        """Create config from dictionary."""
        if not isinstance(data, dict):
            LOG.warning("Ignoring configuration: expected a mapping, got %s", type(data).__name__)
            return cls()

        return cls(
            probes=cls._parse_section(ProbeConfig, data.get("probes", {}), "probes"),
            transcode=cls._parse_section(TranscodeConfig, data.get("transcode", {}), "transcode"),
            dependencies=cls._parse_section(DependencyConfig, data.get("dependencies", {}), "dependencies"),
            global_=cls._parse_global_config(data.get("global", {})),
        )

    @staticmethod
    def _parse_section(section_cls: type, section_data: object, section_name: str) -> Any:
        """Build a config section, ignoring unknown keys."""
        if not isinstance(section_data, dict):
            LOG.warning("Invalid '%s' section in config, using defaults", section_name)
            return section_cls()

        known = section_cls.__dataclass_fields__
        unknown = set(section_data) - set(known)
        if unknown:
            LOG.warning("Unknown keys in '%s' section: %s", section_name, ", ".join(sorted(unknown)))

        values = {}
        for key, value in section_data.items():
            if key not in known:
                continue
            if str(known[key].type).startswith("list"):
                value = ValidatorConfig._parse_token_list(value, f"{section_name}.{key}")
                if value is None:
                    continue
            values[key] = value

        try:
            return section_cls(**values)
        except (TypeError, ValueError) as e:
            LOG.warning("Failed to load '%s' section: %s", section_name, e)
            return section_cls()

    @staticmethod
    def _parse_token_list(value: object, key_path: str) -> list[str] | None:
        """Accept a list of names or a single name; None means keep the default."""
        if isinstance(value, str):
            return [value]
        if isinstance(value, list) and all(isinstance(item, str) for item in value):
            return value
        LOG.warning("Invalid '%s' in config: expected a list of names, using default", key_path)
        return None

    @classmethod
    def _parse_global_config(cls, global_data: object) -> GlobalConfig:
        """Parse global configuration."""
        config = cls._parse_section(GlobalConfig, global_data, "global")

        # Validate timeout
        if config.timeout is not None:
            try:
                timeout = float(config.timeout)
            except (TypeError, ValueError):
                timeout = 0.0
            if timeout <= 0:
                LOG.warning("Invalid timeout '%s'. Using no timeout.", config.timeout)
                config.timeout = None
            else:
                config.timeout = timeout

        return config


def get_config() -> ValidatorConfig:
    """Get the global configuration instance."""
    return _config_singleton.get_instance()
