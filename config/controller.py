"""Configuration controller for YAML-based settings."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml


@dataclass(frozen=True)
class ConfigPaths:
    """Filesystem paths for configuration files."""

    config_dir: Path
    config_file: Path
    override_file: Path


def default_config_dir(config_file: str = "default.yaml") -> Path:
    """Return ./config when it holds ``config_file``, else the installed package directory."""

    local_dir = Path("config")
    if (local_dir / config_file).exists():
        return local_dir
    return Path(__file__).resolve().parent


class ConfigController:
    """Singleton controller for loading and updating configuration."""

    _instance: "ConfigController | None" = None

    def __init__(self, config_file: str = "default.yaml", config_dir: Path | None = None) -> None:
        if ConfigController._instance is not None:
            raise RuntimeError("You cannot create another ConfigController class")

        config_dir = config_dir if config_dir is not None else default_config_dir(config_file)
        self.paths = ConfigPaths(
            config_dir=config_dir,
            config_file=config_dir / config_file,
            override_file=config_dir / "override.yaml",
        )
        self.config: dict[str, Any] = {}
        self.load_config()

    @classmethod
    def get_instance(cls) -> "ConfigController":
        """Return the singleton instance of the controller."""

        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def load_config(self) -> None:
        """Load configuration from default and override YAML files."""

        with self.paths.config_file.open("r", encoding="utf-8") as file:
            config = yaml.safe_load(file) or {}

        if self.paths.override_file.exists():
            with self.paths.override_file.open("r", encoding="utf-8") as file:
                override_config = yaml.safe_load(file) or {}
            if override_config:
                config = self._deep_merge(config, override_config)

        self.config = self._normalize_perception_config(config)

    def save_config(self, config: dict[str, Any]) -> None:
        """Persist configuration to override.yaml, archiving previous overrides."""

        if self.paths.override_file.exists():
            archive_index = 1
            archive_file = self._archive_path(archive_index)
            while archive_file.exists():
                archive_index += 1
                archive_file = self._archive_path(archive_index)
            self.paths.override_file.rename(archive_file)

        with self.paths.override_file.open("w", encoding="utf-8") as file:
            yaml.safe_dump(config, file)

    def get_config(self) -> dict[str, Any]:
        """Return the currently loaded configuration."""

        return dict(self.config)

    def set_config(self, config: dict[str, Any]) -> None:
        """Set and persist configuration values."""

        self.config = dict(config)
        self.save_config(self.config)

    def _archive_path(self, index: int) -> Path:
        """Return the archive path for a given override index."""

        filename = f"override_{index:04d}.yaml"
        return self.paths.config_dir / filename

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge dictionaries, overriding base values with override values."""

        merged = dict(base)
        for key, value in override.items():
            if (
                key in merged
                and isinstance(merged[key], dict)
                and isinstance(value, dict)
            ):
                merged[key] = self._deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    def _normalize_perception_config(self, config: dict[str, Any]) -> dict[str, Any]:
        """Fill perception defaults, accepting the flat cooldown keys as well."""

        normalized = dict(config)
        perception_cfg = dict(normalized.get("perception") or {})
        arbitration_cfg = dict(perception_cfg.get("arbitration") or {})
        sampler_cfg = dict(perception_cfg.get("sampler") or {})
        speech_cfg = dict(perception_cfg.get("speech") or {})

        perception_cfg["default_mode"] = str(perception_cfg.get("default_mode", "outdoor")).lower()
        perception_cfg["modes"] = dict(perception_cfg.get("modes") or {})
        perception_cfg["debug_log_size"] = int(perception_cfg.get("debug_log_size", 11))

        arbitration_cfg["global_cooldown_ms"] = int(
            arbitration_cfg.get("global_cooldown_ms", normalized.get("global_cooldown_ms", 3500))
        )
        arbitration_cfg["per_class_cooldown_ms"] = int(
            arbitration_cfg.get("per_class_cooldown_ms", normalized.get("per_class_cooldown_ms", 10000))
        )

        sampler_cfg["critical_ms"] = int(sampler_cfg.get("critical_ms", 0))
        sampler_cfg["active_ms"] = int(sampler_cfg.get("active_ms", 300))
        sampler_cfg["idle_ms"] = int(sampler_cfg.get("idle_ms", 500))
        sampler_cfg["dormant_ms"] = int(sampler_cfg.get("dormant_ms", 1000))
        sampler_cfg["empty_slow_after"] = int(sampler_cfg.get("empty_slow_after", 10))
        sampler_cfg["initial_ms"] = int(sampler_cfg.get("initial_ms", 100))

        speech_cfg["locale"] = str(speech_cfg.get("locale", normalized.get("speech_locale", "en")))

        perception_cfg["arbitration"] = arbitration_cfg
        perception_cfg["sampler"] = sampler_cfg
        perception_cfg["speech"] = speech_cfg
        normalized["perception"] = perception_cfg
        return normalized
