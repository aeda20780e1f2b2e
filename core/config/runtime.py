"""
Runtime Configuration

Central configuration for evaluation thresholds, the device-type catalogue,
the fee schedule and the application service.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Optional
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


ENV_PREFIX = "APCD_"


@dataclass
class EvaluationConfig:
    """Thresholds applied to total / max_attainable, and an optional rubric file."""
    approve_threshold: float = 0.6
    reject_threshold: float = 0.4
    rubric_path: Optional[str] = None

    def __post_init__(self):
        if not 0.0 <= self.reject_threshold <= self.approve_threshold <= 1.0:
            raise ValueError(
                "thresholds must satisfy 0 <= reject_threshold <= approve_threshold <= 1 "
                f"(got reject={self.reject_threshold}, approve={self.approve_threshold})"
            )


@dataclass
class DeviceTypeConfig:
    """One APCD category applicants may seek empanelment for."""
    id: str
    label: str = ""
    always_inspect: bool = False


def _default_device_types() -> list[DeviceTypeConfig]:
    return [
        DeviceTypeConfig(id="ESP", label="Electrostatic Precipitators (ESP)"),
        DeviceTypeConfig(id="BAG_FILTER", label="Bag Filter / Baghouse Systems"),
        DeviceTypeConfig(id="CYCLONE", label="Cyclones"),
        DeviceTypeConfig(id="WET_SCRUBBER", label="Wet Scrubbers"),
        DeviceTypeConfig(id="DRY_SCRUBBER", label="Dry Scrubbers"),
        DeviceTypeConfig(id="HYBRID_OTHER", label="Hybrid / Other"),
        DeviceTypeConfig(id="FUME_EXTRACTION", label="Industrial Fume/Dust Extraction"),
    ]


@dataclass
class FeeConfig:
    """Fee amounts in INR excluding GST."""
    application_fee: int = 25000
    empanelment_fee: int = 65000  # per APCD type
    field_verification_fee: int = 57000
    annual_renewal_fee: int = 35000
    gst_rate: int = 18
    discount_percent: int = 15


@dataclass
class ServiceConfig:
    """Configuration for the load-transition-save service."""
    max_conflict_retries: int = 3


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration for the empanelment engine.

    Can be loaded from:
    - Environment variables
    - YAML or JSON file
    - Programmatic construction
    """
    evaluation: EvaluationConfig = field(default_factory=EvaluationConfig)
    device_types: list[DeviceTypeConfig] = field(default_factory=_default_device_types)
    fees: FeeConfig = field(default_factory=FeeConfig)
    service: ServiceConfig = field(default_factory=ServiceConfig)
    log_level: str = "INFO"
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def device_type_ids(self) -> frozenset[str]:
        return frozenset(d.id for d in self.device_types)

    @property
    def inspection_device_types(self) -> frozenset[str]:
        """Device types that always require a physical inspection."""
        return frozenset(d.id for d in self.device_types if d.always_inspect)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        This is the SINGLE source of truth for all env var reading.

        Supported variables:
        - APCD_APPROVE_THRESHOLD: Ratio at or above which APPROVE is advised
        - APCD_REJECT_THRESHOLD: Ratio below which REJECT is advised
        - APCD_RUBRIC_PATH: YAML file replacing the default rubric
        - APCD_ALWAYS_INSPECT: Comma-separated device types needing inspection
        - APCD_MAX_CONFLICT_RETRIES: Retries of a conflicting transition
        - APCD_LOG_LEVEL: Log level
        """
        overrides: dict[str, Any] = {}

        if os.getenv(f"{ENV_PREFIX}APPROVE_THRESHOLD"):
            overrides.setdefault("evaluation", {})["approve_threshold"] = float(
                os.getenv(f"{ENV_PREFIX}APPROVE_THRESHOLD")
            )
        if os.getenv(f"{ENV_PREFIX}REJECT_THRESHOLD"):
            overrides.setdefault("evaluation", {})["reject_threshold"] = float(
                os.getenv(f"{ENV_PREFIX}REJECT_THRESHOLD")
            )
        if os.getenv(f"{ENV_PREFIX}RUBRIC_PATH"):
            overrides.setdefault("evaluation", {})["rubric_path"] = os.getenv(f"{ENV_PREFIX}RUBRIC_PATH")

        if os.getenv(f"{ENV_PREFIX}ALWAYS_INSPECT") is not None:
            raw = os.getenv(f"{ENV_PREFIX}ALWAYS_INSPECT", "")
            overrides["always_inspect"] = [t.strip() for t in raw.split(",") if t.strip()]

        if os.getenv(f"{ENV_PREFIX}MAX_CONFLICT_RETRIES"):
            overrides.setdefault("service", {})["max_conflict_retries"] = int(
                os.getenv(f"{ENV_PREFIX}MAX_CONFLICT_RETRIES")
            )

        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            overrides["log_level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """
        Load configuration purely from environment variables.

        Uses defaults for any values not specified in env vars.
        """
        return cls().with_env_overrides()

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        evaluation_data = data.get("evaluation", {})
        fees_data = data.get("fees", {})
        service_data = data.get("service", {})

        evaluation = EvaluationConfig(**evaluation_data) if evaluation_data else EvaluationConfig()
        fees = FeeConfig(**fees_data) if fees_data else FeeConfig()
        service = ServiceConfig(**service_data) if service_data else ServiceConfig()

        device_types_data = data.get("device_types")
        if device_types_data:
            device_types = [DeviceTypeConfig(**d) for d in device_types_data]
        else:
            device_types = _default_device_types()

        config = cls(
            evaluation=evaluation,
            device_types=device_types,
            fees=fees,
            service=service,
            log_level=data.get("log_level", "INFO"),
            extra=data.get("extra", {}),
        )
        if "always_inspect" in data:
            config._apply_always_inspect(data["always_inspect"])
        return config

    def _apply_always_inspect(self, device_type_ids: list[str]) -> None:
        wanted = set(device_type_ids)
        for device_type in self.device_types:
            device_type.always_inspect = device_type.id in wanted

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        import copy
        new_config = copy.deepcopy(self)

        if "evaluation" in overrides:
            merged = {
                "approve_threshold": new_config.evaluation.approve_threshold,
                "reject_threshold": new_config.evaluation.reject_threshold,
                "rubric_path": new_config.evaluation.rubric_path,
            }
            merged.update(overrides["evaluation"])
            # Rebuilt rather than setattr so the threshold check runs again
            new_config.evaluation = EvaluationConfig(**merged)

        if "service" in overrides:
            for key, value in overrides["service"].items():
                setattr(new_config.service, key, value)

        if "always_inspect" in overrides:
            new_config._apply_always_inspect(overrides["always_inspect"])

        if "log_level" in overrides:
            new_config.log_level = overrides["log_level"]

        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "evaluation": {
                "approve_threshold": self.evaluation.approve_threshold,
                "reject_threshold": self.evaluation.reject_threshold,
                "rubric_path": self.evaluation.rubric_path,
            },
            "device_types": [
                {"id": d.id, "label": d.label, "always_inspect": d.always_inspect}
                for d in self.device_types
            ],
            "fees": {
                "application_fee": self.fees.application_fee,
                "empanelment_fee": self.fees.empanelment_fee,
                "field_verification_fee": self.fees.field_verification_fee,
                "annual_renewal_fee": self.fees.annual_renewal_fee,
                "gst_rate": self.fees.gst_rate,
                "discount_percent": self.fees.discount_percent,
            },
            "service": {
                "max_conflict_retries": self.service.max_conflict_retries,
            },
            "log_level": self.log_level,
            "extra": self.extra,
        }


def find_config_file() -> Path | None:
    """
    Locate a config file.

    Search order:
      1. ./apcd.json
      2. ./.apcd.json
      3. ~/.config/apcd/config.json
    """
    search_paths = [
        Path.cwd() / "apcd.json",
        Path.cwd() / ".apcd.json",
        Path.home() / ".config" / "apcd" / "config.json",
    ]
    for path in search_paths:
        if path.exists():
            return path
    return None


def load_runtime_config(path: str | Path | None = None) -> RuntimeConfig:
    """
    Load RuntimeConfig from a file (explicit or discovered), then overlay env vars.

    YAML is used for .yaml/.yml files, JSON otherwise. Environment variables
    ALWAYS override file values.
    """
    import json

    config_path = Path(path) if path is not None else find_config_file()
    if config_path is None:
        return RuntimeConfig().with_env_overrides()

    if config_path.suffix in (".yaml", ".yml"):
        config = RuntimeConfig.from_yaml(config_path)
    else:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        with open(config_path) as f:
            config = RuntimeConfig.from_dict(json.load(f))

    return config.with_env_overrides()


# Global default configuration
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = load_runtime_config()
    return _default_config


def set_default_config(config: RuntimeConfig | None) -> None:
    """Set (or with None, reset) the default runtime configuration."""
    global _default_config
    _default_config = config
