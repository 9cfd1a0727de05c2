"""
Configuration management for PostQuarry using Pydantic.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, ClassVar, Dict, cast

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from postquarry.extractor.confidence_scorer import (
    EMBEDDED_FIELD_WEIGHTS,
    FIELD_WEIGHTS,
    MINIMUM_VIABLE_CONFIDENCE,
    PRIMARY_LABEL_THRESHOLD,
    SECONDARY_LABEL_THRESHOLD,
    TIER_MULTIPLIERS,
    ConfidenceScorer,
)
from postquarry.extractor.expansion import DEFAULT_POLL_INTERVAL_MS, DEFAULT_TIMEOUT_MS
from postquarry.extractor.models import Tier

# --- Setup Logging ---
log = logging.getLogger(__name__)

# --- Nested Configuration Models ---


def _check_unit_interval(name: str, values: Dict[str, float]) -> Dict[str, float]:
    for key, value in values.items():
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"{name}[{key!r}] must be between 0.0 and 1.0, got {value}")
    return values


class ConfidenceSettings(BaseModel):
    """Weights and thresholds for record confidence aggregation."""

    tier_multipliers: Dict[Tier, float] = Field(
        default_factory=lambda: dict(TIER_MULTIPLIERS),
        description="Multiplier applied to a field's weight for the tier that resolved it.",
    )
    field_weights: Dict[str, float] = Field(
        default_factory=lambda: dict(FIELD_WEIGHTS),
        description="Per-field weights for top-level records.",
    )
    embedded_field_weights: Dict[str, float] = Field(
        default_factory=lambda: dict(EMBEDDED_FIELD_WEIGHTS),
        description="Per-field weights for embedded records.",
    )
    primary_threshold: float = Field(default=PRIMARY_LABEL_THRESHOLD, ge=0.0, le=1.0)
    secondary_threshold: float = Field(default=SECONDARY_LABEL_THRESHOLD, ge=0.0, le=1.0)
    minimum_confidence: float = Field(
        default=MINIMUM_VIABLE_CONFIDENCE,
        ge=0.0,
        le=1.0,
        description="Advisory viability threshold; records below it are still returned.",
    )

    @field_validator("field_weights", "embedded_field_weights")
    @classmethod
    def validate_weights(cls, v: Dict[str, float], info: Any) -> Dict[str, float]:
        return _check_unit_interval(info.field_name, v)

    @field_validator("tier_multipliers")
    @classmethod
    def validate_multipliers(cls, v: Dict[Tier, float]) -> Dict[Tier, float]:
        _check_unit_interval("tier_multipliers", {tier.value: value for tier, value in v.items()})
        return v

    @model_validator(mode="after")
    def validate_threshold_order(self) -> ConfidenceSettings:
        if self.secondary_threshold > self.primary_threshold:
            raise ValueError("secondary_threshold must not exceed primary_threshold")
        return self

    def build_scorer(self) -> ConfidenceScorer:
        return ConfidenceScorer(
            field_weights=self.field_weights,
            embedded_field_weights=self.embedded_field_weights,
            tier_multipliers=self.tier_multipliers,
            primary_threshold=self.primary_threshold,
            secondary_threshold=self.secondary_threshold,
            minimum_confidence=self.minimum_confidence,
        )


class ExpansionSettings(BaseModel):
    """Configuration for the "Show more" expansion pre-step."""

    enabled: bool = Field(default=True, description="Look for and trigger a show-more control before extracting.")
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, ge=0, le=5000)
    poll_interval_ms: int = Field(default=DEFAULT_POLL_INTERVAL_MS, gt=0, le=1000)


class ExtractionSettings(BaseModel):
    """Configuration for record extraction."""

    max_depth: int = Field(default=3, ge=1, description="Records at this embedding depth are refused.")
    max_embedded_candidates: int = Field(
        default=20,
        ge=1,
        description="Upper bound on containers inspected when locating an embedded record.",
    )
    confidence: ConfidenceSettings = Field(default_factory=ConfidenceSettings)
    expansion: ExpansionSettings = Field(default_factory=ExpansionSettings)


class MonitoringConfig(BaseModel):
    """Configuration for logging and metrics."""

    enabled: bool = True
    log_level: str = Field(default="INFO", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: str | None = Field(
        default=None,
        description="Path to log file. If None, logs to console.",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


# --- Main Configuration Class ---


class Config(BaseSettings):
    project_name: str = "PostQuarry"
    version: str = "0.1.0"
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="POSTQUARRY_", env_nested_delimiter="__", case_sensitive=False)

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls.model_validate({})
        return cls.model_validate(yaml_data)


def find_config_file() -> Path | None:
    current_dir = Path.cwd()
    paths_to_check = [
        current_dir / "postquarry.yaml",
        current_dir / "postquarry.yml",
        current_dir / "config.yaml",
        current_dir / "config.yml",
    ]
    for path in paths_to_check:
        if path.exists():
            return path

    return None


# --- Lazy Configuration Loader ---


class LazyConfig:
    """
    A proxy for the Config object that delays its loading and validation
    until an attribute is first accessed, so a broken config file cannot
    fail an import.
    """

    _config: ClassVar[Config | None] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __getattr__(self, name: str) -> Any:
        if self.__class__._config is None:
            with self.__class__._lock:
                if self.__class__._config is None:
                    self.__class__._config = self._load_config_with_fallback()
        return getattr(self.__class__._config, name)

    @classmethod
    def reset(cls) -> None:
        """Forget the loaded config; the next attribute access reloads it."""
        with cls._lock:
            cls._config = None

    def _load_config_with_fallback(self) -> Config:
        """Load configuration from file or fall back to defaults."""
        config_path = find_config_file()
        if config_path:
            try:
                log.info("Lazy loading configuration from: %s", config_path)
                return Config.from_yaml(config_path)
            except (ValidationError, FileNotFoundError, yaml.YAMLError) as e:
                log.error(
                    "Failed to load or validate configuration from '%s': %s. "
                    "Falling back to default settings. Please check your config file.",
                    config_path,
                    e,
                    exc_info=log.getEffectiveLevel() <= logging.DEBUG,
                )
        else:
            log.info("No config file found. Using default settings for lazy load.")

        try:
            return Config()
        except ValidationError as e:
            log.critical("FATAL: Default configuration is invalid: %s", e, exc_info=True)
            raise RuntimeError(f"Default configuration is invalid, cannot start: {e}") from e


# --- Global Settings Instance ---
settings: "Config" = cast("Config", LazyConfig())
