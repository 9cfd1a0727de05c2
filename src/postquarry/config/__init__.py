from .config import (
    Config,
    ConfidenceSettings,
    ExpansionSettings,
    ExtractionSettings,
    LazyConfig,
    MonitoringConfig,
    find_config_file,
    settings,
)

__all__ = [
    "Config",
    "ConfidenceSettings",
    "ExpansionSettings",
    "ExtractionSettings",
    "LazyConfig",
    "MonitoringConfig",
    "find_config_file",
    "settings",
]
