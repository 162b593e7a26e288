"""Configuration loading (TOML profiles) and logging setup."""

from predagg.config.settings import (
    DEFAULT_ENGINE_CONFIG,
    EngineConfig,
    Settings,
    configure_logging,
    get_settings,
    load_config,
)

__all__ = [
    "DEFAULT_ENGINE_CONFIG",
    "EngineConfig",
    "Settings",
    "configure_logging",
    "get_settings",
    "load_config",
]
