"""TOML config loading and profiles."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

# Default config search path (project root or cwd)
_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "config"
_CWD_CONFIG = Path.cwd() / "config"


def _load_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override values take precedence."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _find_config_dir(config_dir: Path | None = None) -> Path:
    if config_dir is not None:
        return config_dir
    if _CWD_CONFIG.exists():
        return _CWD_CONFIG
    return _CONFIG_DIR


def load_config(profile: str | None = None, config_dir: Path | None = None) -> dict[str, Any]:
    """Load merged config from default.toml and optional profile overlay."""
    directory = _find_config_dir(config_dir)
    default_path = directory / "default.toml"
    if not default_path.exists():
        return {}
    base = _load_toml(default_path)
    if profile:
        profile_path = directory / f"{profile}.toml"
        if profile_path.exists():
            overlay = _load_toml(profile_path)
            base = _deep_merge(base, overlay)
    return base


def get_settings(profile: str | None = None, config_dir: Path | None = None) -> Settings:
    """Return Settings instance from merged config."""
    raw = load_config(profile, config_dir)
    return Settings.from_dict(raw)


@dataclass(frozen=True)
class EngineConfig:
    """Tuning values for grouping, synthesis and ranking."""

    max_group_size: int = 25
    trending_multi_outcome_boost: float = 1.2
    profitable_multi_outcome_boost: float = 1.15
    rank_limit: int = 100
    min_active_volume: float = 0.0


DEFAULT_ENGINE_CONFIG = EngineConfig()


class Settings:
    """Application settings from TOML config."""

    def __init__(
        self,
        *,
        polymarket: dict[str, Any] | None = None,
        engine: dict[str, Any] | None = None,
        api: dict[str, Any] | None = None,
        logging: dict[str, Any] | None = None,
    ):
        self.polymarket = polymarket or {}
        self.engine = engine or {}
        self.api = api or {}
        self.logging = logging or {}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Settings:
        return cls(
            polymarket=raw.get("polymarket"),
            engine=raw.get("engine"),
            api=raw.get("api"),
            logging=raw.get("logging"),
        )

    # Convenience accessors with defaults
    @property
    def gamma_api_base(self) -> str:
        return self.polymarket.get("gamma_api_base", "https://gamma-api.polymarket.com")

    @property
    def request_timeout_sec(self) -> float:
        return float(self.polymarket.get("request_timeout_sec", 30.0))

    @property
    def trending_limit(self) -> int:
        return int(self.polymarket.get("trending_limit", 100))

    @property
    def events_limit(self) -> int:
        return int(self.polymarket.get("events_limit", 500))

    @property
    def search_limit_per_type(self) -> int:
        return int(self.polymarket.get("search_limit_per_type", 50))

    @property
    def event_scan_max_pages(self) -> int:
        return int(self.polymarket.get("event_scan_max_pages", 10))

    @property
    def event_scan_page_size(self) -> int:
        return int(self.polymarket.get("event_scan_page_size", 100))

    @property
    def user_agent(self) -> str:
        return self.polymarket.get("user_agent", "predagg/0.1")

    @property
    def refresh_interval_sec(self) -> float:
        return float(self.api.get("refresh_interval_sec", 30))

    @property
    def engine_config(self) -> EngineConfig:
        return EngineConfig(
            max_group_size=int(self.engine.get("max_group_size", 25)),
            trending_multi_outcome_boost=float(self.engine.get("trending_multi_outcome_boost", 1.2)),
            profitable_multi_outcome_boost=float(self.engine.get("profitable_multi_outcome_boost", 1.15)),
            rank_limit=int(self.engine.get("rank_limit", 100)),
            min_active_volume=float(self.engine.get("min_active_volume", 0.0)),
        )

    @property
    def logging_level(self) -> str:
        return self.logging.get("level", "INFO").upper()

    @property
    def logging_format(self) -> str:
        return self.logging.get("format", "console")

    @property
    def logging_level_num(self) -> int:
        return getattr(logging, self.logging_level, logging.INFO)


def configure_logging(settings: Settings) -> None:
    """Configure structlog with settings. Call once at application entry."""
    import structlog

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.logging_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(settings.logging_level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
