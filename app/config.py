"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


@dataclass(frozen=True)
class ExternalHTTPSettings:
    """
    Shared HTTP behavior settings for the vision, catalog and CMS adapters.
    """

    timeout_seconds: float = 30.0
    max_retries: int = 2
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0
    rate_limit_per_second: float = 5.0


@dataclass(frozen=True)
class VisionSettings:
    """
    Vision model adapter settings (Anthropic Messages API).
    """

    api_key: str | None = None
    api_url: str = "https://api.anthropic.com"
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 1000
    api_version: str = "2023-06-01"
    use_fallback: bool = True


@dataclass(frozen=True)
class CatalogSettings:
    """
    Product catalog adapter settings.
    """

    base_url: str = "https://search-edge.services.ajio.com/rilfnlwebservices/v4/rilfnl/products/category/83"
    user_agent: str = "Banner-Anomaly-Scanner/1.0"
    use_fallback: bool = True


@dataclass(frozen=True)
class CmsSettings:
    """
    CMS page layout adapter settings.
    """

    base_url: str = ""
    user_agent: str = "Banner-Anomaly-Scanner/1.0"
    use_fallback: bool = True


@dataclass(frozen=True)
class ResultCacheSettings:
    """
    TTL and size bound for the signal and catalog result caches.
    """

    ttl_seconds: float = 3600.0
    max_entries: int = 1024


@dataclass(frozen=True)
class DetectionSettings:
    """
    Rule engine settings.
    """

    max_anomalies: int = 50


@dataclass(frozen=True)
class SchedulerSettings:
    """
    Periodic scan settings.
    """

    enabled: bool = True
    interval_minutes: int = 240
    cron: str | None = None
    # Worker threads share the adapters and result cache; each thread opens
    # its own requests.Session.
    component_workers: int = 1
    misfire_grace_seconds: int = 3600


@lru_cache(maxsize=1)
def get_external_http_settings() -> ExternalHTTPSettings:
    """
    Return shared adapter HTTP settings from environment variables.
    """

    return ExternalHTTPSettings(
        timeout_seconds=max(1.0, _get_float_env("EXTERNAL_HTTP_TIMEOUT_SECONDS", 30.0)),
        max_retries=max(0, _get_int_env("EXTERNAL_HTTP_MAX_RETRIES", 2)),
        backoff_initial_seconds=max(0.1, _get_float_env("EXTERNAL_HTTP_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env("EXTERNAL_HTTP_BACKOFF_MULTIPLIER", 2.0)),
        rate_limit_per_second=max(0.1, _get_float_env("EXTERNAL_HTTP_RATE_LIMIT_PER_SECOND", 5.0)),
    )


@lru_cache(maxsize=1)
def get_vision_settings() -> VisionSettings:
    """
    Return vision adapter settings from environment variables.
    """

    return VisionSettings(
        api_key=_get_optional_str_env("VISION_API_KEY") or _get_optional_str_env("ANTHROPIC_API_KEY"),
        api_url=_get_str_env("VISION_API_URL", "https://api.anthropic.com"),
        model=_get_str_env("VISION_MODEL", "claude-sonnet-4-20250514"),
        max_tokens=max(1, _get_int_env("VISION_MAX_TOKENS", 1000)),
        api_version=_get_str_env("VISION_API_VERSION", "2023-06-01"),
        use_fallback=_get_bool_env("VISION_USE_FALLBACK", True),
    )


@lru_cache(maxsize=1)
def get_catalog_settings() -> CatalogSettings:
    """
    Return catalog adapter settings from environment variables.
    """

    defaults = CatalogSettings()
    return CatalogSettings(
        base_url=_get_str_env("CATALOG_BASE_URL", defaults.base_url),
        user_agent=_get_str_env("CATALOG_USER_AGENT", defaults.user_agent),
        use_fallback=_get_bool_env("CATALOG_USE_FALLBACK", True),
    )


@lru_cache(maxsize=1)
def get_cms_settings() -> CmsSettings:
    """
    Return CMS adapter settings from environment variables.
    """

    defaults = CmsSettings()
    return CmsSettings(
        base_url=_get_str_env("CMS_BASE_URL", defaults.base_url),
        user_agent=_get_str_env("CMS_USER_AGENT", defaults.user_agent),
        use_fallback=_get_bool_env("CMS_USE_FALLBACK", True),
    )


@lru_cache(maxsize=1)
def get_result_cache_settings() -> ResultCacheSettings:
    """
    Return result cache settings from environment variables.
    """

    return ResultCacheSettings(
        ttl_seconds=max(1.0, _get_float_env("RESULT_CACHE_TTL_SECONDS", 3600.0)),
        max_entries=max(1, _get_int_env("RESULT_CACHE_MAX_ENTRIES", 1024)),
    )


@lru_cache(maxsize=1)
def get_detection_settings() -> DetectionSettings:
    """
    Return rule engine settings from environment variables.
    """

    return DetectionSettings(
        max_anomalies=max(1, _get_int_env("DETECTION_MAX_ANOMALIES", 50)),
    )


@lru_cache(maxsize=1)
def get_scheduler_settings() -> SchedulerSettings:
    """
    Return scan scheduler settings from environment variables.
    """

    return SchedulerSettings(
        enabled=_get_bool_env("SCAN_SCHEDULER_ENABLED", True),
        interval_minutes=max(1, _get_int_env("SCAN_INTERVAL_MINUTES", 240)),
        cron=_get_optional_str_env("SCAN_CRON"),
        component_workers=max(1, _get_int_env("SCAN_COMPONENT_WORKERS", 1)),
        misfire_grace_seconds=max(1, _get_int_env("SCAN_MISFIRE_GRACE_SECONDS", 3600)),
    )
