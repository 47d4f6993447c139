"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


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
    Shared HTTP behavior settings for outbound connectors.
    """

    timeout_seconds: float = 15.0
    max_retries: int = 3
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0
    rate_limit_per_second: float = 0.0


@dataclass(frozen=True)
class OrdersAPISettings:
    """
    Location of the orders API the import pipeline talks to.
    """

    base_url: str = "http://localhost:3000"
    orders_path: str = "/api/orders"
    batch_path: str = "/api/orders/batch"
    company_profile_path: str = "/api/company-profiles"
    user_id: str | None = None


@dataclass(frozen=True)
class OrderImportSettings:
    """
    Runtime settings for CSV order import.
    """

    skip_preview_on_empty: int = 5
    report_preview_size: int = 3
    log_skipped_rows: bool = True


@dataclass(frozen=True)
class PendingOrderLoaderSettings:
    """
    Paging limits for loading the open order set.
    """

    page_size: int = 100
    max_orders: int = 5000
    max_concurrent_requests: int = 8
    status: str = "PENDING"


@lru_cache(maxsize=1)
def get_external_http_settings() -> ExternalHTTPSettings:
    """
    Return shared connector HTTP settings from environment variables.
    """

    return ExternalHTTPSettings(
        timeout_seconds=max(1.0, _get_float_env("EXTERNAL_HTTP_TIMEOUT_SECONDS", 15.0)),
        max_retries=max(0, _get_int_env("EXTERNAL_HTTP_MAX_RETRIES", 3)),
        backoff_initial_seconds=max(0.1, _get_float_env("EXTERNAL_HTTP_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env("EXTERNAL_HTTP_BACKOFF_MULTIPLIER", 2.0)),
        rate_limit_per_second=max(0.0, _get_float_env("EXTERNAL_HTTP_RATE_LIMIT_PER_SECOND", 0.0)),
    )


@lru_cache(maxsize=1)
def get_orders_api_settings() -> OrdersAPISettings:
    """
    Return orders API location settings from environment variables.
    """

    return OrdersAPISettings(
        base_url=_get_str_env("ORDERS_API_BASE_URL", "http://localhost:3000").rstrip("/"),
        orders_path=_get_str_env("ORDERS_API_ORDERS_PATH", "/api/orders"),
        batch_path=_get_str_env("ORDERS_API_BATCH_PATH", "/api/orders/batch"),
        company_profile_path=_get_str_env("ORDERS_API_COMPANY_PROFILE_PATH", "/api/company-profiles"),
        user_id=_get_optional_str_env("ORDERS_API_USER_ID"),
    )


@lru_cache(maxsize=1)
def get_order_import_settings() -> OrderImportSettings:
    """
    Return cached order import settings from environment variables.
    """

    return OrderImportSettings(
        skip_preview_on_empty=max(1, _get_int_env("ORDER_IMPORT_SKIP_PREVIEW_ON_EMPTY", 5)),
        report_preview_size=max(1, _get_int_env("ORDER_IMPORT_REPORT_PREVIEW_SIZE", 3)),
        log_skipped_rows=_get_bool_env("ORDER_IMPORT_LOG_SKIPPED_ROWS", True),
    )


@lru_cache(maxsize=1)
def get_pending_order_loader_settings() -> PendingOrderLoaderSettings:
    """
    Return cached pending order loader settings from environment variables.
    """

    return PendingOrderLoaderSettings(
        page_size=max(1, _get_int_env("PENDING_ORDERS_PAGE_SIZE", 100)),
        max_orders=max(1, _get_int_env("PENDING_ORDERS_MAX_ORDERS", 5000)),
        max_concurrent_requests=max(1, _get_int_env("PENDING_ORDERS_MAX_CONCURRENT_REQUESTS", 8)),
        status=_get_str_env("PENDING_ORDERS_STATUS", "PENDING").upper(),
    )
