from __future__ import annotations

import logging
import os

from fastapi import FastAPI


def _validate_env() -> None:
    """
    Validate required environment variables at startup.

    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle.
    """

    from app.config import load_env_files

    load_env_files()

    errors: list[str] = []

    base_url = os.getenv("ORDERS_API_BASE_URL", "").strip()
    if not base_url:
        errors.append(
            "ORDERS_API_BASE_URL is not set. It must point at the orders API, "
            "e.g. https://console.example.com."
        )
    elif not base_url.startswith(("http://", "https://")):
        errors.append(
            f"ORDERS_API_BASE_URL='{base_url}' is not valid. It must start with http:// or https://."
        )

    for name in ("PENDING_ORDERS_PAGE_SIZE", "PENDING_ORDERS_MAX_ORDERS"):
        raw = os.getenv(name, "").strip()
        if raw and (not raw.isdigit() or int(raw) < 1):
            errors.append(f"{name}='{raw}' is not valid. It must be a positive integer.")

    if errors:
        raise RuntimeError(
            "Startup validation failed: missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Order Import API",
        version="1.0.0",
    )

    from app.api.routers import order_import_router

    application.include_router(order_import_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    logging.getLogger(__name__).info("Order import API configured")
    return application


app = create_app()
