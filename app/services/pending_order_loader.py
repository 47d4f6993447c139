"""
app/services/pending_order_loader.py

Loads the full open order set from the paginated order listing.

Page 0 is fetched alone. When it comes back short it is the whole set and no
further request is made. Otherwise every remaining page up to the order cap
is requested through a bounded thread pool and the pages are stitched back
together in page order.
"""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from typing import Any

from app.config import get_pending_order_loader_settings
from app.connectors.base import ConnectorRequestError
from app.connectors.orders_api_connector import OrdersAPIConnector, get_orders_api_connector
from app.domain.order_import import PendingOrderSet
from app.logging_utils import timed_event

logger = logging.getLogger(__name__)


class PendingOrderLoader:
    """
    Probe-then-fan-out loader over the order listing endpoint.
    """

    def __init__(
        self,
        *,
        connector: OrdersAPIConnector,
        page_size: int = 100,
        max_orders: int = 5000,
        max_concurrent_requests: int = 8,
        status: str = "PENDING",
    ) -> None:
        self._connector = connector
        self._page_size = max(1, page_size)
        self._max_orders = max(1, max_orders)
        self._max_concurrent_requests = max(1, max_concurrent_requests)
        self._status = status

    @property
    def max_pages(self) -> int:
        return math.ceil(self._max_orders / self._page_size)

    def load(self, *, company_id: str) -> PendingOrderSet:
        """
        Return every open order up to the cap, in ascending page order.

        A failure on page 0 propagates as ConnectorRequestError. A failed page
        in the fan-out phase counts as empty and is reported in `failed_pages`.
        """

        with timed_event(logger, logging.INFO, "pending_orders_loaded", company_id=company_id) as summary:
            first_page = self._fetch_page(company_id=company_id, page=0)
            if len(first_page) < self._page_size:
                summary.update(orders=len(first_page), pages=1, fan_out=False)
                return PendingOrderSet(orders=list(first_page), pages_requested=1)

            remaining_pages = list(range(1, self.max_pages))
            pages, failed_pages = self._fetch_remaining(company_id=company_id, pages=remaining_pages)

            orders: list[dict[str, Any]] = list(first_page)
            complete_at: int | None = None
            for page in remaining_pages:
                batch = pages[page]
                orders.extend(batch)
                if complete_at is None and len(batch) < self._page_size:
                    complete_at = page

            summary.update(
                orders=len(orders),
                pages=1 + len(remaining_pages),
                fan_out=True,
                complete_at_page=complete_at,
                failed_pages=failed_pages,
            )
            return PendingOrderSet(
                orders=orders,
                pages_requested=1 + len(remaining_pages),
                failed_pages=failed_pages,
            )

    def _fetch_remaining(
        self,
        *,
        company_id: str,
        pages: list[int],
    ) -> tuple[dict[int, list[dict[str, Any]]], list[int]]:
        results: dict[int, list[dict[str, Any]]] = {}
        failed_pages: list[int] = []
        if not pages:
            return results, failed_pages

        workers = min(self._max_concurrent_requests, len(pages))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="pending-orders") as pool:
            futures = {page: pool.submit(self._fetch_page, company_id=company_id, page=page) for page in pages}
            for page, future in futures.items():
                try:
                    results[page] = future.result()
                except ConnectorRequestError as exc:
                    logger.warning(
                        "Pending order page failed company=%s page=%s error=%s",
                        company_id,
                        page,
                        exc,
                    )
                    failed_pages.append(page)
                    results[page] = []
        return results, failed_pages

    def _fetch_page(self, *, company_id: str, page: int) -> list[dict[str, Any]]:
        return self._connector.fetch_order_page(
            company_id=company_id,
            limit=self._page_size,
            offset=page * self._page_size,
            status=self._status,
            active=True,
        )


@lru_cache(maxsize=1)
def get_pending_order_loader() -> PendingOrderLoader:
    """
    Build and cache the pending order loader with env-driven settings.
    """

    settings = get_pending_order_loader_settings()
    return PendingOrderLoader(
        connector=get_orders_api_connector(),
        page_size=settings.page_size,
        max_orders=settings.max_orders,
        max_concurrent_requests=settings.max_concurrent_requests,
        status=settings.status,
    )
