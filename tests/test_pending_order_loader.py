from __future__ import annotations

import json
import threading
import unittest
from typing import Any

from app.connectors.base import ConnectorRequestError
from app.services.pending_order_loader import PendingOrderLoader


class FakeOrdersConnector:
    """
    In-memory paginated listing that records every page request.
    """

    def __init__(self, total: int, *, failing_offsets: set[int] | None = None) -> None:
        self._orders = [{"id": f"o-{index}"} for index in range(total)]
        self._failing_offsets = failing_offsets or set()
        self._lock = threading.Lock()
        self.calls: list[tuple[int, int]] = []

    def fetch_order_page(
        self,
        *,
        company_id: str,
        limit: int,
        offset: int,
        status: str = "PENDING",
        active: bool = True,
    ) -> list[dict[str, Any]]:
        with self._lock:
            self.calls.append((limit, offset))
        if offset in self._failing_offsets:
            raise ConnectorRequestError("orders_api: request failed after retries.")
        return self._orders[offset : offset + limit]


class TestPendingOrderLoader(unittest.TestCase):
    def test_small_set_is_loaded_with_one_request(self) -> None:
        connector = FakeOrdersConnector(85)
        loader = PendingOrderLoader(connector=connector, page_size=100, max_orders=5000)

        result = loader.load(company_id="c-1")

        self.assertEqual(connector.calls, [(100, 0)])
        self.assertEqual(len(result.orders), 85)
        self.assertEqual(result.pages_requested, 1)

    def test_large_set_fans_out_over_remaining_pages(self) -> None:
        connector = FakeOrdersConnector(150)
        loader = PendingOrderLoader(connector=connector, page_size=100, max_orders=5000, max_concurrent_requests=4)

        result = loader.load(company_id="c-1")

        self.assertEqual(len(connector.calls), 50)
        self.assertEqual(connector.calls[0], (100, 0))
        self.assertEqual(sorted(offset for _, offset in connector.calls[1:]), [page * 100 for page in range(1, 50)])
        self.assertEqual(result.pages_requested, 50)
        self.assertEqual(result.order_ids, [f"o-{index}" for index in range(150)])

    def test_pages_are_concatenated_in_page_order(self) -> None:
        connector = FakeOrdersConnector(1000)
        loader = PendingOrderLoader(connector=connector, page_size=100, max_orders=1000, max_concurrent_requests=9)

        result = loader.load(company_id="c-1")

        self.assertEqual(len(connector.calls), 10)
        self.assertEqual(result.order_ids, [f"o-{index}" for index in range(1000)])

    def test_exact_full_first_page_triggers_fan_out(self) -> None:
        connector = FakeOrdersConnector(100)
        loader = PendingOrderLoader(connector=connector, page_size=100, max_orders=300)

        result = loader.load(company_id="c-1")

        self.assertEqual(len(connector.calls), 3)
        self.assertEqual(len(result.orders), 100)

    def test_cap_of_one_page_skips_fan_out(self) -> None:
        connector = FakeOrdersConnector(500)
        loader = PendingOrderLoader(connector=connector, page_size=100, max_orders=100)

        result = loader.load(company_id="c-1")

        self.assertEqual(connector.calls, [(100, 0)])
        self.assertEqual(len(result.orders), 100)

    def test_failed_fan_out_page_counts_as_empty(self) -> None:
        connector = FakeOrdersConnector(250, failing_offsets={100})
        loader = PendingOrderLoader(connector=connector, page_size=100, max_orders=400)

        result = loader.load(company_id="c-1")

        self.assertEqual(result.failed_pages, [1])
        self.assertEqual(result.order_ids, [f"o-{index}" for index in list(range(100)) + list(range(200, 250))])

    def test_failed_first_page_propagates(self) -> None:
        connector = FakeOrdersConnector(250, failing_offsets={0})
        loader = PendingOrderLoader(connector=connector, page_size=100, max_orders=400)

        with self.assertRaises(ConnectorRequestError):
            loader.load(company_id="c-1")

        self.assertEqual(len(connector.calls), 1)

    def test_load_summary_is_logged_with_duration(self) -> None:
        connector = FakeOrdersConnector(150)
        loader = PendingOrderLoader(connector=connector, page_size=100, max_orders=300)

        with self.assertLogs("app.services.pending_order_loader", level="INFO") as captured:
            loader.load(company_id="c-1")

        summary = json.loads(captured.records[-1].getMessage())
        self.assertEqual(summary["event"], "pending_orders_loaded")
        self.assertEqual(summary["orders"], 150)
        self.assertEqual(summary["pages"], 3)
        self.assertEqual(summary["complete_at_page"], 1)
        self.assertGreaterEqual(summary["duration_ms"], 0)

    def test_failed_load_logs_no_summary(self) -> None:
        connector = FakeOrdersConnector(50, failing_offsets={0})
        loader = PendingOrderLoader(connector=connector, page_size=100)

        with self.assertNoLogs("app.services.pending_order_loader", level="INFO"):
            with self.assertRaises(ConnectorRequestError):
                loader.load(company_id="c-1")


if __name__ == "__main__":
    unittest.main()
