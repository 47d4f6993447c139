"""
app/connectors/orders_api_connector.py

Client for the orders API: bulk creation, paginated listing, company profile.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Sequence

import requests

from app.config import (
    ExternalHTTPSettings,
    OrdersAPISettings,
    get_external_http_settings,
    get_orders_api_settings,
)
from app.connectors.base import BaseConnector, ConnectorRequestError
from app.domain.order_import import BulkCreateResult, CapabilityProfile, ImportCandidate

logger = logging.getLogger(__name__)

DEFAULT_BULK_CREATE_ERROR = "Error al subir órdenes"


@dataclass(frozen=True)
class FieldErrorDetail:
    """
    One structured validation failure reported by the server.
    """

    field: str | None
    message: str | None


class BulkCreateRejectedError(ConnectorRequestError):
    """
    Raised when the bulk-create endpoint answers with a non-success status.
    """

    def __init__(
        self,
        *,
        status_code: int,
        error: str,
        details: Sequence[FieldErrorDetail] = (),
    ) -> None:
        self.status_code = status_code
        self.error = error
        self.details = tuple(details)
        super().__init__(self.display_message)

    @property
    def display_message(self) -> str:
        if not self.details:
            return self.error
        rendered = ", ".join(f"{detail.field}: {detail.message}" for detail in self.details)
        return f"{self.error}: {rendered}"


class OrdersAPIConnector(BaseConnector):
    """
    Talks to the orders API on behalf of one tenant per call.
    """

    def __init__(
        self,
        *,
        settings: OrdersAPISettings,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(source="orders_api", http_settings=http_settings, session=session)
        self._settings = settings

    def bulk_create(
        self,
        *,
        company_id: str,
        candidates: Sequence[ImportCandidate],
        skip_duplicates: bool = True,
    ) -> BulkCreateResult:
        """
        Submit a batch of orders in one request. Never retried.

        Any non-2xx status is a rejection, even when the body is valid JSON.
        """

        response = self._send_once(
            method="POST",
            url=self._url(self._settings.batch_path),
            json_body={
                "orders": [candidate.to_payload() for candidate in candidates],
                "skipDuplicates": skip_duplicates,
            },
            headers=self._tenant_headers(company_id),
        )
        body = self._json_or_none(response)

        if not response.ok:
            payload = body if isinstance(body, dict) else {}
            error = payload.get("error") or DEFAULT_BULK_CREATE_ERROR
            if body is None:
                error = f"{error} (HTTP {response.status_code})"
            raise BulkCreateRejectedError(
                status_code=response.status_code,
                error=str(error),
                details=self._parse_details(payload.get("details")),
            )

        if not isinstance(body, dict):
            raise ConnectorRequestError(f"{self.source}: bulk create response was not a JSON object.")

        return BulkCreateResult(
            created=self._as_count(body.get("created")),
            skipped=self._as_count(body.get("skipped")),
            invalid=self._as_count(body.get("invalid")),
            duplicates=[str(item) for item in body.get("duplicates") or []],
        )

    def fetch_order_page(
        self,
        *,
        company_id: str,
        limit: int,
        offset: int,
        status: str = "PENDING",
        active: bool = True,
    ) -> list[dict[str, Any]]:
        """
        Fetch one page of the order listing. A missing `data` array is an empty page.
        """

        payload = self._request_json(
            method="GET",
            url=self._url(self._settings.orders_path),
            params={
                "status": status,
                "active": "true" if active else "false",
                "limit": limit,
                "offset": offset,
            },
            headers=self._tenant_headers(company_id),
        )
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, list):
            return []
        return [item for item in data if isinstance(item, dict)]

    def fetch_capability_profile(self, *, company_id: str) -> CapabilityProfile:
        """
        Read the tenant's enabled order dimensions, falling back to the
        server-provided defaults when no profile is configured.
        """

        payload = self._request_json(
            method="GET",
            url=self._url(self._settings.company_profile_path),
            headers=self._tenant_headers(company_id),
        )
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            logger.warning(
                "Company profile response had no data company=%s; using defaults",
                company_id,
            )
            return CapabilityProfile()

        profile = data.get("profile")
        if not isinstance(profile, dict):
            profile = data.get("defaults") if isinstance(data.get("defaults"), dict) else {}
        return CapabilityProfile.from_payload(profile)

    def _url(self, path: str) -> str:
        return f"{self._settings.base_url.rstrip('/')}/{path.lstrip('/')}"

    def _tenant_headers(self, company_id: str) -> dict[str, str]:
        headers = {"x-company-id": company_id}
        if self._settings.user_id:
            headers["x-user-id"] = self._settings.user_id
        return headers

    @staticmethod
    def _json_or_none(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None

    @staticmethod
    def _parse_details(raw: Any) -> list[FieldErrorDetail]:
        if not isinstance(raw, list):
            return []
        return [
            FieldErrorDetail(field=item.get("field"), message=item.get("message"))
            for item in raw
            if isinstance(item, dict)
        ]

    @staticmethod
    def _as_count(value: Any) -> int:
        try:
            return max(0, int(value))
        except (TypeError, ValueError):
            return 0


@lru_cache(maxsize=1)
def get_orders_api_connector() -> OrdersAPIConnector:
    """
    Build and cache the orders API connector with env-driven settings.
    """

    return OrdersAPIConnector(
        settings=get_orders_api_settings(),
        http_settings=get_external_http_settings(),
    )
