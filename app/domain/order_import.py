"""
app/domain/order_import.py

Domain models used by the CSV order import flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class OrderType(str, Enum):
    NEW = "NEW"
    RESCHEDULED = "RESCHEDULED"
    URGENT = "URGENT"


class CapacityDimension(str, Enum):
    """
    Optional order dimensions a tenant can switch on.
    """

    ORDER_VALUE = "orderValue"
    WEIGHT = "weight"
    VOLUME = "volume"
    UNITS = "units"
    ORDER_TYPE = "orderType"


@dataclass(frozen=True)
class CapabilityProfile:
    """
    Tenant flags selecting which optional order dimensions are active.
    """

    order_value: bool = False
    weight: bool = True
    volume: bool = True
    units: bool = False
    order_type: bool = False

    def is_enabled(self, dimension: CapacityDimension) -> bool:
        return {
            CapacityDimension.ORDER_VALUE: self.order_value,
            CapacityDimension.WEIGHT: self.weight,
            CapacityDimension.VOLUME: self.volume,
            CapacityDimension.UNITS: self.units,
            CapacityDimension.ORDER_TYPE: self.order_type,
        }[dimension]

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> CapabilityProfile:
        """
        Build a profile from the `enable*` flags of a company profile payload.
        """

        defaults = cls()
        return cls(
            order_value=bool(payload.get("enableOrderValue", defaults.order_value)),
            weight=bool(payload.get("enableWeight", defaults.weight)),
            volume=bool(payload.get("enableVolume", defaults.volume)),
            units=bool(payload.get("enableUnits", defaults.units)),
            order_type=bool(payload.get("enableOrderType", defaults.order_type)),
        )


@dataclass(frozen=True)
class HeaderIndexMap:
    """
    Canonical field name to column position for one file.
    """

    positions: Mapping[str, int]
    delimiter: str

    def index_of(self, field_name: str) -> int | None:
        return self.positions.get(field_name)

    def __contains__(self, field_name: object) -> bool:
        return field_name in self.positions


@dataclass(frozen=True)
class RawRow:
    """
    One trimmed data line plus the header map it must be read through.
    """

    row_number: int
    cells: tuple[str, ...]
    header_map: HeaderIndexMap

    def value(self, field_name: str) -> str:
        """
        Return the cell for a canonical field, or "" when absent.
        """

        index = self.header_map.index_of(field_name)
        if index is None or index >= len(self.cells):
            return ""
        return self.cells[index]


@dataclass(frozen=True)
class ImportCandidate:
    """
    Order-creation record that passed every local check.
    """

    tracking_id: str
    address: str
    latitude: str
    longitude: str
    order_value: int | None = None
    weight_required: int | None = None
    volume_required: int | None = None
    units_required: int | None = None
    order_type: OrderType | None = None
    priority: int | None = None
    time_window_start: str | None = None
    time_window_end: str | None = None
    notes: str | None = None
    customer_name: str | None = None
    customer_phone: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """
        Serialize to the bulk-create wire shape, omitting absent fields.
        """

        payload: dict[str, Any] = {
            "trackingId": self.tracking_id,
            "address": self.address,
            "latitude": self.latitude,
            "longitude": self.longitude,
        }
        optional = {
            "orderValue": self.order_value,
            "weightRequired": self.weight_required,
            "volumeRequired": self.volume_required,
            "unitsRequired": self.units_required,
            "orderType": self.order_type.value if self.order_type else None,
            "priority": self.priority,
            "timeWindowStart": self.time_window_start,
            "timeWindowEnd": self.time_window_end,
            "notes": self.notes,
            "customerName": self.customer_name,
            "customerPhone": self.customer_phone,
        }
        payload.update({key: value for key, value in optional.items() if value is not None})
        return payload


@dataclass(frozen=True)
class SkipRecord:
    """
    A row rejected before submission.
    """

    row_number: int
    reason: str
    tracking_id: str | None = None


@dataclass(frozen=True)
class ParsedOrderFile:
    """
    Output of the tabular parser for one file.
    """

    header_map: HeaderIndexMap
    rows: list[RawRow]
    skipped: list[SkipRecord] = field(default_factory=list)


@dataclass(frozen=True)
class ValidatedBatch:
    """
    Rows of one file split into candidates and skip records, in file order.
    """

    candidates: list[ImportCandidate]
    skipped: list[SkipRecord]


@dataclass(frozen=True)
class BulkCreateResult:
    """
    Counts reported by the bulk-create endpoint.
    """

    created: int
    skipped: int
    invalid: int
    duplicates: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ImportReport:
    """
    Merged outcome of one import attempt. Never persisted.
    """

    created: int
    skipped: int
    invalid: int
    local_skipped: int
    duplicate_preview: list[str]
    duplicates_truncated: bool
    skip_preview: list[str]
    summary: str

    @property
    def has_warnings(self) -> bool:
        return self.skipped > 0 or self.invalid > 0 or self.local_skipped > 0


@dataclass(frozen=True)
class PendingOrderSet:
    """
    Open orders loaded from the paginated listing, in page order.
    """

    orders: list[dict[str, Any]]
    pages_requested: int
    failed_pages: list[int] = field(default_factory=list)

    @property
    def order_ids(self) -> list[Any]:
        return [order.get("id") for order in self.orders if order.get("id") is not None]
