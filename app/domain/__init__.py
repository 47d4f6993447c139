"""
app/domain package marker.
"""

from app.domain.order_import import (
    BulkCreateResult,
    CapabilityProfile,
    CapacityDimension,
    HeaderIndexMap,
    ImportCandidate,
    ImportReport,
    OrderType,
    ParsedOrderFile,
    PendingOrderSet,
    RawRow,
    SkipRecord,
    ValidatedBatch,
)

__all__ = [
    "BulkCreateResult",
    "CapabilityProfile",
    "CapacityDimension",
    "HeaderIndexMap",
    "ImportCandidate",
    "ImportReport",
    "OrderType",
    "ParsedOrderFile",
    "PendingOrderSet",
    "RawRow",
    "SkipRecord",
    "ValidatedBatch",
]
