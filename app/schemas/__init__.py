"""
app/schemas package marker.
"""

from app.schemas.order_import import (
    ImportPreviewResponse,
    ImportReportResponse,
    PendingOrdersResponse,
    SkipRecordResponse,
)

__all__ = [
    "ImportPreviewResponse",
    "ImportReportResponse",
    "PendingOrdersResponse",
    "SkipRecordResponse",
]
