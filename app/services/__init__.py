"""
app/services package marker.
"""

from app.services.order_import_service import (
    NoValidOrdersError,
    OrderImportService,
    OrderSubmissionError,
    get_order_import_service,
)
from app.services.pending_order_loader import PendingOrderLoader, get_pending_order_loader

__all__ = [
    "NoValidOrdersError",
    "OrderImportService",
    "OrderSubmissionError",
    "get_order_import_service",
    "PendingOrderLoader",
    "get_pending_order_loader",
]
