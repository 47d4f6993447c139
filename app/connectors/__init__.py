"""
app/connectors package marker.
"""

from app.connectors.base import BaseConnector, ConnectorRequestError
from app.connectors.orders_api_connector import (
    BulkCreateRejectedError,
    FieldErrorDetail,
    OrdersAPIConnector,
    get_orders_api_connector,
)

__all__ = [
    "BaseConnector",
    "BulkCreateRejectedError",
    "ConnectorRequestError",
    "FieldErrorDetail",
    "OrdersAPIConnector",
    "get_orders_api_connector",
]
