"""
app/parsing package marker.
"""

from app.parsing.encoding import decode_bytes
from app.parsing.order_csv_parser import MissingColumnsError, OrderCSVParser, OrderFileFormatError

__all__ = [
    "MissingColumnsError",
    "OrderCSVParser",
    "OrderFileFormatError",
    "decode_bytes",
]
