"""
app/mappers package marker.
"""

from app.mappers.header_mapper import (
    BASE_REQUIRED_COLUMNS,
    DIMENSION_COLUMNS,
    HeaderMapper,
    HeaderResolution,
    normalize_header,
    required_columns,
)

__all__ = [
    "BASE_REQUIRED_COLUMNS",
    "DIMENSION_COLUMNS",
    "HeaderMapper",
    "HeaderResolution",
    "normalize_header",
    "required_columns",
]
