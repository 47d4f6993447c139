"""
app/validators package marker.
"""

from app.validators.order_row_validator import ImportCandidateBuilder, OrderRowValidator

__all__ = [
    "ImportCandidateBuilder",
    "OrderRowValidator",
]
