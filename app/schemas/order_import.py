"""
app/schemas/order_import.py

Response schemas for order import endpoints.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from app.domain.order_import import ImportCandidate, ImportReport, PendingOrderSet, SkipRecord


class SkipRecordResponse(BaseModel):
    """
    API response model for one row rejected before submission.
    """

    row_number: int = Field(..., ge=1)
    reason: str
    tracking_id: str | None = None

    @classmethod
    def from_domain(cls, record: SkipRecord) -> SkipRecordResponse:
        return cls(row_number=record.row_number, reason=record.reason, tracking_id=record.tracking_id)


class ImportPreviewResponse(BaseModel):
    """
    API response model for a parsed-but-unsubmitted order file.
    """

    candidate_count: int = Field(..., ge=0)
    skipped_count: int = Field(..., ge=0)
    candidates: list[dict[str, Any]] = Field(default_factory=list)
    skipped: list[SkipRecordResponse] = Field(default_factory=list)

    @classmethod
    def from_domain(
        cls,
        candidates: list[ImportCandidate],
        skipped: list[SkipRecord],
    ) -> ImportPreviewResponse:
        return cls(
            candidate_count=len(candidates),
            skipped_count=len(skipped),
            candidates=[candidate.to_payload() for candidate in candidates],
            skipped=[SkipRecordResponse.from_domain(record) for record in skipped],
        )


class ImportReportResponse(BaseModel):
    """
    API response model for a submitted order import.
    """

    created: int = Field(..., ge=0)
    skipped: int = Field(..., ge=0)
    invalid: int = Field(..., ge=0)
    local_skipped: int = Field(..., ge=0)
    duplicate_preview: list[str] = Field(default_factory=list)
    duplicates_truncated: bool = False
    skip_preview: list[str] = Field(default_factory=list)
    has_warnings: bool
    summary: str

    @classmethod
    def from_domain(cls, report: ImportReport) -> ImportReportResponse:
        return cls(
            created=report.created,
            skipped=report.skipped,
            invalid=report.invalid,
            local_skipped=report.local_skipped,
            duplicate_preview=report.duplicate_preview,
            duplicates_truncated=report.duplicates_truncated,
            skip_preview=report.skip_preview,
            has_warnings=report.has_warnings,
            summary=report.summary,
        )


class PendingOrdersResponse(BaseModel):
    """
    API response model for the full open order set.
    """

    total: int = Field(..., ge=0)
    pages_requested: int = Field(..., ge=1)
    failed_pages: list[int] = Field(default_factory=list)
    order_ids: list[Any] = Field(default_factory=list)
    data: list[dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, order_set: PendingOrderSet) -> PendingOrdersResponse:
        return cls(
            total=len(order_set.orders),
            pages_requested=order_set.pages_requested,
            failed_pages=order_set.failed_pages,
            order_ids=order_set.order_ids,
            data=order_set.orders,
        )
