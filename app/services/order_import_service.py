"""
app/services/order_import_service.py

Service layer for CSV order import.

The flow runs in two steps that mirror the console wizard:

    1. prepare(): decode, parse and validate the file; nothing leaves the process
    2. submit(): send the candidates to the bulk-create endpoint and merge
       the server counts with the local skip list into one report

import_file() chains both for callers that do not need the preview. Rows that
fail validation become skip records; only file-format problems and submission
failures raise.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Sequence

from app.config import get_order_import_settings
from app.connectors.base import ConnectorRequestError
from app.connectors.orders_api_connector import (
    BulkCreateRejectedError,
    FieldErrorDetail,
    OrdersAPIConnector,
    get_orders_api_connector,
)
from app.domain.order_import import (
    BulkCreateResult,
    CapabilityProfile,
    ImportCandidate,
    ImportReport,
    SkipRecord,
    ValidatedBatch,
)
from app.parsing.encoding import decode_bytes
from app.parsing.order_csv_parser import OrderCSVParser
from app.validators.order_row_validator import OrderRowValidator

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class NoValidOrdersError(ValueError):
    """
    Raised when no row survived validation; the network is never touched.
    """

    def __init__(self, skipped: Sequence[SkipRecord], *, preview_size: int) -> None:
        self.skipped = tuple(skipped)
        reasons = "\n".join(record.reason for record in self.skipped[:preview_size])
        super().__init__(f"No hay órdenes válidas para subir.\n{reasons}".rstrip("\n"))


class OrderSubmissionError(RuntimeError):
    """
    Raised when the bulk-create call fails. The batch is discarded.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: Sequence[FieldErrorDetail] = (),
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = tuple(details)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class OrderImportService:
    """
    Coordinates decoding, parsing, validation and submission of order files.
    """

    def __init__(
        self,
        *,
        connector: OrdersAPIConnector,
        skip_preview_on_empty: int = 5,
        report_preview_size: int = 3,
        log_skipped_rows: bool = True,
    ) -> None:
        self._connector = connector
        self._skip_preview_on_empty = max(1, skip_preview_on_empty)
        self._report_preview_size = max(1, report_preview_size)
        self._log_skipped_rows = log_skipped_rows

    def resolve_profile(
        self,
        *,
        company_id: str,
        profile: CapabilityProfile | None = None,
    ) -> CapabilityProfile:
        if profile is not None:
            return profile
        return self._connector.fetch_capability_profile(company_id=company_id)

    def prepare(self, *, raw: bytes, profile: CapabilityProfile) -> ValidatedBatch:
        """
        Turn a file buffer into candidates and skip records, in file order.

        Raises OrderFileFormatError for files that cannot be read as an order sheet.
        """

        text = decode_bytes(raw)
        parsed = OrderCSVParser(profile=profile).parse(text)
        validator = OrderRowValidator(profile=profile)

        candidates: list[ImportCandidate] = []
        skipped: list[SkipRecord] = list(parsed.skipped)
        for row in parsed.rows:
            outcome = validator.validate_row(row)
            if isinstance(outcome, SkipRecord):
                skipped.append(outcome)
            else:
                candidates.append(outcome)

        skipped.sort(key=lambda record: record.row_number)
        if self._log_skipped_rows:
            for record in skipped:
                logger.warning("Order row skipped row=%s reason=%s", record.row_number, record.reason)

        return ValidatedBatch(candidates=candidates, skipped=skipped)

    def submit(
        self,
        *,
        company_id: str,
        batch: ValidatedBatch,
    ) -> ImportReport:
        """
        Send the candidates in one bulk-create call and build the report.
        """

        if not batch.candidates:
            raise NoValidOrdersError(batch.skipped, preview_size=self._skip_preview_on_empty)

        try:
            result = self._connector.bulk_create(
                company_id=company_id,
                candidates=batch.candidates,
                skip_duplicates=True,
            )
        except BulkCreateRejectedError as exc:
            logger.error(
                "Order import rejected company=%s status=%s error=%s",
                company_id,
                exc.status_code,
                exc.display_message,
            )
            raise OrderSubmissionError(
                exc.display_message,
                status_code=exc.status_code,
                details=exc.details,
            ) from exc
        except ConnectorRequestError as exc:
            logger.error("Order import submission failed company=%s error=%s", company_id, exc)
            raise OrderSubmissionError(str(exc)) from exc

        report = self.build_report(result, batch.skipped)
        logger.info(
            "Order import submitted company=%s candidates=%s created=%s skipped=%s invalid=%s local_skipped=%s",
            company_id,
            len(batch.candidates),
            report.created,
            report.skipped,
            report.invalid,
            report.local_skipped,
        )
        return report

    def import_file(
        self,
        *,
        company_id: str,
        raw: bytes,
        profile: CapabilityProfile | None = None,
    ) -> ImportReport:
        resolved = self.resolve_profile(company_id=company_id, profile=profile)
        batch = self.prepare(raw=raw, profile=resolved)
        return self.submit(company_id=company_id, batch=batch)

    def build_report(self, result: BulkCreateResult, skipped: Sequence[SkipRecord]) -> ImportReport:
        """
        Merge server counts with the local skip list.
        """

        size = self._report_preview_size
        duplicate_preview = result.duplicates[:size]
        duplicates_truncated = len(result.duplicates) > size
        skip_preview = [record.reason for record in skipped[:size]]

        messages: list[str] = []
        if result.created > 0:
            messages.append(f"{result.created} órdenes creadas")
        if result.skipped > 0:
            messages.append(f"{result.skipped} duplicados saltados")
        if result.invalid > 0:
            messages.append(f"{result.invalid} inválidos")
        if skipped:
            messages.append(f"{len(skipped)} filas sin datos")

        details: list[str] = []
        if result.skipped > 0 or result.invalid > 0 or skipped:
            if duplicate_preview:
                ellipsis = "..." if duplicates_truncated else ""
                details.append(f"Duplicados: {', '.join(duplicate_preview)}{ellipsis}")
            details.extend(skip_preview)

        summary = ", ".join(messages) if messages else "0 órdenes creadas"
        if details:
            summary = f"{summary}\n" + "\n".join(details)

        return ImportReport(
            created=result.created,
            skipped=result.skipped,
            invalid=result.invalid,
            local_skipped=len(skipped),
            duplicate_preview=duplicate_preview,
            duplicates_truncated=duplicates_truncated,
            skip_preview=skip_preview,
            summary=summary,
        )


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_order_import_service() -> OrderImportService:
    """
    Build and cache the import service with env-driven settings.
    """

    settings = get_order_import_settings()
    return OrderImportService(
        connector=get_orders_api_connector(),
        skip_preview_on_empty=settings.skip_preview_on_empty,
        report_preview_size=settings.report_preview_size,
        log_skipped_rows=settings.log_skipped_rows,
    )
