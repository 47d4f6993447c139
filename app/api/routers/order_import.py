"""
app/api/routers/order_import.py

Order import and pending order HTTP endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, UploadFile, status

from app.api.dependencies import get_company_id, get_csv_upload
from app.connectors.base import ConnectorRequestError
from app.parsing.order_csv_parser import MissingColumnsError, OrderFileFormatError
from app.schemas.order_import import ImportPreviewResponse, ImportReportResponse, PendingOrdersResponse
from app.services.order_import_service import (
    NoValidOrdersError,
    OrderImportService,
    OrderSubmissionError,
    get_order_import_service,
)
from app.services.pending_order_loader import PendingOrderLoader, get_pending_order_loader

router = APIRouter(prefix="/orders", tags=["order-import"])


def _read_upload(file: UploadFile) -> bytes:
    try:
        return file.file.read()
    finally:
        file.file.close()


def _file_format_exception(exc: OrderFileFormatError) -> HTTPException:
    detail: dict[str, object] = {"message": str(exc)}
    if isinstance(exc, MissingColumnsError):
        detail["missing_columns"] = list(exc.missing)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


@router.post("/import/preview", response_model=ImportPreviewResponse)
def preview_order_import(
    file: UploadFile = Depends(get_csv_upload),
    company_id: str = Depends(get_company_id),
    import_service: OrderImportService = Depends(get_order_import_service),
) -> ImportPreviewResponse:
    """
    Parse and validate an order file without creating anything.
    """

    raw = _read_upload(file)
    try:
        profile = import_service.resolve_profile(company_id=company_id)
        batch = import_service.prepare(raw=raw, profile=profile)
    except OrderFileFormatError as exc:
        raise _file_format_exception(exc) from exc
    except ConnectorRequestError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"message": str(exc)},
        ) from exc

    return ImportPreviewResponse.from_domain(batch.candidates, batch.skipped)


@router.post("/import", response_model=ImportReportResponse)
def import_orders(
    file: UploadFile = Depends(get_csv_upload),
    company_id: str = Depends(get_company_id),
    import_service: OrderImportService = Depends(get_order_import_service),
) -> ImportReportResponse:
    """
    Import an order file through the bulk-create endpoint with duplicate skipping.
    """

    raw = _read_upload(file)
    try:
        report = import_service.import_file(company_id=company_id, raw=raw)
    except OrderFileFormatError as exc:
        raise _file_format_exception(exc) from exc
    except NoValidOrdersError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": str(exc)},
        ) from exc
    except OrderSubmissionError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={
                "message": str(exc),
                "upstream_status": exc.status_code,
                "details": [
                    {"field": detail.field, "message": detail.message}
                    for detail in exc.details
                ],
            },
        ) from exc
    except ConnectorRequestError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"message": str(exc)},
        ) from exc

    return ImportReportResponse.from_domain(report)


@router.get("/pending", response_model=PendingOrdersResponse)
def list_pending_orders(
    company_id: str = Depends(get_company_id),
    loader: PendingOrderLoader = Depends(get_pending_order_loader),
) -> PendingOrdersResponse:
    """
    Return every open order for the tenant, in listing order.
    """

    try:
        order_set = loader.load(company_id=company_id)
    except ConnectorRequestError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"message": str(exc)},
        ) from exc

    return PendingOrdersResponse.from_domain(order_set)
