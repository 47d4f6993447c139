from __future__ import annotations

import unittest
from unittest import mock

from app.connectors.base import ConnectorRequestError
from app.connectors.orders_api_connector import BulkCreateRejectedError, FieldErrorDetail
from app.domain.order_import import BulkCreateResult, CapabilityProfile, ImportCandidate, SkipRecord, ValidatedBatch
from app.parsing.order_csv_parser import MissingColumnsError
from app.services.order_import_service import NoValidOrdersError, OrderImportService, OrderSubmissionError

PROFILE = CapabilityProfile(order_value=False, weight=False, volume=False, units=False, order_type=False)

HEADER = "trackcode,nombre_cliente,direccion,referencia,departamento,provincia,distrito,latitud,longitud,telefono"

TWO_ROW_FILE = (
    HEADER
    + "\nTC-1,Ana,Av. Arequipa 100,,Lima,Lima,Lince,-12.08,-77.03,999"
    + "\nTC-2,Bob,Jr. Cusco 20,,Lima,Lima,Cercado,-12.05,,888\n"
).encode("utf-8")


def _candidate(tracking_id: str) -> ImportCandidate:
    return ImportCandidate(tracking_id=tracking_id, address="Av. 1", latitude="-12.0", longitude="-77.0")


class TestOrderImportService(unittest.TestCase):
    def setUp(self) -> None:
        self.connector = mock.Mock()
        self.service = OrderImportService(connector=self.connector, log_skipped_rows=False)

    def test_three_line_file_yields_one_candidate_and_one_skip(self) -> None:
        raw = (
            HEADER
            + "\nTC-1,Ana,Av. Arequipa 100,,Lima,Lima,Lince,-12.08,-77.03,999"
            + "\nTC-2,Bob,Jr. Cusco 20,,Lima,Lima,Cercado,-12.05,,888\n"
        ).encode("utf-8")

        batch = self.service.prepare(raw=raw, profile=PROFILE)

        self.assertEqual([c.tracking_id for c in batch.candidates], ["TC-1"])
        self.assertEqual(len(batch.skipped), 1)
        self.assertEqual(batch.skipped[0].reason, "TC-2: Sin coordenadas")

    def test_legacy_encoded_file_is_parsed(self) -> None:
        raw = (
            "trackcode;nombre_cliente;dirección;referencia;departamento;provincia;distrito;latitud;longitud;teléfono\n"
            "TC-9;Iñigo;Av. Perú 1;;Lima;Lima;Breña;-12,06;-77,05;911\n"
        ).encode("cp1252")

        batch = self.service.prepare(raw=raw, profile=PROFILE)

        candidate = batch.candidates[0]
        self.assertEqual(candidate.address, "Av. Perú 1, Breña, Lima, Lima")
        self.assertEqual((candidate.latitude, candidate.longitude), ("-12.06", "-77.05"))
        self.assertEqual(candidate.customer_name, "Iñigo")

    def test_missing_columns_fail_before_any_row(self) -> None:
        profile = CapabilityProfile(weight=False, volume=False, order_type=True)

        with self.assertRaises(MissingColumnsError) as ctx:
            self.service.prepare(raw=TWO_ROW_FILE, profile=profile)

        self.assertEqual(ctx.exception.missing, ("tipo_pedido",))

    def test_skip_records_are_kept_in_row_order(self) -> None:
        raw = (
            HEADER
            + "\n,Ana,Av. 1,,Lima,Lima,Lince,-12.0,-77.0,1"
            + "\nshort,row"
            + "\nTC-3,Cy,Av. 3,,Lima,Lima,Lince,x,-77.0,3\n"
        ).encode("utf-8")

        batch = self.service.prepare(raw=raw, profile=PROFILE)

        self.assertEqual([record.row_number for record in batch.skipped], [2, 3, 4])
        self.assertEqual(batch.candidates, [])

    def test_empty_batch_never_calls_the_server(self) -> None:
        skipped = [SkipRecord(row_number=n, reason=f"TC-{n}: Sin coordenadas") for n in range(2, 10)]

        with self.assertRaises(NoValidOrdersError) as ctx:
            self.service.submit(company_id="c-1", batch=ValidatedBatch(candidates=[], skipped=skipped))

        message = str(ctx.exception)
        self.assertTrue(message.startswith("No hay órdenes válidas para subir."))
        self.assertIn("TC-6: Sin coordenadas", message)
        self.assertNotIn("TC-7: Sin coordenadas", message)
        self.connector.bulk_create.assert_not_called()

    def test_submit_merges_server_counts_and_local_skips(self) -> None:
        self.connector.bulk_create.return_value = BulkCreateResult(
            created=2,
            skipped=4,
            invalid=1,
            duplicates=["D-1", "D-2", "D-3", "D-4"],
        )
        skipped = [SkipRecord(row_number=n, reason=f"reason {n}") for n in range(2, 7)]
        batch = ValidatedBatch(candidates=[_candidate("A"), _candidate("B")], skipped=skipped)

        report = self.service.submit(company_id="c-1", batch=batch)

        self.connector.bulk_create.assert_called_once_with(
            company_id="c-1",
            candidates=batch.candidates,
            skip_duplicates=True,
        )
        self.assertEqual((report.created, report.skipped, report.invalid, report.local_skipped), (2, 4, 1, 5))
        self.assertEqual(report.duplicate_preview, ["D-1", "D-2", "D-3"])
        self.assertTrue(report.duplicates_truncated)
        self.assertEqual(report.skip_preview, ["reason 2", "reason 3", "reason 4"])
        self.assertTrue(report.has_warnings)
        self.assertEqual(
            report.summary,
            "2 órdenes creadas, 4 duplicados saltados, 1 inválidos, 5 filas sin datos\n"
            "Duplicados: D-1, D-2, D-3...\n"
            "reason 2\nreason 3\nreason 4",
        )

    def test_clean_success_has_no_details(self) -> None:
        self.connector.bulk_create.return_value = BulkCreateResult(created=2, skipped=0, invalid=0)
        batch = ValidatedBatch(candidates=[_candidate("A"), _candidate("B")], skipped=[])

        report = self.service.submit(company_id="c-1", batch=batch)

        self.assertFalse(report.has_warnings)
        self.assertEqual(report.summary, "2 órdenes creadas")

    def test_short_duplicate_list_has_no_ellipsis(self) -> None:
        self.connector.bulk_create.return_value = BulkCreateResult(
            created=0, skipped=2, invalid=0, duplicates=["D-1", "D-2"]
        )

        report = self.service.submit(
            company_id="c-1",
            batch=ValidatedBatch(candidates=[_candidate("D-1"), _candidate("D-2")], skipped=[]),
        )

        self.assertFalse(report.duplicates_truncated)
        self.assertEqual(report.summary, "2 duplicados saltados\nDuplicados: D-1, D-2")

    def test_server_rejection_surfaces_message_and_details(self) -> None:
        self.connector.bulk_create.side_effect = BulkCreateRejectedError(
            status_code=400,
            error="Validation failed",
            details=[FieldErrorDetail(field="orders.0.latitude", message="Invalid")],
        )

        with self.assertRaises(OrderSubmissionError) as ctx:
            self.service.submit(
                company_id="c-1",
                batch=ValidatedBatch(candidates=[_candidate("A")], skipped=[]),
            )

        self.assertEqual(str(ctx.exception), "Validation failed: orders.0.latitude: Invalid")
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(len(ctx.exception.details), 1)

    def test_network_failure_surfaces_exception_message(self) -> None:
        self.connector.bulk_create.side_effect = ConnectorRequestError("orders_api: connection refused")

        with self.assertRaises(OrderSubmissionError) as ctx:
            self.service.submit(
                company_id="c-1",
                batch=ValidatedBatch(candidates=[_candidate("A")], skipped=[]),
            )

        self.assertEqual(str(ctx.exception), "orders_api: connection refused")
        self.assertIsNone(ctx.exception.status_code)
        self.assertEqual(self.connector.bulk_create.call_count, 1)

    def test_import_file_fetches_profile_when_not_supplied(self) -> None:
        self.connector.fetch_capability_profile.return_value = PROFILE
        self.connector.bulk_create.return_value = BulkCreateResult(created=1, skipped=0, invalid=0)

        report = self.service.import_file(company_id="c-1", raw=TWO_ROW_FILE)

        self.connector.fetch_capability_profile.assert_called_once_with(company_id="c-1")
        submitted = self.connector.bulk_create.call_args.kwargs["candidates"]
        self.assertEqual([c.tracking_id for c in submitted], ["TC-1"])
        self.assertEqual(submitted[0].latitude, "-12.08")
        self.assertEqual(report.local_skipped, 1)

    def test_import_file_uses_supplied_profile(self) -> None:
        self.connector.bulk_create.return_value = BulkCreateResult(created=1, skipped=0, invalid=0)

        self.service.import_file(company_id="c-1", raw=TWO_ROW_FILE, profile=PROFILE)

        self.connector.fetch_capability_profile.assert_not_called()


if __name__ == "__main__":
    unittest.main()
