"""
app/validators/order_row_validator.py

Row-level validation and mapping of order sheet rows into import candidates.
"""

from __future__ import annotations

import re
from dataclasses import replace

from app.domain.order_import import (
    CapabilityProfile,
    CapacityDimension,
    ImportCandidate,
    OrderType,
    RawRow,
    SkipRecord,
)

TRACKING_ID_MAX_LENGTH = 50
ADDRESS_MAX_LENGTH = 500
NOTES_MAX_LENGTH = 500
CUSTOMER_NAME_MAX_LENGTH = 100
CUSTOMER_PHONE_MAX_LENGTH = 20

ADDRESS_PARTS: tuple[str, ...] = ("direccion", "distrito", "provincia", "departamento")

COORDINATE_PATTERN = re.compile(r"^-?[0-9]+(\.[0-9]+)?$")
COORDINATE_DISALLOWED = re.compile(r"[^0-9.\-]")
LEADING_INTEGER_PATTERN = re.compile(r"^[+-]?[0-9]+")
TIME_OF_DAY_PATTERN = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")

ORDER_TYPE_VOCABULARY: dict[str, OrderType] = {
    "NEW": OrderType.NEW,
    "NUEVO": OrderType.NEW,
    "RESCHEDULED": OrderType.RESCHEDULED,
    "REPROGRAMADO": OrderType.RESCHEDULED,
    "URGENT": OrderType.URGENT,
    "URGENTE": OrderType.URGENT,
}

PRIORITY_RANGE = (0, 100)


def clean_coordinate(value: str) -> str:
    """
    Turn a decimal comma into a point and drop anything but digits, `.` and `-`.
    """

    return COORDINATE_DISALLOWED.sub("", value.replace(",", ".", 1))


def parse_leading_int(value: str) -> int | None:
    match = LEADING_INTEGER_PATTERN.match(value.strip())
    if match is None:
        return None
    return int(match.group(0))


class ImportCandidateBuilder:
    """
    Assembles a candidate, setting a capacity dimension only when the
    tenant has it enabled.
    """

    def __init__(self, base: ImportCandidate, profile: CapabilityProfile) -> None:
        self._candidate = base
        self._profile = profile

    def with_dimension(
        self,
        dimension: CapacityDimension,
        value: int | OrderType | None,
    ) -> ImportCandidateBuilder:
        if value is None or not self._profile.is_enabled(dimension):
            return self
        field_name = {
            CapacityDimension.ORDER_VALUE: "order_value",
            CapacityDimension.WEIGHT: "weight_required",
            CapacityDimension.VOLUME: "volume_required",
            CapacityDimension.UNITS: "units_required",
            CapacityDimension.ORDER_TYPE: "order_type",
        }[dimension]
        self._candidate = replace(self._candidate, **{field_name: value})
        return self

    def with_details(self, **values: str | int | None) -> ImportCandidateBuilder:
        present = {key: value for key, value in values.items() if value is not None}
        if present:
            self._candidate = replace(self._candidate, **present)
        return self

    def build(self) -> ImportCandidate:
        return self._candidate


class OrderRowValidator:
    """
    Validates raw order rows. Never raises; every outcome is returned as data.
    """

    def __init__(self, *, profile: CapabilityProfile) -> None:
        self._profile = profile

    def validate_row(self, row: RawRow) -> ImportCandidate | SkipRecord:
        """
        Apply the required-field checks in order and stop at the first failure.
        """

        tracking_id = row.value("trackcode").strip()
        if not tracking_id:
            return SkipRecord(row_number=row.row_number, reason="Fila sin trackcode")

        def skip(reason: str) -> SkipRecord:
            return SkipRecord(
                row_number=row.row_number,
                reason=f"{tracking_id}: {reason}",
                tracking_id=tracking_id,
            )

        latitude_raw = row.value("latitud").strip()
        longitude_raw = row.value("longitud").strip()
        if not latitude_raw or not longitude_raw:
            return skip("Sin coordenadas")

        address = ", ".join(part for part in (row.value(name) for name in ADDRESS_PARTS) if part)
        if not address.strip():
            return skip("Sin dirección")

        latitude = clean_coordinate(latitude_raw)
        longitude = clean_coordinate(longitude_raw)
        if not COORDINATE_PATTERN.match(latitude) or not COORDINATE_PATTERN.match(longitude):
            return skip("Coordenadas inválidas")

        base = ImportCandidate(
            tracking_id=tracking_id[:TRACKING_ID_MAX_LENGTH],
            address=address[:ADDRESS_MAX_LENGTH],
            latitude=latitude,
            longitude=longitude,
        )
        order_value = self._parse_quantity(row.value("valorizado"), allow_zero=True)
        return (
            ImportCandidateBuilder(base, self._profile)
            .with_details(**self._contact_details(row))
            .with_dimension(CapacityDimension.ORDER_VALUE, order_value)
            .with_dimension(CapacityDimension.WEIGHT, self._parse_quantity(row.value("peso")))
            .with_dimension(CapacityDimension.VOLUME, self._parse_quantity(row.value("volumen")))
            .with_dimension(CapacityDimension.UNITS, self._parse_quantity(row.value("unidades")))
            .with_dimension(CapacityDimension.ORDER_TYPE, self._parse_order_type(row.value("tipo_pedido")))
            .with_details(
                priority=self._parse_priority(row.value("prioridad")),
                time_window_start=self._parse_time_of_day(row.value("ventana_horaria_inicio")),
                time_window_end=self._parse_time_of_day(row.value("ventana_horaria_fin")),
            )
            .build()
        )

    def _contact_details(self, row: RawRow) -> dict[str, str | None]:
        reference = row.value("referencia").strip()
        customer_name = row.value("nombre_cliente").strip()
        customer_phone = row.value("telefono").strip()

        notes_parts: list[str] = []
        if reference:
            notes_parts.append(reference)
        if customer_name:
            notes_parts.append(f"Cliente: {customer_name}")
        if customer_phone:
            notes_parts.append(f"Tel: {customer_phone}")

        return {
            "notes": " | ".join(notes_parts)[:NOTES_MAX_LENGTH] if notes_parts else None,
            "customer_name": customer_name[:CUSTOMER_NAME_MAX_LENGTH] or None,
            "customer_phone": customer_phone[:CUSTOMER_PHONE_MAX_LENGTH] or None,
        }

    @staticmethod
    def _parse_quantity(value: str, *, allow_zero: bool = False) -> int | None:
        parsed = parse_leading_int(value) if value.strip() else None
        if parsed is None:
            return None
        if parsed < 0 or (parsed == 0 and not allow_zero):
            return None
        return parsed

    @staticmethod
    def _parse_order_type(value: str) -> OrderType | None:
        return ORDER_TYPE_VOCABULARY.get(value.strip().upper())

    @staticmethod
    def _parse_priority(value: str) -> int | None:
        parsed = parse_leading_int(value) if value.strip() else None
        low, high = PRIORITY_RANGE
        if parsed is None or not low <= parsed <= high:
            return None
        return parsed

    @staticmethod
    def _parse_time_of_day(value: str) -> str | None:
        candidate = value.strip()
        return candidate if TIME_OF_DAY_PATTERN.match(candidate) else None
