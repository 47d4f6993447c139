"""
app/mappers/header_mapper.py

Header normalization and column resolution for order CSV files.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from typing import Mapping, Sequence

from app.domain.order_import import CapabilityProfile, CapacityDimension, HeaderIndexMap

BASE_REQUIRED_COLUMNS: tuple[str, ...] = (
    "trackcode",
    "nombre_cliente",
    "direccion",
    "referencia",
    "departamento",
    "provincia",
    "distrito",
    "latitud",
    "longitud",
    "telefono",
)

DIMENSION_COLUMNS: dict[CapacityDimension, str] = {
    CapacityDimension.ORDER_VALUE: "valorizado",
    CapacityDimension.WEIGHT: "peso",
    CapacityDimension.VOLUME: "volumen",
    CapacityDimension.UNITS: "unidades",
    CapacityDimension.ORDER_TYPE: "tipo_pedido",
}

OPTIONAL_COLUMNS: tuple[str, ...] = (
    "prioridad",
    "ventana_horaria_inicio",
    "ventana_horaria_fin",
)

KNOWN_COLUMNS: tuple[str, ...] = BASE_REQUIRED_COLUMNS + tuple(DIMENSION_COLUMNS.values()) + OPTIONAL_COLUMNS

DEFAULT_COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "ventana_horaria_inicio": ("ventana horaria inicio",),
    "ventana_horaria_fin": ("ventana horaria fin",),
}

_NON_IDENTIFIER = re.compile(r"[^a-z0-9_]")


def normalize_header(header: str) -> str:
    """
    Fold a header to its canonical key: lowercase, no diacritics, `ñ` as `n`,
    and `_` in place of anything outside `[a-z0-9_]`.
    """

    decomposed = unicodedata.normalize("NFD", header.strip().lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_IDENTIFIER.sub("_", stripped.replace("ñ", "n"))


def required_columns(profile: CapabilityProfile) -> tuple[str, ...]:
    """
    Base columns plus one column per enabled capacity dimension.
    """

    enabled = tuple(
        column
        for dimension, column in DIMENSION_COLUMNS.items()
        if profile.is_enabled(dimension)
    )
    return BASE_REQUIRED_COLUMNS + enabled


@dataclass(frozen=True)
class HeaderResolution:
    """
    Both header forms of one file, used for every column lookup.
    """

    normalized: tuple[str, ...]
    original: tuple[str, ...]

    def find(self, name: str) -> int | None:
        """
        Locate a column by its normalized form first, then its raw form.
        """

        normalized_name = normalize_header(name)
        if normalized_name in self.normalized:
            return self.normalized.index(normalized_name)
        if name in self.original:
            return self.original.index(name)
        return None


class HeaderMapper:
    """
    Resolves the header line of an order file into column positions.
    """

    def __init__(self, *, aliases: Mapping[str, Sequence[str]] | None = None) -> None:
        self._aliases: dict[str, tuple[str, ...]] = {
            canonical: tuple(values)
            for canonical, values in (aliases or DEFAULT_COLUMN_ALIASES).items()
        }

    def resolve(self, header_cells: Sequence[str]) -> HeaderResolution:
        return HeaderResolution(
            normalized=tuple(normalize_header(cell) for cell in header_cells),
            original=tuple(cell.strip().lower() for cell in header_cells),
        )

    def missing_columns(
        self,
        resolution: HeaderResolution,
        profile: CapabilityProfile,
    ) -> list[str]:
        return [
            column
            for column in required_columns(profile)
            if self._locate(resolution, column) is None
        ]

    def build_index_map(self, resolution: HeaderResolution, *, delimiter: str) -> HeaderIndexMap:
        positions: dict[str, int] = {}
        for column in KNOWN_COLUMNS:
            index = self._locate(resolution, column)
            if index is not None:
                positions[column] = index
        return HeaderIndexMap(positions=positions, delimiter=delimiter)

    def _locate(self, resolution: HeaderResolution, column: str) -> int | None:
        index = resolution.find(column)
        if index is not None:
            return index
        for alias in self._aliases.get(column, ()):
            index = resolution.find(alias)
            if index is not None:
                return index
        return None
