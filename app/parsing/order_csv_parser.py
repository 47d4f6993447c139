"""
app/parsing/order_csv_parser.py

Splits decoded order files into header-mapped rows.
"""

from __future__ import annotations

import logging

from app.domain.order_import import CapabilityProfile, ParsedOrderFile, RawRow, SkipRecord
from app.mappers.header_mapper import HeaderMapper, required_columns

logger = logging.getLogger(__name__)

BOM_CHARACTER = "\ufeff"

# Priority order; the first one present in the header line wins.
CANDIDATE_DELIMITERS: tuple[str, ...] = ("\t", ";")
DEFAULT_DELIMITER = ","


class OrderFileFormatError(ValueError):
    """
    Raised when a file cannot be parsed as an order sheet at all.
    """


class MissingColumnsError(OrderFileFormatError):
    """
    Raised when required columns are absent from the header line.
    """

    def __init__(self, missing: list[str]) -> None:
        self.missing = tuple(missing)
        super().__init__(f"Faltan columnas requeridas: {', '.join(self.missing)}")


def sniff_delimiter(header_line: str) -> str:
    for delimiter in CANDIDATE_DELIMITERS:
        if delimiter in header_line:
            return delimiter
    return DEFAULT_DELIMITER


class OrderCSVParser:
    """
    Parses order sheet text for one tenant capability profile.
    """

    def __init__(
        self,
        *,
        profile: CapabilityProfile,
        header_mapper: HeaderMapper | None = None,
    ) -> None:
        self._profile = profile
        self._header_mapper = header_mapper or HeaderMapper()
        self._required = required_columns(profile)

    @property
    def required_columns(self) -> tuple[str, ...]:
        return self._required

    def parse(self, text: str) -> ParsedOrderFile:
        """
        Parse decoded text into rows.

        Fails before any row is read when fewer than two non-blank lines are
        present or any required column is missing. Data lines with fewer
        cells than the required column count become skip records.
        """

        if text.startswith(BOM_CHARACTER):
            text = text[1:]

        numbered_lines = [
            (line_number, line.rstrip("\r"))
            for line_number, line in enumerate(text.split("\n"), start=1)
            if line.strip()
        ]
        if len(numbered_lines) < 2:
            raise OrderFileFormatError(
                "El archivo CSV debe tener al menos una fila de encabezados y una de datos"
            )

        _, header_line = numbered_lines[0]
        delimiter = sniff_delimiter(header_line)
        resolution = self._header_mapper.resolve(header_line.split(delimiter))

        missing = self._header_mapper.missing_columns(resolution, self._profile)
        if missing:
            raise MissingColumnsError(missing)

        header_map = self._header_mapper.build_index_map(resolution, delimiter=delimiter)
        rows: list[RawRow] = []
        skipped: list[SkipRecord] = []
        minimum_cells = len(self._required)

        for line_number, line in numbered_lines[1:]:
            cells = tuple(cell.strip() for cell in line.split(delimiter))
            if len(cells) < minimum_cells:
                skipped.append(
                    SkipRecord(
                        row_number=line_number,
                        reason=(
                            f"Fila {line_number}: columnas insuficientes "
                            f"({len(cells)} de {minimum_cells})"
                        ),
                    )
                )
                continue
            rows.append(RawRow(row_number=line_number, cells=cells, header_map=header_map))

        logger.debug(
            "Order file parsed delimiter=%r rows=%s short_rows=%s",
            delimiter,
            len(rows),
            len(skipped),
        )
        return ParsedOrderFile(header_map=header_map, rows=rows, skipped=skipped)
