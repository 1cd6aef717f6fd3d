"""
CSV codec.

The first row is the header; every following row becomes a mapping from
column name to cell text. Cells are always strings, there is no numeric
coercion.

Serialization expects a sequence of mappings (a single mapping is treated as a
one-row table). Rows with different keys are written with the union of all
keys, in first-seen order, leaving missing cells empty. Nested mappings are
flattened to dotted column names and nested sequences are written as compact
JSON text, which matches what spreadsheet exports do and is not reversible.
A dotted name that clashes with an existing column is rejected.

A table with a header and no data rows parses to an empty sequence, so its
column names are not kept: formatting it yields an empty document.
"""

import csv as csv_lib
import io
import json
import logging
from typing import Any, Dict, List

import pandas as pd

from ..canonical import scalar_to_text
from .base_codec import BaseCodec

logger = logging.getLogger(__name__)

NESTED_KEY_SEPARATOR = "."


class CSVCodec(BaseCodec):
    """CSV parser and serializer."""

    def __init__(self, delimiter: str = ","):
        super().__init__("csv")
        self.delimiter = delimiter

    def _parse_text(self, text: str, strict: bool = False, **options) -> List[Dict[str, str]]:
        """
        Parse CSV text into a sequence of row mappings.

        Args:
            text: CSV document, header first
            strict: Reject rows whose field count differs from the header
                instead of padding short rows with "" and truncating long ones

        Raises:
            FormatSyntaxError: On malformed quoting, or on ragged rows in strict mode
        """
        reader = csv_lib.reader(io.StringIO(text, newline=""), delimiter=self.delimiter, strict=True)
        try:
            rows = [row for row in reader if row]
        except csv_lib.Error as e:
            raise self.syntax_error(
                f"{e} (line {reader.line_num})",
                details={"csv_error": str(e), "line": reader.line_num}
            )

        if not rows:
            return []

        header, body = rows[0], rows[1:]
        width = len(header)
        records = []
        for row_number, row in enumerate(body, start=2):
            if len(row) != width:
                if strict:
                    raise self.syntax_error(
                        f"row {row_number} has {len(row)} field(s), header has {width}",
                        details={"row": row_number, "fields": len(row), "expected": width}
                    )
                self.logger.debug(f"Row {row_number} has {len(row)} field(s), adjusting to {width}")
                row = (row + [""] * width)[:width]
            records.append(dict(zip(header, row)))
        return records

    def _serialize_value(self, value, **options) -> str:
        """
        Serialize a sequence of mappings as CSV.

        Raises:
            UnsupportedShapeError: If the value is a scalar or a sequence
                containing anything other than mappings
        """
        if isinstance(value, dict):
            value = [value]
        if not isinstance(value, list):
            raise self.shape_error(
                f"top-level value must be a sequence of mappings, got {type(value).__name__}",
                details={"value_type": type(value).__name__}
            )
        for index, row in enumerate(value):
            if not isinstance(row, dict):
                raise self.shape_error(
                    f"row {index} must be a mapping, got {type(row).__name__}",
                    details={"row": index, "value_type": type(row).__name__}
                )
        if not value:
            return ""

        records = [self._flatten_row(row) for row in value]
        columns: Dict[str, None] = {}
        for record in records:
            for key in record:
                columns.setdefault(key, None)

        df = pd.DataFrame(
            [[record.get(column, "") for column in columns] for record in records],
            columns=list(columns),
            dtype=object
        )
        return df.to_csv(index=False, sep=self.delimiter, lineterminator="\n")

    def _flatten_row(self, row: Dict[str, Any], prefix: str = "") -> Dict[str, str]:
        """
        Flatten a row mapping into column -> cell text.

        Raises:
            UnsupportedShapeError: If two cells flatten to the same column name
        """
        flat: Dict[str, str] = {}
        for key, cell in row.items():
            column = f"{prefix}{NESTED_KEY_SEPARATOR}{key}" if prefix else key
            if isinstance(cell, dict) and cell:
                cells = self._flatten_row(cell, column)
            elif isinstance(cell, (dict, list)):
                cells = {column: json.dumps(cell, ensure_ascii=False, separators=(",", ":"))}
            elif cell is None:
                cells = {column: ""}
            elif isinstance(cell, str):
                cells = {column: cell}
            else:
                cells = {column: scalar_to_text(cell)}
            for name, text in cells.items():
                if name in flat:
                    raise self.shape_error(
                        f"column {name!r} appears more than once after flattening nested mappings",
                        details={"column": name}
                    )
                flat[name] = text
        return flat
