"""
CSV artifact writer.

Normalizes a structured table into rectangular records and writes them as
a uniquely named CSV file.
"""

import csv
import json
import logging
import time
import uuid
from pathlib import Path
from typing import Any

from ..exceptions import WriteFailure
from ..models import StructuredTable, TabularArtifact

logger = logging.getLogger(__name__)


def _cell_to_text(value: Any) -> str:
    """Render one cell value as CSV text."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (list, dict)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def normalize_records(table: StructuredTable) -> list[dict[str, str]]:
    """
    Map every row to a header -> cell dict.

    Short rows are padded with empty strings. Cells beyond the header width
    are dropped.
    """
    width = len(table.headers)
    records = []
    for index, row in enumerate(table.rows):
        if len(row) > width:
            logger.warning(
                "Row %d has %d cells for %d headers; extra cells dropped",
                index,
                len(row),
                width,
            )
        cells = list(row[:width]) + [""] * (width - len(row))
        records.append(
            {header: _cell_to_text(cell) for header, cell in zip(table.headers, cells)}
        )
    return records


def generate_artifact_name() -> str:
    """Return a collision-resistant artifact filename."""
    return f"output-{time.time_ns() // 1_000_000}-{uuid.uuid4().hex[:8]}.csv"


class TableBuilder:
    """Writes structured tables to CSV files in the output directory."""

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)

    def build(self, table: StructuredTable) -> TabularArtifact:
        """
        Write ``table`` as a new CSV artifact.

        Args:
            table: Validated table.

        Returns:
            Reference to the written file with its row/column counts.

        Raises:
            WriteFailure: If the file cannot be created or written.
        """
        records = normalize_records(table)
        filename = generate_artifact_name()
        path = self.output_dir / filename

        try:
            # "x" refuses to overwrite an existing artifact
            with path.open("x", newline="", encoding="utf-8") as fh:
                writer = csv.DictWriter(
                    fh, fieldnames=table.headers, quoting=csv.QUOTE_MINIMAL
                )
                writer.writeheader()
                writer.writerows(records)
            size = path.stat().st_size
        except OSError as e:
            logger.error("Could not write CSV artifact %s: %s", path, e)
            raise WriteFailure(f"Could not write CSV file: {e}") from e

        logger.info(
            "Wrote %s (%d rows, %d columns, %d bytes)",
            filename,
            len(records),
            len(table.headers),
            size,
        )
        return TabularArtifact(
            filename=filename,
            path=path,
            row_count=len(records),
            column_count=len(table.headers),
            size_bytes=size,
        )
