"""
CSV Codec - Map the slab interchange CSV to SlabRecords and back.

Import accepts any subset/superset of the known columns, matched by name
case-insensitively. Export always writes the fixed 13-column shape.
"""

import csv
import io
import re
from typing import Iterable, Optional, TextIO

from .models import SlabRecord, SlabSource, SlabStatus

# Import column name -> SlabRecord field
IMPORT_COLUMNS = {
    "combined_id": "combined_id",
    "slab_number": "slab_number",
    "batch_number": "batch_number",
    "material_name": "material",
    "size_mm": "dimensions",
    "thickness_mm": "thickness_mm",
    "colour_family": "colour_family",
    "location": "location",
    "received_date": "received_date",
    "notes": "notes",
}

EXPORT_HEADER = [
    "combined_id",
    "slab_number",
    "batch_number",
    "material_name",
    "size_mm",
    "thickness_mm",
    "colour_family",
    "location",
    "received_date",
    "notes",
    "status",
    "last_seen",
    "missing",
]

_LINE_BREAK = re.compile(r"\r?\n")


def _is_blank(row: list[str]) -> bool:
    return not any(cell.strip() for cell in row)


def _split_row(line: str) -> list[str]:
    """One physical line as fields. A quote never carries over to the next line."""
    try:
        return next(csv.reader([line]))
    except csv.Error:
        return line.split(",")


def derive_combined_id(slab: str, batch: str, row_number: int) -> str:
    """
    Pick an identifier for a row that has no combined_id.

    "<slab>/<batch>" when both are known, otherwise whichever one is,
    otherwise a positional placeholder so ids stay unique within the file.
    """
    if slab and batch:
        return f"{slab}/{batch}"
    return slab or batch or f"row_{row_number}"


def parse_csv(text: str) -> list[SlabRecord]:
    """
    Parse slab CSV text into records.

    Each line is one row. Quoted fields are honored within the line, so a
    comma inside quotes stays in its field; an unclosed quote ends at the
    line break and a line the csv module rejects is split on plain commas.
    Ragged rows are fine: a column the row does not reach is "".

    Args:
        text: Full CSV file contents

    Returns:
        One SlabRecord per non-blank data row, all available and unseen
    """
    lines = [line for line in (text or "").splitlines() if line.strip()]
    rows = [row for row in map(_split_row, lines) if not _is_blank(row)]
    if not rows:
        return []

    headers = [h.strip().lower() for h in rows[0]]
    index = {}
    for column, field_name in IMPORT_COLUMNS.items():
        if column in headers:
            index[field_name] = headers.index(column)

    records = []
    for row_number, row in enumerate(rows[1:], start=1):
        values = {}
        for field_name in IMPORT_COLUMNS.values():
            idx = index.get(field_name)
            values[field_name] = row[idx].strip() if idx is not None and idx < len(row) else ""

        if not values["combined_id"]:
            values["combined_id"] = derive_combined_id(
                values["slab_number"], values["batch_number"], row_number
            )
        values["material"] = values["material"].upper()

        records.append(SlabRecord(
            **values,
            status=SlabStatus.AVAILABLE,
            last_seen=None,
            raw_ocr_text="",
            ocr_confidence=0,
            source=SlabSource.CSV,
        ))

    return records


def _export_value(value) -> str:
    if value is None:
        return ""
    return _LINE_BREAK.sub(" ", str(value)).strip()


def to_csv(records: Iterable[SlabRecord], output: Optional[TextIO] = None) -> str:
    """
    Export records to CSV.

    Every value is quoted (embedded quotes doubled by the csv module) and
    line breaks inside values become spaces. The trailing "missing" column
    is derived from last_seen and is ignored on import.

    Args:
        records: Records to export
        output: Optional file handle to write to

    Returns:
        CSV string (also writes to output if provided)
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")

    writer.writerow(EXPORT_HEADER)

    for r in records:
        writer.writerow([_export_value(v) for v in (
            r.combined_id,
            r.slab_number,
            r.batch_number,
            r.material,
            r.dimensions,
            r.thickness_mm,
            r.colour_family,
            r.location,
            r.received_date,
            r.notes,
            r.status.value,
            r.last_seen or "",
            "" if r.last_seen else "missing",
        )])

    csv_content = buffer.getvalue()

    if output:
        output.write(csv_content)

    return csv_content
