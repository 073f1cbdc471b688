"""CSV serialization helpers."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable
from pathlib import Path

from .models import ContactRecord

CSV_FIELDS = ["URL", "Email"]


def render_contacts_csv(records: Iterable[ContactRecord]) -> str:
    """Render records as ``URL,Email`` rows joined by newlines, no trailing newline."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_FIELDS)
    for record in records:
        writer.writerow([record.url, record.email])
    return buffer.getvalue().rstrip("\n")


def write_rows(path: str, records: Iterable[ContactRecord]) -> None:
    """Write contact records to a CSV file."""
    output_path = Path(path)
    output_path.write_text(render_contacts_csv(records) + "\n", encoding="utf-8")
