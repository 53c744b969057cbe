"""
ingest/csv_reader.py

Upload → Dataset.

Parsing is deliberately naive: lines split on '\\n', cells split on ',',
every cell trimmed. Quoted commas and embedded newlines are NOT handled;
a quoted cell containing a comma is split into two cells.
"""

from __future__ import annotations

import logging
import os

from ..config import settings
from ..errors import DatasetReadError, UnsupportedFileType
from ..models import Dataset

logger = logging.getLogger(__name__)


def validate_filename(name: str) -> None:
    """Raise UnsupportedFileType unless the extension is an accepted one."""
    _, ext = os.path.splitext(name or "")
    allowed = {e.lower() for e in settings.ALLOWED_EXTENSIONS}
    if ext.lower() not in allowed:
        raise UnsupportedFileType(
            f"{name!r} is not a supported file type (expected one of: {', '.join(sorted(allowed))})"
        )


def decode_upload(content: bytes) -> str:
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise DatasetReadError(
            f"file is larger than the {settings.MAX_UPLOAD_BYTES} byte limit"
        )
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise DatasetReadError(f"file is not valid UTF-8 text: {exc}") from exc


def _split_line(line: str) -> list[str]:
    return [cell.strip() for cell in line.rstrip("\r").split(",")]


def parse_csv_text(text: str) -> Dataset:
    if not text.strip():
        raise DatasetReadError("file is empty")

    table = [
        cells
        for cells in (_split_line(line) for line in text.split("\n"))
        if any(cells)
    ]
    dataset = Dataset.from_table(table)
    logger.debug(
        "Parsed CSV: headers=%s rows=%d", dataset.headers, len(dataset.rows)
    )
    return dataset
