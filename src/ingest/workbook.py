"""
Workbook decoder: spreadsheet file → sheets of rows.

Decodes a whole workbook into memory as
``{sheet_name: [{header: raw_value, ...}, ...]}``:

1. Format detection by file signature (ZIP → xlsx, OLE2 → xls),
   falling back to the file extension
2. First non-blank row of each sheet is the header row
3. Header cells without text become ``_EMPTY``, ``_EMPTY1``, ... and
   repeated header texts get a ``_1``, ``_2`` suffix
4. Empty cells are omitted from the row mapping, blank rows are skipped

Readers:
- openpyxl for .xlsx / .xlsm (cached formula values, ``data_only=True``)
- xlrd for legacy .xls
"""

import asyncio
import logging
import zipfile
from collections.abc import Iterable, Sequence
from io import BytesIO
from pathlib import Path
from typing import Any

import xlrd
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from xlrd.compdoc import CompDocError
from xlrd.xldate import XLDateError, xldate_as_datetime

from src.core.normalize import format_number, is_number
from src.domain.constants import (
    DECODER_ARTIFACT_PREFIX,
    OLE2_SIGNATURE,
    WORKBOOK_ALLOWED_EXTENSIONS,
    ZIP_SIGNATURE,
)
from src.domain.errors import USER_MESSAGES, ErrorCodes, PolicyRejectError
from src.domain.schemas import RawWorkbook

logger = logging.getLogger(__name__)

WorkbookSource = Path | bytes

FORMAT_XLSX = "xlsx"
FORMAT_XLS = "xls"


# =============================================================================
# Format Detection
# =============================================================================


def detect_format(data: bytes, filename: str = "") -> str:
    """
    Detect the workbook format.

    Signature wins over extension so renamed uploads still decode.

    Raises:
        PolicyRejectError: UNSUPPORTED_FORMAT
    """
    if data.startswith(ZIP_SIGNATURE):
        return FORMAT_XLSX
    if data.startswith(OLE2_SIGNATURE):
        return FORMAT_XLS

    ext = Path(filename).suffix.lower()
    if ext in (".xlsx", ".xlsm"):
        return FORMAT_XLSX
    if ext == ".xls":
        return FORMAT_XLS

    raise PolicyRejectError(
        ErrorCodes.UNSUPPORTED_FORMAT,
        file=filename,
        allowed=", ".join(WORKBOOK_ALLOWED_EXTENSIONS),
    )


# =============================================================================
# Rows → Records
# =============================================================================


def _is_blank_row(row: Sequence[Any]) -> bool:
    return all(value is None or value == "" for value in row)


def _header_text(value: Any) -> str:
    if value is None:
        return ""
    if is_number(value):
        return format_number(value)
    return str(value)


def make_headers(header_row: Sequence[Any]) -> list[str]:
    """
    Build unique header keys from the header row.

    Examples:
        ["Name", None, "Name", ""] → ["Name", "_EMPTY", "Name_1", "_EMPTY1"]
    """
    headers: list[str] = []
    seen: dict[str, int] = {}
    artifact_count = 0

    for value in header_row:
        text = _header_text(value)
        if not text:
            suffix = str(artifact_count) if artifact_count else ""
            headers.append(f"{DECODER_ARTIFACT_PREFIX}{suffix}")
            artifact_count += 1
            continue

        if text in seen:
            seen[text] += 1
            key = f"{text}_{seen[text]}"
            while key in seen:
                seen[text] += 1
                key = f"{text}_{seen[text]}"
            seen[key] = 0
            headers.append(key)
        else:
            seen[text] = 0
            headers.append(text)

    return headers


def rows_to_records(rows: Iterable[Sequence[Any]]) -> list[dict[str, Any]]:
    """
    Convert raw sheet rows (header row first) to header → value mappings.

    Returns an empty list for sheets with no data rows.
    """
    non_blank = [tuple(row) for row in rows if not _is_blank_row(row)]
    if not non_blank:
        return []

    width = max(len(row) for row in non_blank)
    header_row, *data_rows = non_blank
    headers = make_headers(list(header_row) + [None] * (width - len(header_row)))

    records: list[dict[str, Any]] = []
    for row in data_rows:
        record = {
            headers[index]: value
            for index, value in enumerate(row)
            if value is not None
        }
        records.append(record)
    return records


# =============================================================================
# Readers
# =============================================================================


def _read_xlsx(data: bytes) -> RawWorkbook:
    wb = load_workbook(BytesIO(data), read_only=True, data_only=True)
    try:
        return {
            ws.title: rows_to_records(ws.iter_rows(values_only=True))
            for ws in wb.worksheets
        }
    finally:
        wb.close()


def _xls_cell_value(cell: Any, datemode: int) -> Any:
    ctype = cell.ctype
    if ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
        return None
    if ctype == xlrd.XL_CELL_BOOLEAN:
        return bool(cell.value)
    if ctype == xlrd.XL_CELL_ERROR:
        return xlrd.error_text_from_code.get(cell.value, "#ERR")
    if ctype == xlrd.XL_CELL_DATE:
        try:
            return xldate_as_datetime(cell.value, datemode)
        except XLDateError:
            return cell.value
    return cell.value


def _read_xls(data: bytes) -> RawWorkbook:
    book = xlrd.open_workbook(file_contents=data)
    try:
        workbook: dict[str, list[dict[str, Any]]] = {}
        for sheet in book.sheets():
            rows = (
                [_xls_cell_value(cell, book.datemode) for cell in sheet.row(r)]
                for r in range(sheet.nrows)
            )
            workbook[sheet.name] = rows_to_records(rows)
        return workbook
    finally:
        book.release_resources()


# =============================================================================
# Public API
# =============================================================================


def _read_source(source: WorkbookSource | None, name: str) -> bytes:
    if source is None:
        raise PolicyRejectError(ErrorCodes.MISSING_INPUT, file=name)

    if isinstance(source, Path):
        if not source.is_file():
            raise PolicyRejectError(ErrorCodes.MISSING_INPUT, file=str(source))
        data = source.read_bytes()
    else:
        data = bytes(source)

    if not data:
        raise PolicyRejectError(ErrorCodes.MISSING_INPUT, file=name, reason="empty file")
    return data


def decode_workbook(source: WorkbookSource | None, name: str | None = None) -> RawWorkbook:
    """
    Decode a workbook file into sheets of rows.

    Args:
        source: file path or raw file bytes
        name: display name (defaults to the path name)

    Returns:
        ``{sheet_name: [row, ...]}`` in workbook sheet order

    Raises:
        PolicyRejectError: MISSING_INPUT, UNSUPPORTED_FORMAT,
            ENCODING_INVALID, DECODE_FAILED
    """
    if name is None:
        name = source.name if isinstance(source, Path) else "<bytes>"

    data = _read_source(source, name)
    fmt = detect_format(data, name)

    try:
        workbook = _read_xlsx(data) if fmt == FORMAT_XLSX else _read_xls(data)
    except (UnicodeDecodeError, LookupError) as e:
        # LookupError: 알 수 없는 codepage
        raise PolicyRejectError(
            ErrorCodes.ENCODING_INVALID,
            file=name,
            message=USER_MESSAGES[ErrorCodes.ENCODING_INVALID],
            error=str(e),
        ) from e
    except (
        zipfile.BadZipFile,
        InvalidFileException,
        xlrd.XLRDError,
        CompDocError,
        KeyError,
        ValueError,
        OSError,
    ) as e:
        raise PolicyRejectError(
            ErrorCodes.DECODE_FAILED,
            file=name,
            format=fmt,
            error=str(e),
        ) from e

    logger.info(
        f"Decoded {name} ({fmt}): "
        + ", ".join(f"{sheet}={len(rows)} rows" for sheet, rows in workbook.items())
    )
    return workbook


async def load_workbook_pair(
    baseline: WorkbookSource | None,
    comparison: WorkbookSource | None,
    baseline_name: str | None = None,
    comparison_name: str | None = None,
) -> tuple[RawWorkbook, RawWorkbook]:
    """
    Decode baseline and comparison concurrently.

    Fan-out / fan-in: if either decode fails the whole pair fails.

    Raises:
        PolicyRejectError: from either decode
    """
    if baseline is None or comparison is None:
        raise PolicyRejectError(
            ErrorCodes.MISSING_INPUT,
            baseline=baseline is not None,
            comparison=comparison is not None,
        )

    workbook_a, workbook_b = await asyncio.gather(
        asyncio.to_thread(decode_workbook, baseline, baseline_name),
        asyncio.to_thread(decode_workbook, comparison, comparison_name),
    )
    return workbook_a, workbook_b
