"""
CSV Parser for bank and wallet statement exports

Reads comma-separated statements with a header row. Columns are located by
substring (``data``, ``valor``, ``descricao``/``descrição``), so exports from
different banks work without configuration. Rows are parsed best-effort:
a bad date or amount drops that row only.

Known limitation: quoted fields are not supported, a comma inside quotes
is still a field separator.
"""
import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Iterator, List, Optional, Union

from luthier_finance.logging_setup import get_logger
from .models import (
    DraftTransaction,
    SkippedRow,
    MISSING_COLUMN,
    INVALID_DATE,
    INVALID_AMOUNT,
    EMPTY_DESCRIPTION,
)

logger = get_logger(__name__)

DATE_COLUMN_HINTS = ('data',)
AMOUNT_COLUMN_HINTS = ('valor',)
DESCRIPTION_COLUMN_HINTS = ('descricao', 'descrição')

# Anything that can't be part of a number
AMOUNT_NOISE = re.compile(r'[^\d,.\-]')


@dataclass(frozen=True)
class ColumnMap:
    """Column indexes found in the header (-1 when missing)"""
    date: int
    amount: int
    description: int

    @property
    def missing(self) -> List[str]:
        return [name for name in ('date', 'amount', 'description')
                if getattr(self, name) < 0]


def split_fields(line: str) -> List[str]:
    """Split a line on commas, trimming surrounding quotes and whitespace"""
    return [value.strip().strip('"').strip() for value in line.split(',')]


def _find_column(header: List[str], hints) -> int:
    for index, name in enumerate(header):
        if any(hint in name for hint in hints):
            return index
    return -1


def find_columns(header_line: str) -> ColumnMap:
    """Locate date, amount and description columns (first match wins)"""
    header = split_fields(header_line.lower())
    return ColumnMap(
        date=_find_column(header, DATE_COLUMN_HINTS),
        amount=_find_column(header, AMOUNT_COLUMN_HINTS),
        description=_find_column(header, DESCRIPTION_COLUMN_HINTS),
    )


def parse_date(date_str: Optional[str]) -> Optional[date]:
    """
    Parse a statement date

    ``DD/MM/YYYY`` when the value contains ``/``, ISO (``YYYY-MM-DD``, with an
    optional time part) when it contains ``-``. Two-digit years are taken as
    20xx.

    Returns:
        The calendar date, or None when the value is not a valid date
    """
    if not date_str:
        return None

    date_str = date_str.strip()

    if '/' in date_str:
        parts = date_str.split('/')
        if len(parts) != 3:
            return None
        try:
            day, month, year = (int(part) for part in parts)
            if year < 100:
                year += 2000
            return date(year, month, day)
        except ValueError:
            return None

    if '-' in date_str:
        try:
            return datetime.fromisoformat(date_str).date()
        except ValueError:
            return None

    return None


def parse_amount(amount_str: Optional[str]) -> Optional[Decimal]:
    """
    Parse a locale-formatted amount, keeping its sign

    Currency symbols and spaces are dropped. When a comma is present it is
    the decimal separator and dots are thousands separators
    (``"R$ 1.234,56"`` -> ``1234.56``).

    Returns:
        Decimal value, or None when nothing numeric remains
    """
    if not amount_str:
        return None

    cleaned = AMOUNT_NOISE.sub('', amount_str)
    if ',' in cleaned:
        cleaned = cleaned.replace('.', '').replace(',', '.', 1)

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return None

    if not amount.is_finite():
        return None
    return amount


def _field(values: List[str], index: int) -> Optional[str]:
    if index < 0 or index >= len(values):
        return None
    return values[index]


def iter_rows(csv_text: str) -> Iterator[Union[DraftTransaction, SkippedRow]]:
    """
    Parse CSV text row by row

    Yields a DraftTransaction for every usable row and a SkippedRow (with the
    1-based line number, header = line 1) for every row that was dropped.
    Blank lines produce nothing. Drafts come out unclassified.
    """
    lines = csv_text.lstrip('\ufeff').split('\n')
    columns = find_columns(lines[0])

    if columns.missing:
        logger.warning("CSV header is missing column(s): %s", ', '.join(columns.missing))

    for line_number, raw_line in enumerate(lines[1:], start=2):
        line = raw_line.strip()
        if not line:
            continue

        values = split_fields(line)

        date_raw = _field(values, columns.date)
        amount_raw = _field(values, columns.amount)
        description = _field(values, columns.description)

        if date_raw is None or amount_raw is None or description is None:
            yield SkippedRow(line_number, MISSING_COLUMN, line)
            continue

        txn_date = parse_date(date_raw)
        if txn_date is None:
            yield SkippedRow(line_number, INVALID_DATE, date_raw)
            continue

        signed_amount = parse_amount(amount_raw)
        if signed_amount is None:
            yield SkippedRow(line_number, INVALID_AMOUNT, amount_raw)
            continue

        if not description:
            yield SkippedRow(line_number, EMPTY_DESCRIPTION, line)
            continue

        yield DraftTransaction(
            line_number=line_number,
            date=txn_date,
            description=description,
            amount=abs(signed_amount),
            signed_amount=signed_amount,
        )


def log_skipped(row: SkippedRow) -> None:
    """Log a dropped row with its line number"""
    logger.warning("Line %d: %s %r, skipping", row.line_number,
                   row.reason.replace('_', ' '), row.raw_value)


def parse_csv(csv_text: str) -> Iterator[DraftTransaction]:
    """
    Parse CSV text into draft transactions (one pass, lazy)

    Unusable rows are logged and dropped. A file without recognizable
    columns yields nothing.
    """
    for row in iter_rows(csv_text):
        if isinstance(row, SkippedRow):
            log_skipped(row)
            continue
        yield row


def read_csv_text(csv_path: Union[str, Path], encoding: str = 'utf-8') -> str:
    """Read a statement file (a UTF-8 BOM is ignored)

    Bytes that are not valid in the given encoding become U+FFFD, so a
    cp1252 export read as UTF-8 still parses row by row.
    """
    with open(csv_path, 'r', encoding=encoding, errors='replace') as f:
        return f.read()


def parse_csv_file(csv_path: Union[str, Path], encoding: str = 'utf-8') -> Iterator[DraftTransaction]:
    """Parse a statement file into draft transactions"""
    return parse_csv(read_csv_text(csv_path, encoding))
