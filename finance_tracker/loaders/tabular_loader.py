"""
Tabular Loader Module
Normalizes CSV and JSON transaction exports into transaction candidates.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterator, Optional

from dateutil import parser as date_parser

from ..models import DEFAULT_CATEGORY, TransactionCandidate, TransactionType

logger = logging.getLogger(__name__)

INVALID_DATE = "Invalid Date"
CSV_MIN_FIELDS = 5


class TabularLoadError(Exception):
    """Base exception for import documents that cannot be read at all."""
    pass


class UnsupportedFormatError(TabularLoadError):
    """Declared extension is not one of the supported formats."""
    pass


class MalformedDocumentError(TabularLoadError):
    """Document could not be decoded or parsed."""
    pass


@dataclass
class NormalizeResult:
    """Candidates produced from one document plus row accounting."""

    candidates: list[TransactionCandidate] = field(default_factory=list)
    total_rows: int = 0

    @property
    def accepted(self) -> int:
        return len(self.candidates)

    @property
    def skipped(self) -> int:
        return self.total_rows - self.accepted

    def __iter__(self) -> Iterator[TransactionCandidate]:
        return iter(self.candidates)

    def __len__(self) -> int:
        return len(self.candidates)


def normalize_date(raw: Any, today: date) -> str:
    """
    Re-render an import date as YYYY-MM-DD.

    Empty values and the literal "Invalid Date" become today. Values that
    cannot be parsed are kept as-is rather than failing the row.
    """
    value = "" if raw is None else str(raw).strip()
    if not value or value == INVALID_DATE:
        return today.isoformat()

    try:
        return date_parser.parse(value).date().isoformat()
    except (ValueError, OverflowError) as e:
        logger.debug(f"Keeping unparsable date '{value}': {e}")
        return value


def parse_amount(raw: Any) -> Optional[Decimal]:
    """
    Parse an import amount.

    Returns:
        Finite Decimal, or None if the value is not a number
    """
    if raw is None or isinstance(raw, bool):
        return None
    try:
        amount = Decimal(str(raw).strip())
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return amount


def _candidate(date_value: str, title: Any, category: Any, type_value: Any, amount: Decimal) -> TransactionCandidate:
    return TransactionCandidate(
        title=str(title).strip(),
        amount=abs(amount),
        type=str(type_value).strip().lower(),
        category=str(category).strip() if category else DEFAULT_CATEGORY,
        date=date_value,
    )


def parse_csv(text: str, today: date) -> NormalizeResult:
    """
    Parse a CSV export with fixed columns: date, title, category, type, amount.

    The first line is a header and is always skipped. Fields are split on
    commas without quote awareness; surrounding double quotes are stripped.
    """
    result = NormalizeResult()
    lines = text.split('\n')

    for line_num, line in enumerate(lines[1:], 2):
        line = line.strip()
        if not line:
            continue

        result.total_rows += 1
        columns = [col.strip().removeprefix('"').removesuffix('"').strip() for col in line.split(',')]

        if len(columns) < CSV_MIN_FIELDS:
            logger.debug(f"Line {line_num}: {len(columns)} fields, skipping")
            continue

        date_raw, title, category, type_raw, amount_raw = columns[:CSV_MIN_FIELDS]
        amount = parse_amount(amount_raw)

        if not title or amount is None:
            logger.debug(f"Line {line_num}: missing title or non-numeric amount, skipping")
            continue

        result.candidates.append(
            _candidate(normalize_date(date_raw, today), title, category, type_raw, amount)
        )

    return result


def _lookup(item: dict, *aliases: str) -> Any:
    """Case-insensitive field lookup; the first alias with a truthy value wins."""
    lowered = {str(key).lower(): value for key, value in item.items()}
    for alias in aliases:
        value = lowered.get(alias)
        if value not in (None, ""):
            return value
    return None


def parse_json(text: str, today: date) -> NormalizeResult:
    """
    Parse a JSON export: a single object or an array of objects.

    Raises:
        MalformedDocumentError: If the text is not valid JSON or not an object/array
    """
    try:
        data = json.loads(text, parse_float=Decimal)
    except json.JSONDecodeError as e:
        raise MalformedDocumentError(f"Invalid JSON document: {e}") from e

    if isinstance(data, dict):
        items = [data]
    elif isinstance(data, list):
        items = data
    else:
        raise MalformedDocumentError("JSON document must be an object or an array of objects")

    result = NormalizeResult(total_rows=len(items))

    for index, item in enumerate(items):
        if not isinstance(item, dict):
            logger.debug(f"Item {index}: not an object, skipping")
            continue

        title = _lookup(item, "title", "description")
        amount = parse_amount(_lookup(item, "amount"))

        if title is None or not str(title).strip() or amount is None:
            logger.debug(f"Item {index}: missing title or non-numeric amount, skipping")
            continue

        result.candidates.append(
            _candidate(
                normalize_date(_lookup(item, "date"), today),
                title,
                _lookup(item, "category"),
                _lookup(item, "type") or TransactionType.EXPENSE.value,
                amount,
            )
        )

    return result


PARSERS: dict[str, Callable[[str, date], NormalizeResult]] = {
    "csv": parse_csv,
    "json": parse_json,
}


def normalize(file_bytes: bytes, extension: str, today: Optional[date] = None) -> NormalizeResult:
    """
    Parse an import document into transaction candidates.

    Args:
        file_bytes: Raw document content
        extension: Declared extension ("csv", ".json", ...)
        today: Date used for missing/invalid dates (defaults to the current date)

    Returns:
        NormalizeResult with candidates and row counts

    Raises:
        UnsupportedFormatError: If the extension is not csv or json
        MalformedDocumentError: If the bytes cannot be decoded or parsed
    """
    fmt = (extension or "").strip().lower().lstrip('.')
    parse = PARSERS.get(fmt)
    if parse is None:
        logger.error(f"Unsupported import format: {extension!r}")
        raise UnsupportedFormatError(
            f"Unsupported file format '{extension}'. Please upload a .csv or .json file."
        )

    try:
        text = file_bytes.decode('utf-8-sig')
    except UnicodeDecodeError as e:
        logger.error(f"Cannot decode {fmt} document: {e}")
        raise MalformedDocumentError(f"File is not valid UTF-8 text: {e}") from e

    result = parse(text, today or date.today())
    logger.info(
        f"Normalized {fmt} document: {result.accepted} accepted, "
        f"{result.skipped} skipped out of {result.total_rows} rows"
    )
    return result
