"""
Export Writer Module
Renders a transaction view to CSV or JSON text and writes report files.
"""

import json
import logging
from pathlib import Path
from typing import Iterable, Union

from ..models import Transaction, amount_text, json_amount

logger = logging.getLogger(__name__)

CSV_HEADER = ("Date", "Title", "Category", "Type", "Amount")
EXPORT_FORMATS = ("csv", "json")
DEFAULT_FILENAMES = {
    "csv": "finance_report.csv",
    "json": "finance_report.json",
}


def _display_date(tx: Transaction) -> str:
    """US locale short date, e.g. 11/5/2025."""
    return f"{tx.date.month}/{tx.date.day}/{tx.date.year}"


def _quote(value: str) -> str:
    return f'"{value}"'


def to_csv(records: Iterable[Transaction]) -> str:
    """Header line plus one fully quoted line per record."""
    lines = [','.join(CSV_HEADER)]
    for tx in records:
        lines.append(','.join(_quote(field) for field in (
            _display_date(tx),
            tx.title,
            tx.category,
            tx.type.value,
            amount_text(tx.amount),
        )))
    return '\n'.join(lines)


def to_json(records: Iterable[Transaction]) -> str:
    """Array of objects with capitalized keys and ISO dates."""
    export_data = [
        {
            "Date": tx.date_key,
            "Title": tx.title,
            "Category": tx.category,
            "Type": tx.type.value,
            "Amount": json_amount(tx.amount),
        }
        for tx in records
    ]
    return json.dumps(export_data, indent=2, ensure_ascii=False)


def serialize(records: Iterable[Transaction], fmt: str) -> str:
    """
    Render records in the requested format. Records are neither filtered nor reordered.

    Raises:
        ValueError: If fmt is not csv or json
    """
    if fmt == "csv":
        return to_csv(records)
    if fmt == "json":
        return to_json(records)
    raise ValueError(f"Unknown export format {fmt!r}. Allowed: {', '.join(EXPORT_FORMATS)}")


class ExportWriter:
    """Writes exported transaction views to disk."""

    def __init__(self, output_dir: Union[str, Path]):
        """
        Args:
            output_dir: Directory that receives report files
        """
        self.output_dir = Path(output_dir)

    def write(self, records: Iterable[Transaction], fmt: str, filename: Union[str, None] = None) -> Path:
        """
        Serialize records and write them to a report file.

        Returns:
            Path of the written file

        Raises:
            ValueError: If fmt is not supported
            OSError: If the file cannot be written
        """
        records = list(records)
        text = serialize(records, fmt)
        output_path = self.output_dir / (filename or DEFAULT_FILENAMES[fmt])

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(text, encoding='utf-8')
        except PermissionError as e:
            logger.error(f"Permission denied writing to {output_path}: {e}")
            raise
        except OSError as e:
            logger.error(f"OS error writing export: {e}", exc_info=True)
            raise

        logger.info(f"Exported {len(records)} transactions to {output_path}")
        return output_path


def write_export(records: Iterable[Transaction], output_dir: Union[str, Path], fmt: str) -> Path:
    """
    Convenience function to write an export file.

    Args:
        records: Transactions to export
        output_dir: Target directory
        fmt: "csv" or "json"

    Returns:
        Path of the written file
    """
    writer = ExportWriter(output_dir)
    return writer.write(records, fmt)
