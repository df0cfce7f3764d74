"""
Output Module - CSV/JSON export of transaction views.
"""

from .writer import (
    ExportWriter,
    serialize,
    write_export
)

__all__ = [
    'ExportWriter',
    'serialize',
    'write_export',
]
