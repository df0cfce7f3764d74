"""
Loaders Module - CSV/JSON import normalization.
"""

from .tabular_loader import (
    MalformedDocumentError,
    NormalizeResult,
    TabularLoadError,
    UnsupportedFormatError,
    normalize,
)

__all__ = [
    'MalformedDocumentError',
    'NormalizeResult',
    'TabularLoadError',
    'UnsupportedFormatError',
    'normalize',
]
