"""
Personal Finance Tracker - transaction ingestion, normalization and analytics.
"""

from .config import config
from .models import Transaction, TransactionCandidate, TransactionType

__version__ = config.VERSION

__all__ = [
    'Transaction',
    'TransactionCandidate',
    'TransactionType',
    'config',
]
