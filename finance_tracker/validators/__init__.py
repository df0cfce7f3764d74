"""
Validators Module - Candidate validation against the record invariants.
"""

from .financial_validator import (
    TransactionValidator,
    validate_candidates,
    ValidationError
)

__all__ = [
    'TransactionValidator',
    'validate_candidates',
    'ValidationError',
]
