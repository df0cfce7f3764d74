"""
Extractors Module - Free-text transaction parsing and categorization.
"""

from .text_extractor import (
    ExtractionResult,
    TransactionExtractor,
    classify_direction,
    extract_amount,
    extract_counterparty,
    extract_date,
    extract_transaction_from_text,
    infer_category,
)

from .financial_rules import (
    apply_sign_to_amount,
    format_amount_display,
    match_category,
)

__all__ = [
    'ExtractionResult',
    'TransactionExtractor',
    'classify_direction',
    'extract_amount',
    'extract_counterparty',
    'extract_date',
    'extract_transaction_from_text',
    'infer_category',
    'apply_sign_to_amount',
    'format_amount_display',
    'match_category',
]
