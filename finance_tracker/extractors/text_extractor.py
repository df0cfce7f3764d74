"""
Text Extractor Module
Parses a single free-text bank message (SMS, e-mail alert, pasted note) into a
transaction candidate using independent regex heuristics.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

from ..models import TransactionCandidate, TransactionType
from .financial_rules import (
    default_category,
    is_credit_text,
    match_category,
    strip_noise_tokens,
)

logger = logging.getLogger(__name__)

UNKNOWN_CREDIT_TITLE = "Unknown Credit"
UNKNOWN_DEBIT_TITLE = "Unknown Debit"

# Currency marker followed by an amount. Thousands separators are optional and
# at most two decimals are read ("Rs. 1,250.50", "INR 300", "$12.5").
# The marker may not be glued to a preceding letter ("Bars 20" is not "Rs 20").
AMOUNT_PATTERN = re.compile(
    r'(?<![A-Za-z])(?:Rs\.?|INR|USD|EUR|GBP|₹|\$|€|£)\s*'
    r'(\d+(?:,\d+)*(?:\.\d{1,2})?)',
    re.IGNORECASE
)

# Counterparty: a preposition or reference marker, then words that contain no
# further preposition, ended by a trailing keyword, punctuation or end of text.
_WORD = r'(?!(?:at|to|from|for)\b)[A-Za-z0-9]+'
COUNTERPARTY_PATTERN = re.compile(
    r'\b(?:at|to|from|for|vpa|info:?)\s+'
    r'(' + _WORD + r'(?:\s+' + _WORD + r')*?)'
    r'(?=\s+(?:on|using|via|ref|bal)\b|\s*[.,;:!]|\s*$)',
    re.IGNORECASE
)

# D-M-Y with '-' or '/' and a 2 or 4 digit year
DATE_PATTERN = re.compile(r'(?<!\d)(\d{1,2})[-/](\d{1,2})[-/](\d{4}|\d{2})(?!\d)')


@dataclass(frozen=True)
class ExtractionResult:
    """Outcome of parsing one message: a candidate, or the reason it failed."""

    candidate: Optional[TransactionCandidate] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.candidate is not None

    def __bool__(self) -> bool:
        return self.ok


def extract_amount(text: str) -> Optional[Decimal]:
    """
    Find the first currency-marked amount.

    Returns:
        Positive Decimal amount, or None if absent, zero or not finite
    """
    match = AMOUNT_PATTERN.search(text)
    if not match:
        logger.debug("No currency-marked amount found")
        return None

    raw = match.group(1)
    try:
        amount = Decimal(raw.replace(',', ''))
    except InvalidOperation:
        logger.warning(f"Failed to parse amount '{raw}'")
        return None

    if not amount.is_finite() or amount == 0:
        logger.debug(f"Rejected amount '{raw}' (zero or not finite)")
        return None

    return amount


def classify_direction(text: str) -> TransactionType:
    """Credit words mean income; everything else defaults to expense."""
    if is_credit_text(text):
        return TransactionType.INCOME
    return TransactionType.EXPENSE


def extract_counterparty(text: str, transaction_type: TransactionType) -> str:
    """
    Extract the merchant or sender name.

    Falls back to a generic credit/debit label when nothing usable is found.
    """
    for match in COUNTERPARTY_PATTERN.finditer(text):
        title = strip_noise_tokens(match.group(1))
        if title:
            return title

    if transaction_type is TransactionType.INCOME:
        return UNKNOWN_CREDIT_TITLE
    return UNKNOWN_DEBIT_TITLE


def extract_date(text: str, today: Optional[date] = None) -> str:
    """
    Extract a day-month-year date and render it as YYYY-MM-DD.

    Two-digit years are read as 20YY. Missing or impossible dates
    (e.g. 31-02-2025) fall back to today.
    """
    fallback = (today or date.today()).isoformat()

    match = DATE_PATTERN.search(text)
    if not match:
        return fallback

    day, month, year = match.groups()
    if len(year) == 2:
        year = f"20{year}"

    try:
        return date(int(year), int(month), int(day)).isoformat()
    except ValueError:
        logger.debug(f"Ignoring impossible date '{match.group(0)}'")
        return fallback


def infer_category(text: str, transaction_type: TransactionType) -> str:
    """Map brand/keyword clusters to a category, else the per-direction default."""
    return match_category(text) or default_category(transaction_type)


class TransactionExtractor:
    """
    Extracts transaction candidates from free-text messages.
    Keeps running statistics across calls.
    """

    def __init__(self, today: Callable[[], date] = date.today):
        """
        Args:
            today: Clock used for the default date
        """
        self.today = today
        self.stats = {
            "messages_processed": 0,
            "parsed": 0,
            "failed": 0,
        }

    def extract(self, raw_text: Optional[str]) -> ExtractionResult:
        """
        Parse one message.

        Args:
            raw_text: Message content

        Returns:
            ExtractionResult holding either a candidate or a failure reason
        """
        self.stats["messages_processed"] += 1

        if not raw_text or not isinstance(raw_text, str) or not raw_text.strip():
            logger.warning("Empty text provided for extraction")
            return self._fail("Could not parse: message is empty")

        amount = extract_amount(raw_text)
        if amount is None:
            return self._fail("Could not parse: no non-zero currency amount found")

        transaction_type = classify_direction(raw_text)
        candidate = TransactionCandidate(
            title=extract_counterparty(raw_text, transaction_type),
            amount=amount,
            type=transaction_type.value,
            category=infer_category(raw_text, transaction_type),
            date=extract_date(raw_text, self.today()),
        )

        self.stats["parsed"] += 1
        logger.info(
            f"Parsed message: {candidate.date} | {candidate.title[:30]} | "
            f"{candidate.type} {candidate.amount}"
        )
        return ExtractionResult(candidate=candidate)

    def _fail(self, reason: str) -> ExtractionResult:
        self.stats["failed"] += 1
        logger.info(reason)
        return ExtractionResult(reason=reason)

    def get_stats(self) -> dict:
        """Get extraction statistics."""
        return self.stats.copy()


def extract_transaction_from_text(raw_text: Optional[str]) -> ExtractionResult:
    """
    Convenience function to parse a single message.

    Args:
        raw_text: Message content

    Returns:
        ExtractionResult
    """
    extractor = TransactionExtractor()
    return extractor.extract(raw_text)
