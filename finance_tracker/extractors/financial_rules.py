"""
Financial Rules Module
Keyword tables for direction and category detection, and the storage sign convention.
"""

import logging
import re
from decimal import Decimal
from typing import Optional, Union

from ..models import TransactionType

logger = logging.getLogger(__name__)


# Words that mark money coming in. Anything else is treated as a debit.
CREDIT_KEYWORDS = ("credited", "received", "deposited", "refunded")

# Banking noise removed from counterparty names
NOISE_TOKENS = ("UPI", "REF", "NEFT", "IMPS", "RTGS")

INCOME_DEFAULT_CATEGORY = "Salary"
EXPENSE_DEFAULT_CATEGORY = "Other"

# Choices for hand-entered transactions; the first is the default
MANUAL_CATEGORIES = (
    "Food", "Shopping", "Transport", "Housing", "Entertainment",
    "Utilities", "Healthcare", "Education", "Salary", "Other",
)

# Ordered: the first cluster with a hit wins ("uber eats" is Food, not Transport).
CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "Food": (
        "swiggy", "zomato", "uber eats", "ubereats", "dominos", "domino's",
        "pizza hut", "mcdonalds", "mcdonald's", "kfc", "eatsure", "dunzo",
    ),
    "Shopping": (
        "amazon", "flipkart", "myntra", "ajio", "meesho", "nykaa", "snapdeal",
        "tata cliq",
    ),
    "Transport": (
        "uber", "ola", "rapido", "irctc", "railway", "metro", "petrol",
        "diesel", "fuel", "indian oil", "hpcl", "bpcl", "fastag",
    ),
    "Bills": (
        "airtel", "jio", "vodafone", "bsnl", "recharge", "electricity",
        "broadband", "postpaid", "prepaid", "dth", "water bill", "gas bill",
    ),
}

_CREDIT_PATTERN = re.compile(
    r'\b(?:' + '|'.join(CREDIT_KEYWORDS) + r')\b',
    re.IGNORECASE
)

_NOISE_PATTERN = re.compile(
    r'\b(?:' + '|'.join(NOISE_TOKENS) + r')\b',
    re.IGNORECASE
)

_CATEGORY_PATTERNS = [
    (
        category,
        re.compile(r'(?<!\w)(?:' + '|'.join(re.escape(k) for k in keywords) + r')(?!\w)', re.IGNORECASE),
    )
    for category, keywords in CATEGORY_KEYWORDS.items()
]


def is_credit_text(text: str) -> bool:
    """Check whether the text contains a credit-indicating word."""
    return bool(_CREDIT_PATTERN.search(text))


def strip_noise_tokens(text: str) -> str:
    """Remove transfer-protocol abbreviations and collapse leftover whitespace."""
    cleaned = _NOISE_PATTERN.sub(' ', text)
    return ' '.join(cleaned.split())


def match_category(text: str) -> Optional[str]:
    """
    Find the first keyword cluster present in the text.

    Returns:
        Category name, or None if no keyword matched
    """
    for category, pattern in _CATEGORY_PATTERNS:
        if pattern.search(text):
            logger.debug(f"Category keyword hit: {category}")
            return category
    return None


def default_category(transaction_type: TransactionType) -> str:
    """Category used when no keyword matched."""
    if transaction_type is TransactionType.INCOME:
        return INCOME_DEFAULT_CATEGORY
    return EXPENSE_DEFAULT_CATEGORY


def apply_sign_to_amount(amount: Decimal, transaction_type: Union[TransactionType, str]) -> Decimal:
    """
    Apply the storage sign convention to a magnitude.

    Income: positive
    Expense: negative

    Args:
        amount: Raw amount (sign is discarded)
        transaction_type: Income or expense

    Returns:
        Amount with correct sign applied
    """
    # Ensure we start with absolute value
    amount = abs(amount)

    if transaction_type == TransactionType.INCOME:
        return amount
    elif transaction_type == TransactionType.EXPENSE:
        return -amount
    else:
        logger.warning(f"Unknown transaction type {transaction_type!r} for amount {amount}, keeping positive")
        return amount


def format_amount_display(amount: Decimal, transaction_type: Union[TransactionType, str]) -> str:
    """
    Format amount for display with explicit sign.

    Income: +1600.00
    Expense: -250.00
    """
    signed = apply_sign_to_amount(amount, transaction_type)
    if signed >= 0:
        return f"+{signed:.2f}"
    return f"{signed:.2f}"
