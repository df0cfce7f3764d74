"""
Transaction Models
Typed shapes shared by the parsers, the storage client and the analytics engines.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping, Union


DEFAULT_CATEGORY = "General"


class TransactionType(str, Enum):
    """Transaction direction."""
    INCOME = "income"
    EXPENSE = "expense"

    @classmethod
    def values(cls) -> set[str]:
        return {member.value for member in cls}


def to_decimal(value: Any) -> Decimal:
    """
    Convert a wire/storage value to Decimal.

    Floats go through ``str`` so 12.1 becomes Decimal("12.1"), not its binary expansion.

    Raises:
        ValueError: If the value is not numeric
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid amount: {value!r}") from e


def amount_text(amount: Decimal) -> str:
    """Plain decimal text without trailing zeros: 500.00 -> '500', 12.50 -> '12.5'."""
    text = format(amount, 'f')
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return text


def json_amount(amount: Decimal) -> Union[int, float, str]:
    """
    JSON form of an amount: an int or float when that is exact, else the decimal text.

    ``Decimal("12.5")`` -> 12.5, ``Decimal("500.00")`` -> 500, and a value a
    float cannot hold exactly stays a string.
    """
    if amount == amount.to_integral_value():
        return int(amount)
    as_float = float(amount)
    if Decimal(repr(as_float)) == amount:
        return as_float
    return amount_text(amount)


@dataclass(frozen=True)
class TransactionCandidate:
    """A parsed transaction that has not been validated or persisted yet."""

    title: str
    amount: Decimal
    type: str
    category: str
    date: str  # YYYY-MM-DD, or the raw value when a tabular date could not be parsed

    def to_storage_payload(self) -> dict:
        """Render the storage create body; expenses are stored as negative amounts."""
        from .extractors.financial_rules import apply_sign_to_amount

        return {
            "text": self.title,
            "amount": json_amount(apply_sign_to_amount(self.amount, self.type)),
            "type": self.type,
            "category": self.category,
            "date": self.date,
        }


@dataclass(frozen=True)
class Transaction:
    """A stored transaction record. Immutable; only deletion is supported."""

    id: str
    title: str
    amount: Decimal
    type: TransactionType
    category: str
    date: date

    @property
    def date_key(self) -> str:
        """Sortable YYYY-MM-DD form."""
        return self.date.isoformat()

    @property
    def month_key(self) -> str:
        """Calendar month in YYYY-MM form."""
        return self.date.strftime("%Y-%m")

    @property
    def is_income(self) -> bool:
        return self.type is TransactionType.INCOME

    @property
    def is_expense(self) -> bool:
        return self.type is TransactionType.EXPENSE

    @classmethod
    def from_storage(cls, document: Mapping[str, Any]) -> "Transaction":
        """
        Build a record from a storage document.

        Storage keeps a signed amount and names the title ``text``; the record
        always carries the magnitude.

        Raises:
            ValueError: If the document is missing fields or holds invalid values
        """
        try:
            record_id = document.get("_id", document.get("id"))
            raw_date = str(document["date"])
            return cls(
                id=str(record_id),
                title=str(document["text"]),
                amount=abs(to_decimal(document["amount"])),
                type=TransactionType(document["type"]),
                category=document.get("category") or DEFAULT_CATEGORY,
                date=date.fromisoformat(raw_date[:10]),
            )
        except KeyError as e:
            raise ValueError(f"Storage document missing field: {e}") from e

    def to_dict(self) -> dict:
        """Convert transaction to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "amount": self.amount,
            "type": self.type.value,
            "category": self.category,
            "date": self.date_key,
        }

    def __repr__(self) -> str:
        return (
            f"Transaction(date={self.date_key}, title={self.title[:30]}, "
            f"amount={self.amount}, type={self.type.value})"
        )
