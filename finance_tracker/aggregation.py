"""
Aggregation Module
Period totals, category breakdown, budget utilization and guidance, and the
month-rollover offer.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, localcontext
from typing import Callable, Iterable, Optional

from dateutil.relativedelta import relativedelta

from .models import Transaction, TransactionCandidate, TransactionType
from .settings import SettingsStore

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")

ROLLOVER_TITLE = "Previous Month Rollover"
ROLLOVER_CATEGORY = "Other"

PERIODS = ("this_month", "last_month", "all")

NEEDS_SHARE = Decimal("0.50")
WANTS_SHARE = Decimal("0.30")
SAVINGS_SHARE = Decimal("0.20")
SPLIT_EXAMPLES = {
    "needs": "Rent, Groceries, Utilities",
    "wants": "Dining, Entertainment, Shopping",
    "savings": "Investments, Emergency Fund",
}


def round_money(value: Decimal) -> Decimal:
    """Round for presentation only. Precision grows with the value so large totals still quantize."""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return value.quantize(CENTS)


@dataclass(frozen=True)
class PeriodSummary:
    total_income: Decimal = ZERO
    total_expenses: Decimal = ZERO
    balance: Decimal = ZERO

    def to_dict(self) -> dict:
        return {
            "total_income": round_money(self.total_income),
            "total_expenses": round_money(self.total_expenses),
            "balance": round_money(self.balance),
        }


@dataclass(frozen=True)
class CategoryBucket:
    category: str
    amount: Decimal

    def to_dict(self) -> dict:
        return {"category": self.category, "amount": round_money(self.amount)}


@dataclass(frozen=True)
class BudgetState:
    limit: Decimal
    spent: Decimal
    percentage_used: Decimal

    @property
    def remaining(self) -> Decimal:
        """Limit minus spent; negative once the budget is overrun."""
        return self.limit - self.spent

    @property
    def exceeded(self) -> bool:
        return self.percentage_used >= HUNDRED

    @property
    def level(self) -> str:
        """Progress band: low below 50%, medium below 85%, high otherwise."""
        if self.percentage_used < 50:
            return "low"
        if self.percentage_used < 85:
            return "medium"
        return "high"

    def to_dict(self) -> dict:
        return {
            "limit": round_money(self.limit),
            "spent": round_money(self.spent),
            "percentage_used": self.percentage_used.quantize(Decimal("0.1")),
            "level": self.level,
            "remaining": round_money(self.remaining),
            "exceeded": self.exceeded,
        }


@dataclass(frozen=True)
class BudgetSplit:
    """50/30/20 guideline shares of income."""

    needs: Decimal
    wants: Decimal
    savings: Decimal

    def to_dict(self) -> dict:
        return {
            "needs": round_money(self.needs),
            "wants": round_money(self.wants),
            "savings": round_money(self.savings),
        }


@dataclass(frozen=True)
class TransactionImpact:
    current_balance: Decimal
    projected_balance: Decimal
    is_affordable: bool


@dataclass(frozen=True)
class MonthlyStat:
    month: str  # YYYY-MM
    income: Decimal = ZERO
    expense: Decimal = ZERO

    @property
    def savings(self) -> Decimal:
        return self.income - self.expense


@dataclass(frozen=True)
class RolloverOffer:
    month: str  # the month whose balance is offered
    amount: Decimal


def summarize(records: Iterable[Transaction]) -> PeriodSummary:
    """
    Sum income and expenses exactly.

    Returns:
        PeriodSummary where balance == total_income - total_expenses
    """
    income = ZERO
    expenses = ZERO
    for tx in records:
        if tx.is_income:
            income += tx.amount
        elif tx.is_expense:
            expenses += tx.amount
    return PeriodSummary(total_income=income, total_expenses=expenses, balance=income - expenses)


def top_categories(records: Iterable[Transaction], n: int = 5) -> list[CategoryBucket]:
    """
    Largest expense categories.

    Ties keep the order in which categories were first seen.
    """
    totals: dict[str, Decimal] = {}
    for tx in records:
        if tx.is_expense:
            totals[tx.category] = totals.get(tx.category, ZERO) + tx.amount

    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [CategoryBucket(category, amount) for category, amount in ranked[:n]]


def budget_percentage(spent: Decimal, limit: Decimal) -> Decimal:
    """Share of the limit used, capped at 100. A zero limit is fully used once anything is spent."""
    if limit <= 0:
        return HUNDRED if spent > 0 else ZERO
    return min(HUNDRED, spent / limit * HUNDRED)


def budget_state(records: Iterable[Transaction], limit: Decimal) -> BudgetState:
    """Budget utilization of the expenses in records."""
    spent = summarize(records).total_expenses
    return BudgetState(limit=limit, spent=spent, percentage_used=budget_percentage(spent, limit))


def budget_split(income: Decimal) -> Optional[BudgetSplit]:
    """
    Suggested 50/30/20 allocation of income.

    Returns:
        BudgetSplit, or None when there is no income to split
    """
    if income <= 0:
        return None
    return BudgetSplit(
        needs=income * NEEDS_SHARE,
        wants=income * WANTS_SHARE,
        savings=income * SAVINGS_SHARE,
    )


def transaction_impact(balance: Decimal, amount: Decimal, transaction_type: str) -> TransactionImpact:
    """
    Balance before and after a prospective transaction.

    Income is always affordable; an expense is affordable while the projected
    balance stays at or above zero.
    """
    if transaction_type == TransactionType.INCOME.value:
        return TransactionImpact(balance, balance + amount, True)
    projected = balance - amount
    return TransactionImpact(balance, projected, projected >= 0)


def month_key(day: date) -> str:
    return day.strftime("%Y-%m")


def previous_month(day: date) -> str:
    """YYYY-MM of the calendar month before day."""
    return month_key(day.replace(day=1) - relativedelta(months=1))


def filter_period(records: Iterable[Transaction], period: str, today: Optional[date] = None) -> list[Transaction]:
    """
    Restrict records to this month, last month or all time.

    Raises:
        ValueError: If period is not one of PERIODS
    """
    if period not in PERIODS:
        raise ValueError(f"Unknown period {period!r}. Allowed: {', '.join(PERIODS)}")

    today = today or date.today()
    if period == "all":
        return list(records)

    wanted = month_key(today) if period == "this_month" else previous_month(today)
    return [tx for tx in records if tx.month_key == wanted]


class TransactionGrouper:
    """Groups transactions by calendar month."""

    @staticmethod
    def group_by_month(transactions: Iterable[Transaction]) -> dict[str, list[Transaction]]:
        """
        Group transactions by month (YYYY-MM), months in ascending order.
        """
        grouped = defaultdict(list)
        for tx in transactions:
            grouped[tx.month_key].append(tx)
        return {month: grouped[month] for month in sorted(grouped)}

    @staticmethod
    def monthly_stats(transactions: Iterable[Transaction]) -> dict[str, MonthlyStat]:
        """Income and expense per active month. Months without records are absent."""
        stats = {}
        for month, month_txns in TransactionGrouper.group_by_month(transactions).items():
            summary = summarize(month_txns)
            stats[month] = MonthlyStat(month, summary.total_income, summary.total_expenses)

        logger.debug(f"Computed monthly stats for {len(stats)} months")
        return stats


class RolloverManager:
    """
    Offers to carry last month's positive balance into the current month.

    The last acknowledged month lives in the client settings; accepting or
    declining both advance it so the offer is made once per month. Only the
    immediately preceding month is considered, even after a longer absence.
    """

    def __init__(self, store: SettingsStore, today: Callable[[], date] = date.today):
        self.store = store
        self.today = today

    def current_month(self) -> str:
        return month_key(self.today())

    def check(self, records: Iterable[Transaction]) -> Optional[RolloverOffer]:
        """
        Decide whether a rollover offer should be shown.

        Returns:
            RolloverOffer, or None if nothing is to be offered
        """
        records = list(records)
        if not records:
            # Nothing loaded yet; leave the marker for the next check
            return None

        settings = self.store.load()
        current = self.current_month()

        if settings.last_seen_month is None:
            # First use: start tracking from this month
            self._acknowledge()
            return None

        if settings.last_seen_month == current:
            return None

        last_month = previous_month(self.today())
        balance = summarize(tx for tx in records if tx.month_key == last_month).balance

        if balance > 0:
            logger.info(f"Rollover available: {balance} from {last_month}")
            return RolloverOffer(month=last_month, amount=balance)

        self._acknowledge()
        return None

    def rollover_candidate(self, offer: RolloverOffer) -> TransactionCandidate:
        """The synthetic income record created when an offer is accepted."""
        return TransactionCandidate(
            title=ROLLOVER_TITLE,
            amount=offer.amount,
            type=TransactionType.INCOME.value,
            category=ROLLOVER_CATEGORY,
            date=self.today().isoformat(),
        )

    def accept(self, offer: RolloverOffer, storage) -> Transaction:
        """
        Store the rollover income record, then mark the month acknowledged.

        Args:
            offer: Offer returned by check()
            storage: Storage collaborator exposing create(candidate)

        Raises:
            StorageError: If the record cannot be stored; the marker is left unchanged
        """
        record = storage.create(self.rollover_candidate(offer))
        self._acknowledge()
        logger.info(f"Rollover of {offer.amount} from {offer.month} accepted")
        return record

    def decline(self) -> None:
        """Mark the month acknowledged without creating a record."""
        self._acknowledge()
        logger.info("Rollover declined")

    def _acknowledge(self) -> None:
        settings = self.store.load()
        self.store.save(settings.with_last_seen_month(self.current_month()))
