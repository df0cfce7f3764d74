"""
Goal Projection Module
Estimates when a savings target is reached from the historical monthly savings rate.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from .aggregation import ZERO, TransactionGrouper, round_money
from .models import Transaction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GoalProjection:
    months_needed: int
    target_month: date  # first day of the month the goal is reached
    average_monthly_savings: Decimal

    @property
    def target_month_label(self) -> str:
        """e.g. 'March 2027'."""
        return self.target_month.strftime("%B %Y")

    def to_dict(self) -> dict:
        return {
            "months_needed": self.months_needed,
            "target_month": self.target_month.strftime("%Y-%m"),
            "target_month_label": self.target_month_label,
            "average_monthly_savings": round_money(self.average_monthly_savings),
        }


def average_monthly_savings(records: Iterable[Transaction]) -> Decimal:
    """
    Mean of (income - expense) over months that have at least one record.

    Months with no activity are skipped, not counted as zero.
    """
    stats = TransactionGrouper.monthly_stats(records)
    if not stats:
        return ZERO
    total = sum((stat.savings for stat in stats.values()), ZERO)
    return total / len(stats)


def project_goal(
    records: Iterable[Transaction],
    target_amount: Decimal,
    today: Optional[date] = None
) -> Optional[GoalProjection]:
    """
    Project the month in which target_amount is saved.

    Args:
        records: Full transaction history
        target_amount: Amount to save
        today: Start of the projection (defaults to the current date)

    Returns:
        GoalProjection, or None when the savings rate is not positive or the
        target is not a positive amount
    """
    if target_amount <= 0:
        logger.info(f"No projection for non-positive target {target_amount}")
        return None

    average = average_monthly_savings(records)
    if average <= 0:
        logger.info(f"No projection: average monthly savings is {average}")
        return None

    months_needed = math.ceil(target_amount / average)
    start = (today or date.today()).replace(day=1)

    return GoalProjection(
        months_needed=months_needed,
        target_month=start + relativedelta(months=months_needed),
        average_monthly_savings=average,
    )
