"""
Candidate Validator
Applies the record invariants (positive finite amount up to the configured
maximum, non-blank title, known type) to parsed candidates before they
reach storage.
"""

import logging
from decimal import Decimal
from typing import Iterable, Optional

from ..config import config
from ..models import TransactionCandidate, TransactionType

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """A candidate broke a record invariant while running in strict mode."""
    pass


class TransactionValidator:
    """
    Filters candidates that would produce invalid records.

    In the default mode offending candidates are logged and dropped; with
    ``strict_mode`` the first one raises ValidationError.
    """

    def __init__(
        self,
        strict_mode: bool = False,
        min_title_length: int = 1,
        max_amount: Optional[Decimal] = None
    ):
        self.strict_mode = strict_mode
        self.min_title_length = min_title_length
        self.max_amount = config.MAX_TRANSACTION_AMOUNT if max_amount is None else max_amount
        self.stats = self._fresh_stats()

    @staticmethod
    def _fresh_stats() -> dict:
        return {
            "total_validated": 0,
            "valid": 0,
            "invalid": 0,
            "invalid_amount": 0,
            "amount_too_large": 0,
            "invalid_title": 0,
            "invalid_type": 0,
        }

    def _problems(self, candidate: TransactionCandidate):
        if not self._amount_ok(candidate.amount):
            yield "invalid_amount", f"amount must be a positive number, got {candidate.amount}"
        elif candidate.amount > self.max_amount:
            yield "amount_too_large", f"amount {candidate.amount} exceeds the maximum of {self.max_amount}"
        if not self._title_ok(candidate.title):
            yield "invalid_title", "title is empty"
        if candidate.type not in TransactionType.values():
            yield "invalid_type", f"type must be income or expense, got {candidate.type!r}"

    def validate_candidate(self, candidate: TransactionCandidate) -> bool:
        """
        Check one candidate.

        Returns:
            Whether the candidate may be stored

        Raises:
            ValidationError: In strict mode, for the first broken invariant
        """
        self.stats["total_validated"] += 1

        problem = next(self._problems(candidate), None)
        if problem is None:
            self.stats["valid"] += 1
            return True

        stat_key, reason = problem
        self.stats[stat_key] += 1
        self.stats["invalid"] += 1
        if self.strict_mode:
            raise ValidationError(f"{candidate.title!r}: {reason}")
        logger.warning(f"Skipping candidate {candidate.title!r}: {reason}")
        return False

    def validate_candidates(self, candidates: Iterable[TransactionCandidate]) -> list[TransactionCandidate]:
        """Keep the candidates that pass, in input order."""
        accepted = [c for c in candidates if self.validate_candidate(c)]
        logger.info(
            f"Validated {self.stats['total_validated']} candidates: "
            f"{self.stats['valid']} ok, {self.stats['invalid']} skipped"
        )
        return accepted

    @staticmethod
    def _amount_ok(amount) -> bool:
        return isinstance(amount, Decimal) and amount.is_finite() and amount > 0

    def _title_ok(self, title) -> bool:
        return isinstance(title, str) and len(title.strip()) >= self.min_title_length

    def get_stats(self) -> dict:
        return self.stats.copy()

    def reset_stats(self):
        self.stats = self._fresh_stats()


def validate_candidates(candidates: Iterable[TransactionCandidate], strict_mode: bool = False) -> list[TransactionCandidate]:
    """
    Convenience function to filter candidates with a fresh validator.

    Args:
        candidates: Parsed candidates
        strict_mode: Raise on the first invalid candidate instead of skipping it

    Returns:
        Candidates that may be stored
    """
    return TransactionValidator(strict_mode=strict_mode).validate_candidates(candidates)
