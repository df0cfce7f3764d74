from decimal import Decimal

import pytest

from finance_tracker.config import Config
from finance_tracker.models import TransactionCandidate
from finance_tracker.validators import TransactionValidator, ValidationError, validate_candidates


def _candidate(**overrides):
    fields = dict(title="Lunch", amount=Decimal("120"), type="expense", category="Food", date="2025-11-05")
    fields.update(overrides)
    return TransactionCandidate(**fields)


def test_valid_candidate_passes():
    assert TransactionValidator().validate_candidate(_candidate())


@pytest.mark.parametrize("overrides, stat", [
    ({"amount": Decimal("0")}, "invalid_amount"),
    ({"amount": Decimal("-5")}, "invalid_amount"),
    ({"amount": Decimal("NaN")}, "invalid_amount"),
    ({"title": "   "}, "invalid_title"),
    ({"type": "transfer"}, "invalid_type"),
])
def test_invalid_candidates_are_filtered(overrides, stat):
    validator = TransactionValidator()
    valid = validator.validate_candidates([_candidate(), _candidate(**overrides)])
    assert len(valid) == 1
    stats = validator.get_stats()
    assert stats[stat] == 1
    assert stats["invalid"] == 1
    assert stats["valid"] == 1


def test_strict_mode_raises():
    with pytest.raises(ValidationError):
        validate_candidates([_candidate(type="Income")], strict_mode=True)


def test_reset_stats():
    validator = TransactionValidator()
    validator.validate_candidate(_candidate())
    validator.reset_stats()
    assert validator.get_stats()["total_validated"] == 0


def test_amount_above_maximum_is_filtered():
    validator = TransactionValidator(max_amount=Decimal("1000"))
    valid = validator.validate_candidates([
        _candidate(amount=Decimal("1000")),
        _candidate(amount=Decimal("1E+30")),
    ])
    assert [c.amount for c in valid] == [Decimal("1000")]
    assert validator.get_stats()["amount_too_large"] == 1


def test_default_maximum_comes_from_config(monkeypatch):
    monkeypatch.setattr(Config, "MAX_TRANSACTION_AMOUNT", Decimal("50"))
    validator = TransactionValidator()
    assert not validator.validate_candidate(_candidate(amount=Decimal("120")))
