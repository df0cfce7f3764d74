from decimal import Decimal

import pytest
import requests

from finance_tracker.models import TransactionCandidate, TransactionType
from finance_tracker.storage import (
    StorageClient,
    StorageUnavailableError,
    StorageValidationError,
    TransactionNotFoundError,
)


def _candidate(title="Starbucks", amount="500", type_="expense", on="2025-11-05"):
    return TransactionCandidate(title=title, amount=Decimal(amount), type=type_, category="Other", date=on)


class _Response:
    def __init__(self, status_code, body=None):
        self.status_code = status_code
        self._body = body
        self.text = ""

    def json(self):
        if self._body is None:
            raise ValueError("no body")
        return self._body


class _Session:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error

    def request(self, method, url, **kwargs):
        if self.error:
            raise self.error
        return self.response


def test_create_stores_signed_amount(storage, store):
    tx = storage.create(_candidate())
    assert tx.title == "Starbucks"
    assert tx.amount == Decimal("500")
    assert tx.type is TransactionType.EXPENSE
    assert tx.date_key == "2025-11-05"

    [doc] = store.list()
    assert doc["amount"] == Decimal("-500")
    assert doc["text"] == "Starbucks"


def test_list_returns_records(storage):
    storage.create(_candidate(title="Old", on="2025-10-01"))
    storage.create(_candidate(title="Salary", type_="income", amount="1000.25", on="2025-11-01"))
    records = storage.list()
    assert [tx.title for tx in records] == ["Salary", "Old"]
    assert records[0].amount == Decimal("1000.25")


def test_create_rejected_by_service(storage):
    with pytest.raises(StorageValidationError):
        storage.create(_candidate(on="99/99/2025"))


def test_create_many_keeps_going_after_failure(storage, store):
    result = storage.create_many([
        _candidate(title="A"),
        _candidate(title="B", on="not a date"),
        _candidate(title="C"),
    ])
    assert result.succeeded == 2
    assert result.failed == 1
    assert result.failures[0][0].title == "B"
    assert len(store) == 2


def test_delete_missing_is_not_found(storage):
    tx = storage.create(_candidate())
    storage.delete(tx.id)
    with pytest.raises(TransactionNotFoundError) as excinfo:
        storage.delete(tx.id)
    assert not isinstance(excinfo.value, StorageUnavailableError)


def test_unreachable_service():
    client = StorageClient(base_url="http://storage", session=_Session(error=requests.ConnectionError("refused")))
    with pytest.raises(StorageUnavailableError):
        client.list()


def test_server_error_is_unavailable():
    client = StorageClient(base_url="http://storage", session=_Session(response=_Response(500)))
    with pytest.raises(StorageUnavailableError):
        client.create(_candidate())
    with pytest.raises(StorageUnavailableError):
        client.delete("abc")


def test_precise_amount_survives_the_service(storage, store):
    storage.create(_candidate(title="Dust", amount="0.1234567890123456789"))
    [doc] = store.list()
    assert doc["amount"] == Decimal("-0.1234567890123456789")
    [tx] = storage.list()
    assert tx.amount == Decimal("0.1234567890123456789")
