"""Shared fixtures.

The storage client is wired to the FastAPI app through Starlette's TestClient,
so client and service are exercised together without opening a socket.
"""

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from finance_tracker.api.main import create_app
from finance_tracker.config import Config
from finance_tracker.models import Transaction, TransactionType
from finance_tracker.storage.client import StorageClient
from finance_tracker.storage.memory import InMemoryTransactionStore


@pytest.fixture(autouse=True)
def _isolate_paths(tmp_path, monkeypatch):
    """Keep settings, exports and logs inside the test's temporary directory."""
    monkeypatch.setattr(Config, "SETTINGS_PATH", tmp_path / "settings.json")
    monkeypatch.setattr(Config, "OUTPUT_DIR", tmp_path / "output")
    monkeypatch.setattr(Config, "LOG_DIR", tmp_path / "logs")


@pytest.fixture
def store():
    return InMemoryTransactionStore()


@pytest.fixture
def api_client(store):
    return TestClient(create_app(store))


@pytest.fixture
def storage(api_client):
    return StorageClient(base_url="", session=api_client)


@pytest.fixture
def make_tx():
    """Factory for stored records: make_tx("expense", "500", category="Food", on=date(...))."""
    counter = iter(range(1, 10_000))

    def _make(type_, amount, title=None, category="General", on=date(2025, 11, 5)):
        n = next(counter)
        return Transaction(
            id=f"t{n}",
            title=title or f"Transaction {n}",
            amount=Decimal(amount),
            type=TransactionType(type_),
            category=category,
            date=on,
        )

    return _make
