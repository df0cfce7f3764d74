"""
In-memory document store backing the REST service.
Documents follow the storage contract: ``text``, signed ``amount``, ``type``,
``category`` and ``date``, plus a generated ``_id``.
"""

import logging
import threading
import uuid
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..models import DEFAULT_CATEGORY, TransactionType, to_decimal
from .exceptions import StorageValidationError, TransactionNotFoundError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("text", "amount", "type")


class InMemoryTransactionStore:
    """Thread-safe dictionary of transaction documents."""

    def __init__(self):
        self._documents: dict[str, dict] = {}
        self._lock = threading.Lock()

    def create(self, payload: Mapping[str, Any]) -> dict:
        """
        Validate and store a new document.

        Raises:
            StorageValidationError: If a required field is missing or invalid
        """
        document = self._build_document(payload)
        with self._lock:
            self._documents[document["_id"]] = document
        logger.info(f"Stored transaction {document['_id']}: {document['text'][:30]} {document['amount']}")
        return dict(document)

    def list(self) -> list[dict]:
        """All documents, newest date first."""
        with self._lock:
            documents = [dict(doc) for doc in self._documents.values()]
        return sorted(documents, key=lambda doc: doc["date"], reverse=True)

    def get(self, transaction_id: str) -> Optional[dict]:
        with self._lock:
            document = self._documents.get(transaction_id)
        return dict(document) if document else None

    def delete(self, transaction_id: str) -> dict:
        """
        Permanently remove a document.

        Raises:
            TransactionNotFoundError: If the id does not exist
        """
        with self._lock:
            document = self._documents.pop(transaction_id, None)
        if document is None:
            raise TransactionNotFoundError(f"Transaction {transaction_id} not found")
        logger.info(f"Deleted transaction {transaction_id}")
        return document

    def __len__(self) -> int:
        with self._lock:
            return len(self._documents)

    @staticmethod
    def _build_document(payload: Mapping[str, Any]) -> dict:
        missing = [name for name in REQUIRED_FIELDS if payload.get(name) in (None, "")]
        if missing:
            raise StorageValidationError(f"Missing required field(s): {', '.join(missing)}")

        txn_type = payload["type"]
        if txn_type not in TransactionType.values():
            raise StorageValidationError(f"`{txn_type}` is not a valid value for field `type`")

        try:
            amount: Decimal = to_decimal(payload["amount"])
        except ValueError as e:
            raise StorageValidationError(str(e)) from e

        raw_date = payload.get("date")
        if raw_date is None:
            record_date = date.today()
        elif isinstance(raw_date, date):
            record_date = raw_date
        else:
            try:
                record_date = date.fromisoformat(str(raw_date)[:10])
            except ValueError as e:
                raise StorageValidationError(f"Invalid date: {raw_date!r}") from e

        return {
            "_id": uuid.uuid4().hex,
            "text": str(payload["text"]),
            "amount": amount,
            "type": txn_type,
            "category": payload.get("category") or DEFAULT_CATEGORY,
            "date": record_date,
        }
