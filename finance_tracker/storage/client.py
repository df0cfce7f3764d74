"""
HTTP client for the transaction storage service.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

import requests

from ..config import config
from ..models import Transaction, TransactionCandidate
from .exceptions import (
    StorageError,
    StorageUnavailableError,
    StorageValidationError,
    TransactionNotFoundError,
)

logger = logging.getLogger(__name__)

TRANSACTIONS_PATH = "/api/transactions"


@dataclass
class BatchResult:
    """Per-item outcome of a batch of independent create calls."""

    created: list[Transaction] = field(default_factory=list)
    failures: list[tuple[TransactionCandidate, str]] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.created)

    @property
    def failed(self) -> int:
        return len(self.failures)


class StorageClient:
    """
    Talks to the REST storage service.

    Any object with requests' Session interface can be passed as ``session``.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        session=None,
        timeout: Optional[float] = None
    ):
        self.base_url = (config.API_URL if base_url is None else base_url).rstrip('/')
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout or config.REQUEST_TIMEOUT

    def _url(self, suffix: str = "") -> str:
        return f"{self.base_url}{TRANSACTIONS_PATH}{suffix}"

    def _request(self, method: str, url: str, **kwargs):
        try:
            return self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise StorageUnavailableError(f"Storage service unreachable: {e}") from e

    @staticmethod
    def _message(response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(body, dict):
            return str(body.get("message") or body.get("detail") or body)
        return str(body)

    def list(self) -> list[Transaction]:
        """
        Fetch all stored transactions, newest first.

        Raises:
            StorageUnavailableError: On connection problems or server errors
        """
        response = self._request("GET", self._url())
        if response.status_code != 200:
            raise StorageUnavailableError(f"Listing failed: {self._message(response)}")

        documents = response.json()
        records = [Transaction.from_storage(doc) for doc in documents]
        logger.info(f"Fetched {len(records)} transactions")
        return records

    def create(self, candidate: TransactionCandidate) -> Transaction:
        """
        Store one candidate.

        Raises:
            StorageValidationError: If the service rejects the record
            StorageUnavailableError: On connection problems or server errors
        """
        response = self._request("POST", self._url(), json=candidate.to_storage_payload())
        if response.status_code in (200, 201):
            return Transaction.from_storage(response.json())
        if 400 <= response.status_code < 500:
            raise StorageValidationError(self._message(response))
        raise StorageUnavailableError(f"Create failed: {self._message(response)}")

    def create_many(self, candidates: Iterable[TransactionCandidate]) -> BatchResult:
        """
        Store candidates one by one. A failed item does not stop the others
        and nothing already stored is rolled back.
        """
        result = BatchResult()
        for candidate in candidates:
            try:
                result.created.append(self.create(candidate))
            except StorageError as e:
                logger.warning(f"Failed to store '{candidate.title}': {e}")
                result.failures.append((candidate, str(e)))

        logger.info(f"Batch store: {result.succeeded} stored, {result.failed} failed")
        return result

    def delete(self, transaction_id: str) -> None:
        """
        Permanently delete a transaction.

        Raises:
            TransactionNotFoundError: If the id does not exist
            StorageUnavailableError: On connection problems or server errors
        """
        response = self._request("DELETE", self._url(f"/{transaction_id}"))
        if response.status_code == 404:
            raise TransactionNotFoundError(self._message(response))
        if response.status_code != 200:
            raise StorageUnavailableError(f"Delete failed: {self._message(response)}")
        logger.info(f"Deleted transaction {transaction_id}")
