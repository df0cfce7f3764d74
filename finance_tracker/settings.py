"""
Client Settings Module
Client-local preferences kept outside the record store: the monthly budget
limit and the last month the rollover offer was acknowledged.
"""

import json
import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from pathlib import Path
from typing import Optional, Union

from .config import config
from .models import to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientSettings:
    """Persisted client-local scalars."""

    monthly_budget: Decimal = config.DEFAULT_MONTHLY_BUDGET
    last_seen_month: Optional[str] = None  # YYYY-MM

    def with_budget(self, amount: Decimal) -> "ClientSettings":
        return replace(self, monthly_budget=amount)

    def with_last_seen_month(self, month: str) -> "ClientSettings":
        return replace(self, last_seen_month=month)

    def to_dict(self) -> dict:
        return {
            "monthly_budget": str(self.monthly_budget),
            "last_seen_month": self.last_seen_month,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ClientSettings":
        budget = data.get("monthly_budget")
        return cls(
            monthly_budget=to_decimal(budget) if budget is not None else config.DEFAULT_MONTHLY_BUDGET,
            last_seen_month=data.get("last_seen_month"),
        )


class SettingsStore:
    """Persistence collaborator for ClientSettings."""

    def load(self) -> ClientSettings:
        raise NotImplementedError

    def save(self, settings: ClientSettings) -> None:
        raise NotImplementedError


class InMemorySettingsStore(SettingsStore):
    """Keeps settings for the lifetime of the process."""

    def __init__(self, settings: Optional[ClientSettings] = None):
        self._settings = settings or ClientSettings()

    def load(self) -> ClientSettings:
        return self._settings

    def save(self, settings: ClientSettings) -> None:
        self._settings = settings


class JsonFileSettingsStore(SettingsStore):
    """Stores settings as a small JSON file."""

    def __init__(self, path: Union[str, Path, None] = None):
        self.path = Path(path) if path is not None else config.SETTINGS_PATH

    def load(self) -> ClientSettings:
        """
        Read settings from disk.

        A missing or unreadable file yields defaults so a fresh client still works.
        """
        if not self.path.exists():
            return ClientSettings()

        try:
            data = json.loads(self.path.read_text(encoding='utf-8'))
            return ClientSettings.from_dict(data)
        except (OSError, ValueError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable settings file {self.path}: {e}")
            return ClientSettings()

    def save(self, settings: ClientSettings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(settings.to_dict(), indent=2), encoding='utf-8')
        logger.debug(f"Settings saved to {self.path}")
