"""
Configuration for the Personal Finance Tracker.
Every setting can be overridden with an environment variable of the same name.
"""

import os
from decimal import Decimal
from pathlib import Path
from typing import Optional


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


class Config:
    """Settings shared by the CLI, the storage API and the import pipeline."""

    APP_NAME = "Personal Finance Tracker"
    VERSION = "1.0.0"

    # Storage service
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "5000"))
    API_URL: str = os.getenv("API_URL", "http://localhost:5000")
    REQUEST_TIMEOUT: float = float(os.getenv("REQUEST_TIMEOUT", "10"))

    # Imports
    ALLOWED_FILE_TYPES: tuple[str, ...] = (".csv", ".json")
    MAX_FILE_SIZE_MB: int = int(os.getenv("MAX_FILE_SIZE_MB", "10"))
    STRICT_MODE: bool = _env_flag("STRICT_MODE")
    MAX_TRANSACTION_AMOUNT: Decimal = Decimal(os.getenv("MAX_TRANSACTION_AMOUNT", "1000000000"))

    # Client-local state and generated files
    SETTINGS_PATH: Path = Path(os.getenv("SETTINGS_PATH", "./finance_settings.json"))
    DEFAULT_MONTHLY_BUDGET: Decimal = Decimal(os.getenv("DEFAULT_MONTHLY_BUDGET", "20000"))
    OUTPUT_DIR: Path = Path(os.getenv("OUTPUT_DIR", "./output"))
    LOG_DIR: Path = Path(os.getenv("LOG_DIR", "./logs"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    LOG_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"

    @classmethod
    def max_file_size_bytes(cls) -> int:
        return cls.MAX_FILE_SIZE_MB * 1024 * 1024

    @classmethod
    def log_path(cls, filename: str) -> Path:
        """Path of a log file inside LOG_DIR, creating the directory."""
        cls.LOG_DIR.mkdir(parents=True, exist_ok=True)
        return cls.LOG_DIR / filename

    @classmethod
    def is_allowed_file_type(cls, filename: str) -> bool:
        return Path(filename).suffix.lower() in cls.ALLOWED_FILE_TYPES

    @classmethod
    def check_import_file(cls, filename: str, file_size: int) -> Optional[str]:
        """
        Pre-flight check for an import file.

        Returns:
            Reason the file cannot be imported, or None if it may be read
        """
        if not cls.is_allowed_file_type(filename):
            return f"Unsupported file format. Allowed types: {', '.join(cls.ALLOWED_FILE_TYPES)}"
        if file_size == 0:
            return "File is empty"
        if file_size > cls.max_file_size_bytes():
            return f"File too large ({file_size / (1024 * 1024):.2f} MB). Maximum: {cls.MAX_FILE_SIZE_MB} MB"
        return None


config = Config()
