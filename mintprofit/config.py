"""
Configuration management for the mint and resale profit tracker.

This module handles all configuration loading from environment variables
and provides type-safe access to configuration values throughout the application.
Address lists and the collection map live in the Registry, not here.
"""

import os
from decimal import Decimal, InvalidOperation
from typing import Optional
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()


def _parse_fixed_prices(raw: str) -> dict[str, Decimal]:
    """
    Parse a "denom=price,denom=price" string into a price table.

    Raises:
        ValueError: If an entry is not of the form denom=price
    """
    prices: dict[str, Decimal] = {}
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        denom, sep, price = entry.partition("=")
        if not sep or not denom.strip():
            raise ValueError(f"Invalid fixed price entry: {entry!r}")
        try:
            prices[denom.strip()] = Decimal(price.strip())
        except InvalidOperation:
            raise ValueError(f"Invalid fixed price entry: {entry!r}") from None
    return prices


class Config:
    """
    Centralized configuration class for the profit tracker.

    All configuration values are loaded from environment variables with
    sensible defaults where appropriate.
    """

    # Transaction history endpoint (Terra FCD)
    FCD_URL: str = os.getenv("FCD_URL", "https://fcd.terra.dev")
    PAGE_SIZE: int = int(os.getenv("PAGE_SIZE", "100"))
    PAGE_DELAY_SECONDS: float = float(os.getenv("PAGE_DELAY_SECONDS", "0.7"))
    MAX_CONCURRENT_LOADS: int = int(os.getenv("MAX_CONCURRENT_LOADS", "4"))

    # Request Timeouts (seconds)
    API_TIMEOUT: int = int(os.getenv("API_TIMEOUT", "30"))

    # Transaction cache
    TX_CACHE_FILE: Path = Path(os.getenv("TX_CACHE_FILE", "data/all-transactions.json"))

    # Optional registry override (JSON); the built-in registry is used otherwise
    REGISTRY_FILE: Optional[Path] = Path(os.getenv("REGISTRY_FILE")) if os.getenv("REGISTRY_FILE") else None

    # Price oracle
    PRICE_ORACLE: str = os.getenv("PRICE_ORACLE", "coingecko")
    COINGECKO_API_URL: str = os.getenv("COINGECKO_API_URL", "https://api.coingecko.com/api/v3")
    FIXED_PRICES: str = os.getenv("FIXED_PRICES", "uluna=100")

    # Report Configuration
    REPORT_OUTPUT_DIR: Path = Path(os.getenv("REPORT_OUTPUT_DIR", "reports"))

    # Scheduler Configuration
    SCAN_INTERVAL_HOURS: int = int(os.getenv("SCAN_INTERVAL_HOURS", "24"))
    REPORT_TIMEZONE: str = os.getenv("REPORT_TIMEZONE", "UTC")

    # Logging Configuration
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: Optional[Path] = Path(os.getenv("LOG_FILE", "logs/tracker.log")) if os.getenv("LOG_FILE") else None

    @classmethod
    def fixed_prices(cls) -> dict[str, Decimal]:
        """Price table for the fixed price oracle."""
        return _parse_fixed_prices(cls.FIXED_PRICES)

    @classmethod
    def validate(cls) -> tuple[bool, list[str]]:
        """
        Validate configuration values.

        Returns:
            tuple: (is_valid, list_of_errors)
        """
        errors: list[str] = []

        if not cls.FCD_URL:
            errors.append("FCD_URL is required but not set")

        if cls.PAGE_SIZE < 1:
            errors.append("PAGE_SIZE must be at least 1")

        if cls.PAGE_DELAY_SECONDS < 0:
            errors.append("PAGE_DELAY_SECONDS cannot be negative")

        if cls.MAX_CONCURRENT_LOADS < 1:
            errors.append("MAX_CONCURRENT_LOADS must be at least 1")

        if cls.PRICE_ORACLE not in ("coingecko", "fixed"):
            errors.append("PRICE_ORACLE must be 'coingecko' or 'fixed'")

        if cls.PRICE_ORACLE == "fixed":
            try:
                cls.fixed_prices()
            except ValueError as e:
                errors.append(f"FIXED_PRICES is malformed: {e}")

        if cls.REGISTRY_FILE and not cls.REGISTRY_FILE.exists():
            errors.append(f"REGISTRY_FILE does not exist: {cls.REGISTRY_FILE}")

        if cls.SCAN_INTERVAL_HOURS < 1:
            errors.append("SCAN_INTERVAL_HOURS must be at least 1")

        return (len(errors) == 0, errors)

    @classmethod
    def ensure_directories(cls) -> None:
        """
        Ensure all required directories exist.

        Creates directories for the transaction cache, reports, and logs if they don't exist.
        """
        cls.TX_CACHE_FILE.parent.mkdir(parents=True, exist_ok=True)
        cls.REPORT_OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
        if cls.LOG_FILE:
            cls.LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
