"""Application configuration."""

from __future__ import annotations

from dataclasses import dataclass

from dealership_manager.version import __app_name__, __company__

APP_NAME = __app_name__
APP_DATA_DIRNAME = "DealershipManager"
DB_FILENAME = "dealership_manager.db"
BACKUP_DIRNAME = "backups"
BACKUP_RETENTION_COUNT = 30
LOGS_DIRNAME = "logs"
LOG_FILENAME = "app.log"
LOG_MAX_BYTES = 1_000_000
LOG_BACKUP_COUNT = 3
DOCUMENTS_DIRNAME = "documents"
EXPORTS_DIRNAME = "exports"
CONFIG_FILENAME = "config.json"

DEFAULT_CURRENCY = "LKR"
DEFAULT_TAX_RATE = 0.05
DEFAULT_DOWN_PAYMENT_RATIO = 0.2
DEFAULT_COUNTRY_OF_ORIGIN = "JAPAN"

# Markups applied when an import order becomes a stock vehicle.
MARKET_VALUE_MARKUP = 1.15
SELLING_PRICE_MARKUP = 1.20

MONTHLY_TREND_MONTHS = 6


@dataclass(frozen=True)
class SellerInfo:
    """Seller details printed on invoices."""

    name: str
    contact: str
    nic: str
    address: str


@dataclass(frozen=True)
class BankInfo:
    """Fallback bank printed on leasing invoices without a leasing company."""

    name: str
    branch: str


SELLER = SellerInfo(
    name=__company__,
    contact="067 22 29 174",
    nic="198716101572",
    address="Main Street, Kalmunai",
)

DEFAULT_BANK = BankInfo(
    name="Hatton National Bank (HNB)",
    branch="Kalawanchikudy",
)


@dataclass(frozen=True)
class AppConfig:
    """Static configuration values for DealershipManager."""

    app_name: str = APP_NAME
    organization_name: str = __company__
    default_currency: str = DEFAULT_CURRENCY
