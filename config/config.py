"""
Configuration classes for the point-of-sale core.
Defines business settings and engine tunables in a type-safe, extensible way.
"""

import logging
from dataclasses import dataclass, field

from models.enums import CurrencyPosition, ThousandsSeparator
from utils.env import load_project_dotenv, read_env

logger = logging.getLogger(__name__)

PRESET_WINDOWS = (1, 3, 7, 14, 30)


@dataclass
class BusinessSettings:
    store_name: str = "Coffee Shop"
    address: str = "Jl. Utama No. 123"
    tax_rate: float = 11.0  # Percent
    currency: str = "IDR"
    currency_position: CurrencyPosition = CurrencyPosition.BEFORE
    decimal_places: int = 0
    thousands_separator: ThousandsSeparator = ThousandsSeparator.COMMA
    receipt_footer: str = "Thank you for your visit!"

    def __post_init__(self):
        if self.tax_rate < 0:
            raise ValueError(f"tax_rate must not be negative, got {self.tax_rate}")
        if self.decimal_places not in (0, 2):
            raise ValueError(f"decimal_places must be 0 or 2, got {self.decimal_places}")


@dataclass
class BestSellerConfig:
    window_days: int = 3
    top_n: int = 5
    min_sales: int = 1
    banner_size: int = 3
    preset_windows: list[int] = field(default_factory=lambda: list(PRESET_WINDOWS))

    def __post_init__(self):
        if self.window_days <= 0:
            raise ValueError(f"window_days must be positive, got {self.window_days}")
        if self.window_days not in self.preset_windows:
            # Still valid for the engine, the UI just has no button for it
            logger.debug(f"Best-seller window {self.window_days} is not a preset")


@dataclass
class CartConfig:
    manual_cost_ratio: float = 0.7  # Estimated cost share for ad-hoc items


@dataclass
class LedgerConfig:
    max_orders: int = 1000


def load_settings_from_env() -> tuple[BusinessSettings, BestSellerConfig]:
    """
    Build settings from `POS_*` environment variables, falling back to defaults.
    Loads the project-level `.env` first so values defined there are visible.
    """
    if load_project_dotenv():
        logger.info("Loaded settings overrides from project .env")
    defaults = BusinessSettings()
    settings = BusinessSettings(
        store_name=read_env("POS_STORE_NAME", str, defaults.store_name),
        address=read_env("POS_ADDRESS", str, defaults.address),
        tax_rate=read_env("POS_TAX_RATE", float, defaults.tax_rate),
        currency=read_env("POS_CURRENCY", str.upper, defaults.currency),
        receipt_footer=read_env("POS_RECEIPT_FOOTER", str, defaults.receipt_footer),
    )
    best_seller_defaults = BestSellerConfig()
    best_seller = BestSellerConfig(
        window_days=read_env(
            "POS_BEST_SELLER_WINDOW", int, best_seller_defaults.window_days
        ),
        top_n=read_env("POS_BEST_SELLER_TOP_N", int, best_seller_defaults.top_n),
    )
    return settings, best_seller


# Example usage:
# settings, best_seller = load_settings_from_env()
# session = TillSession(store, settings=settings, best_seller=best_seller)
