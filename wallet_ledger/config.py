"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from decimal import Decimal
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings

from .money import MAX_AMOUNT_PRECISION


class WalletConfig(BaseSettings):
    """Wallet ledger configuration"""

    # Database configuration
    database_url: str = "sqlite:///wallet.db"  # memory://, sqlite:///path, postgresql://...

    # Business rules configuration
    amount_precision: int = Field(default=2, ge=0, le=MAX_AMOUNT_PRECISION)  # Fractional digits kept on every amount
    max_transaction_amount: str = ""  # Empty = no per-transaction ceiling
    cache_balance: bool = False  # Keep a running balance instead of re-summing history

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8090

    class Config:
        env_prefix = "WALLET_"
        env_file = ".env"
        case_sensitive = False

    def get_max_amount(self) -> Optional[Decimal]:
        """Per-transaction ceiling as a Decimal, or None when unset"""
        if not self.max_transaction_amount.strip():
            return None
        return Decimal(self.max_transaction_amount.strip())


# Global configuration instance
config = WalletConfig()


def get_config() -> WalletConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> WalletConfig:
    """Reload configuration from environment"""
    global config
    config = WalletConfig()
    return config
