"""
Wallet Error Taxonomy

Every failure the wallet core reports to its caller. Adapters map these to
user-visible responses; nothing here is swallowed inside the core.
"""

from decimal import Decimal
from typing import Any, Dict, Optional


class WalletError(Exception):
    """Base exception for all wallet errors"""
    
    code = "wallet_error"
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)
    
    def to_dict(self) -> Dict[str, Any]:
        """Serializable form for API responses"""
        return {"error": self.code, "message": self.message, **self.details}


class InvalidAmount(WalletError, ValueError):
    """Amount is zero, negative, or not a valid monetary value"""
    
    code = "invalid_amount"
    
    def __init__(self, message: str = "Amount must be a positive monetary value", value: Any = None) -> None:
        details = {}
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, details)


class InsufficientFunds(WalletError):
    """Debit would overdraw the wallet"""
    
    code = "insufficient_funds"
    
    def __init__(self, requested: Decimal, available: Decimal) -> None:
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient funds: available {available}, requested {requested}",
            {"requested": str(requested), "available": str(available)}
        )


class StoreUnavailable(WalletError):
    """Ledger store failed to complete a read or append"""
    
    code = "store_unavailable"
