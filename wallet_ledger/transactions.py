"""
Transaction Model

Immutable wallet transactions. A Transaction is a fact: once the store has
assigned it an id it is never mutated or deleted. Amounts are always
positive; the direction of the balance effect comes from the kind.
"""

from decimal import Decimal
from datetime import datetime
from dataclasses import dataclass
from typing import Any, Dict
from enum import Enum

from .errors import InvalidAmount
from .money import ZERO


class TransactionKind(Enum):
    """Direction of a transaction's effect on the balance"""
    CREDIT = "credit"  # Increases balance
    DEBIT = "debit"    # Decreases balance


def _validate_amount(amount: Decimal) -> None:
    if not isinstance(amount, Decimal) or not amount.is_finite() or amount <= ZERO:
        raise InvalidAmount("Transaction amount must be a positive Decimal", amount)


@dataclass(frozen=True)
class TransactionCandidate:
    """
    A transaction accepted by the wallet but not yet stored
    
    The store turns a candidate into a Transaction by assigning its id.
    """
    amount: Decimal
    kind: TransactionKind
    timestamp: datetime
    
    def __post_init__(self):
        _validate_amount(self.amount)
    
    def to_transaction(self, transaction_id: int) -> 'Transaction':
        """Materialize the stored record"""
        return Transaction(
            id=transaction_id,
            amount=self.amount,
            kind=self.kind,
            timestamp=self.timestamp
        )


@dataclass(frozen=True)
class Transaction:
    """Stored wallet transaction"""
    id: int
    amount: Decimal
    kind: TransactionKind
    timestamp: datetime
    
    def __post_init__(self):
        _validate_amount(self.amount)
    
    @property
    def is_credit(self) -> bool:
        return self.kind == TransactionKind.CREDIT
    
    @property
    def is_debit(self) -> bool:
        return self.kind == TransactionKind.DEBIT
    
    @property
    def signed_amount(self) -> Decimal:
        """Effect on balance: +amount for credits, -amount for debits"""
        if self.is_credit:
            return self.amount
        return -self.amount
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage and API responses"""
        return {
            'id': self.id,
            'amount': str(self.amount),
            'kind': self.kind.value,
            'timestamp': self.timestamp.isoformat()
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Transaction':
        """Create instance from dictionary"""
        timestamp = data['timestamp']
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)

        return cls(
            id=int(data['id']),
            amount=Decimal(str(data['amount'])),
            kind=TransactionKind(data['kind']),
            timestamp=timestamp
        )
