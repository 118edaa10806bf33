"""
Wallet Service Module

Mediates every change to the ledger and enforces the balance invariant:
the balance is the signed sum of the ledger and a debit may never drive it
below zero. Credits and debits run their check-then-append inside one
mutual-exclusion section so concurrent debits cannot jointly overdraw.
"""

from decimal import Decimal
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional
import threading

from .config import WalletConfig
from .errors import InsufficientFunds, InvalidAmount, StoreUnavailable
from .logging_config import get_logger, log_action
from .money import MAX_AMOUNT_PRECISION, ZERO, exact_arithmetic, to_amount
from .storage import LedgerStore, create_store
from .transactions import Transaction, TransactionCandidate, TransactionKind


def sum_signed_amounts(transactions: Iterable[Transaction]) -> Decimal:
    """Balance derived from a sequence of transactions"""
    with exact_arithmetic():
        return sum((t.signed_amount for t in transactions), ZERO)


class WalletService:
    """
    Single-wallet service over a ledger store

    Balances are derived from the ledger; with ``cache_balance`` enabled a
    running total is kept alongside it and updated in the same critical
    section as each append.
    """

    def __init__(
        self,
        store: LedgerStore,
        precision: int = 2,
        max_amount: Optional[Decimal] = None,
        cache_balance: bool = False
    ):
        if not 0 <= precision <= MAX_AMOUNT_PRECISION:
            raise ValueError(f"Amount precision must be between 0 and {MAX_AMOUNT_PRECISION}")

        self.store = store
        self.precision = precision
        self.max_amount = max_amount
        self.cache_balance = cache_balance
        self.logger = get_logger("wallet_ledger.wallet")

        self._lock = threading.Lock()
        self._cached_balance: Optional[Decimal] = None

    @classmethod
    def from_config(cls, config: WalletConfig) -> 'WalletService':
        """Build a service and its store from configuration"""
        return cls(
            store=create_store(config.database_url),
            precision=config.amount_precision,
            max_amount=config.get_max_amount(),
            cache_balance=config.cache_balance
        )

    def get_balance(self) -> Decimal:
        """
        Current balance

        Returns:
            Signed sum of all ledger transactions (zero for an empty wallet)

        Raises:
            StoreUnavailable: If the ledger cannot be read
        """
        if self.cache_balance:
            with self._lock:
                return self._current_balance()
        return sum_signed_amounts(self.store.list_all())

    def get_history(self) -> List[Transaction]:
        """All transactions in acceptance order"""
        return self.store.list_all()

    def credit(self, amount: Any) -> Transaction:
        """
        Add funds to the wallet

        Args:
            amount: Positive amount as Decimal, int or numeric string

        Returns:
            The recorded credit transaction

        Raises:
            InvalidAmount: If amount is not a positive monetary value
            StoreUnavailable: If the ledger cannot record the transaction
        """
        value = self._validate(amount, TransactionKind.CREDIT)

        with self._lock:
            balance = self._current_balance() if self.cache_balance else None
            transaction = self._append(value, TransactionKind.CREDIT)
            if balance is not None:
                with exact_arithmetic():
                    self._cached_balance = balance + value

        self._log_accepted(transaction)
        return transaction

    def debit(self, amount: Any) -> Transaction:
        """
        Withdraw funds from the wallet

        The sufficiency check and the append happen inside the wallet's
        critical section, so the balance checked is the balance the debit
        is applied to.

        Args:
            amount: Positive amount as Decimal, int or numeric string

        Returns:
            The recorded debit transaction

        Raises:
            InvalidAmount: If amount is not a positive monetary value
            InsufficientFunds: If amount exceeds the current balance
            StoreUnavailable: If the ledger cannot be read or written
        """
        value = self._validate(amount, TransactionKind.DEBIT)

        with self._lock:
            balance = self._current_balance()
            if balance < value:
                log_action(
                    self.logger, "warning",
                    f"Debit rejected: available {balance}, requested {value}",
                    action="debit_rejected", resource="wallet",
                    extra={"requested": str(value), "available": str(balance)}
                )
                raise InsufficientFunds(requested=value, available=balance)

            transaction = self._append(value, TransactionKind.DEBIT)
            if self.cache_balance:
                with exact_arithmetic():
                    self._cached_balance = balance - value

        self._log_accepted(transaction)
        return transaction

    def _validate(self, amount: Any, kind: TransactionKind) -> Decimal:
        try:
            return to_amount(amount, precision=self.precision, max_amount=self.max_amount)
        except InvalidAmount as e:
            log_action(
                self.logger, "warning", f"{kind.value.capitalize()} rejected: {e.message}",
                action=f"{kind.value}_rejected", resource="wallet",
                extra={"amount": str(amount)}
            )
            raise

    def _current_balance(self) -> Decimal:
        # Caller holds self._lock
        if not self.cache_balance:
            return sum_signed_amounts(self.store.list_all())
        if self._cached_balance is None:
            self._cached_balance = sum_signed_amounts(self.store.list_all())
        return self._cached_balance

    def _append(self, amount: Decimal, kind: TransactionKind) -> Transaction:
        # Caller holds self._lock
        candidate = TransactionCandidate(
            amount=amount,
            kind=kind,
            timestamp=datetime.now(timezone.utc)
        )
        try:
            return self.store.append(candidate)
        except StoreUnavailable:
            # Resynchronize the cached balance from the ledger on next use
            self._cached_balance = None
            raise

    def _log_accepted(self, transaction: Transaction) -> None:
        log_action(
            self.logger, "info", f"{transaction.kind.value.capitalize()} accepted",
            action=transaction.kind.value, resource=f"transaction:{transaction.id}",
            extra={
                "transaction_id": transaction.id,
                "amount": str(transaction.amount),
                "kind": transaction.kind.value
            }
        )
