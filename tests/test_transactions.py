"""
Test suite for the transaction model

Tests immutability, signed effects and serialization of ledger records.
"""

import dataclasses
import pytest
from decimal import Decimal
from datetime import datetime, timezone

from wallet_ledger.errors import InvalidAmount
from wallet_ledger.transactions import Transaction, TransactionCandidate, TransactionKind


NOW = datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc)


class TestTransaction:
    """Test stored transactions"""

    def test_credit_signed_amount(self):
        transaction = Transaction(id=1, amount=Decimal('25.00'), kind=TransactionKind.CREDIT, timestamp=NOW)

        assert transaction.is_credit
        assert not transaction.is_debit
        assert transaction.signed_amount == Decimal('25.00')

    def test_debit_signed_amount(self):
        transaction = Transaction(id=2, amount=Decimal('25.00'), kind=TransactionKind.DEBIT, timestamp=NOW)

        assert transaction.is_debit
        assert transaction.signed_amount == Decimal('-25.00')

    def test_transactions_are_immutable(self):
        transaction = Transaction(id=1, amount=Decimal('1.00'), kind=TransactionKind.CREDIT, timestamp=NOW)

        with pytest.raises(dataclasses.FrozenInstanceError):
            transaction.amount = Decimal('1000.00')

    @pytest.mark.parametrize("amount", [Decimal('0'), Decimal('-1'), Decimal('NaN'), 10, 1.5])
    def test_invalid_amounts_rejected(self, amount):
        with pytest.raises(InvalidAmount):
            Transaction(id=1, amount=amount, kind=TransactionKind.CREDIT, timestamp=NOW)

    def test_to_dict(self):
        transaction = Transaction(id=7, amount=Decimal('0.10'), kind=TransactionKind.DEBIT, timestamp=NOW)

        assert transaction.to_dict() == {
            'id': 7,
            'amount': '0.10',
            'kind': 'debit',
            'timestamp': '2024-03-01T12:30:00+00:00'
        }

    def test_from_dict(self):
        transaction = Transaction.from_dict({
            'id': '3',
            'amount': '99.99',
            'kind': 'credit',
            'timestamp': '2024-03-01T12:30:00+00:00'
        })

        assert transaction.id == 3
        assert transaction.amount == Decimal('99.99')
        assert transaction.kind == TransactionKind.CREDIT
        assert transaction.timestamp == NOW

    def test_from_dict_accepts_datetime_and_decimal(self):
        transaction = Transaction.from_dict({
            'id': 4, 'amount': Decimal('5.00000000'), 'kind': 'debit', 'timestamp': NOW
        })

        assert transaction.amount == Decimal('5')
        assert transaction.timestamp is NOW

    def test_from_dict_unknown_kind(self):
        with pytest.raises(ValueError):
            Transaction.from_dict({'id': 1, 'amount': '1', 'kind': 'refund', 'timestamp': NOW.isoformat()})


class TestTransactionCandidate:
    """Test candidates awaiting an id"""

    def test_to_transaction(self):
        candidate = TransactionCandidate(amount=Decimal('12.00'), kind=TransactionKind.CREDIT, timestamp=NOW)

        transaction = candidate.to_transaction(42)

        assert transaction == Transaction(id=42, amount=Decimal('12.00'), kind=TransactionKind.CREDIT, timestamp=NOW)

    def test_non_positive_candidate_rejected(self):
        with pytest.raises(InvalidAmount):
            TransactionCandidate(amount=Decimal('0'), kind=TransactionKind.DEBIT, timestamp=NOW)
