"""
Wallet Ledger

A single-wallet ledger with an append-only transaction history, balances
derived from that history using Decimal arithmetic, and serialized debits
that can never overdraw the wallet.
"""

__version__ = "1.0.0"
