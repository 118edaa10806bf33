"""
Ledger Store Module

Provides the abstract append-only ledger interface and implementations for
in-memory (testing), SQLite (persistence) and PostgreSQL (production).
All monetary values are stored as Decimal strings or NUMERIC, never floats.
"""

from abc import ABC, abstractmethod
from typing import List, Union
import sqlite3
import threading
from pathlib import Path

from .errors import StoreUnavailable
from .logging_config import get_logger, log_action
from .money import MAX_AMOUNT_PRECISION
from .transactions import Transaction, TransactionCandidate


TABLE_NAME = "ledger_transactions"

logger = get_logger("wallet_ledger.storage")


class LedgerStore(ABC):
    """Abstract interface for ledger backends"""

    @abstractmethod
    def append(self, candidate: TransactionCandidate) -> Transaction:
        """
        Assign an id to the candidate and store it atomically

        Raises:
            StoreUnavailable: If the backend cannot complete the write
        """
        pass

    @abstractmethod
    def list_all(self) -> List[Transaction]:
        """All transactions in insertion order, as one consistent snapshot"""
        pass

    @abstractmethod
    def count(self) -> int:
        """Count stored transactions"""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the backend; later calls raise StoreUnavailable"""
        pass


class InMemoryLedgerStore(LedgerStore):
    """In-memory ledger for testing and single-process use"""

    def __init__(self):
        self._records: List[Transaction] = []
        self._next_id = 1
        self._lock = threading.RLock()
        self._closed = False

    def _check_open(self) -> None:
        if self._closed:
            raise StoreUnavailable("In-memory ledger store is closed")

    def append(self, candidate: TransactionCandidate) -> Transaction:
        """Store a transaction in memory"""
        with self._lock:
            self._check_open()
            transaction = candidate.to_transaction(self._next_id)
            self._records.append(transaction)
            self._next_id += 1
            return transaction

    def list_all(self) -> List[Transaction]:
        """Snapshot of all transactions"""
        with self._lock:
            self._check_open()
            # Transactions are frozen, a shallow copy is a full snapshot
            return list(self._records)

    def count(self) -> int:
        with self._lock:
            self._check_open()
            return len(self._records)

    def close(self) -> None:
        """Close storage (no data is released)"""
        with self._lock:
            self._closed = True


class SQLiteLedgerStore(LedgerStore):
    """SQLite ledger implementation for persistence"""

    def __init__(self, db_path: Union[str, Path] = ":memory:"):
        self.db_path = str(db_path)
        self._lock = threading.RLock()
        try:
            self._connection = sqlite3.connect(self.db_path, check_same_thread=False)
            self._connection.row_factory = sqlite3.Row

            # Enable WAL mode for better concurrent access
            if self.db_path != ":memory:":
                self._connection.execute("PRAGMA journal_mode = WAL")
                self._connection.execute("PRAGMA synchronous = NORMAL")
            self._ensure_table()
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Cannot open SQLite ledger at {self.db_path}: {e}") from e

    def _ensure_table(self) -> None:
        """Ensure table exists with proper schema"""
        with self._connection:
            # AUTOINCREMENT guarantees ids are never reused
            self._connection.execute(f"""
                CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    amount TEXT NOT NULL,
                    kind TEXT NOT NULL CHECK (kind IN ('credit', 'debit')),
                    timestamp TEXT NOT NULL
                )
            """)

    def _require_connection(self) -> sqlite3.Connection:
        if self._connection is None:
            raise StoreUnavailable(f"SQLite ledger at {self.db_path} is closed")
        return self._connection

    def append(self, candidate: TransactionCandidate) -> Transaction:
        """Insert a transaction; the row is committed or rolled back as a unit"""
        with self._lock:
            connection = self._require_connection()
            try:
                with connection:
                    cursor = connection.execute(f"""
                        INSERT INTO {TABLE_NAME} (amount, kind, timestamp)
                        VALUES (?, ?, ?)
                    """, (str(candidate.amount), candidate.kind.value, candidate.timestamp.isoformat()))
            except sqlite3.Error as e:
                log_action(
                    logger, "error", f"SQLite append failed: {e}",
                    action="append", resource=f"sqlite:{self.db_path}"
                )
                raise StoreUnavailable(f"SQLite ledger append failed: {e}") from e

            return candidate.to_transaction(cursor.lastrowid)

    def list_all(self) -> List[Transaction]:
        """Load all transactions ordered by id"""
        with self._lock:
            connection = self._require_connection()
            try:
                cursor = connection.execute(f"""
                    SELECT id, amount, kind, timestamp FROM {TABLE_NAME} ORDER BY id
                """)
                rows = cursor.fetchall()
            except sqlite3.Error as e:
                raise StoreUnavailable(f"SQLite ledger read failed: {e}") from e

            return [Transaction.from_dict(dict(row)) for row in rows]

    def count(self) -> int:
        """Count transactions in the ledger"""
        with self._lock:
            connection = self._require_connection()
            try:
                cursor = connection.execute(f"""
                    SELECT COUNT(*) as count FROM {TABLE_NAME}
                """)
                return cursor.fetchone()['count']
            except sqlite3.Error as e:
                raise StoreUnavailable(f"SQLite ledger read failed: {e}") from e

    def close(self) -> None:
        """Close SQLite connection"""
        with self._lock:
            if self._connection:
                self._connection.close()
                self._connection = None


class PostgreSQLLedgerStore(LedgerStore):
    """PostgreSQL ledger backend with ACID commit per append"""

    def __init__(self, connection_string: str):
        try:
            import psycopg2
            import psycopg2.extras
            self.psycopg2 = psycopg2
            self.extras = psycopg2.extras
        except ImportError:
            raise ImportError("psycopg2 is required for PostgreSQL storage. Install with: pip install psycopg2-binary")

        self.connection_string = connection_string
        self._connection = None
        self._lock = threading.RLock()

        try:
            self._connection = self.psycopg2.connect(
                self.connection_string,
                cursor_factory=self.extras.RealDictCursor
            )
            self._connection.autocommit = False  # We handle transactions manually
            self._ensure_table()
        except self.psycopg2.Error as e:
            raise StoreUnavailable(f"Cannot connect to PostgreSQL ledger: {e}") from e

    def _ensure_table(self) -> None:
        """Ensure table exists with proper schema"""
        with self._lock:
            cursor = self._connection.cursor()
            try:
                cursor.execute(f"""
                    CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
                        id BIGSERIAL PRIMARY KEY,
                        amount NUMERIC(38, {MAX_AMOUNT_PRECISION}) NOT NULL CHECK (amount > 0),
                        kind TEXT NOT NULL CHECK (kind IN ('credit', 'debit')),
                        timestamp TIMESTAMPTZ NOT NULL
                    )
                """)
                self._connection.commit()
            finally:
                cursor.close()

    def _require_connection(self):
        if self._connection is None:
            raise StoreUnavailable("PostgreSQL ledger is closed")
        return self._connection

    def append(self, candidate: TransactionCandidate) -> Transaction:
        """Insert a transaction and commit it"""
        with self._lock:
            connection = self._require_connection()
            cursor = connection.cursor()
            try:
                cursor.execute(f"""
                    INSERT INTO {TABLE_NAME} (amount, kind, timestamp)
                    VALUES (%s, %s, %s)
                    RETURNING id
                """, (candidate.amount, candidate.kind.value, candidate.timestamp))
                transaction_id = cursor.fetchone()['id']
                connection.commit()
            except self.psycopg2.Error as e:
                connection.rollback()
                log_action(
                    logger, "error", f"PostgreSQL append failed: {e}",
                    action="append", resource="postgresql"
                )
                raise StoreUnavailable(f"PostgreSQL ledger append failed: {e}") from e
            finally:
                cursor.close()

            return candidate.to_transaction(transaction_id)

    def list_all(self) -> List[Transaction]:
        """Load all transactions ordered by id"""
        with self._lock:
            connection = self._require_connection()
            cursor = connection.cursor()
            try:
                cursor.execute(f"""
                    SELECT id, amount, kind, timestamp FROM {TABLE_NAME} ORDER BY id
                """)
                rows = cursor.fetchall()
                connection.commit()
            except self.psycopg2.Error as e:
                connection.rollback()
                raise StoreUnavailable(f"PostgreSQL ledger read failed: {e}") from e
            finally:
                cursor.close()

            return [Transaction.from_dict(dict(row)) for row in rows]

    def count(self) -> int:
        """Count transactions in the ledger"""
        with self._lock:
            connection = self._require_connection()
            cursor = connection.cursor()
            try:
                cursor.execute(f"SELECT COUNT(*) as count FROM {TABLE_NAME}")
                result = cursor.fetchone()['count']
                connection.commit()
                return result
            except self.psycopg2.Error as e:
                connection.rollback()
                raise StoreUnavailable(f"PostgreSQL ledger read failed: {e}") from e
            finally:
                cursor.close()

    def close(self) -> None:
        """Close PostgreSQL connection"""
        with self._lock:
            if self._connection:
                self._connection.close()
                self._connection = None


def create_store(database_url: str) -> LedgerStore:
    """
    Build a ledger store from a database URL

    Args:
        database_url: ``memory://``, ``sqlite:///path/to/file.db``,
            ``sqlite://`` (in-memory SQLite) or ``postgresql://...``

    Returns:
        LedgerStore for the URL's backend

    Raises:
        ValueError: If the URL scheme is not supported
    """
    if database_url.startswith("memory://"):
        return InMemoryLedgerStore()

    if database_url.startswith("sqlite://"):
        path = database_url[len("sqlite://"):]
        if path.startswith("/"):
            path = path[1:]
        return SQLiteLedgerStore(path or ":memory:")

    if database_url.startswith(("postgresql://", "postgres://")):
        return PostgreSQLLedgerStore(database_url)

    raise ValueError(f"Unsupported database URL: {database_url}")
