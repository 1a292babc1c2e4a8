"""Transaction service for database operations."""

import calendar
from typing import List, Optional
from datetime import date
from decimal import Decimal
from models.transaction import Transaction

_TRANSACTION_FIELDS = """id, description, amount, transaction_date, transaction_type,
       category, ai_generated"""

# Automatically generate placeholders from field count
_TRANSACTION_INSERT_PLACEHOLDERS = (
    f"({', '.join(['?'] * len(_TRANSACTION_FIELDS.split(',')))})"
)


class TransactionService:
    """Service for managing transactions."""

    def __init__(self, db_manager):
        """Initialize the transaction service.

        Args:
            db_manager: Database manager instance for database operations.
        """
        self.db_manager = db_manager

    def create(self, transaction: Transaction) -> Transaction:
        """Create a single transaction in the database.

        Args:
            transaction: Transaction object to insert.

        Returns:
            The same Transaction object.

        Raises:
            sqlite3.Error: If the insert fails (e.g., duplicate ID).
        """
        with self.db_manager.connect() as conn:
            conn.execute(
                f"""
                INSERT INTO transactions ({_TRANSACTION_FIELDS})
                VALUES {_TRANSACTION_INSERT_PLACEHOLDERS}
                """,
                self._transaction_to_row(transaction),
            )
            conn.commit()

        return transaction

    def bulk_create(self, transactions: List[Transaction]) -> int:
        """Create multiple transactions in a single database transaction.

        Args:
            transactions: List of Transaction objects to insert.

        Returns:
            Number of transactions inserted.

        Raises:
            sqlite3.Error: If bulk insert fails. All inserts are rolled back.
        """
        if not transactions:
            return 0

        with self.db_manager.connect() as conn:
            try:
                cursor = conn.executemany(
                    f"""
                    INSERT INTO transactions ({_TRANSACTION_FIELDS})
                    VALUES {_TRANSACTION_INSERT_PLACEHOLDERS}
                    """,
                    [self._transaction_to_row(t) for t in transactions],
                )
                conn.commit()
            except Exception:
                conn.rollback()
                raise

            return cursor.rowcount

    def find(self, transaction_id: str) -> Optional[Transaction]:
        """Get a single transaction by ID.

        Returns:
            Transaction object if found, None otherwise.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"SELECT {_TRANSACTION_FIELDS} FROM transactions WHERE id = ?",
                (transaction_id,),
            )
            row = cursor.fetchone()

            if row:
                return self._row_to_transaction(row)
            return None

    def find_all(self) -> List[Transaction]:
        """Get all transactions, newest first."""
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"""
                SELECT {_TRANSACTION_FIELDS}
                FROM transactions
                ORDER BY transaction_date DESC, rowid DESC
                """
            )
            return [self._row_to_transaction(row) for row in cursor.fetchall()]

    def find_by_month(self, year: int, month: int) -> List[Transaction]:
        """Get transactions dated within a calendar month, newest first.

        Args:
            year: Year (e.g., 2025).
            month: Month (1-12).
        """
        start_date = date(year, month, 1)
        end_date = date(year, month, calendar.monthrange(year, month)[1])

        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"""
                SELECT {_TRANSACTION_FIELDS}
                FROM transactions
                WHERE transaction_date >= ? AND transaction_date <= ?
                ORDER BY transaction_date DESC, rowid DESC
                """,
                (start_date.isoformat(), end_date.isoformat()),
            )
            return [self._row_to_transaction(row) for row in cursor.fetchall()]

    def delete(self, transaction_id: str) -> bool:
        """Delete a transaction by ID.

        Returns:
            True if the transaction was deleted, False if not found.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                "DELETE FROM transactions WHERE id = ?", (transaction_id,)
            )
            conn.commit()
            return cursor.rowcount > 0

    def _transaction_to_row(self, transaction: Transaction) -> tuple:
        return (
            transaction.id,
            transaction.description,
            float(transaction.amount),
            transaction.transaction_date.isoformat(),
            transaction.type,
            transaction.category,
            int(transaction.ai_generated),
        )

    def _row_to_transaction(self, row: tuple) -> Transaction:
        """Convert a database row to a Transaction object."""
        return Transaction(
            id=row[0],
            description=row[1],
            amount=Decimal(str(row[2])),
            transaction_date=date.fromisoformat(row[3]),
            type=row[4],
            category=row[5],
            ai_generated=bool(row[6]),
        )
