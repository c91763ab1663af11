"""SQLite database operations for the back-office ledger."""

import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from uuid import UUID

from backoffice.config import settings
from backoffice.models import (
    BankTransaction,
    ParsedStatement,
    StatementImport,
    TransactionCategory,
    TransactionTag,
)
from backoffice.services.dedup import transaction_key

# SQL schema
SCHEMA = """
CREATE TABLE IF NOT EXISTS bank_transactions (
    id TEXT PRIMARY KEY,
    date TEXT NOT NULL,
    description TEXT NOT NULL,
    amount REAL NOT NULL,
    balance REAL,
    bank_name TEXT NOT NULL,
    account_number TEXT,
    month TEXT NOT NULL,
    category_id TEXT,
    category_name TEXT,
    tag_ids TEXT,
    notes TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_bank_transactions_month ON bank_transactions(month);
CREATE INDEX IF NOT EXISTS idx_bank_transactions_dedup ON bank_transactions(date, description, amount);
CREATE INDEX IF NOT EXISTS idx_bank_transactions_category ON bank_transactions(category_id);

CREATE TABLE IF NOT EXISTS transaction_categories (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    type TEXT NOT NULL,
    color TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS transaction_tags (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    color TEXT NOT NULL,
    description TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS statement_imports (
    id TEXT PRIMARY KEY,
    filename TEXT,
    file_hash TEXT,
    bank_name TEXT NOT NULL,
    account_number TEXT,
    statement_period TEXT,
    transactions_added INTEGER NOT NULL,
    transactions_skipped INTEGER NOT NULL,
    imported_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_statement_imports_hash ON statement_imports(file_hash);
"""

TRANSACTION_COLUMNS = """
    id, date, description, amount, balance, bank_name, account_number,
    category_id, category_name, tag_ids, notes, created_at, updated_at
"""


class Database:
    """SQLite database manager."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or settings.db_path
        if db_path is None:
            settings.ensure_directories()
        self._init_db()

    def _init_db(self) -> None:
        """Initialize the database schema."""
        with self._get_connection() as conn:
            conn.executescript(SCHEMA)
            conn.commit()

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Bank transactions
    # ------------------------------------------------------------------

    def add_transactions_batch(self, statement: ParsedStatement) -> tuple[int, int]:
        """
        Insert a parsed statement's transactions, skipping ones already stored.

        A transaction is a duplicate when a stored row has the same date,
        description and amount. The check and the inserts run in one write
        transaction, so two imports of the same statement cannot both pass
        the check.

        Returns (added_count, skipped_count).
        """
        metadata = statement.metadata
        now = datetime.now().isoformat()
        added = 0
        skipped = 0

        with self._get_connection() as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                for txn in statement.transactions:
                    if self._transaction_exists(conn, *transaction_key(txn)):
                        skipped += 1
                        continue

                    record = BankTransaction(
                        date=txn.date,
                        description=txn.description,
                        amount=float(txn.amount),
                        balance=float(txn.balance) if txn.balance is not None else None,
                        bank_name=metadata.bank_name.value,
                        account_number=metadata.account_number or None,
                        created_at=now,
                        updated_at=now,
                    )
                    self._insert_transaction(conn, record)
                    added += 1
                conn.commit()
            except Exception:
                conn.rollback()
                raise

        return added, skipped

    def add_transaction(self, transaction: BankTransaction) -> BankTransaction:
        """Add a single transaction without a duplicate check."""
        now = datetime.now().isoformat()
        record = transaction.model_copy(
            update={
                "created_at": transaction.created_at or now,
                "updated_at": transaction.updated_at or now,
            }
        )
        with self._get_connection() as conn:
            self._insert_transaction(conn, record)
            conn.commit()
        return record

    def get_transaction(self, transaction_id: UUID) -> BankTransaction | None:
        """Get a single transaction by ID."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                f"SELECT {TRANSACTION_COLUMNS} FROM bank_transactions WHERE id = ?",
                (str(transaction_id),),
            )
            row = cursor.fetchone()
            return self._row_to_transaction(row) if row else None

    def get_transactions_by_month(self, month: str, category_id: str | None = None) -> list[BankTransaction]:
        """Get a month's transactions (YYYY-MM), oldest first."""
        query = f"SELECT {TRANSACTION_COLUMNS} FROM bank_transactions WHERE month = ?"
        params: list = [month]

        if category_id:
            query += " AND category_id = ?"
            params.append(category_id)

        query += " ORDER BY date ASC, created_at ASC"

        with self._get_connection() as conn:
            cursor = conn.execute(query, params)
            return [self._row_to_transaction(row) for row in cursor.fetchall()]

    def update_transaction(self, transaction: BankTransaction) -> None:
        """Write back an edited transaction; the month follows the date."""
        with self._get_connection() as conn:
            conn.execute(
                """
                UPDATE bank_transactions
                SET date = ?, description = ?, amount = ?, month = ?,
                    category_id = ?, category_name = ?, tag_ids = ?, notes = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (
                    transaction.date.isoformat(),
                    transaction.description,
                    transaction.amount,
                    transaction.month,
                    transaction.category_id,
                    transaction.category_name,
                    ",".join(transaction.tag_ids) if transaction.tag_ids else None,
                    transaction.notes,
                    datetime.now().isoformat(),
                    str(transaction.id),
                ),
            )
            conn.commit()

    def update_transaction_category(
        self, transaction_id: UUID, category_id: str | None, category_name: str | None
    ) -> None:
        """Update a transaction's category."""
        with self._get_connection() as conn:
            conn.execute(
                "UPDATE bank_transactions SET category_id = ?, category_name = ?, updated_at = ? WHERE id = ?",
                (category_id, category_name, datetime.now().isoformat(), str(transaction_id)),
            )
            conn.commit()

    def delete_transaction(self, transaction_id: UUID) -> bool:
        """Delete a transaction. Returns True if a row was removed."""
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM bank_transactions WHERE id = ?", (str(transaction_id),))
            conn.commit()
            return cursor.rowcount > 0

    def get_transaction_count(self) -> int:
        """Get total number of transactions."""
        with self._get_connection() as conn:
            cursor = conn.execute("SELECT COUNT(*) as count FROM bank_transactions")
            return cursor.fetchone()["count"]

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def get_categories(self) -> list[TransactionCategory]:
        """Get all categories."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                "SELECT id, name, type, color FROM transaction_categories ORDER BY created_at, name"
            )
            return [
                TransactionCategory(id=UUID(row["id"]), name=row["name"], type=row["type"], color=row["color"])
                for row in cursor.fetchall()
            ]

    def get_category(self, category_id: str) -> TransactionCategory | None:
        """Get a single category by ID."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                "SELECT id, name, type, color FROM transaction_categories WHERE id = ?", (category_id,)
            )
            row = cursor.fetchone()
            if not row:
                return None
            return TransactionCategory(id=UUID(row["id"]), name=row["name"], type=row["type"], color=row["color"])

    def add_category(self, category: TransactionCategory) -> None:
        """Record a category."""
        now = datetime.now().isoformat()
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO transaction_categories (id, name, type, color, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (str(category.id), category.name, category.type, category.color, now, now),
            )
            conn.commit()

    def update_category(self, category: TransactionCategory) -> bool:
        """Update a category. Returns True if it exists."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                "UPDATE transaction_categories SET name = ?, type = ?, color = ?, updated_at = ? WHERE id = ?",
                (category.name, category.type, category.color, datetime.now().isoformat(), str(category.id)),
            )
            conn.commit()
            return cursor.rowcount > 0

    def delete_category(self, category_id: str) -> int:
        """
        Delete a category and clear it from transactions.

        Returns the number of transactions that lost the category, or -1 if
        the category did not exist.
        """
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM transaction_categories WHERE id = ?", (category_id,))
            if cursor.rowcount == 0:
                return -1
            cursor = conn.execute(
                "UPDATE bank_transactions SET category_id = NULL, category_name = NULL WHERE category_id = ?",
                (category_id,),
            )
            conn.commit()
            return cursor.rowcount

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    def get_tags(self) -> list[TransactionTag]:
        """Get all tags."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                "SELECT id, name, color, description FROM transaction_tags ORDER BY created_at, name"
            )
            return [
                TransactionTag(
                    id=UUID(row["id"]),
                    name=row["name"],
                    color=row["color"],
                    description=row["description"] or "",
                )
                for row in cursor.fetchall()
            ]

    def add_tag(self, tag: TransactionTag) -> None:
        """Record a tag."""
        now = datetime.now().isoformat()
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO transaction_tags (id, name, color, description, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (str(tag.id), tag.name, tag.color, tag.description, now, now),
            )
            conn.commit()

    def update_tag(self, tag: TransactionTag) -> bool:
        """Update a tag. Returns True if it exists."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                "UPDATE transaction_tags SET name = ?, color = ?, description = ?, updated_at = ? WHERE id = ?",
                (tag.name, tag.color, tag.description, datetime.now().isoformat(), str(tag.id)),
            )
            conn.commit()
            return cursor.rowcount > 0

    def delete_tag(self, tag_id: str) -> int:
        """
        Delete a tag and remove it from every transaction.

        Returns the number of transactions updated, or -1 if the tag did
        not exist.
        """
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM transaction_tags WHERE id = ?", (tag_id,))
            if cursor.rowcount == 0:
                return -1

            cursor = conn.execute(
                "SELECT id, tag_ids FROM bank_transactions WHERE tag_ids LIKE ?", (f"%{tag_id}%",)
            )
            updated = 0
            for row in cursor.fetchall():
                tag_ids = row["tag_ids"].split(",")
                if tag_id not in tag_ids:
                    continue
                remaining = [t for t in tag_ids if t != tag_id]
                conn.execute(
                    "UPDATE bank_transactions SET tag_ids = ? WHERE id = ?",
                    (",".join(remaining) if remaining else None, row["id"]),
                )
                updated += 1
            conn.commit()
            return updated

    # ------------------------------------------------------------------
    # Statement imports
    # ------------------------------------------------------------------

    def add_statement_import(self, statement_import: StatementImport) -> None:
        """Record an imported statement."""
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO statement_imports
                (id, filename, file_hash, bank_name, account_number, statement_period,
                 transactions_added, transactions_skipped, imported_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(statement_import.id),
                    statement_import.filename,
                    statement_import.file_hash,
                    statement_import.bank_name,
                    statement_import.account_number,
                    statement_import.statement_period,
                    statement_import.transactions_added,
                    statement_import.transactions_skipped,
                    statement_import.imported_at,
                ),
            )
            conn.commit()

    def get_statement_imports(self) -> list[StatementImport]:
        """Get all statement imports, newest first."""
        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                SELECT id, filename, file_hash, bank_name, account_number, statement_period,
                       transactions_added, transactions_skipped, imported_at
                FROM statement_imports ORDER BY imported_at DESC
                """
            )
            return [
                StatementImport(
                    id=UUID(row["id"]),
                    filename=row["filename"],
                    file_hash=row["file_hash"],
                    bank_name=row["bank_name"],
                    account_number=row["account_number"],
                    statement_period=row["statement_period"],
                    transactions_added=row["transactions_added"],
                    transactions_skipped=row["transactions_skipped"],
                    imported_at=row["imported_at"],
                )
                for row in cursor.fetchall()
            ]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _transaction_exists(self, conn: sqlite3.Connection, txn_date: str, description: str, amount: float) -> bool:
        cursor = conn.execute(
            "SELECT 1 FROM bank_transactions WHERE date = ? AND description = ? AND amount = ?",
            (txn_date, description, amount),
        )
        return cursor.fetchone() is not None

    def _insert_transaction(self, conn: sqlite3.Connection, transaction: BankTransaction) -> None:
        conn.execute(
            """
            INSERT INTO bank_transactions (id, date, description, amount, balance,
            bank_name, account_number, month, category_id, category_name, tag_ids,
            notes, created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(transaction.id),
                transaction.date.isoformat(),
                transaction.description,
                transaction.amount,
                transaction.balance,
                transaction.bank_name,
                transaction.account_number,
                transaction.month,
                transaction.category_id,
                transaction.category_name,
                ",".join(transaction.tag_ids) if transaction.tag_ids else None,
                transaction.notes,
                transaction.created_at,
                transaction.updated_at,
            ),
        )

    def _row_to_transaction(self, row: sqlite3.Row) -> BankTransaction:
        """Convert a database row to a BankTransaction model."""
        tags_str = row["tag_ids"]
        return BankTransaction(
            id=UUID(row["id"]),
            date=date.fromisoformat(row["date"]),
            description=row["description"],
            amount=row["amount"],
            balance=row["balance"],
            bank_name=row["bank_name"],
            account_number=row["account_number"],
            category_id=row["category_id"],
            category_name=row["category_name"],
            tag_ids=tags_str.split(",") if tags_str else [],
            notes=row["notes"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


# Global database instance
db = Database()
