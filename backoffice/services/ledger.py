"""Ledger service: manual entries, edits, categories and tags."""

import logging
import re
from uuid import UUID

from backoffice.db.sqlite import db
from backoffice.models import (
    BankName,
    BankTransaction,
    CategoryInput,
    TagInput,
    TransactionCategory,
    TransactionCreate,
    TransactionTag,
    TransactionUpdate,
)

logger = logging.getLogger(__name__)

MONTH_KEY_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")

# Seeded the first time the category list is empty
DEFAULT_CATEGORIES: tuple[tuple[str, str, str], ...] = (
    ("Salary", "income", "#10b981"),
    ("Freelance", "income", "#22c55e"),
    ("Investment", "income", "#84cc16"),
    ("Groceries", "expense", "#ef4444"),
    ("Utilities", "expense", "#f97316"),
    ("Transportation", "expense", "#f59e0b"),
    ("Entertainment", "expense", "#8b5cf6"),
    ("Healthcare", "expense", "#ec4899"),
    ("Office Supplies", "expense", "#6366f1"),
    ("Software", "expense", "#0ea5e9"),
    ("Marketing", "expense", "#14b8a6"),
    ("Other", "expense", "#6b7280"),
)


class NotFoundError(LookupError):
    """Raised when a transaction, category or tag does not exist."""

    pass


def validate_month(month: str) -> str:
    """Check a YYYY-MM month key."""
    if not MONTH_KEY_PATTERN.match(month):
        raise ValueError(f"Invalid month '{month}', expected YYYY-MM")
    return month


# ----------------------------------------------------------------------
# Transactions
# ----------------------------------------------------------------------


def list_transactions(month: str, category_id: str | None = None) -> list[BankTransaction]:
    """A month's transactions, oldest first, optionally for one category."""
    return db.get_transactions_by_month(validate_month(month), category_id=category_id)


def get_transaction(transaction_id: UUID) -> BankTransaction:
    transaction = db.get_transaction(transaction_id)
    if transaction is None:
        raise NotFoundError(f"Transaction {transaction_id} not found")
    return transaction


def add_manual_transaction(entry: TransactionCreate) -> BankTransaction:
    """
    Add a hand-typed transaction.

    Manual entries are stored as given, with no duplicate check. The
    description must not be blank and the amount must not be zero.
    """
    description = entry.description.strip()
    if not description or entry.amount == 0:
        raise ValueError("Please fill in all transaction fields")

    transaction = db.add_transaction(
        BankTransaction(
            date=entry.date,
            description=description,
            amount=entry.amount,
            balance=entry.balance,
            bank_name=BankName.MANUAL.value,
        )
    )
    logger.info(f"Added manual transaction {transaction.id} for {transaction.month}")
    return transaction


def update_transaction(transaction_id: UUID, update: TransactionUpdate) -> BankTransaction:
    """
    Edit a stored transaction.

    The month follows the new date. A given category id replaces the
    category and its name; without one the current category is kept.
    Tag ids are always replaced, an empty list clears them.
    """
    existing = get_transaction(transaction_id)
    description = update.description.strip()
    if not description:
        raise ValueError("Please fill in all required fields")

    changes: dict = {
        "date": update.date,
        "description": description,
        "amount": update.amount,
        "tag_ids": list(update.tag_ids),
    }
    if update.category_id:
        changes["category_id"] = update.category_id
        changes["category_name"] = _category_name(update.category_id)
    if update.notes is not None:
        changes["notes"] = update.notes or None

    transaction = existing.model_copy(update=changes)
    db.update_transaction(transaction)
    return get_transaction(transaction_id)


def set_transaction_category(transaction_id: UUID, category_id: str) -> BankTransaction:
    """Assign a category; an unknown category id leaves an empty name."""
    get_transaction(transaction_id)
    db.update_transaction_category(transaction_id, category_id, _category_name(category_id))
    return get_transaction(transaction_id)


def delete_transaction(transaction_id: UUID) -> None:
    if not db.delete_transaction(transaction_id):
        raise NotFoundError(f"Transaction {transaction_id} not found")


def _category_name(category_id: str) -> str:
    category = db.get_category(category_id)
    return category.name if category else ""


# ----------------------------------------------------------------------
# Categories
# ----------------------------------------------------------------------


def list_categories() -> list[TransactionCategory]:
    """All categories, seeding the defaults when there are none yet."""
    categories = db.get_categories()
    if categories:
        return categories

    for name, category_type, color in DEFAULT_CATEGORIES:
        db.add_category(TransactionCategory(name=name, type=category_type, color=color))
    logger.info(f"Seeded {len(DEFAULT_CATEGORIES)} default categories")
    return db.get_categories()


def create_category(data: CategoryInput) -> TransactionCategory:
    name = data.name.strip()
    if not name:
        raise ValueError("Please enter a category name")

    category = TransactionCategory(name=name, type=data.type, color=data.color)
    db.add_category(category)
    return category


def update_category(category_id: UUID, data: CategoryInput) -> TransactionCategory:
    name = data.name.strip()
    if not name:
        raise ValueError("Please enter a category name")

    category = TransactionCategory(id=category_id, name=name, type=data.type, color=data.color)
    if not db.update_category(category):
        raise NotFoundError(f"Category {category_id} not found")
    return category


def delete_category(category_id: UUID) -> int:
    """Delete a category; its transactions become uncategorized. Returns how many."""
    cleared = db.delete_category(str(category_id))
    if cleared < 0:
        raise NotFoundError(f"Category {category_id} not found")
    logger.info(f"Deleted category {category_id}, cleared it from {cleared} transactions")
    return cleared


# ----------------------------------------------------------------------
# Tags
# ----------------------------------------------------------------------


def list_tags() -> list[TransactionTag]:
    return db.get_tags()


def create_tag(data: TagInput) -> TransactionTag:
    name = data.name.strip()
    if not name:
        raise ValueError("Please enter a tag name")

    tag = TransactionTag(name=name, color=data.color, description=data.description)
    db.add_tag(tag)
    return tag


def update_tag(tag_id: UUID, data: TagInput) -> TransactionTag:
    name = data.name.strip()
    if not name:
        raise ValueError("Please enter a tag name")

    tag = TransactionTag(id=tag_id, name=name, color=data.color, description=data.description)
    if not db.update_tag(tag):
        raise NotFoundError(f"Tag {tag_id} not found")
    return tag


def delete_tag(tag_id: UUID) -> int:
    """Delete a tag and drop it from every transaction. Returns how many changed."""
    updated = db.delete_tag(str(tag_id))
    if updated < 0:
        raise NotFoundError(f"Tag {tag_id} not found")
    logger.info(f"Deleted tag {tag_id}, removed it from {updated} transactions")
    return updated
