"""Deduplication logic for imported transactions."""

import hashlib

from backoffice.models import ParsedTransaction

TransactionKey = tuple[str, str, float]


def compute_file_hash(contents: bytes) -> str:
    """Compute SHA256 hash of file contents."""
    return hashlib.sha256(contents).hexdigest()


def transaction_key(transaction: ParsedTransaction) -> TransactionKey:
    """
    Key used to detect a transaction that is already stored.

    Exact on (date, description, amount): any drift in the description
    text, whitespace included, makes it a different transaction.
    """
    return (transaction.date.isoformat(), transaction.description, float(transaction.amount))
