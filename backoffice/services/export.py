"""CSV export of ledger transactions."""

import pandas as pd

from backoffice.models import BankTransaction
from backoffice.services.ledger import list_tags, list_transactions

EXPORT_COLUMNS = [
    "date",
    "description",
    "amount",
    "balance",
    "bank_name",
    "account_number",
    "category",
    "tags",
    "notes",
]


def transactions_to_dataframe(transactions: list[BankTransaction]) -> pd.DataFrame:
    """Flatten transactions into one row each, tag ids replaced by tag names."""
    tag_names = {str(t.id): t.name for t in list_tags()}
    rows = [
        {
            "date": t.date.isoformat(),
            "description": t.description,
            "amount": t.amount,
            "balance": t.balance,
            "bank_name": t.bank_name,
            "account_number": t.account_number or "",
            "category": t.category_name or "",
            "tags": ", ".join(tag_names.get(tag_id, tag_id) for tag_id in t.tag_ids),
            "notes": t.notes or "",
        }
        for t in transactions
    ]
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def export_month_csv(month: str) -> str:
    """CSV text for a month's transactions, oldest first."""
    df = transactions_to_dataframe(list_transactions(month))
    return df.to_csv(index=False)
