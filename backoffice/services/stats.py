"""Monthly statistics and breakdowns for the ledger."""

from backoffice.models import BankTransaction, BreakdownItem, MonthlyStats
from backoffice.services.ledger import list_categories, list_tags, list_transactions

UNCATEGORIZED_ID = "uncategorized"
UNCATEGORIZED_NAME = "Uncategorized"
UNCATEGORIZED_COLOR = "#6b7280"
UNKNOWN_TAG_NAME = "Unknown Tag"
DEFAULT_TAG_COLOR = "#10b981"


def monthly_stats(month: str) -> MonthlyStats:
    """Income, expenses and net balance for a YYYY-MM month."""
    transactions = list_transactions(month)
    income = sum(t.amount for t in transactions if t.amount > 0)
    expenses = sum(abs(t.amount) for t in transactions if t.amount < 0)

    return MonthlyStats(
        month=month,
        income=round(income, 2),
        expenses=round(expenses, 2),
        balance=round(income - expenses, 2),
        transaction_count=len(transactions),
    )


def category_breakdown(month: str, transactions: list[BankTransaction] | None = None) -> list[BreakdownItem]:
    """
    Totals per category for a month.

    Amounts in income categories count as positive and everything else
    (expense categories and uncategorized rows) as negative, whatever the
    sign of the stored amount. Sorted by absolute total, largest first.
    """
    if transactions is None:
        transactions = list_transactions(month)
    categories = {str(c.id): c for c in list_categories()}

    breakdown: dict[str, BreakdownItem] = {}
    for txn in transactions:
        category_id = txn.category_id or UNCATEGORIZED_ID
        item = breakdown.get(category_id)
        if item is None:
            category = categories.get(category_id)
            item = BreakdownItem(
                id=category_id,
                name=category.name if category else UNCATEGORIZED_NAME,
                total=0.0,
                count=0,
                color=category.color if category else UNCATEGORIZED_COLOR,
                type=category.type if category else "expense",
            )
            breakdown[category_id] = item

        item.total += abs(txn.amount) if item.type == "income" else -abs(txn.amount)
        item.count += 1

    return _sorted_items(breakdown.values())


def tag_breakdown(month: str, transactions: list[BankTransaction] | None = None) -> list[BreakdownItem]:
    """Signed totals per tag for a month; a transaction counts once per tag."""
    if transactions is None:
        transactions = list_transactions(month)
    tags = {str(t.id): t for t in list_tags()}

    breakdown: dict[str, BreakdownItem] = {}
    for txn in transactions:
        for tag_id in txn.tag_ids:
            item = breakdown.get(tag_id)
            if item is None:
                tag = tags.get(tag_id)
                item = BreakdownItem(
                    id=tag_id,
                    name=tag.name if tag else UNKNOWN_TAG_NAME,
                    total=0.0,
                    count=0,
                    color=tag.color if tag else DEFAULT_TAG_COLOR,
                    description=tag.description if tag else None,
                )
                breakdown[tag_id] = item

            item.total += txn.amount
            item.count += 1

    return _sorted_items(breakdown.values())


def _sorted_items(items) -> list[BreakdownItem]:
    result = [item for item in items if item.count > 0]
    for item in result:
        item.total = round(item.total, 2)
    result.sort(key=lambda item: abs(item.total), reverse=True)
    return result
