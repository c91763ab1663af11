"""Sign, date and amount normalization for raw transaction lines."""

from collections.abc import Callable
from datetime import date
from decimal import Decimal, InvalidOperation

from backoffice.models import ParsedTransaction
from backoffice.parsers.document_types import RawTransactionLine
from backoffice.parsers.rules import DEBIT_KEYWORDS, MONTH_TABLE
from backoffice.parsers.validation import clean_amount_string, collapse_whitespace

YearForMonth = Callable[[int], int]


class DateTokenError(ValueError):
    """Raised when a "DD Mon" token cannot be turned into a date."""

    pass


def is_debit(description: str) -> bool:
    """True if the description contains any debit keyword (case-insensitive)."""
    description_lower = description.lower()
    return any(keyword in description_lower for keyword in DEBIT_KEYWORDS)


def apply_polarity(amount: Decimal, description: str) -> Decimal:
    """
    Force the sign of an amount from its description.

    Descriptions matching no debit keyword are treated as credits, so
    unrecognised outflows show up as income.
    """
    return -abs(amount) if is_debit(description) else abs(amount)


def split_date_token(token: str) -> tuple[int, int]:
    """Split "02 Jun" into (day, month). Raises DateTokenError."""
    parts = token.split()
    if len(parts) != 2:
        raise DateTokenError(f"Unexpected date format: {token!r} ({len(parts)} parts)")

    day_str, month_str = parts
    if not (day_str.isdecimal() and 1 <= len(day_str) <= 2):
        raise DateTokenError(f"Invalid day in date token: {token!r}")

    day = int(day_str)
    month_key = month_str.lower()
    if month_key not in MONTH_TABLE or not 1 <= day <= 31:
        raise DateTokenError(f"Invalid date components: day={day}, month={month_str}")

    return day, MONTH_TABLE.index(month_key) + 1


def parse_date_token(token: str, year: int | YearForMonth) -> date:
    """
    Parse a "DD Mon" token into a calendar date.

    Args:
        token: Day and three-letter month, e.g. "02 Jun"
        year: Fixed year, or a callable mapping the month number to a year

    Raises:
        DateTokenError: If the token is malformed or not a real date
    """
    day, month = split_date_token(token)
    resolved_year = year(month) if callable(year) else year
    try:
        return date(resolved_year, month, day)
    except ValueError as e:
        raise DateTokenError(f"Invalid calendar date: {token!r} in {resolved_year}") from e


def parse_amount(amount_str: str) -> Decimal:
    """Parse "2,340.55" into Decimal("2340.55")."""
    try:
        return Decimal(clean_amount_string(amount_str))
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount: {amount_str!r}") from e


def normalize_transaction(line: RawTransactionLine, year: int | YearForMonth) -> ParsedTransaction:
    """
    Build a ParsedTransaction from a raw line.

    Raises:
        DateTokenError: If the date token is rejected
    """
    txn_date = parse_date_token(line.date_token, year)
    description = collapse_whitespace(line.description)
    amount = apply_polarity(parse_amount(line.amount_token), description)
    balance = parse_amount(line.balance_token) if line.balance_token else None

    return ParsedTransaction(
        date=txn_date,
        description=description,
        amount=amount,
        balance=balance,
    )
