"""Bank and statement metadata detection from raw statement text."""

from datetime import date, datetime

from backoffice.models import BankName, StatementMetadata
from backoffice.parsers.rules import (
    ACCOUNT_PATTERNS,
    BANK_MARKERS,
    PERIOD_DATE_FORMATS,
    PERIOD_PATTERNS,
)


def detect_metadata(text: str) -> StatementMetadata:
    """
    Detect institution, account number and statement period.

    Best effort: fields that cannot be found keep their defaults and
    nothing is raised.
    """
    return StatementMetadata(
        bank_name=detect_bank(text),
        account_number=extract_account_number(text),
        statement_period=extract_statement_period(text),
    )


def detect_bank(text: str) -> BankName:
    """Return the first institution whose marker appears in the text."""
    text_lower = text.lower()
    for markers, bank in BANK_MARKERS:
        if any(marker in text_lower for marker in markers):
            return bank
    return BankName.UNKNOWN


def extract_account_number(text: str) -> str:
    """Return the account number from the first matching pattern, or ""."""
    for pattern in ACCOUNT_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1) if match.groups() else match.group(0)
    return ""


def extract_statement_period(text: str) -> str:
    """Return the statement period from the first matching pattern, or ""."""
    for pattern in PERIOD_PATTERNS:
        match = pattern.search(text)
        if match:
            if len(match.groups()) >= 2 and match.group(2):
                return f"{match.group(1)} to {match.group(2)}"
            return match.group(1).strip()
    return ""


def statement_period_bounds(period: str) -> tuple[date, date] | None:
    """
    Parse a "<start> to <end>" period into dates.

    Returns None when the period is free text the known date formats
    cannot read.
    """
    if " to " not in period:
        return None

    start_str, end_str = (part.strip() for part in period.split(" to ", 1))
    start = _parse_period_date(start_str)
    end = _parse_period_date(end_str)
    if start is None or end is None or end < start:
        return None
    return start, end


def _parse_period_date(date_str: str) -> date | None:
    """Parse one side of a statement period."""
    for fmt in PERIOD_DATE_FORMATS:
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue
    return None
