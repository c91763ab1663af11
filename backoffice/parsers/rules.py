"""Static lookup tables for the statement reader.

Every classifier in the reader is data-driven from the tuples below so the
rules can be tested on their own and extended per institution without touching
the segmentation code.
"""

import re

from backoffice.models import BankName

# (markers, bank) pairs, checked in order; first hit wins
BANK_MARKERS: tuple[tuple[tuple[str, ...], BankName], ...] = (
    (("royal bank", "rbc"), BankName.RBC),
    (("td bank", "toronto dominion"), BankName.TD),
    (("scotia", "bank of nova scotia"), BankName.SCOTIABANK),
)

ACCOUNT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\*{4}\d{4}"),  # ****1234
    re.compile(r"Account\s*#?\s*:?\s*(\d{4,}|\*+\d{4})", re.IGNORECASE),
    re.compile(r"Account\s*Number\s*:?\s*(\d{4,}|\*+\d{4})", re.IGNORECASE),
)

PERIOD_PATTERNS: tuple[re.Pattern[str], ...] = (
    # Jun 1, 2025 to Jun 30, 2025
    re.compile(
        r"([A-Za-z]{3,9}\s+\d{1,2},\s+\d{4})\s+to\s+([A-Za-z]{3,9}\s+\d{1,2},\s+\d{4})",
        re.IGNORECASE,
    ),
    # 01/06/2025 to 30/06/2025
    re.compile(r"(\d{1,2}/\d{1,2}/\d{4})\s+to\s+(\d{1,2}/\d{1,2}/\d{4})", re.IGNORECASE),
    re.compile(r"Statement\s+Period\s*:?\s*(.+)", re.IGNORECASE),
)

# strptime formats for the dates captured by PERIOD_PATTERNS
PERIOD_DATE_FORMATS: tuple[str, ...] = ("%b %d, %Y", "%B %d, %Y", "%d/%m/%Y")

ACTIVITY_SECTION_MARKERS: tuple[str, ...] = ("Account Activity Details",)

MONTH_TABLE: tuple[str, ...] = (
    "jan", "feb", "mar", "apr", "may", "jun",
    "jul", "aug", "sep", "oct", "nov", "dec",
)

DATE_ANCHOR_PATTERN = re.compile(
    r"\d{1,2}\s+(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)",
    re.IGNORECASE,
)

# Looser "DD Xxx" token used by the amount-anchored layout
LOOSE_DATE_PATTERN = re.compile(r"\d{1,2}\s+\w{3}")

AMOUNT_PATTERN = re.compile(r"\d{1,3}(?:,\d{3})*\.\d{2}")

# Phrases that open an individual transaction inside a date segment
TRANSACTION_KEYWORDS: tuple[str, ...] = (
    "e-Transfer sent",
    "e-Transfer received",
    "e-Transfer - Autodeposit",
    "Contactless Interac purchase",
    "Interac purchase",
    "ATM withdrawal",
    "Misc Payment",
    "Monthly fee",
    "Online Transfer",
    "Online Banking transfer",
    "INTERAC-SC-",
    "INTERAC e-Transfer fee",
)

# Lower-case substrings that mark an outflow; anything else is a credit
DEBIT_KEYWORDS: tuple[str, ...] = (
    "fee",
    "withdrawal",
    "purchase",
    "transfer sent",
    "cheque",
    "atm",
    "interac",
    "online transfer to",
    "payment",
    "online banking transfer",
)

# Lower-case substrings of lines the amount-anchored layout treats as totals
SUMMARY_LINE_KEYWORDS: tuple[str, ...] = ("balance", "total", "opening", "closing")
