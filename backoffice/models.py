"""Data models for the back-office statement reader and ledger."""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_serializer


class BankName(str, Enum):
    """Institutions recognised by the statement reader."""

    RBC = "RBC Royal Bank"
    TD = "TD Bank"
    SCOTIABANK = "Scotiabank"
    UNKNOWN = "Unknown Bank"
    MANUAL = "Manual Entry"  # Ledger rows typed in by hand, never detected


class StatementMetadata(BaseModel):
    """Statement-level facts detected from the raw text."""

    model_config = ConfigDict(frozen=True)

    bank_name: BankName = BankName.UNKNOWN
    account_number: str = ""  # Captured digits, or the literal masked match
    statement_period: str = ""

    @property
    def account_number_tail(self) -> str:
        """Last four characters of the account number, if any."""
        return self.account_number[-4:]


class ParsedTransaction(BaseModel):
    """A single transaction reconstructed from statement text."""

    date: date
    description: str = Field(min_length=1)
    amount: Decimal  # Negative for debits/outflows, positive for credits/inflows
    balance: Decimal | None = None  # Running balance after this transaction

    @model_serializer(mode="wrap")
    def omit_missing_balance(self, handler):
        data = handler(self)
        if self.balance is None:
            data.pop("balance", None)
        return data

    @property
    def month(self) -> str:
        """YYYY-MM index key derived from the date."""
        return self.date.isoformat()[:7]


class ParsedStatement(BaseModel):
    """Metadata plus transactions, in the order they appear in the statement."""

    metadata: StatementMetadata = Field(default_factory=StatementMetadata)
    transactions: list[ParsedTransaction] = Field(default_factory=list)


class SkipReason(str, Enum):
    """Why a statement region or candidate yielded no transaction."""

    NO_ACTIVITY_SECTION = "no_activity_section"
    NO_DATE_ANCHORS = "no_date_anchors"
    NO_AMOUNT = "no_amount"
    NO_KEYWORD = "no_keyword"
    DESCRIPTION_TOO_SHORT = "description_too_short"
    SUMMARY_LINE = "summary_line"
    INVALID_DATE = "invalid_date"


class SkippedSegment(BaseModel):
    """Diagnostic record for a dropped segment."""

    reason: SkipReason
    snippet: str = ""
    date_token: str | None = None


class BankTransaction(BaseModel):
    """A transaction stored in the ledger."""

    id: UUID = Field(default_factory=uuid4)
    date: date
    description: str
    amount: float
    balance: float | None = None
    bank_name: str = BankName.UNKNOWN.value
    account_number: str | None = None
    category_id: str | None = None
    category_name: str | None = None
    tag_ids: list[str] = Field(default_factory=list)
    notes: str | None = None
    created_at: str | None = None  # ISO format datetime
    updated_at: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def month(self) -> str:
        """YYYY-MM key, always recomputed from the date."""
        return self.date.isoformat()[:7]

    class Config:
        from_attributes = True


class TransactionCreate(BaseModel):
    """Manual ledger entry."""

    date: date
    description: str
    amount: float
    balance: float | None = None


class TransactionUpdate(BaseModel):
    """Edit of a stored transaction."""

    date: date
    description: str
    amount: float
    category_id: str | None = None
    tag_ids: list[str] = Field(default_factory=list)
    notes: str | None = None


class CategoryAssignment(BaseModel):
    """Set the category of a single transaction."""

    category_id: str


class TransactionCategory(BaseModel):
    """Income or expense bucket for ledger rows."""

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(min_length=1)
    type: Literal["income", "expense"] = "expense"
    color: str = "#3b82f6"


class CategoryInput(BaseModel):
    """Category create/update request."""

    name: str
    type: Literal["income", "expense"] = "expense"
    color: str = "#3b82f6"


class TransactionTag(BaseModel):
    """Free-form label attachable to many transactions."""

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(min_length=1)
    color: str = "#10b981"
    description: str = ""


class TagInput(BaseModel):
    """Tag create/update request."""

    name: str
    color: str = "#10b981"
    description: str = ""


class StatementImport(BaseModel):
    """Record of an imported statement."""

    id: UUID = Field(default_factory=uuid4)
    filename: str | None = None
    file_hash: str | None = None  # SHA256 of the uploaded PDF
    bank_name: str
    account_number: str | None = None
    statement_period: str | None = None
    transactions_added: int
    transactions_skipped: int
    imported_at: str  # ISO format datetime


class ParseTextRequest(BaseModel):
    """Statement text pasted or extracted elsewhere."""

    text: str
    statement_year: int | None = Field(default=None, ge=2000, le=2100)


class ParsePreviewResponse(BaseModel):
    """Parsed statement shown to the user before saving."""

    statement: ParsedStatement
    skipped: list[SkippedSegment]
    segments_processed: int
    manual_entry_suggested: bool
    message: str


class ImportResponse(BaseModel):
    """Response after saving a parsed statement."""

    filename: str | None = None
    bank_name: str
    transactions_found: int
    transactions_added: int
    transactions_skipped: int  # Duplicates
    message: str


class MonthlyStats(BaseModel):
    """Income/expense totals for one month."""

    month: str
    income: float
    expenses: float
    balance: float
    transaction_count: int


class BreakdownItem(BaseModel):
    """One row of a category or tag breakdown."""

    id: str
    name: str
    total: float
    count: int
    color: str | None = None
    type: str | None = None
    description: str | None = None
