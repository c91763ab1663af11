"""Tests for statement import, preview and duplicate detection."""

from datetime import date
from decimal import Decimal
from unittest.mock import patch

import pytest

from backoffice.models import (
    BankName,
    ParsedStatement,
    ParsedTransaction,
    StatementMetadata,
    TransactionCreate,
)
from backoffice.parsers.pdf_text import ExtractionError
from backoffice.parsers.validation import ValidationError
from backoffice.services.dedup import compute_file_hash, transaction_key
from backoffice.services.importer import (
    MANUAL_ENTRY_HINT,
    import_pdf,
    preview_pdf,
    preview_text,
    save_statement,
)
from backoffice.services.ledger import add_manual_transaction

FAKE_PDF = b"%PDF-1.4\n" + b"0" * 200


def make_statement(*transactions: ParsedTransaction) -> ParsedStatement:
    return ParsedStatement(
        metadata=StatementMetadata(bank_name=BankName.RBC, account_number="01234567"),
        transactions=list(transactions),
    )


def make_transaction(description: str = "Monthly fee", amount: str = "-4.95", day: int = 5) -> ParsedTransaction:
    return ParsedTransaction(date=date(2025, 6, day), description=description, amount=Decimal(amount))


class TestDedupHelpers:
    def test_file_hash_is_stable(self):
        assert compute_file_hash(b"abc") == compute_file_hash(b"abc")
        assert compute_file_hash(b"abc") != compute_file_hash(b"abd")

    def test_transaction_key(self):
        assert transaction_key(make_transaction()) == ("2025-06-05", "Monthly fee", -4.95)


class TestSaveStatement:
    """Test the persistence gate."""

    def test_saves_new_transactions(self, database):
        statement = make_statement(make_transaction(), make_transaction("Misc Payment HYDRO", "-80.00", day=6))
        response = save_statement(statement)

        assert response.transactions_found == 2
        assert response.transactions_added == 2
        assert response.transactions_skipped == 0
        assert response.message == "Successfully saved 2 transactions"
        assert response.bank_name == "RBC Royal Bank"

        stored = database.get_transactions_by_month("2025-06")
        assert [t.description for t in stored] == ["Monthly fee", "Misc Payment HYDRO"]
        assert stored[0].bank_name == "RBC Royal Bank"
        assert stored[0].account_number == "01234567"
        assert stored[0].month == "2025-06"

    def test_duplicate_import_adds_nothing(self, database, simple_statement_text):
        """Importing the same statement twice should add nothing the second time."""
        statement = preview_text(simple_statement_text, statement_year=2025).statement

        first = save_statement(statement)
        second = save_statement(statement)

        assert first.transactions_added == 2
        assert second.transactions_added == 0
        assert second.transactions_skipped == 2
        assert second.message == "Saved 0 new transactions (2 duplicates skipped)"
        assert database.get_transaction_count() == 2

    def test_partial_overlap(self, database):
        save_statement(make_statement(make_transaction()))
        response = save_statement(make_statement(make_transaction(), make_transaction(day=6)))

        assert response.transactions_added == 1
        assert response.message == "Saved 1 new transactions (1 duplicates skipped)"

    def test_description_drift_is_a_new_transaction(self, database):
        save_statement(make_statement(make_transaction("Monthly fee")))
        response = save_statement(make_statement(make_transaction("Monthly  fee")))
        assert response.transactions_added == 1

    def test_matches_manual_entries(self, database):
        """A statement line equal to a manual entry is a duplicate."""
        add_manual_transaction(TransactionCreate(date=date(2025, 6, 5), description="Monthly fee", amount=-4.95))
        response = save_statement(make_statement(make_transaction()))
        assert response.transactions_skipped == 1

    def test_records_import(self, database):
        save_statement(make_statement(make_transaction()), filename="june.pdf", file_hash="abc123")

        imports = database.get_statement_imports()
        assert len(imports) == 1
        assert imports[0].filename == "june.pdf"
        assert imports[0].file_hash == "abc123"
        assert imports[0].transactions_added == 1


class TestPreview:
    """Test parse-only previews."""

    def test_preview_text(self, database, simple_statement_text):
        preview = preview_text(simple_statement_text, statement_year=2025)

        assert len(preview.statement.transactions) == 2
        assert preview.manual_entry_suggested is False
        assert preview.message == "Found 2 transactions"
        assert database.get_transaction_count() == 0

    def test_preview_suggests_manual_entry(self, database):
        preview = preview_text("RBC Royal Bank statement")

        assert preview.statement.transactions == []
        assert preview.manual_entry_suggested is True
        assert preview.message == MANUAL_ENTRY_HINT
        assert preview.skipped[0].reason == "no_activity_section"

    @pytest.mark.asyncio
    async def test_preview_pdf(self, database, simple_statement_text):
        with patch("backoffice.services.importer.extract_pdf_text", return_value=simple_statement_text):
            preview = await preview_pdf(FAKE_PDF, statement_year=2025)
        assert len(preview.statement.transactions) == 2

    @pytest.mark.asyncio
    async def test_preview_rejects_non_pdf(self, database):
        with pytest.raises(ValidationError):
            await preview_pdf(b"not a pdf" * 20)


class TestImportPdf:
    """Test parse-and-save for uploaded PDFs."""

    @pytest.mark.asyncio
    async def test_imports_pdf(self, database, simple_statement_text):
        with patch("backoffice.services.importer.extract_pdf_text", return_value=simple_statement_text):
            response = await import_pdf("june.pdf", FAKE_PDF, statement_year=2025)

        assert response.filename == "june.pdf"
        assert response.transactions_added == 2
        assert database.get_statement_imports()[0].file_hash == compute_file_hash(FAKE_PDF)

    @pytest.mark.asyncio
    async def test_import_with_nothing_parsed(self, database):
        with patch("backoffice.services.importer.extract_pdf_text", return_value="Unreadable layout"):
            response = await import_pdf("odd.pdf", FAKE_PDF)

        assert response.transactions_found == 0
        assert response.message == MANUAL_ENTRY_HINT
        assert database.get_statement_imports() == []

    @pytest.mark.asyncio
    async def test_extraction_failure_propagates(self, database):
        with patch(
            "backoffice.services.importer.extract_pdf_text",
            side_effect=ExtractionError("PDF appears to be empty or has no text layer"),
        ):
            with pytest.raises(ExtractionError):
                await import_pdf("scan.pdf", FAKE_PDF)
