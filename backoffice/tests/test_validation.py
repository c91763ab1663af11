"""Tests for the parser validation module."""

import pytest

from backoffice.models import ParsedStatement, SkipReason
from backoffice.parsers.validation import (
    ParseResult,
    ValidationError,
    clean_amount_string,
    collapse_whitespace,
    make_snippet,
    validate_description,
    validate_file_contents,
    validate_pdf_contents,
)


class TestValidateFileContents:
    """Test file contents validation."""

    def test_rejects_empty_contents(self):
        """Should reject empty file contents."""
        with pytest.raises(ValidationError, match="empty"):
            validate_file_contents(b"")

    def test_rejects_too_small_contents(self):
        """Should reject files smaller than minimum size."""
        with pytest.raises(ValidationError, match="too small"):
            validate_file_contents(b"abc", min_size=10)

    def test_rejects_too_large_contents(self):
        with pytest.raises(ValidationError, match="too large"):
            validate_file_contents(b"x" * 50, max_size=20)

    def test_accepts_valid_contents(self):
        """Should accept valid file contents."""
        validate_file_contents(b"Valid file contents here", min_size=10)


class TestValidatePdfContents:
    """Test PDF upload validation."""

    def test_accepts_pdf_header(self):
        validate_pdf_contents(b"%PDF-1.7\n" + b"0" * 200)

    def test_rejects_non_pdf(self):
        """Should reject files without the PDF header."""
        with pytest.raises(ValidationError, match="PDF"):
            validate_pdf_contents(b"Date,Amount\n" + b"0" * 200)


class TestValidateDescription:
    """Test description validation."""

    def test_accepts_valid_description(self):
        assert validate_description("Monthly fee") is True

    def test_rejects_empty(self):
        assert validate_description("") is False

    def test_rejects_too_short(self):
        assert validate_description("ab") is False

    def test_respects_min_length(self):
        assert validate_description("Monthly fee", min_length=20) is False


class TestCleanAmountString:
    def test_removes_currency_and_separators(self):
        assert clean_amount_string("$ 2,340.55") == "2340.55"

    def test_empty_string(self):
        assert clean_amount_string("") == "0"


class TestTextHelpers:
    def test_collapse_whitespace(self):
        assert collapse_whitespace("  e-Transfer   sent\n TO  JOHN ") == "e-Transfer sent TO JOHN"

    def test_short_snippet_unchanged(self):
        assert make_snippet("Monthly fee") == "Monthly fee"

    def test_long_snippet_truncated(self):
        snippet = make_snippet("x" * 300, length=20)
        assert len(snippet) == 20
        assert snippet.endswith("...")


class TestParseResult:
    """Test ParseResult dataclass."""

    def test_empty_result(self):
        result = ParseResult(statement=ParsedStatement())
        assert result.transactions == []
        assert result.rows_skipped == 0
        assert result.success_rate == 0.0

    def test_skip_records_snippet(self):
        """Should record the reason, date token and a whitespace-collapsed snippet."""
        result = ParseResult(statement=ParsedStatement())
        result.skip(SkipReason.NO_KEYWORD, "  Payroll   deposit 1,000.00 ", "03 Jun")

        assert result.rows_skipped == 1
        skipped = result.skipped[0]
        assert skipped.reason == SkipReason.NO_KEYWORD
        assert skipped.snippet == "Payroll deposit 1,000.00"
        assert skipped.date_token == "03 Jun"
