"""Shared validation utilities for the statement reader."""

import logging
from dataclasses import dataclass, field

from backoffice.models import ParsedStatement, ParsedTransaction, SkippedSegment, SkipReason

# Configure logging for parsers
logger = logging.getLogger("backoffice.parsers")

SNIPPET_LENGTH = 120


@dataclass
class ParseResult:
    """Result of parsing a bank statement."""

    statement: ParsedStatement
    segments_processed: int = 0
    skipped: list[SkippedSegment] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def transactions(self) -> list[ParsedTransaction]:
        return self.statement.transactions

    @property
    def rows_skipped(self) -> int:
        return len(self.skipped)

    @property
    def success_rate(self) -> float:
        """Calculate the parsing success rate."""
        attempted = len(self.transactions) + self.rows_skipped
        if attempted == 0:
            return 0.0
        return (len(self.transactions) / attempted) * 100

    def skip(self, reason: SkipReason, text: str = "", date_token: str | None = None) -> None:
        """Record a dropped segment with a short snippet for diagnostics."""
        snippet = make_snippet(text)
        self.skipped.append(SkippedSegment(reason=reason, snippet=snippet, date_token=date_token))
        logger.debug(f"Skipped segment ({reason.value}) {date_token or '-'}: {snippet!r}")


class ValidationError(Exception):
    """Raised when validation fails."""

    pass


def validate_file_contents(contents: bytes, min_size: int = 10, max_size: int | None = None) -> None:
    """
    Validate file contents before parsing.

    Args:
        contents: Raw file bytes
        min_size: Minimum expected file size in bytes
        max_size: Maximum accepted file size in bytes

    Raises:
        ValidationError: If validation fails
    """
    if not contents:
        raise ValidationError("File is empty")

    if len(contents) < min_size:
        raise ValidationError(f"File too small ({len(contents)} bytes), minimum {min_size} bytes expected")

    if max_size is not None and len(contents) > max_size:
        raise ValidationError(f"File too large ({len(contents)} bytes), maximum {max_size} bytes allowed")


def validate_pdf_contents(contents: bytes, max_size: int | None = None) -> None:
    """Validate that an upload looks like a PDF document."""
    validate_file_contents(contents, min_size=100, max_size=max_size)
    if not contents.lstrip().startswith(b"%PDF-"):
        raise ValidationError("File does not appear to be a PDF")


def validate_description(description: str, min_length: int = 3, max_length: int = 500) -> bool:
    """
    Validate a transaction description.

    Args:
        description: The description to validate
        min_length: Minimum length
        max_length: Maximum length

    Returns:
        True if valid, False otherwise
    """
    if not description:
        return False

    length = len(description.strip())
    return min_length <= length <= max_length


def clean_amount_string(amount_str: str) -> str:
    """
    Clean an amount string for parsing.

    Args:
        amount_str: Raw amount string

    Returns:
        Cleaned amount string ready for Decimal conversion
    """
    if not amount_str:
        return "0"

    # Remove currency symbols, whitespace and thousand separators
    return amount_str.replace("$", "").replace(" ", "").replace(",", "").strip()


def collapse_whitespace(text: str) -> str:
    """Collapse every whitespace run to a single space and trim."""
    return " ".join(text.split())


def make_snippet(text: str, length: int = SNIPPET_LENGTH) -> str:
    """Shorten segment text for diagnostics."""
    text = collapse_whitespace(text)
    if len(text) <= length:
        return text
    return text[: length - 3] + "..."


def log_parse_result(result: ParseResult, parser_name: str) -> None:
    """
    Log parsing results for debugging.

    Args:
        result: The parse result
        parser_name: Name of the parser
    """
    metadata = result.statement.metadata
    logger.info(
        f"{parser_name}: Parsed {len(result.transactions)} transactions "
        f"(bank {metadata.bank_name.value}, "
        f"segments {result.segments_processed}, "
        f"skipped {result.rows_skipped})"
    )

    if result.errors:
        for error in result.errors[:5]:  # Log first 5 errors
            logger.warning(f"{parser_name}: {error}")

    if result.warnings:
        for warning in result.warnings[:5]:  # Log first 5 warnings
            logger.debug(f"{parser_name}: {warning}")
