"""Statement import service: PDF to preview, preview to ledger."""

import logging
from datetime import datetime

from backoffice.config import settings
from backoffice.db.sqlite import db
from backoffice.models import (
    ImportResponse,
    ParsedStatement,
    ParsePreviewResponse,
    StatementImport,
)
from backoffice.parsers.pdf_text import extract_pdf_text
from backoffice.parsers.statement import parse_statement
from backoffice.parsers.validation import ParseResult, validate_pdf_contents
from backoffice.services.dedup import compute_file_hash

logger = logging.getLogger(__name__)

MANUAL_ENTRY_HINT = "No transactions could be read from this statement. Add them manually instead."


def preview_text(text: str, statement_year: int | None = None) -> ParsePreviewResponse:
    """Parse statement text without saving anything."""
    result = parse_statement(text, statement_year=statement_year)
    return _to_preview(result)


async def preview_pdf(contents: bytes, statement_year: int | None = None) -> ParsePreviewResponse:
    """
    Parse an uploaded PDF statement without saving anything.

    Raises:
        ValidationError: If the upload is not a usable PDF
        ExtractionError: If no text can be extracted
    """
    result = _parse_pdf(contents, statement_year)
    return _to_preview(result)


async def import_pdf(filename: str, contents: bytes, statement_year: int | None = None) -> ImportResponse:
    """Parse an uploaded PDF statement and save its new transactions."""
    result = _parse_pdf(contents, statement_year)

    if not result.transactions:
        return ImportResponse(
            filename=filename,
            bank_name=result.statement.metadata.bank_name.value,
            transactions_found=0,
            transactions_added=0,
            transactions_skipped=0,
            message=MANUAL_ENTRY_HINT,
        )

    return save_statement(result.statement, filename=filename, file_hash=compute_file_hash(contents))


def save_statement(
    statement: ParsedStatement, filename: str | None = None, file_hash: str | None = None
) -> ImportResponse:
    """
    Save a parsed (possibly user-corrected) statement to the ledger.

    Transactions already stored with the same date, description and amount
    are skipped. Every call is recorded as a statement import.
    """
    metadata = statement.metadata
    added, skipped = db.add_transactions_batch(statement)
    logger.info(f"Saved statement from {metadata.bank_name.value}: {added} added, {skipped} duplicates skipped")

    db.add_statement_import(
        StatementImport(
            filename=filename,
            file_hash=file_hash,
            bank_name=metadata.bank_name.value,
            account_number=metadata.account_number or None,
            statement_period=metadata.statement_period or None,
            transactions_added=added,
            transactions_skipped=skipped,
            imported_at=datetime.now().isoformat(),
        )
    )

    if skipped > 0:
        message = f"Saved {added} new transactions ({skipped} duplicates skipped)"
    else:
        message = f"Successfully saved {added} transactions"

    return ImportResponse(
        filename=filename,
        bank_name=metadata.bank_name.value,
        transactions_found=len(statement.transactions),
        transactions_added=added,
        transactions_skipped=skipped,
        message=message,
    )


def _parse_pdf(contents: bytes, statement_year: int | None) -> ParseResult:
    validate_pdf_contents(contents, max_size=settings.max_upload_bytes)
    text = extract_pdf_text(contents)
    return parse_statement(text, statement_year=statement_year)


def _to_preview(result: ParseResult) -> ParsePreviewResponse:
    count = len(result.transactions)
    if count:
        message = f"Found {count} transactions"
        if result.rows_skipped:
            message += f" ({result.rows_skipped} segments skipped)"
    else:
        message = MANUAL_ENTRY_HINT

    return ParsePreviewResponse(
        statement=result.statement,
        skipped=result.skipped,
        segments_processed=result.segments_processed,
        manual_entry_suggested=count == 0,
        message=message,
    )
