"""Parser for bank statement text extracted from PDF statements."""

from datetime import date

from backoffice.config import settings
from backoffice.models import ParsedStatement, SkipReason, StatementMetadata
from backoffice.parsers.detector import detect_metadata, statement_period_bounds
from backoffice.parsers.normalizer import DateTokenError, YearForMonth, normalize_transaction
from backoffice.parsers.segmenter import Segmenter, get_segmenter
from backoffice.parsers.validation import ParseResult, log_parse_result, logger


def parse_statement(
    text: str,
    *,
    statement_year: int | None = None,
    segmenter: Segmenter | None = None,
    infer_year: bool | None = None,
) -> ParseResult:
    """
    Parse raw statement text into metadata and transactions.

    Statement text usually looks like (one blob, line breaks unreliable):
        Account Activity Details ... 02 Jun e-Transfer sent TO JOHN DOE 150.00 2,340.55
        05 Jun Monthly fee 4.95 2,335.60

    Segments that cannot be read are dropped and recorded in
    ParseResult.skipped; nothing here raises for bad content. An empty
    transaction list means the caller should fall back to manual entry.

    Args:
        text: Full text of one statement
        statement_year: Year for "DD Mon" tokens. Defaults to the current year.
        segmenter: Segmentation strategy (defaults to the configured one)
        infer_year: Take the year from the detected statement period when
            statement_year is not given. Defaults to settings.infer_statement_year.

    Returns:
        ParseResult with the ParsedStatement and skip diagnostics
    """
    metadata = detect_metadata(text)
    result = ParseResult(statement=ParsedStatement(metadata=metadata))
    segmenter = segmenter or get_segmenter()
    logger.debug(f"Statement text ({len(text)} chars): {text[:500]!r}")

    if infer_year is None:
        infer_year = settings.infer_statement_year
    year = _resolve_year(metadata, statement_year, infer_year)

    candidates = segmenter.segment(text, result)
    result.segments_processed = len(candidates)

    for candidate in candidates:
        for line in segmenter.split(candidate, result):
            try:
                transaction = normalize_transaction(line, year)
            except DateTokenError as e:
                logger.warning(f"Skipping transaction due to invalid date {line.date_token!r}: {e}")
                result.warnings.append(str(e))
                result.skip(SkipReason.INVALID_DATE, line.description, line.date_token)
                continue
            result.statement.transactions.append(transaction)

    if not result.transactions:
        result.errors.append("No transactions found in statement text")

    log_parse_result(result, f"Statement parser ({segmenter.name})")
    return result


def _resolve_year(
    metadata: StatementMetadata, statement_year: int | None, infer_year: bool
) -> int | YearForMonth:
    """
    Pick the year applied to "DD Mon" tokens.

    An explicit year wins. With inference on and a readable period, months
    before the period's start month belong to the period's end year (a
    Dec-Jan statement). Otherwise the current calendar year is used.
    """
    if statement_year is not None:
        return statement_year

    if infer_year:
        bounds = statement_period_bounds(metadata.statement_period)
        if bounds is not None:
            start, end = bounds

            def year_for_month(month: int) -> int:
                if start.year == end.year or month >= start.month:
                    return start.year
                return end.year

            return year_for_month

        logger.info("No readable statement period, using the current year for transaction dates")

    return date.today().year
