"""
Transaction segmentation for raw statement text.

Two layouts are supported behind the same interface:

- DateAnchoredSegmenter: the "Account Activity Details" layout where several
  transactions share one "DD Mon" date header. Text is cut at every date
  anchor, then each segment is split again at known transaction phrases.
- AmountAnchoredSegmenter: older layout with one amount per transaction line.
  Text is cut at every amount and the nearest preceding date is attached.

Both produce TransactionCandidate objects and turn them into
RawTransactionLine objects with the same span helper, so sign and date
handling downstream is shared.
"""

import re
from abc import ABC, abstractmethod

from backoffice.config import settings
from backoffice.models import SkipReason
from backoffice.parsers.document_types import RawTransactionLine, TransactionCandidate
from backoffice.parsers.rules import (
    ACTIVITY_SECTION_MARKERS,
    AMOUNT_PATTERN,
    DATE_ANCHOR_PATTERN,
    LOOSE_DATE_PATTERN,
    MONTH_TABLE,
    SUMMARY_LINE_KEYWORDS,
    TRANSACTION_KEYWORDS,
)
from backoffice.parsers.validation import ParseResult, collapse_whitespace, validate_description

_KEYWORD_PATTERNS = tuple(re.compile(re.escape(keyword), re.IGNORECASE) for keyword in TRANSACTION_KEYWORDS)

# Amount-anchored layout: how close a trailing amount must be to count as the balance
BALANCE_MAX_DISTANCE = 50
BALANCE_MAX_GAP_TEXT = 20
LEGACY_MIN_DESCRIPTION_LENGTH = 5


class Segmenter(ABC):
    """Cuts statement text into candidates and candidates into raw lines."""

    name: str

    def __init__(self, min_description_length: int | None = None):
        if min_description_length is None:
            min_description_length = settings.min_description_length
        self.min_description_length = min_description_length

    @abstractmethod
    def segment(self, text: str, result: ParseResult | None = None) -> list[TransactionCandidate]:
        """Return candidates in document order."""

    @abstractmethod
    def split(self, candidate: TransactionCandidate, result: ParseResult | None = None) -> list[RawTransactionLine]:
        """Return the raw transaction lines found in one candidate."""

    def _line_from_span(
        self, date_token: str, span: str, result: ParseResult | None
    ) -> RawTransactionLine | None:
        """
        Pull amount, balance and description out of one transaction's text.

        The first amount is the transaction amount; when there are two or
        more, the last one is the running balance.
        """
        amounts = AMOUNT_PATTERN.findall(span)
        if not amounts:
            _skip(result, SkipReason.NO_AMOUNT, span, date_token)
            return None

        description = collapse_whitespace(AMOUNT_PATTERN.sub("", span))
        if not validate_description(description, min_length=self.min_description_length):
            _skip(result, SkipReason.DESCRIPTION_TOO_SHORT, span, date_token)
            return None

        return RawTransactionLine(
            date_token=date_token,
            description=description,
            amount_token=amounts[0],
            balance_token=amounts[-1] if len(amounts) > 1 else None,
        )


class DateAnchoredSegmenter(Segmenter):
    """Segment on "DD Mon" anchors inside the account activity section."""

    name = "date"

    def segment(self, text: str, result: ParseResult | None = None) -> list[TransactionCandidate]:
        activity_start = find_activity_section(text)
        if activity_start is None:
            _skip(result, SkipReason.NO_ACTIVITY_SECTION, text)
            return []

        activity_text = text[activity_start:]
        anchors = list(DATE_ANCHOR_PATTERN.finditer(activity_text))
        if not anchors:
            _skip(result, SkipReason.NO_DATE_ANCHORS, activity_text)
            return []

        candidates: list[TransactionCandidate] = []
        for i, anchor in enumerate(anchors):
            end = anchors[i + 1].start() if i + 1 < len(anchors) else len(activity_text)
            candidates.append(
                TransactionCandidate(
                    date_token=anchor.group(0),
                    text_segment=activity_text[anchor.end() : end],
                )
            )
        return candidates

    def split(self, candidate: TransactionCandidate, result: ParseResult | None = None) -> list[RawTransactionLine]:
        segment = candidate.text_segment
        if not AMOUNT_PATTERN.search(segment):
            _skip(result, SkipReason.NO_AMOUNT, segment, candidate.date_token)
            return []

        starts = find_keyword_starts(segment)
        if not starts:
            _skip(result, SkipReason.NO_KEYWORD, segment, candidate.date_token)
            return []

        lines: list[RawTransactionLine] = []
        for i, start in enumerate(starts):
            end = starts[i + 1] if i + 1 < len(starts) else len(segment)
            line = self._line_from_span(candidate.date_token, segment[start:end].strip(), result)
            if line:
                lines.append(line)
        return lines


class AmountAnchoredSegmenter(Segmenter):
    """Segment on amounts, attaching the closest preceding date token."""

    name = "amount"

    def segment(self, text: str, result: ParseResult | None = None) -> list[TransactionCandidate]:
        amounts = list(AMOUNT_PATTERN.finditer(text))
        candidates: list[TransactionCandidate] = []

        for i, current in enumerate(amounts):
            start = amounts[i - 1].end() if i > 0 else 0
            preceding = text[start : current.start()]

            dates = list(LOOSE_DATE_PATTERN.finditer(preceding))
            if not dates:
                # Balance columns and header figures have no date of their own
                continue

            date_match = dates[-1]
            description = collapse_whitespace(preceding[date_match.end() :])
            description_lower = description.lower()
            if any(keyword in description_lower for keyword in SUMMARY_LINE_KEYWORDS):
                _skip(result, SkipReason.SUMMARY_LINE, description, date_match.group(0))
                continue
            if len(description) < max(LEGACY_MIN_DESCRIPTION_LENGTH, self.min_description_length):
                _skip(result, SkipReason.DESCRIPTION_TOO_SHORT, description, date_match.group(0))
                continue

            next_amount = amounts[i + 1] if i + 1 < len(amounts) else None
            balance = _trailing_balance(text, current, next_amount)
            text_segment = f"{description} {current.group(0)}"
            if balance:
                text_segment += f" {balance}"

            candidates.append(TransactionCandidate(date_token=date_match.group(0), text_segment=text_segment))

        if not candidates:
            _skip(result, SkipReason.NO_DATE_ANCHORS, text)
        return candidates

    def split(self, candidate: TransactionCandidate, result: ParseResult | None = None) -> list[RawTransactionLine]:
        # Each candidate already holds exactly one transaction
        line = self._line_from_span(candidate.date_token, candidate.text_segment, result)
        return [line] if line else []


SEGMENTERS: dict[str, type[Segmenter]] = {
    DateAnchoredSegmenter.name: DateAnchoredSegmenter,
    AmountAnchoredSegmenter.name: AmountAnchoredSegmenter,
}


def get_segmenter(strategy: str | None = None) -> Segmenter:
    """Build the segmenter for a strategy name (defaults to the configured one)."""
    strategy = strategy or settings.segmentation_strategy
    try:
        return SEGMENTERS[strategy]()
    except KeyError:
        raise ValueError(f"Unknown segmentation strategy: {strategy}") from None


def find_activity_section(text: str) -> int | None:
    """Offset of the first activity section marker, or None."""
    for marker in ACTIVITY_SECTION_MARKERS:
        index = text.find(marker)
        if index != -1:
            return index
    return None


def find_keyword_starts(segment: str) -> list[int]:
    """
    Offsets where a known transaction phrase begins, ascending.

    Every occurrence counts, including a phrase inside a longer one:
    "Contactless Interac purchase" starts spans at both "Contactless" and
    "Interac purchase", and the leading span has no amount of its own.
    """
    return sorted({match.start() for pattern in _KEYWORD_PATTERNS for match in pattern.finditer(segment)})


def _trailing_balance(text: str, current: re.Match[str], next_amount: re.Match[str] | None) -> str | None:
    """Return the next amount if it reads as this line's running balance."""
    if next_amount is None:
        return None
    if next_amount.start() - current.end() >= BALANCE_MAX_DISTANCE:
        return None

    between = text[current.end() : next_amount.start()]
    between_lower = between.lower()
    if len(between.strip()) >= BALANCE_MAX_GAP_TEXT or any(month in between_lower for month in MONTH_TABLE):
        return None
    return next_amount.group(0)


def _skip(result: ParseResult | None, reason: SkipReason, text: str, date_token: str | None = None) -> None:
    if result is not None:
        result.skip(reason, text, date_token)
