"""Intermediate records passed between the statement reader stages."""

from pydantic import BaseModel, ConfigDict


class TransactionCandidate(BaseModel):
    """Text following one date anchor, up to the next anchor."""

    model_config = ConfigDict(frozen=True)

    date_token: str  # Raw token, e.g. "02 Jun"
    text_segment: str


class RawTransactionLine(BaseModel):
    """One transaction's raw pieces, before sign and date handling."""

    model_config = ConfigDict(frozen=True)

    date_token: str
    description: str
    amount_token: str
    balance_token: str | None = None
