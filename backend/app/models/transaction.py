from datetime import datetime
from typing import Literal

from pydantic import Field

from backend.app.core.base import Money, Record, utcnow


class Transaction(Record):
    """Ledger entry: positive amount for credit, negative for debit."""

    id: str
    user_id: str
    type: Literal["referral", "withdraw"]
    amount: Money
    created_at: datetime = Field(default_factory=utcnow)
