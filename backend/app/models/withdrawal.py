from datetime import datetime
from typing import Literal

from pydantic import Field

from backend.app.core.base import Money, Record, utcnow
from backend.app.core.constants import DEFAULT_WITHDRAW_METHOD


class WithdrawalRequest(Record):
    id: str
    user_id: str
    amount: Money = Field(gt=0)
    method: str = DEFAULT_WITHDRAW_METHOD
    details: str = ""
    # Payout happens outside the service; the status is written once
    status: Literal["pending"] = "pending"
    created_at: datetime = Field(default_factory=utcnow)
