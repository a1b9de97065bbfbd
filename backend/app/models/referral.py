from datetime import datetime

from pydantic import Field

from backend.app.core.base import Money, Record, utcnow


class ReferralEvent(Record):
    """Audit record of one credited signup. Immutable."""

    id: str
    # Who invited
    referrer_id: str
    # Who signed up with the referrer's code
    new_user_id: str
    amount: Money
    created_at: datetime = Field(default_factory=utcnow)
