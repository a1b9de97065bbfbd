from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import Field

from backend.app.core.base import Money, Record, utcnow


class User(Record):
    id: str
    phone: str
    name: str
    password_hash: str
    referral_code: str
    # Code supplied at signup, stored as given; never changed afterwards
    referred_by: Optional[str] = None
    referrals_count: int = Field(default=0, ge=0)
    earnings: Money = Field(default=Decimal("0"), ge=0)
    created_at: datetime = Field(default_factory=utcnow)

    def public(self) -> dict[str, Any]:
        """Record without the password hash."""
        return self.model_dump(by_alias=True, mode="json", exclude={"password_hash"})
