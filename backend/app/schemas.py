from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from typing import Any, Optional, List
from datetime import datetime

from backend.app.core.base import Money
from backend.app.core.sanitize import sanitize_user_input
from backend.app.models.transaction import Transaction
from backend.app.models.withdrawal import WithdrawalRequest


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Auth ---
def _digits_to_str(v: Any) -> Any:
    """Phones often arrive as JSON numbers; keep them as the digits sent."""
    if isinstance(v, int) and not isinstance(v, bool):
        return str(v)
    return v


# Required fields are optional here so a missing one is reported as
# 400 "Missing fields" by the service rather than a schema error.
class RegisterRequest(BaseModel):
    phone: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    ref: Optional[str] = None

    @field_validator("phone", mode="before")
    @classmethod
    def phone_as_text(cls, v: Any) -> Any:
        return _digits_to_str(v)

    @field_validator("name")
    @classmethod
    def sanitize_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return sanitize_user_input(v, max_length=200).strip()


class LoginRequest(BaseModel):
    phone: Optional[str] = None
    password: Optional[str] = None

    @field_validator("phone", mode="before")
    @classmethod
    def phone_as_text(cls, v: Any) -> Any:
        return _digits_to_str(v)


class PublicUser(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    phone: str
    name: str
    referral_code: str
    referred_by: Optional[str] = None
    referrals_count: int = 0
    earnings: Money
    created_at: datetime


class AuthResponse(BaseModel):
    token: str
    user: PublicUser


# --- Account ---
class WalletView(BaseModel):
    balance: Money
    transactions: List[Transaction]


class MeResponse(BaseModel):
    user: PublicUser
    wallet: WalletView
    withdraws: List[WithdrawalRequest]


class ReferralLinkResponse(BaseModel):
    link: str


# --- Withdrawals ---
class WithdrawRequest(BaseModel):
    # Parsed by the wallet service: numbers and numeric strings are accepted
    amount: Any = None
    method: Optional[str] = None
    details: Optional[str] = None

    @field_validator("method", "details")
    @classmethod
    def sanitize_text_fields(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return sanitize_user_input(v, max_length=500)


class WithdrawResponse(BaseModel):
    ok: bool = True
    withdraw: WithdrawalRequest


# --- Leaderboard ---
class LeaderboardEntry(BaseModel):
    name: str
    earnings: Money
    referrals: int


class LeaderboardResponse(CamelModel):
    top_by_earnings: List[LeaderboardEntry]
    top_by_referrals: List[LeaderboardEntry]


class OkResponse(BaseModel):
    ok: bool = True
