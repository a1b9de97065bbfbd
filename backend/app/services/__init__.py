# backend/app/services/__init__.py
"""
Services layer for business logic.
Keeps API endpoints thin and business logic testable and reusable.
"""

from backend.app.services.referrals import (
    ReferralService,
    build_referral_link,
    registration_deep_link,
)
from backend.app.services.users import (
    UserService,
    PhoneTakenError,
    UserNotFoundError,
    InvalidCredentialsError,
    generate_referral_code,
)
from backend.app.services.wallet import (
    WalletService,
    InvalidAmountError,
    parse_amount,
)
from backend.app.services.leaderboard import compute_leaderboard

__all__ = [
    # Referral ledger
    "ReferralService",
    "build_referral_link",
    "registration_deep_link",
    # User service
    "UserService",
    "PhoneTakenError",
    "UserNotFoundError",
    "InvalidCredentialsError",
    "generate_referral_code",
    # Wallet service
    "WalletService",
    "InvalidAmountError",
    "parse_amount",
    # Leaderboard
    "compute_leaderboard",
]
