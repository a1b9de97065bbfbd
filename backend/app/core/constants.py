"""
Shared constants for the backend application.
"""
from decimal import Decimal

# ---------------------------------------------------------------------------
# Record store collections
# ---------------------------------------------------------------------------
USERS = "users"
REFERRALS = "referrals"
WITHDRAWS = "withdraws"
TRANSACTIONS = "transactions"

COLLECTIONS = (USERS, REFERRALS, WITHDRAWS, TRANSACTIONS)

# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------
TRANSACTION_REFERRAL = "referral"
TRANSACTION_WITHDRAW = "withdraw"

# Withdrawals are created pending; nothing in the service moves them on
WITHDRAW_STATUS_PENDING = "pending"
DEFAULT_WITHDRAW_METHOD = "UPI"

# Money is kept to whole cents
MONEY_QUANTUM = Decimal("0.01")

# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------
JWT_ALGORITHM = "HS256"
JWT_EXPIRY_HOURS = 24 * 7  # 7 days

REFERRAL_CODE_PREFIX_LENGTH = 4
REFERRAL_CODE_SUFFIX_LENGTH = 4
REFERRAL_CODE_LONG_SUFFIX_LENGTH = 8
REFERRAL_CODE_MAX_ATTEMPTS = 10
