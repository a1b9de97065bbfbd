# backend/app/services/wallet.py
"""
Wallet service - balance, ledger history and withdrawal requests.

The balance is the user's `earnings` field. A withdrawal request debits it
immediately and is recorded as `pending`; settlement happens outside the
service and no code path changes the status afterwards.
"""
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from backend.app.core.base import new_id, utcnow
from backend.app.core.constants import (
    DEFAULT_WITHDRAW_METHOD,
    MONEY_QUANTUM,
    TRANSACTIONS,
    TRANSACTION_WITHDRAW,
    USERS,
    WITHDRAW_STATUS_PENDING,
    WITHDRAWS,
)
from backend.app.core.exceptions import InsufficientBalanceError, InvalidInputError
from backend.app.core.logging import get_logger
from backend.app.core.metrics import withdrawals_requested_total
from backend.app.core.store import RecordStore
from backend.app.models.transaction import Transaction
from backend.app.models.user import User
from backend.app.models.withdrawal import WithdrawalRequest
from backend.app.services.users import UserNotFoundError

logger = get_logger(__name__)


class InvalidAmountError(InvalidInputError):
    def __init__(self):
        super().__init__("Invalid amount")


def parse_amount(raw: Any) -> Decimal:
    """
    Accept a positive number or numeric string with at most two decimal places.

    Raises:
        InvalidAmountError: anything else (including booleans, zero and fractions of a cent)
    """
    if raw is None or isinstance(raw, bool):
        raise InvalidAmountError()
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmountError() from None
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmountError()
    try:
        cents = amount.quantize(MONEY_QUANTUM)
    except InvalidOperation:
        raise InvalidAmountError() from None
    if cents != amount:
        raise InvalidAmountError()
    return cents


class WalletService:
    """Service class for wallet operations."""

    def __init__(self, store: RecordStore):
        self.store = store

    async def _get_user(self, user_id: str) -> User:
        for record in await self.store.load(USERS):
            user = User.from_record(record)
            if user.id == user_id:
                return user
        raise UserNotFoundError()

    async def list_transactions(self, user_id: str) -> list[Transaction]:
        """Ledger entries of the user in creation order."""
        transactions = [Transaction.from_record(r) for r in await self.store.load(TRANSACTIONS)]
        return [t for t in transactions if t.user_id == user_id]

    async def list_withdrawals(self, user_id: str) -> list[WithdrawalRequest]:
        withdrawals = [WithdrawalRequest.from_record(r) for r in await self.store.load(WITHDRAWS)]
        return [w for w in withdrawals if w.user_id == user_id]

    async def get_wallet(self, user_id: str) -> dict[str, Any]:
        """
        Get balance and transaction history.

        Raises:
            UserNotFoundError: If user doesn't exist
        """
        user = await self._get_user(user_id)
        return {
            "balance": user.earnings,
            "transactions": await self.list_transactions(user.id),
        }

    async def request_withdrawal(
        self,
        user_id: str,
        amount: Any,
        method: Optional[str] = None,
        details: Optional[str] = None,
    ) -> WithdrawalRequest:
        """
        Debit the balance and record a pending withdrawal plus a negative transaction.

        Raises:
            InvalidAmountError: amount is not a positive number
            UserNotFoundError: If user doesn't exist
            InsufficientBalanceError: amount exceeds current earnings
        """
        value = parse_amount(amount)
        method = (method or "").strip() or DEFAULT_WITHDRAW_METHOD
        details = details or ""

        async with self.store.lock(USERS, WITHDRAWS, TRANSACTIONS):
            users = [User.from_record(r) for r in await self.store.load(USERS)]
            user = next((u for u in users if u.id == user_id), None)
            if user is None:
                raise UserNotFoundError()
            if user.earnings < value:
                raise InsufficientBalanceError()

            user.earnings -= value
            await self.store.save(USERS, [u.to_record() for u in users])

            now = utcnow()
            withdrawal = WithdrawalRequest(
                id=new_id("w_"),
                user_id=user.id,
                amount=value,
                method=method,
                details=details,
                status=WITHDRAW_STATUS_PENDING,
                created_at=now,
            )
            withdrawals = await self.store.load(WITHDRAWS)
            withdrawals.append(withdrawal.to_record())
            await self.store.save(WITHDRAWS, withdrawals)

            transaction = Transaction(
                id=new_id("t_"),
                user_id=user.id,
                type=TRANSACTION_WITHDRAW,
                amount=-value,
                created_at=now,
            )
            transactions = await self.store.load(TRANSACTIONS)
            transactions.append(transaction.to_record())
            await self.store.save(TRANSACTIONS, transactions)

        withdrawals_requested_total.inc()
        logger.info(
            "Withdrawal requested",
            user_id=user.id,
            withdraw_id=withdrawal.id,
            amount=str(value),
            method=method,
        )
        return withdrawal
