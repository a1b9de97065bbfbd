from decimal import Decimal
from typing import Optional
from urllib.parse import quote

from backend.app.core.base import new_id, utcnow
from backend.app.core.constants import REFERRALS, TRANSACTIONS, TRANSACTION_REFERRAL, USERS
from backend.app.core.logging import get_logger
from backend.app.core.metrics import referral_credits_total
from backend.app.core.settings import get_settings
from backend.app.core.store import RecordStore
from backend.app.models.referral import ReferralEvent
from backend.app.models.transaction import Transaction
from backend.app.models.user import User

logger = get_logger(__name__)


def build_referral_link(origin: str, referral_code: str) -> str:
    """Shareable link `{origin}/r/{code}`."""
    return f"{origin.rstrip('/')}/r/{quote(referral_code, safe='')}"


def registration_deep_link(referral_code: str) -> str:
    """Client route the `/r/{code}` redirect points at."""
    return f"/index.html#register?ref={quote(referral_code, safe='')}"


class ReferralService:
    """Credits referrers when someone signs up with their code."""

    def __init__(self, store: RecordStore, bonus: Optional[Decimal] = None):
        self.store = store
        self.bonus = bonus if bonus is not None else get_settings().REFERRAL_BONUS

    async def credit_signup(self, new_user: User, code: Optional[str]) -> Optional[ReferralEvent]:
        """
        Credit the owner of `code` for the signup of `new_user`.

        The referrer gets +1 referral and the fixed bonus; one referral
        event and one transaction are appended. Returns None (and changes
        nothing) when the code is empty or matches no other user.
        """
        if not code:
            return None

        async with self.store.lock(USERS, REFERRALS, TRANSACTIONS):
            users = [User.from_record(r) for r in await self.store.load(USERS)]
            # The new user is excluded so a code collision can't self-refer
            referrer = next(
                (u for u in users if u.referral_code == code and u.id != new_user.id),
                None,
            )
            if referrer is None:
                logger.info("Referral code not matched", code=code, user_id=new_user.id)
                return None

            referrer.referrals_count += 1
            referrer.earnings += self.bonus
            await self.store.save(USERS, [u.to_record() for u in users])

            event = ReferralEvent(
                id=new_id("r_"),
                referrer_id=referrer.id,
                new_user_id=new_user.id,
                amount=self.bonus,
                created_at=utcnow(),
            )
            referrals = await self.store.load(REFERRALS)
            referrals.append(event.to_record())
            await self.store.save(REFERRALS, referrals)

            transaction = Transaction(
                id=new_id("t_"),
                user_id=referrer.id,
                type=TRANSACTION_REFERRAL,
                amount=self.bonus,
                created_at=event.created_at,
            )
            transactions = await self.store.load(TRANSACTIONS)
            transactions.append(transaction.to_record())
            await self.store.save(TRANSACTIONS, transactions)

        referral_credits_total.inc()
        logger.info(
            "Referral credited",
            referrer_id=referrer.id,
            new_user_id=new_user.id,
            amount=str(self.bonus),
        )
        return event

