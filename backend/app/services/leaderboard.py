from typing import Optional

from backend.app.core.constants import USERS
from backend.app.core.settings import get_settings
from backend.app.core.store import RecordStore
from backend.app.models.user import User
from backend.app.schemas import LeaderboardEntry


def _entry(user: User) -> LeaderboardEntry:
    return LeaderboardEntry(name=user.name, earnings=user.earnings, referrals=user.referrals_count)


async def compute_leaderboard(store: RecordStore, limit: Optional[int] = None) -> dict[str, list[LeaderboardEntry]]:
    """
    Rank all users by earnings and by referral count, descending.

    Recomputed on every call. Ties keep store (insertion) order because
    `sorted` is stable, including with reverse=True.
    """
    if limit is None:
        limit = get_settings().LEADERBOARD_SIZE
    users = [User.from_record(r) for r in await store.load(USERS)]
    by_earnings = sorted(users, key=lambda u: u.earnings, reverse=True)[:limit]
    by_referrals = sorted(users, key=lambda u: u.referrals_count, reverse=True)[:limit]
    return {
        "top_by_earnings": [_entry(u) for u in by_earnings],
        "top_by_referrals": [_entry(u) for u in by_referrals],
    }
