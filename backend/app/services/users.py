# backend/app/services/users.py
"""
User service - registration, login and lookups.
"""
from typing import Optional

from backend.app.core.base import new_id, random_token
from backend.app.core.constants import (
    REFERRAL_CODE_LONG_SUFFIX_LENGTH,
    REFERRAL_CODE_MAX_ATTEMPTS,
    REFERRAL_CODE_PREFIX_LENGTH,
    REFERRAL_CODE_SUFFIX_LENGTH,
    USERS,
)
from backend.app.core.exceptions import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    UnauthorizedError,
)
from backend.app.core.logging import get_logger
from backend.app.core.metrics import users_registered_total
from backend.app.core.password_utils import hash_password_async, verify_password_async
from backend.app.core.settings import get_settings
from backend.app.core.store import RecordStore
from backend.app.models.user import User
from backend.app.services.referrals import ReferralService

logger = get_logger(__name__)


class PhoneTakenError(ConflictError):
    def __init__(self):
        super().__init__("Phone already registered")


class UserNotFoundError(NotFoundError):
    def __init__(self):
        super().__init__("User not found")


class InvalidCredentialsError(UnauthorizedError):
    def __init__(self):
        super().__init__("Invalid credentials")


def generate_referral_code(name: str, suffix_length: int = REFERRAL_CODE_SUFFIX_LENGTH) -> str:
    """First word of the name (max 4 chars, lowercased) plus a random base-36 suffix."""
    parts = name.split()
    prefix = (parts[0] if parts else "user").lower()[:REFERRAL_CODE_PREFIX_LENGTH]
    return prefix + random_token(suffix_length)


class UserService:
    """Service class for user identity operations."""

    def __init__(
        self,
        store: RecordStore,
        referrals: Optional[ReferralService] = None,
        bcrypt_rounds: Optional[int] = None,
    ):
        self.store = store
        self.referrals = referrals or ReferralService(store)
        self.bcrypt_rounds = bcrypt_rounds or get_settings().BCRYPT_ROUNDS

    async def list_users(self) -> list[User]:
        return [User.from_record(r) for r in await self.store.load(USERS)]

    async def get_user(self, user_id: str) -> Optional[User]:
        """
        Find a user by id.

        Returns:
            User or None if not found
        """
        for user in await self.list_users():
            if user.id == user_id:
                return user
        return None

    async def get_user_or_404(self, user_id: str) -> User:
        user = await self.get_user(user_id)
        if user is None:
            raise UserNotFoundError()
        return user

    async def find_by_phone(self, phone: str) -> Optional[User]:
        for user in await self.list_users():
            if user.phone == phone:
                return user
        return None

    @staticmethod
    def _unique_referral_code(name: str, users: list[User]) -> str:
        taken = {u.referral_code for u in users}
        for _ in range(REFERRAL_CODE_MAX_ATTEMPTS):
            code = generate_referral_code(name)
            if code not in taken:
                return code
        while True:
            code = generate_referral_code(name, REFERRAL_CODE_LONG_SUFFIX_LENGTH)
            if code not in taken:
                return code

    async def register(
        self,
        phone: Optional[str],
        password: Optional[str],
        name: Optional[str],
        ref: Optional[str] = None,
    ) -> User:
        """
        Create a user and credit the referrer behind `ref`, if any.

        An unknown referral code is ignored; registration still succeeds.
        Crediting runs after the user is saved and is not atomic with it.

        Raises:
            InvalidInputError: phone, password or name missing
            PhoneTakenError: phone already registered
        """
        phone = (phone or "").strip()
        name = (name or "").strip()
        ref = (ref or "").strip() or None
        if not phone or not password or not name:
            raise InvalidInputError("Missing fields")

        # Fast path before paying for the hash; re-checked under the lock
        if await self.find_by_phone(phone):
            raise PhoneTakenError()

        password_hash = await hash_password_async(password, self.bcrypt_rounds)

        async with self.store.lock(USERS):
            users = await self.list_users()
            if any(u.phone == phone for u in users):
                raise PhoneTakenError()
            user = User(
                id=new_id("u_"),
                phone=phone,
                name=name,
                password_hash=password_hash,
                referral_code=self._unique_referral_code(name, users),
                referred_by=ref,
            )
            users.append(user)
            await self.store.save(USERS, [u.to_record() for u in users])

        users_registered_total.labels(referred=str(bool(ref)).lower()).inc()
        logger.info("User registered", user_id=user.id, referral_code=user.referral_code)

        if ref:
            await self.referrals.credit_signup(user, ref)
        return user

    async def login(self, phone: Optional[str], password: Optional[str]) -> User:
        """
        Raises:
            InvalidInputError: phone or password missing
            UserNotFoundError: no user with this phone
            InvalidCredentialsError: password does not match
        """
        phone = (phone or "").strip()
        if not phone or not password:
            raise InvalidInputError("Missing credentials")

        user = await self.find_by_phone(phone)
        if user is None:
            raise UserNotFoundError()
        if not await verify_password_async(password, user.password_hash):
            logger.warning("Login failed", user_id=user.id)
            raise InvalidCredentialsError()
        return user
