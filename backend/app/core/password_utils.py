"""Password hashing. Uses bcrypt directly (passlib has incompatibilities with bcrypt 4.1+)."""
import asyncio
from typing import Optional

import bcrypt


def _to_bytes(password: str) -> bytes:
    """Convert password to bytes, truncate to 72 bytes (bcrypt limit)."""
    if not isinstance(password, str):
        password = str(password)
    return password.encode("utf-8")[:72]


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash password with bcrypt."""
    salt = bcrypt.gensalt(rounds) if rounds else bcrypt.gensalt()
    return bcrypt.hashpw(_to_bytes(password), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Verify plain password against bcrypt hash."""
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_to_bytes(plain), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash in storage
        return False


async def hash_password_async(password: str, rounds: Optional[int] = None) -> str:
    """bcrypt is CPU-bound; keep it off the event loop."""
    return await asyncio.to_thread(hash_password, password, rounds)


async def verify_password_async(plain: str, hashed: str) -> bool:
    return await asyncio.to_thread(verify_password, plain, hashed)
