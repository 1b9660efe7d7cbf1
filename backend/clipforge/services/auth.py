"""
Credential hashing and account operations.

bcrypt is CPU-bound by design, so hashing and checking run in a worker
thread to keep the event loop responsive.
"""
import asyncio
import logging
from typing import Optional

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from clipforge.config import settings
from clipforge.db.models import User
from clipforge.errors import AuthInvalid, BadRequest
from clipforge.services import project_store

logger = logging.getLogger(__name__)

# bcrypt only considers the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def _hash(password: str, rounds: int) -> str:
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=rounds)).decode("ascii")


def _check(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("ascii"))
    except ValueError:
        # Malformed stored hash
        return False


async def hash_password(password: str, rounds: Optional[int] = None) -> str:
    return await asyncio.to_thread(_hash, password, rounds or settings.auth.bcrypt_rounds)


async def verify_password(password: str, password_hash: str) -> bool:
    return await asyncio.to_thread(_check, password, password_hash)


async def register_user(session: AsyncSession, email: str, password: str) -> User:
    """Create an account.

    Raises:
        BadRequest: If the email is already registered
    """
    if await project_store.get_user_by_email(session, email) is not None:
        raise BadRequest("Email already registered")
    password_hash = await hash_password(password)
    try:
        return await project_store.create_user(session, email, password_hash)
    except IntegrityError:
        # A concurrent registration took the address after the check above
        await session.rollback()
        raise BadRequest("Email already registered")


async def authenticate(session: AsyncSession, email: str, password: str) -> User:
    """Return the user for valid credentials.

    Unknown emails and wrong passwords are indistinguishable to the caller.

    Raises:
        AuthInvalid: If the credentials do not match an account
    """
    user = await project_store.get_user_by_email(session, email)
    if user is None or not await verify_password(password, user.password_hash):
        logger.info("Failed login attempt")
        raise AuthInvalid()
    return user
