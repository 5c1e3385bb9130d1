"""
Petstagram Backend — User Authentication Service
==================================================

What:  Store, verify and rotate hashed credentials for a user ID.
How:   Passwords are hashed with PBKDF2-HMAC-SHA256 and a random 16-byte
       salt, stored as

           pbkdf2_sha256$<iterations>$<salt b64>$<hash b64>

       The iteration count travels with the hash, so it can be raised later
       without invalidating existing rows.

       Hashing is CPU-bound, so it runs in the threadpool and other
       requests keep being served while a password is checked.

Issuing session tokens is handled elsewhere; this service only answers
"do these credentials match".
"""

import base64
import functools
import hashlib
import hmac
import logging
import secrets

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from petstagram.exceptions import ConflictError, NotFoundError, StorageError
from petstagram.models import UserAuthentication
from petstagram.schemas.user import UserAuthResponse

logger = logging.getLogger(__name__)

HASH_ALGORITHM = "pbkdf2_sha256"
HASH_ITERATIONS = 600_000
SALT_BYTES = 16


def hash_password(password: str, iterations: int = HASH_ITERATIONS) -> str:
    salt = secrets.token_bytes(SALT_BYTES)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return "$".join((
        HASH_ALGORITHM,
        str(iterations),
        base64.b64encode(salt).decode("ascii"),
        base64.b64encode(digest).decode("ascii"),
    ))


def check_password(password: str, encoded: str) -> bool:
    """Constant-time comparison against a stored hash. Unknown formats never match."""
    try:
        algorithm, iterations, salt_b64, digest_b64 = encoded.split("$")
        if algorithm != HASH_ALGORITHM:
            return False
        salt = base64.b64decode(salt_b64)
        expected = base64.b64decode(digest_b64)
        rounds = int(iterations)
    except ValueError:
        return False
    actual = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, rounds)
    return hmac.compare_digest(actual, expected)


@functools.lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password(secrets.token_urlsafe(16))


class UserAuthService:
    """Business logic layer for user credentials."""

    async def _find(self, db: AsyncSession, user_id: str):
        try:
            result = await db.execute(
                select(UserAuthentication).where(UserAuthentication.user_id == user_id)
            )
        except SQLAlchemyError as e:
            logger.error("Database error fetching credentials: %s", str(e))
            raise StorageError(
                message="Could not retrieve credentials. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e
        return result.scalar_one_or_none()

    async def create_credentials(
        self,
        db: AsyncSession,
        user_id: str,
        password: str,
    ) -> UserAuthResponse:
        """
        Raises:
            ConflictError: credentials already exist for user_id
            StorageError: insert failed
        """
        if await self._find(db, user_id) is not None:
            raise ConflictError(
                message=f"Credentials for user '{user_id}' already exist",
                context={"user_id": user_id},
            )

        password_hash = await run_in_threadpool(hash_password, password)
        record = UserAuthentication(user_id=user_id, password_hash=password_hash)
        try:
            db.add(record)
            await db.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent registration for the same user_id
            raise ConflictError(
                message=f"Credentials for user '{user_id}' already exist",
                context={"user_id": user_id},
            ) from e
        except SQLAlchemyError as e:
            logger.error("Database error storing credentials: %s", str(e))
            raise StorageError(
                message="Could not store credentials. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Stored credentials for user %s", user_id)
        return UserAuthResponse.model_validate(record)

    async def get_credentials(self, db: AsyncSession, user_id: str) -> UserAuthResponse:
        record = await self._find(db, user_id)
        if record is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        return UserAuthResponse.model_validate(record)

    async def verify_credentials(self, db: AsyncSession, user_id: str, password: str) -> bool:
        """
        False for an unknown user as well as for a wrong password.

        Unknown users are checked against a dummy hash so both cases cost
        the same PBKDF2 work.
        """
        record = await self._find(db, user_id)
        if record is None:
            encoded = await run_in_threadpool(_dummy_hash)
        else:
            encoded = record.password_hash
        valid = await run_in_threadpool(check_password, password, encoded)
        if record is None:
            return False
        if not valid:
            logger.warning("Failed credential check for user %s", user_id)
        return valid

    async def update_password(
        self,
        db: AsyncSession,
        user_id: str,
        password: str,
    ) -> UserAuthResponse:
        """
        Raises:
            NotFoundError: no credentials for user_id
        """
        record = await self._find(db, user_id)
        if record is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        record.password_hash = await run_in_threadpool(hash_password, password)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating credentials: %s", str(e))
            raise StorageError(
                message="Could not update credentials. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e
        logger.info("Password updated for user %s", user_id)
        return UserAuthResponse.model_validate(record)


user_auth_service = UserAuthService()
