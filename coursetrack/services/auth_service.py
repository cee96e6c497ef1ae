from __future__ import annotations

import logging
from datetime import UTC, datetime

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError

from coursetrack.models.user import Role, User
from coursetrack.repos.user_repo import UserRepo
from coursetrack.services.errors import AccountDisabledError, UserAlreadyExistsError

# Argon2 hash strings encode parameters + salt
logger = logging.getLogger(__name__)

_ph = PasswordHasher()


def hash_password(plain_password: str) -> str:
    if not plain_password:
        raise ValueError("password must be non-empty")
    return _ph.hash(plain_password)


# verify_password() must catch Argon2 exceptions and return False
def verify_password(plain_password: str, password_hash: str) -> bool:
    if not plain_password or not password_hash:
        return False
    try:
        return _ph.verify(password_hash, plain_password)
    except (VerifyMismatchError, VerificationError, InvalidHash):
        return False


async def register_user(
    repo: UserRepo,
    *,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    role: Role = Role.LEARNER,
) -> User:
    if await repo.get_by_email(email) is not None:
        raise UserAlreadyExistsError(email.strip().lower())

    user = User.new(
        email=email,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        created_at=datetime.now(UTC),
        role=role,
    )
    await repo.add(user)
    logger.info("Registered user=%s role=%s", user.id, user.role.value)
    return user


async def authenticate_user(repo: UserRepo, email: str, password: str) -> User | None:
    """Return the user for valid credentials, None otherwise.

    A deactivated account with a correct password raises AccountDisabledError
    so the caller can answer 403 instead of 401.
    """
    user = await repo.get_by_email(email)
    if user is None:
        return None
    if not verify_password(password, user.password_hash):
        return None
    if not user.is_active:
        raise AccountDisabledError()

    try:
        if _ph.check_needs_rehash(user.password_hash):
            await repo.update_password_hash(user.id, _ph.hash(password))
            logger.info("Rehashed password for user=%s", user.id)
    except InvalidHash:
        return None

    now = datetime.now(UTC)
    await repo.touch_last_login(user.id, now)
    return await repo.get_by_id(user.id)
