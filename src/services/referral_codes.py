"""Referral short codes for worker profiles."""

import logging

import aiosqlite

from src.core import db_client
from src.core.errors import ConflictError, NotFoundError, RequestValidationError
from src.core.logging import span
from src.core.short_code import allocate_short_code, is_valid_short_code
from src.domain.user import Actor, Profile, UserRole
from src.services import authorization, service_registry


logger = logging.getLogger(__name__)


async def _referral_code_exists(code: str) -> bool:
    row = await db_client.fetch_one("SELECT 1 AS taken FROM profiles WHERE referral_code = ?", (code,))
    return row is not None


async def _get_profile(user_id: int) -> Profile:
    row = await db_client.fetch_one("SELECT * FROM profiles WHERE user_id = ?", (user_id,))
    if row is None:
        raise NotFoundError("Profile not found")
    return Profile.model_validate(row)


async def assign_referral_code(*, user_id: int, actor: Actor) -> Profile:
    """Allocate and store a referral code for a worker who has none.

    Args:
        user_id: Worker receiving the code
        actor: Acting party; the worker themself or an operator

    Returns:
        The updated profile

    Raises:
        AuthorizationError: If the actor may not manage this profile
        NotFoundError: If the user or profile does not exist
        RequestValidationError: If the user is not a worker
        ConflictError: If the user already has a code or the stored code collided
    """
    with span("referral_codes.assign_referral_code"):
        authorization.authorize_profile_access(actor, user_id=user_id)

        user = await service_registry.get_user(user_id=user_id)
        if user.role != UserRole.WORKER:
            raise RequestValidationError("Only workers can have referral codes")

        profile = await _get_profile(user_id)
        if profile.referral_code:
            raise ConflictError("User already has a referral code")

        code = await allocate_short_code(_referral_code_exists)
        try:
            async with db_client.transaction() as tx:
                updated = await tx.execute(
                    "UPDATE profiles SET referral_code = ?, updated = datetime('now') "
                    "WHERE user_id = ? AND referral_code IS NULL",
                    (code, user_id),
                )
                if updated == 0:
                    raise ConflictError("User already has a referral code")
        except aiosqlite.IntegrityError as e:
            logger.warning("Referral code collided on insert", extra={"user_id": user_id})
            raise ConflictError("Referral code already taken, please retry") from e

        logger.info("Assigned referral code", extra={"user_id": user_id})
        return profile.model_copy(update={"referral_code": code})


async def find_profile_by_referral_code(*, code: str) -> Profile | None:
    """Look up a profile by referral code, case-insensitively.

    Returns None for malformed codes and unknown codes alike.
    """
    normalized = code.strip().upper()
    if not is_valid_short_code(normalized):
        return None
    row = await db_client.fetch_one("SELECT * FROM profiles WHERE referral_code = ?", (normalized,))
    return Profile.model_validate(row) if row else None


async def record_referral(*, user_id: int, code: str) -> Profile:
    """Mark a user as referred by the owner of ``code``; the first referral wins.

    Raises:
        NotFoundError: If the code or the user's profile does not exist
        RequestValidationError: If a user tries to refer themself
        ConflictError: If the user was already referred
    """
    with span("referral_codes.record_referral"):
        referrer = await find_profile_by_referral_code(code=code)
        if referrer is None:
            raise NotFoundError("Referral code not found")
        if referrer.user_id == user_id:
            raise RequestValidationError("Users cannot refer themselves")

        profile = await _get_profile(user_id)
        async with db_client.transaction() as tx:
            updated = await tx.execute(
                "UPDATE profiles SET referred_by = ?, updated = datetime('now') "
                "WHERE user_id = ? AND referred_by IS NULL",
                (referrer.user_id, user_id),
            )
            if updated == 0:
                raise ConflictError("User was already referred")

        logger.info("Recorded referral", extra={"user_id": user_id, "referred_by": referrer.user_id})
        return profile.model_copy(update={"referred_by": referrer.user_id})
