"""Collision-avoiding short-code allocator."""

import logging
import re
import secrets
from collections.abc import Awaitable, Callable

from src.core.config import constants


logger = logging.getLogger(__name__)

_SHORT_CODE_PATTERN = re.compile(
    rf"^[{constants.SHORT_CODE_ALPHABET}]{{{constants.SHORT_CODE_LENGTH}}}[0-9]?$"
)


def generate_short_code(length: int = constants.SHORT_CODE_LENGTH) -> str:
    """Generate a random code from the confusable-free alphabet (no 0, O, I, 1)."""
    return "".join(secrets.choice(constants.SHORT_CODE_ALPHABET) for _ in range(length))


def is_valid_short_code(code: str) -> bool:
    """Check that a code is 4 alphabet characters, optionally followed by one fallback digit."""
    return bool(_SHORT_CODE_PATTERN.match(code))


async def allocate_short_code(
    exists: Callable[[str], Awaitable[bool]],
    *,
    max_attempts: int = constants.SHORT_CODE_MAX_ATTEMPTS,
) -> str:
    """Allocate a short code that the injected store does not already hold.

    Tries up to ``max_attempts`` fresh 4-character codes. If every one collides,
    returns a 5-character code (a fresh 4-character code plus one random digit)
    without checking it; the store's uniqueness constraint is the final arbiter.

    Args:
        exists: Async predicate reporting whether a code is already taken
        max_attempts: Number of checked attempts before widening

    Returns:
        The allocated code
    """
    for attempt in range(1, max_attempts + 1):
        code = generate_short_code()
        if not await exists(code):
            logger.debug("short_code_allocated", extra={"attempt": attempt})
            return code

    fallback = generate_short_code() + str(secrets.randbelow(10))
    logger.warning("short_code_fallback_used", extra={"attempts": max_attempts})
    return fallback
