"""Client-side inspection of access tokens.

The client never verifies signatures; it only reads the ``exp`` claim to
decide when to refresh. The backend stays the authority on validity.
"""

import time
from collections.abc import Callable

from jose import JWTError, jwt

from todogether.core.logging import get_logger

logger = get_logger(__name__)


def decode_expiry(token: str) -> float | None:
    """Return the ``exp`` claim in epoch seconds, or None if it cannot be read."""
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError as e:
        logger.debug("token_decode_failed", error=str(e))
        return None

    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        logger.debug("token_exp_claim_missing", exp_type=type(exp).__name__)
        return None
    return float(exp)


def is_expired(token: str | None, now: Callable[[], float] = time.time) -> bool:
    """Check a token against the current time.

    Missing tokens and tokens whose expiry cannot be decoded count as expired.
    """
    if not token:
        return True
    expiry = decode_expiry(token)
    if expiry is None:
        return True
    return now() >= expiry
