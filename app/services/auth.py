"""
Taste Palette API - Authentication Service.

Password hashing, session tokens and the one-time tokens used for email
verification and password reset.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
import logging
import secrets

import bcrypt
from jose import jwt, JWTError

from settings import settings

logger = logging.getLogger(__name__)


# bcrypt ignores everything past 72 bytes
MAX_PASSWORD_BYTES = 72
BCRYPT_ROUNDS = 12

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"
VERIFY_TOKEN_TYPE = "verify"


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:MAX_PASSWORD_BYTES]


def hash_password(password: str) -> str:
    """
    Salted bcrypt hash of ``password``, as text for storage.

    Example:
        >>> hashed = hash_password("pw123456")
        >>> verify_password("pw123456", hashed)
        True
    """
    hashed = bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=BCRYPT_ROUNDS))
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Check a login attempt against the stored hash.

    Accounts created through Google sign-in have no hash and never match.
    A malformed stored hash is logged and treated as a mismatch.
    """
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))
    except ValueError as e:
        logger.warning(f"Unusable password hash: {e}")
        return False


def _encode(claims: Dict[str, Any], lifetime: timedelta, token_type: str) -> str:
    issued_at = datetime.now(timezone.utc)
    payload = {**claims, "exp": issued_at + lifetime, "iat": issued_at, "type": token_type}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def _decode(token: str, token_type: str) -> Optional[Dict[str, Any]]:
    """Claims of a valid, unexpired token of ``token_type``; None otherwise."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.warning(f"{token_type} token rejected: {e}")
        return None

    if payload.get("type") != token_type:
        logger.warning(f"Expected a {token_type} token, got {payload.get('type')!r}")
        return None
    return payload


def session_claims(user, session_id: str) -> Dict[str, Any]:
    """
    Build the claim set carried by session tokens.

    Args:
        user: UserDocument the session belongs to.
        session_id: Id of the SessionDocument backing the token.

    Returns:
        Dict[str, Any]: JWT payload without expiry fields.
    """
    return {
        "sub": str(user.id),
        "sid": session_id,
        "email": user.email,
        "name": user.name,
        "onboarding_status": user.onboarding_status.value,
    }


def create_access_token(claims: Dict[str, Any], lifetime: Optional[timedelta] = None) -> str:
    """
    Sign a short-lived access token.

    Args:
        claims: Output of ``session_claims``.
        lifetime: Overrides ACCESS_TOKEN_EXPIRE_MINUTES.
    """
    return _encode(
        claims,
        lifetime or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        ACCESS_TOKEN_TYPE
    )


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """Access token claims, or None when the token is unusable."""
    return _decode(token, ACCESS_TOKEN_TYPE)


def create_refresh_token(claims: Dict[str, Any], lifetime: Optional[timedelta] = None) -> str:
    """Sign a refresh token for the session named by ``claims["sid"]``."""
    return _encode(
        claims,
        lifetime or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        REFRESH_TOKEN_TYPE
    )


def verify_refresh_token(token: str) -> Optional[Dict[str, Any]]:
    return _decode(token, REFRESH_TOKEN_TYPE)


def create_verification_token(email: str) -> str:
    """
    Create the signed token mailed out for email verification.

    Args:
        email: Address the token is bound to.

    Returns:
        str: Encoded JWT, valid for VERIFICATION_TOKEN_EXPIRE_HOURS.
    """
    return _encode(
        {"email": email},
        timedelta(hours=settings.VERIFICATION_TOKEN_EXPIRE_HOURS),
        VERIFY_TOKEN_TYPE
    )


def decode_verification_token(token: str) -> Optional[str]:
    """
    Return the email a verification token is bound to.

    Returns None for bad signatures, expired tokens and other token types.
    """
    payload = _decode(token, VERIFY_TOKEN_TYPE)
    if not payload:
        return None
    return payload.get("email")


def generate_reset_token() -> str:
    """Random 32-byte password reset token, hex encoded."""
    return secrets.token_hex(32)


def reset_token_expiry(now: Optional[datetime] = None) -> datetime:
    """Expiry timestamp for a reset token issued at ``now``."""
    # Naive UTC, matching what MongoDB hands back
    now = now or datetime.now(timezone.utc).replace(tzinfo=None)
    return now + timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)
