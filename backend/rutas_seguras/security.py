"""
Rutas Seguras Backend — Password Hashing & Token Signing
========================================================

What:  bcrypt password hashing and HS256 JSON Web Tokens.
Why:   Credentials are stored only as adaptive hashes; identity and role
       travel in a signed bearer token, so no server-side session is kept.
How:   `bcrypt` for hashing, `PyJWT` for token encode/decode.
Who:   AuthService and UserService hash/verify; the authorization dependency
       verifies tokens on every protected request.

Token layout:
    header.payload.signature (each base64url)
    header  = {"alg": "HS256", "typ": "JWT"}
    payload = {"id", "email", "role", "iat", "exp"}
    signature = HMAC-SHA256(secret, header + "." + payload)

Verification fails closed: a malformed token, a bad signature, an expired
`exp` or a payload missing a claim all yield None. Nothing raises out of
`verify_token`.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional
from uuid import UUID

import bcrypt
import jwt

from rutas_seguras.config import settings

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_PASSWORD_BYTES = 72


# ══════════════════════════════════════════════════════════════════════════
# Passwords
# ══════════════════════════════════════════════════════════════════════════

def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a plaintext password with a fresh bcrypt salt."""
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Check a plaintext password against a stored bcrypt hash.

    Returns False (never raises) for a corrupt or empty stored hash.
    """
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


# ══════════════════════════════════════════════════════════════════════════
# Tokens
# ══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TokenClaims:
    """Decoded identity carried by a verified token."""

    id: UUID
    email: str
    role: str
    issued_at: int
    expires_at: int


def create_token(
    user_id: UUID,
    email: str,
    role: str,
    expires_in: Optional[int] = None,
    secret: Optional[str] = None,
) -> str:
    """
    Issue a signed token for a user.

    Args:
        user_id:    The user's primary key
        email:      The user's email (informational claim)
        role:       admin | conductor | cliente
        expires_in: Lifetime in seconds; defaults to settings.jwt_expiration_seconds.
                    A negative value produces an already-expired token.
        secret:     Signing key; defaults to settings.jwt_secret
    """
    now = int(time.time())
    lifetime = settings.jwt_expiration_seconds if expires_in is None else expires_in
    payload: Dict[str, Any] = {
        "id": str(user_id),
        "email": email,
        "role": role,
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(payload, secret or settings.jwt_secret, algorithm=JWT_ALGORITHM)


def verify_token(token: Optional[str], secret: Optional[str] = None) -> Optional[TokenClaims]:
    """
    Verify signature and expiry, then decode the claims.

    Returns:
        TokenClaims on success, None on ANY failure.
    """
    if not token:
        return None

    try:
        payload = jwt.decode(
            token,
            secret or settings.jwt_secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp", "iat"]},
        )
    except jwt.ExpiredSignatureError:
        logger.debug("Rejected expired token")
        return None
    except jwt.PyJWTError as e:
        logger.debug("Rejected token: %s", type(e).__name__)
        return None

    try:
        return TokenClaims(
            id=UUID(str(payload["id"])),
            email=str(payload["email"]),
            role=str(payload["role"]),
            issued_at=int(payload["iat"]),
            expires_at=int(payload["exp"]),
        )
    except (KeyError, TypeError, ValueError):
        logger.debug("Rejected token with malformed claims")
        return None
