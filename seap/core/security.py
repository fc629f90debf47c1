"""
Security utilities for the SEAP API.
Password hashing, JWT handling and tracking token generation.
"""
import re
import secrets
import uuid
from datetime import datetime, timedelta
from typing import Optional

import bcrypt
import jwt

from seap.config import settings

TRACKING_TOKEN_BYTES = 32  # 256 bits
_TRACKING_TOKEN_RE = re.compile(r"[0-9a-f]{64}")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return bcrypt.checkpw(
        plain_password.encode('utf-8'),
        hashed_password.encode('utf-8')
    )


def get_password_hash(password: str) -> str:
    """Hash a password."""
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed access token.

    Args:
        data: Payload data (should include user_id and role)
        expires_delta: Custom expiration time

    Returns:
        Encoded JWT string
    """
    to_encode = data.copy()
    now = datetime.utcnow()
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode.update({
        "exp": expire,
        "iat": now,
        "type": "access",
        "jti": str(uuid.uuid4())
    })

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """Decode and validate a JWT, returning None when it is invalid or expired."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.InvalidTokenError:
        return None


def verify_access_token(token: str) -> Optional[dict]:
    payload = decode_token(token)
    if payload and payload.get("type") == "access":
        return payload
    return None


def generate_tracking_token() -> str:
    """Generate an unguessable campaign tracking token (256-bit, hex-encoded)."""
    return secrets.token_hex(TRACKING_TOKEN_BYTES)


def is_well_formed_tracking_token(token: str) -> bool:
    return bool(token) and _TRACKING_TOKEN_RE.fullmatch(token) is not None
