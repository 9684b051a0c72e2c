from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import jwt, JWTError, ExpiredSignatureError
from passlib.context import CryptContext

from ..config import get_settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenError(Exception):
    """Token could not be decoded or verified"""

    pass


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: int, expires_minutes: Optional[int] = None) -> str:
    """Issue a signed access token whose subject is the user id"""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expires = now + timedelta(
        minutes=expires_minutes
        if expires_minutes is not None
        else settings.JWT_EXPIRES_MINUTES
    )

    payload = {
        "sub": str(user_id),
        "iat": int(now.timestamp()),
        "exp": int(expires.timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> int:
    """
    Verify a token's signature and expiry.

    Returns:
        The user id carried in the ``sub`` claim

    Raises:
        TokenError: If the token is expired, tampered with or malformed
    """
    settings = get_settings()

    try:
        payload = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
    except ExpiredSignatureError:
        raise TokenError("Token has expired")
    except JWTError as e:
        raise TokenError(f"Invalid token: {str(e)}")

    subject = payload.get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError):
        raise TokenError("Token subject is missing or malformed")
