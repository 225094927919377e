# backend/app/core/security.py

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import jwt, JWTError
from passlib.context import CryptContext

from app.core.config import settings

# ONLY pbkdf2_sha256 (no bcrypt anywhere)
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

SECRET_KEY = settings.jwt_secret_key
ALGORITHM = settings.jwt_algorithm

ACCESS_TOKEN_EXPIRE_MINUTES = settings.access_token_expire_minutes
REFRESH_TOKEN_EXPIRE_MINUTES = settings.refresh_token_expire_minutes


def hash_password(password: str) -> str:
    return pwd_context.hash(password or "")


def verify_password(plain_password: str, hashed_password) -> bool:
    if hashed_password is None:
        return False

    # handle bytes/memoryview from DB
    if isinstance(hashed_password, memoryview):
        hashed_password = hashed_password.tobytes()
    if isinstance(hashed_password, (bytes, bytearray)):
        hashed_password = hashed_password.decode("utf-8", errors="ignore")

    s = str(hashed_password).strip()

    # anything that is not a passlib hash can never match
    if not s.startswith("$pbkdf2-sha256$"):
        return False

    return pwd_context.verify(plain_password or "", s)


def create_token(
    data: dict[str, Any],
    token_type: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    to_encode = data.copy()
    if expires_delta is None:
        minutes = REFRESH_TOKEN_EXPIRE_MINUTES if token_type == "refresh" else ACCESS_TOKEN_EXPIRE_MINUTES
        expires_delta = timedelta(minutes=minutes)
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire, "type": token_type})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def create_access_token(data: dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    return create_token(data, "access", expires_delta)


def create_refresh_token(data: dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    return create_token(data, "refresh", expires_delta)


def decode_token(token: str) -> dict[str, Any]:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        raise ValueError("Invalid token") from e
