"""
Authentication utilities - Telegram WebApp initData validation and JWT handling.
"""

import hashlib
import hmac
import json
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import parse_qsl

from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ..config import settings
from ..models import TelegramUser, TokenData

# Bearer token security
security = HTTPBearer()


class InitDataError(ValueError):
    """Raised when Telegram WebApp initData is missing, forged or expired."""


def verify_telegram_init_data(
    init_data: str,
    bot_token: str,
    max_age_seconds: Optional[int] = None,
    now: Optional[datetime] = None,
) -> TelegramUser:
    """
    Validate the initData string the mini-app receives from Telegram.

    The hash is HMAC-SHA256 over the sorted "key=value" lines, keyed with
    HMAC-SHA256("WebAppData", bot_token).

    Args:
        init_data: Raw query string from Telegram.WebApp.initData
        bot_token: Bot token the mini-app belongs to
        max_age_seconds: Reject data whose auth_date is older than this
        now: Current time (for tests)

    Returns:
        TelegramUser: The authenticated Telegram user

    Raises:
        InitDataError: If the data is invalid
    """
    params = dict(parse_qsl(init_data, keep_blank_values=True))
    received_hash = params.pop("hash", None)
    if not received_hash:
        raise InitDataError("hash is missing")

    data_check_string = "\n".join(f"{k}={v}" for k, v in sorted(params.items()))
    secret_key = hmac.new(b"WebAppData", bot_token.encode("utf-8"), hashlib.sha256).digest()
    computed = hmac.new(secret_key, data_check_string.encode("utf-8"), hashlib.sha256).hexdigest()
    if not hmac.compare_digest(computed, received_hash):
        raise InitDataError("hash mismatch")

    if max_age_seconds:
        try:
            auth_date = datetime.fromtimestamp(int(params.get("auth_date", "0")), tz=timezone.utc)
        except ValueError:
            raise InitDataError("auth_date is invalid")
        now = now or datetime.now(timezone.utc)
        if now - auth_date > timedelta(seconds=max_age_seconds):
            raise InitDataError("initData expired")

    try:
        return TelegramUser(**json.loads(params["user"]))
    except (KeyError, ValueError, TypeError):
        raise InitDataError("user is missing or malformed")


def create_access_token(tg_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token for a Telegram user.

    Args:
        tg_id: Telegram user id (stored as the subject)
        expires_delta: Optional expiration time delta

    Returns:
        str: Encoded JWT token
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode = {"sub": str(tg_id), "exp": expire}
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Optional[TokenData]:
    """
    Decode and verify a JWT access token.

    Returns:
        Optional[TokenData]: Token data if valid, None otherwise
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
    tg_id = payload.get("sub")
    if tg_id is None:
        return None
    return TokenData(tg_id=tg_id)


async def get_current_tg_id(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> str:
    """
    Dependency to get the current Telegram user id from the JWT.

    Raises:
        HTTPException: If token is invalid
    """
    token_data = decode_access_token(credentials.credentials)
    if token_data is None or token_data.tg_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token_data.tg_id
