"""
Authentication API endpoints.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ..config.constants import SUPPORTED_LANGUAGES
from ..dependencies import ServiceContainer, get_services
from ..models import TelegramAuthRequest, Token
from ..utils.auth import InitDataError, create_access_token, verify_telegram_init_data

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/telegram", response_model=Token)
async def telegram_login(
    body: TelegramAuthRequest,
    services: ServiceContainer = Depends(get_services)
):
    """
    Exchange Telegram WebApp initData for an access token.

    The user is created on first login.

    Raises:
        HTTPException: 401 if initData is invalid, 503 if no bot token is configured
    """
    bot_token = services.settings.telegram_bot_token
    if not bot_token:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Telegram bot is not configured"
        )

    try:
        telegram_user = verify_telegram_init_data(
            body.init_data,
            bot_token,
            max_age_seconds=services.settings.telegram_init_data_max_age_seconds,
            now=services.clock.now(),
        )
    except InitDataError as e:
        logger.warning(f"Rejected Telegram initData: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Telegram init data",
        )

    language = telegram_user.language_code if telegram_user.language_code in SUPPORTED_LANGUAGES else None
    user = await services.profiles.find_or_create(telegram_user, language)
    return Token(access_token=create_access_token(user.tg_id), token_type="bearer")
