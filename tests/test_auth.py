"""
Unit tests for Telegram initData validation and JWT handling.
"""

import json
from datetime import timedelta

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from oshpaz.utils.auth import (
    InitDataError,
    create_access_token,
    decode_access_token,
    get_current_tg_id,
    verify_telegram_init_data,
)
from conftest import BOT_TOKEN, sign_init_data, tashkent

NOW = tashkent(2025, 3, 12, 12)


def init_data_for(user: dict, auth_date=None, bot_token: str = BOT_TOKEN) -> str:
    fields = {
        "query_id": "AAHdF6IQAAAAAN0XohDhrOrc",
        "user": json.dumps(user),
        "auth_date": str(int((auth_date or NOW).timestamp())),
    }
    return sign_init_data(fields, bot_token)


class TestInitData:

    def test_valid(self):
        init_data = init_data_for({"id": 777, "first_name": "Jasur", "language_code": "uz"})

        user = verify_telegram_init_data(init_data, BOT_TOKEN, max_age_seconds=3600, now=NOW)

        assert user.id == 777
        assert user.first_name == "Jasur"
        assert user.language_code == "uz"

    def test_tampered_field(self):
        init_data = init_data_for({"id": 777, "first_name": "Jasur"})
        forged = init_data.replace("777", "778")
        with pytest.raises(InitDataError, match="mismatch"):
            verify_telegram_init_data(forged, BOT_TOKEN, now=NOW)

    def test_other_bot_token(self):
        init_data = init_data_for({"id": 777}, bot_token="999:OTHER")
        with pytest.raises(InitDataError):
            verify_telegram_init_data(init_data, BOT_TOKEN, now=NOW)

    def test_missing_hash(self):
        with pytest.raises(InitDataError, match="missing"):
            verify_telegram_init_data("user=%7B%7D&auth_date=1", BOT_TOKEN)

    def test_expired(self):
        init_data = init_data_for({"id": 777}, auth_date=NOW - timedelta(days=2))
        with pytest.raises(InitDataError, match="expired"):
            verify_telegram_init_data(init_data, BOT_TOKEN, max_age_seconds=86400, now=NOW)

    def test_age_not_checked_without_limit(self):
        init_data = init_data_for({"id": 777}, auth_date=NOW - timedelta(days=30))
        assert verify_telegram_init_data(init_data, BOT_TOKEN, now=NOW).id == 777

    def test_user_missing(self):
        init_data = sign_init_data({"auth_date": str(int(NOW.timestamp()))})
        with pytest.raises(InitDataError, match="user"):
            verify_telegram_init_data(init_data, BOT_TOKEN, now=NOW)


class TestAccessToken:

    def test_round_trip(self):
        token = create_access_token("777")
        assert decode_access_token(token).tg_id == "777"

    def test_expired_token(self):
        token = create_access_token("777", expires_delta=timedelta(seconds=-1))
        assert decode_access_token(token) is None

    def test_garbage_token(self):
        assert decode_access_token("not-a-jwt") is None

    @pytest.mark.asyncio
    async def test_current_user_dependency(self):
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=create_access_token("42"))
        assert await get_current_tg_id(credentials) == "42"

    @pytest.mark.asyncio
    async def test_current_user_rejects_bad_token(self):
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="bad")
        with pytest.raises(HTTPException) as exc:
            await get_current_tg_id(credentials)
        assert exc.value.status_code == 401
