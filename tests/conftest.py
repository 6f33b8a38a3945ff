"""
Shared test fixtures and configuration.
"""

import hashlib
import hmac
import os
from datetime import datetime
from urllib.parse import urlencode
from unittest.mock import AsyncMock
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing app modules
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOCAL_STORAGE_PATH", "/tmp/oshpaz_test_data")
os.environ.setdefault("LOG_FILE_ENABLED", "false")
os.environ.setdefault("REMINDERS_ENABLED", "false")

from oshpaz.channels.telegram import TelegramBot  # noqa: E402
from oshpaz.config.settings import Settings  # noqa: E402
from oshpaz.core.clock import FixedClock  # noqa: E402
from oshpaz.dependencies import build_services  # noqa: E402
from oshpaz.llm.base import LLMResponse  # noqa: E402
from oshpaz.main import app  # noqa: E402
from oshpaz.models import Meal, UserProfile  # noqa: E402
from oshpaz.storage import LocalStorage  # noqa: E402
from oshpaz.utils.auth import create_access_token  # noqa: E402

TZ = ZoneInfo("Asia/Tashkent")
BOT_TOKEN = "123456:TEST-TOKEN"
WEBHOOK_SECRET = "s3cret"
ADMIN_ID = "1"

# Report card JSON as the model returns it
REPORT_PAYLOAD = {
    "grade": "B",
    "gradeEmoji": "🅱️",
    "calorieScore": {"consumed": 1700, "goal": 2000, "status": "under", "difference": -300},
    "macroBalance": {
        "protein": {"consumed": 90, "status": "good"},
        "carbs": {"consumed": 200, "status": "good"},
        "fats": {"consumed": 80, "status": "high"},
    },
    "highlights": ["Logged 3 meals"],
    "improvements": ["Add tvorog at breakfast"],
    "tomorrowTip": "Try mastava for lunch",
    "streakAck": "3 days in a row!",
    "detailedAnalysis": "Solid day.",
}


def tashkent(year, month, day, hour=12, minute=0) -> datetime:
    """Aware datetime in the reference timezone."""
    return datetime(year, month, day, hour, minute, tzinfo=TZ)


def sign_init_data(fields: dict, bot_token: str = BOT_TOKEN) -> str:
    """Build a WebApp initData query string signed the way Telegram signs it."""
    data_check_string = "\n".join(f"{k}={v}" for k, v in sorted(fields.items()))
    secret_key = hmac.new(b"WebAppData", bot_token.encode(), hashlib.sha256).digest()
    signature = hmac.new(secret_key, data_check_string.encode(), hashlib.sha256).hexdigest()
    return urlencode({**fields, "hash": signature})


def llm_returning(content: str) -> AsyncMock:
    """Stand-in LLM provider whose chat_completion answers with `content`."""
    llm = AsyncMock()
    llm.chat_completion = AsyncMock(return_value=LLMResponse(content=content, model="test-model"))
    return llm


async def make_user(services, tg_id: str = "100", **fields) -> UserProfile:
    fields.setdefault("first_name", "Aziz")
    fields.setdefault("daily_goal", 2000)
    user = UserProfile(tg_id=tg_id, **fields)
    return await services.users.save(user)


async def add_meal(services, tg_id: str = "100", when: datetime = None, calories: int = 500,
                   protein: int = 30, carbs: int = 60, fats: int = 15,
                   status: str = "confirmed", name: str = "Plov") -> Meal:
    meal = Meal(
        tg_id=tg_id,
        name=name,
        calories=calories,
        protein=protein,
        carbs=carbs,
        fats=fats,
        status=status,
        timestamp=when or services.clock.now(),
    )
    return await services.meals.save(meal)


@pytest.fixture
def clock():
    # Wednesday noon in Tashkent
    return FixedClock(tashkent(2025, 3, 12, 12, 0))


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "data"))


@pytest.fixture
def settings(tmp_path):
    return Settings(
        local_storage_path=str(tmp_path / "data"),
        telegram_bot_token=BOT_TOKEN,
        telegram_webhook_secret=WEBHOOK_SECRET,
        admin_tg_ids=[ADMIN_ID],
        mini_app_url="https://app.example.com",
        llm_api_key=None,
        openai_api_key=None,
        reminders_enabled=False,
        log_file_enabled=False,
        log_api_requests=False,
    )


@pytest.fixture
def fake_llm():
    return llm_returning("{}")


@pytest.fixture
def bot():
    """Real TelegramBot with the network calls replaced."""
    telegram = TelegramBot(BOT_TOKEN, webhook_secret=WEBHOOK_SECRET)
    telegram.send_message = AsyncMock(return_value={"message_id": 42})
    telegram.edit_message_text = AsyncMock(return_value={"message_id": 42})
    telegram.answer_callback_query = AsyncMock(return_value=True)
    telegram.download_file = AsyncMock(return_value=b"\xff\xd8fake-jpeg")
    return telegram


@pytest.fixture
def services(settings, clock, storage, fake_llm, bot):
    return build_services(settings, clock=clock, storage=storage, llm=fake_llm, bot=bot)


@pytest.fixture
def client(services):
    """TestClient wired to the test container instead of the settings-built one."""
    app.state.services = services
    yield TestClient(app)
    del app.state.services


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {create_access_token('100')}"}
