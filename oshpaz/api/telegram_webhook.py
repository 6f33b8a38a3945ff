"""
Telegram Webhook API - Handles incoming updates for the bot.
Supports commands, photo/voice/text food input and inline button callbacks.
"""

import base64
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from ..config.constants import CALORIE_GOAL_MAX, CALORIE_GOAL_MIN, SUPPORTED_LANGUAGES
from ..core import food_analysis
from ..core.food_analysis import AnalysisResult
from ..core.messages import progress_bar, t
from ..core.profile import InvalidGoalError, resolve_daily_goal
from ..dependencies import ServiceContainer, get_services
from ..models import DailyStats, GamificationResult, TelegramUser, UserProfile
from ..services.transcription import TranscriptionError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/telegram", tags=["telegram"])

LANGUAGE_KEYBOARD = {
    "inline_keyboard": [[
        {"text": "🇺🇿 O'zbekcha", "callback_data": "lang:uz"},
        {"text": "🇬🇧 English", "callback_data": "lang:en"},
    ]]
}


@router.post("/webhook")
async def telegram_webhook(
    request: Request,
    x_telegram_bot_api_secret_token: Optional[str] = Header(None),
    services: ServiceContainer = Depends(get_services)
):
    """
    Handle an incoming Bot API update.

    Always answers 200 once the update is accepted so Telegram does not
    re-deliver it; processing errors are reported to the user instead.
    """
    bot = services.bot
    if bot is None:
        raise HTTPException(status_code=503, detail="Telegram bot not configured")
    if not bot.verify_secret_token(x_telegram_bot_api_secret_token):
        raise HTTPException(status_code=403, detail="Invalid secret token")

    body = await request.json()
    update = bot.parse_update(body)

    # Deduplicate re-delivered updates
    update_id = update.get("update_id")
    if update_id is not None:
        if services.processed_updates.get(update_id):
            return {"ok": True}
        services.processed_updates.set(update_id, True)

    if update["type"] == "unknown" or not update.get("from"):
        return {"ok": True}

    chat_id = update["chat_id"]
    try:
        if update["type"] == "callback":
            await handle_callback(update, services)
        else:
            await handle_message(update, services)
    except Exception:
        logger.exception("Error processing Telegram update")
        language = update["from"].get("language_code")
        try:
            await bot.send_message(chat_id, t(language if language in SUPPORTED_LANGUAGES else "uz", "error"))
        except Exception:
            logger.exception("Failed to send error message to Telegram")

    return {"ok": True}


def _open_app_keyboard(services: ServiceContainer, language: str) -> Optional[Dict[str, Any]]:
    url = services.settings.mini_app_url
    if not url:
        return None
    return {"inline_keyboard": [[{"text": t(language, "open_app"), "web_app": {"url": url}}]]}


def _status_emoji(percentage: int) -> str:
    if percentage >= 100:
        return "🔴"
    if percentage >= 90:
        return "🟡"
    return "🟢"


def _welcome(user: UserProfile) -> str:
    name = user.first_name or t(user.language, "default_name")
    return t(user.language, "welcome", name=name, goal=resolve_daily_goal(user))


def _gamification_lines(language: str, result: GamificationResult) -> str:
    lines = []
    if result.xp_gained:
        lines.append(t(language, "xp_gained", xp=result.xp_gained))
    if result.level_up:
        lines.append(t(language, "level_up", level=result.new_level))
    for badge in result.new_badges:
        lines.append(t(language, "badge_unlocked", name=badge.name))
    return "\n".join(lines)


async def handle_message(update: Dict[str, Any], services: ServiceContainer) -> None:
    message_type = update.get("message_type")
    if message_type == "command":
        await handle_command(update, services)
    elif message_type == "photo":
        await handle_photo(update, services)
    elif message_type == "voice":
        await handle_voice(update, services)
    elif message_type == "text":
        await process_food_input(update, services, text=update["text"])
    else:
        user = await services.profiles.get(str(update["from"].get("id")))
        await services.bot.send_message(update["chat_id"], t(user.language if user else "uz", "unsupported"))


async def handle_command(update: Dict[str, Any], services: ServiceContainer) -> None:
    command = update.get("command")
    if command == "start":
        await cmd_start(update, services)
    elif command == "goal":
        await cmd_goal(update, services)
    elif command == "stats":
        await cmd_stats(update, services)
    elif command == "grant":
        await cmd_grant(update, services)
    else:
        logger.debug(f"Ignoring unknown command /{command}")


async def cmd_start(update: Dict[str, Any], services: ServiceContainer) -> None:
    """
    Returning users get the welcome text; new users are created and asked for
    their language. "/start ref_CODE" also sends a friend request to the referrer.
    """
    bot = services.bot
    telegram_user = TelegramUser(**update["from"])
    tg_id = str(telegram_user.id)

    existing = await services.profiles.get(tg_id)
    user = existing or await services.profiles.find_or_create(telegram_user)

    args = update.get("args") or []
    if existing is None and args and args[0].startswith("ref_"):
        outcome = await services.social.send_request(tg_id, referral_code=args[0][len("ref_"):])
        logger.info(
            "Referral start",
            extra={"extra_fields": {"tg_id": tg_id, "success": outcome.success, "message": outcome.message}}
        )

    if existing is not None:
        await bot.send_message(
            update["chat_id"], _welcome(user),
            reply_markup=_open_app_keyboard(services, user.language), parse_mode="Markdown",
        )
        return

    await bot.send_message(update["chat_id"], t("uz", "choose_language"), reply_markup=LANGUAGE_KEYBOARD)


async def cmd_goal(update: Dict[str, Any], services: ServiceContainer) -> None:
    bot = services.bot
    tg_id = str(update["from"]["id"])
    user = await services.profiles.get(tg_id)
    if user is None:
        await bot.send_message(update["chat_id"], t("uz", "user_not_found"))
        return

    language = user.language
    args = update.get("args") or []
    if not args:
        await bot.send_message(
            update["chat_id"], t(language, "goal_usage", min=CALORIE_GOAL_MIN, max=CALORIE_GOAL_MAX)
        )
        return

    try:
        await services.profiles.update_daily_goal(tg_id, int(args[0]))
    except (ValueError, InvalidGoalError):
        await bot.send_message(
            update["chat_id"], t(language, "goal_invalid", min=CALORIE_GOAL_MIN, max=CALORIE_GOAL_MAX)
        )
        return
    await bot.send_message(update["chat_id"], t(language, "goal_updated", goal=int(args[0])))


def format_stats(language: str, stats: DailyStats) -> str:
    return t(
        language, "stats",
        status=_status_emoji(stats.progress_percentage),
        bar=progress_bar(stats.progress_percentage),
        percent=stats.progress_percentage,
        consumed=stats.total_calories,
        goal=stats.daily_goal,
        remaining=stats.remaining_calories,
        protein=stats.total_protein,
        carbs=stats.total_carbs,
        fats=stats.total_fats,
        count=stats.meals_count,
    )


async def cmd_stats(update: Dict[str, Any], services: ServiceContainer) -> None:
    bot = services.bot
    tg_id = str(update["from"]["id"])
    user = await services.profiles.get(tg_id)
    if user is None:
        await bot.send_message(update["chat_id"], t("uz", "user_not_found"))
        return

    stats = await services.nutrition.get_daily_stats(tg_id, resolve_daily_goal(user))
    await bot.send_message(update["chat_id"], format_stats(user.language, stats), parse_mode="Markdown")


async def cmd_grant(update: Dict[str, Any], services: ServiceContainer) -> None:
    """/grant <tg_id> <days> - admins only, silently ignored for everyone else."""
    bot = services.bot
    sender_id = str(update["from"]["id"])
    if sender_id not in services.settings.admin_tg_ids:
        logger.warning(f"Unauthorized /grant attempt by {sender_id}")
        return

    args = update.get("args") or []
    try:
        target_id, days = args[0], int(args[1])
        if days <= 0:
            raise ValueError(days)
    except (IndexError, ValueError):
        await bot.send_message(update["chat_id"], t("uz", "grant_usage"))
        return

    target = await services.profiles.get(target_id)
    if target is None:
        await bot.send_message(update["chat_id"], t("uz", "user_not_found"))
        return

    subscription = await services.subscriptions.grant(target_id, days, services.clock.now())
    await bot.send_message(
        update["chat_id"],
        t("uz", "grant_done", tg_id=target_id, days=days, end=subscription.end_date.date().isoformat()),
    )
    logger.info(
        "Premium granted",
        extra={"extra_fields": {"admin": sender_id, "tg_id": target_id, "days": days}}
    )
    try:
        await bot.send_message(target_id, t(target.language, "grant_notice", days=days))
    except Exception as e:
        # the user may have blocked the bot
        logger.warning(f"Could not notify {target_id} about the grant: {e}")


async def handle_photo(update: Dict[str, Any], services: ServiceContainer) -> None:
    image_bytes = await services.bot.download_file(update["file_id"])
    image_base64 = base64.b64encode(image_bytes).decode("utf-8")
    await process_food_input(update, services, image_base64=image_base64)


async def handle_voice(update: Dict[str, Any], services: ServiceContainer) -> None:
    bot = services.bot
    chat_id = update["chat_id"]
    user = await services.profiles.find_or_create(TelegramUser(**update["from"]))
    language = user.language

    status_message = await bot.send_message(chat_id, t(language, "listening"))
    try:
        audio = await bot.download_file(update["file_id"])
        text = await services.transcription.transcribe(audio, filename="voice.ogg", language=language)
    except TranscriptionError:
        text = ""

    if not text:
        await bot.edit_message_text(chat_id, status_message["message_id"], t(language, "voice_failed"))
        return

    await bot.edit_message_text(chat_id, status_message["message_id"], t(language, "voice_heard", text=text))
    await process_food_input(update, services, text=text)


async def process_food_input(update: Dict[str, Any], services: ServiceContainer,
                             image_base64: Optional[str] = None, text: Optional[str] = None) -> None:
    """Analyze a photo or text, save a pending meal and ask the user to confirm it."""
    bot = services.bot
    chat_id = update["chat_id"]
    user = await services.profiles.find_or_create(TelegramUser(**update["from"]))
    language = user.language

    allowance = await services.profiles.scan_allowance(user)
    if not allowance.allowed:
        await bot.send_message(
            chat_id,
            t(language, "scan_limit", limit=services.settings.free_daily_scan_limit),
            reply_markup=_open_app_keyboard(services, language),
            parse_mode="Markdown",
        )
        return

    status_message = await bot.send_message(
        chat_id, t(language, "analyzing_image" if image_base64 else "analyzing_text")
    )
    message_id = status_message["message_id"]

    if image_base64:
        result: AnalysisResult = await services.analyzer.analyze_image(image_base64)
    else:
        result = await services.analyzer.analyze_text(text or "")

    if not result.success:
        error_key = {
            food_analysis.NOT_FOOD: "not_food",
            food_analysis.LLM_UNAVAILABLE: "llm_unavailable",
            food_analysis.NOT_CONFIGURED: "llm_unavailable",
        }.get(result.error, "analysis_failed")
        await bot.edit_message_text(chat_id, message_id, t(language, error_key))
        return

    await services.profiles.record_scan(user)
    meal = await services.meal_service.save_pending_meal(user.tg_id, result.data)

    data = result.data
    items = "\n".join(f"- {item.name}: {round(item.calories)} kcal" for item in data.items)
    buttons = [{"text": t(language, "confirm_button"), "callback_data": f"confirm_meal:{meal.id}"}]
    if services.settings.mini_app_url:
        buttons.append({
            "text": t(language, "edit_button"),
            "web_app": {"url": f"{services.settings.mini_app_url}?start_param=edit_meal_{meal.id}"},
        })

    await bot.edit_message_text(
        chat_id,
        message_id,
        t(
            language, "meal_detected",
            items=items,
            calories=round(data.total_calories),
            protein=round(data.total_protein),
            carbs=round(data.total_carbs),
            fats=round(data.total_fats),
        ),
        reply_markup={"inline_keyboard": [buttons]},
        parse_mode="Markdown",
    )


async def handle_callback(update: Dict[str, Any], services: ServiceContainer) -> None:
    data = update.get("data", "")
    if data.startswith("lang:"):
        await callback_language(update, services, data.split(":", 1)[1])
    elif data.startswith("confirm_meal:"):
        await callback_confirm_meal(update, services, data.split(":", 1)[1])
    else:
        await services.bot.answer_callback_query(update["callback_id"])


async def callback_language(update: Dict[str, Any], services: ServiceContainer, language: str) -> None:
    bot = services.bot
    if language not in SUPPORTED_LANGUAGES:
        await bot.answer_callback_query(update["callback_id"])
        return

    telegram_user = TelegramUser(**update["from"])
    await services.profiles.find_or_create(telegram_user, language)
    user = await services.profiles.update_language(str(telegram_user.id), language)

    await bot.edit_message_text(
        update["chat_id"], update["message_id"], _welcome(user),
        reply_markup=_open_app_keyboard(services, language), parse_mode="Markdown",
    )
    await bot.answer_callback_query(update["callback_id"])


async def callback_confirm_meal(update: Dict[str, Any], services: ServiceContainer, meal_id: str) -> None:
    bot = services.bot
    tg_id = str(update["from"]["id"])
    user = await services.profiles.get(tg_id)
    language = user.language if user else "uz"

    confirmed = await services.meal_service.confirm_meal(tg_id, meal_id)
    if confirmed is None:
        await bot.answer_callback_query(update["callback_id"], t(language, "meal_not_found"))
        return

    meal, result = confirmed
    stats = await services.nutrition.get_daily_stats(tg_id, resolve_daily_goal(user))
    text = t(
        language, "meal_confirmed",
        name=meal.name,
        calories=meal.calories,
        bar=progress_bar(stats.progress_percentage),
        percent=stats.progress_percentage,
        consumed=stats.total_calories,
        goal=stats.daily_goal,
    )
    extra = _gamification_lines(language, result)
    if extra:
        text = f"{text}\n\n{extra}"

    await bot.edit_message_text(update["chat_id"], update["message_id"], text, parse_mode="Markdown")
    await bot.answer_callback_query(update["callback_id"], t(language, "meal_confirmed_toast"))
