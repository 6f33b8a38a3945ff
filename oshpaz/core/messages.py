"""
User-facing bot texts in Uzbek and English.
"""

from typing import Dict

from ..config.constants import DEFAULT_LANGUAGE

MESSAGES: Dict[str, Dict[str, str]] = {
    "uz": {
        # reminders
        "breakfast": "Nonushta vaqti keldi! Ovqat rasmini yuboring va kunni to'g'ri boshlang.",
        "lunch": "Tushlik vaqti! Ovqatingizni suratga oling.",
        "dinner": "Kechki ovqat haqida unutmang! Kaloriyalaringizni kuzatib boring.",
        "streak_reminder": "Sizning {streak} kunlik streakingiz xavf ostida! Bugun biror ovqat kiriting.",
        "weigh_in": "Haftalik vazn o'lchash vaqti! Natijangizni kiriting.",
        "open_app": "📊 Ilovani ochish",

        # report card
        "report_free": "📊 *Bugungi bahongiz: {emoji} {grade}*\n\n🔥 Kaloriya: {consumed}/{goal} kkal\n\n💎 To'liq tahlil uchun PRO ga o'ting!",
        "report_title": "📊 *Bugungi baholash: {emoji} {grade}*",
        "report_calories": "*Kaloriya:* {consumed}/{goal} kkal {mark}",
        "report_macros": "*Makrolar:*",
        "protein": "Protein",
        "carbs": "Uglevod",
        "fats": "Yog'",
        "report_highlights": "*Yaxshi:*",
        "report_improvements": "*Ertaga uchun:*",

        # bot
        "choose_language": "Tilni tanlang / Choose your language:",
        "welcome": (
            "Assalomu alaykum, *{name}*! 👋\n\n"
            "Men *Oshpaz AI* - sun'iy intellektli ovqat tahlilchisiman.\n\n"
            "📸  Rasm yuboring - kaloriya va tarkibini aniqlayman\n"
            "🎤  Ovozli xabar - nima yeganingizni ayting\n"
            "✍️  Matn yozing - \"osh, salat, non\" kabi\n\n"
            "🎯  Sizning maqsadingiz: *{goal} kkal/kun*\n\n"
            "/goal `raqam` - maqsadni o'zgartirish\n"
            "/stats - bugungi natijalar"
        ),
        "default_name": "do'stim",
        "goal_usage": "🎯 Foydalanish: /goal <raqam>\nMisol: /goal 2500\n\nRuxsat etilgan oraliq: {min} - {max} kkal",
        "goal_invalid": "❌ Iltimos, {min} va {max} orasida raqam kiriting.",
        "goal_updated": "🎯 Kunlik maqsad yangilandi: {goal} kkal",
        "user_not_found": "❌ Foydalanuvchi topilmadi. Avval /start bosing.",
        "stats": (
            "📊 *Bugungi statistika*\n\n"
            "{status} {bar} {percent}%\n\n"
            "🔥 Kaloriya: {consumed} / {goal} kkal\n"
            "📉 Qoldi: {remaining} kkal\n\n"
            "🥩 Protein: {protein}g\n"
            "🍞 Uglevod: {carbs}g\n"
            "🧈 Yog': {fats}g\n\n"
            "🍽️ Ovqatlar soni: {count}"
        ),
        "listening": "🎤 Eshitilmoqda...",
        "analyzing_image": "🔍 Rasmingiz tahlil qilinmoqda...",
        "analyzing_text": "🧠 Matn tahlil qilinmoqda...",
        "meal_detected": "🍱 *Ovqat aniqlandi:*\n\n{items}\n\n🔥 {calories} kkal\n🥩 P: {protein}g | 🍞 U: {carbs}g | 🧈 Y: {fats}g\n\nTo'g'rimi?",
        "confirm_button": "✅ To'g'ri",
        "edit_button": "✏️ Tahrirlash",
        "meal_confirmed": "✅ Ovqat saqlandi!\n\n🍽️ *{name}*\n🔥 {calories} kkal\n\n{bar} {percent}%\n{consumed} / {goal} kkal",
        "meal_confirmed_toast": "✅ Ovqat tasdiqlandi!",
        "meal_not_found": "❌ Ovqat topilmadi",
        "xp_gained": "⭐ +{xp} XP",
        "level_up": "🎉 Yangi daraja: {level}!",
        "badge_unlocked": "🏅 Yangi nishon: {name}",
        "scan_limit": "🚫 *Kunlik limit tugadi*\n\nSiz bugungi {limit} ta bepul tahlildan foydalandingiz.\nCheklovsiz foydalanish uchun *PRO* ga o'ting! 🚀",
        "not_food": "🤔 Rasmda ovqat topilmadi. Iltimos, taom rasmini yuboring.",
        "analysis_failed": "⚠️ Tahlil qilib bo'lmadi. Iltimos, qayta urinib ko'ring.",
        "llm_unavailable": "🤖 AI xizmati vaqtincha ishlamayapti. Keyinroq urinib ko'ring.",
        "voice_failed": "⚠️ Ovozli xabarni tushunib bo'lmadi. Qayta urinib ko'ring.",
        "voice_heard": "🗣️ Siz aytdingiz: \"{text}\"",
        "unsupported": "📸 Ovqat rasmini, ovozli xabar yoki matn yuboring.",
        "error": "⚠️ Xatolik yuz berdi. Iltimos, qayta urinib ko'ring.",
        "grant_usage": "Foydalanish: /grant <tg_id> <kunlar>",
        "grant_done": "✅ {tg_id} ga {days} kun berildi. Tugash: {end}",
        "grant_notice": "🎉 Tabriklaymiz! Sizga {days} kunlik PRO obuna taqdim etildi!",
    },
    "en": {
        "breakfast": "Time for breakfast! Send a food photo to start your day right.",
        "lunch": "Lunch time! Snap a photo of your meal.",
        "dinner": "Don't forget about dinner! Keep tracking your calories.",
        "streak_reminder": "Your {streak}-day streak is at risk! Log a meal today to keep it going.",
        "weigh_in": "Time for your weekly weigh-in! Log your weight to track progress.",
        "open_app": "📊 Open App",

        "report_free": "📊 *Today's Grade: {emoji} {grade}*\n\n🔥 Calories: {consumed}/{goal} kcal\n\n💎 Upgrade to PRO for the full analysis!",
        "report_title": "📊 *Daily Report: {emoji} {grade}*",
        "report_calories": "*Calories:* {consumed}/{goal} kcal {mark}",
        "report_macros": "*Macros:*",
        "protein": "Protein",
        "carbs": "Carbs",
        "fats": "Fats",
        "report_highlights": "*Highlights:*",
        "report_improvements": "*For tomorrow:*",

        "choose_language": "Tilni tanlang / Choose your language:",
        "welcome": (
            "Hello, *{name}*! 👋\n\n"
            "I'm *Oshpaz AI* - your AI-powered food analyzer.\n\n"
            "📸  Send a photo - I'll estimate calories and nutrients\n"
            "🎤  Voice message - just tell me what you ate\n"
            "✍️  Text - type \"rice, salad, bread\" etc.\n\n"
            "🎯  Your goal: *{goal} kcal/day*\n\n"
            "/goal `number` - change your goal\n"
            "/stats - today's results"
        ),
        "default_name": "friend",
        "goal_usage": "🎯 Usage: /goal <number>\nExample: /goal 2500\n\nAllowed range: {min} - {max} kcal",
        "goal_invalid": "❌ Please enter a number between {min} and {max}.",
        "goal_updated": "🎯 Daily goal updated: {goal} kcal",
        "user_not_found": "❌ User not found. Press /start first.",
        "stats": (
            "📊 *Today's stats*\n\n"
            "{status} {bar} {percent}%\n\n"
            "🔥 Calories: {consumed} / {goal} kcal\n"
            "📉 Remaining: {remaining} kcal\n\n"
            "🥩 Protein: {protein}g\n"
            "🍞 Carbs: {carbs}g\n"
            "🧈 Fats: {fats}g\n\n"
            "🍽️ Meals: {count}"
        ),
        "listening": "🎤 Listening...",
        "analyzing_image": "🔍 Analyzing your photo...",
        "analyzing_text": "🧠 Analyzing your text...",
        "meal_detected": "🍱 *Meal detected:*\n\n{items}\n\n🔥 {calories} kcal\n🥩 P: {protein}g | 🍞 C: {carbs}g | 🧈 F: {fats}g\n\nIs this right?",
        "confirm_button": "✅ Correct",
        "edit_button": "✏️ Edit",
        "meal_confirmed": "✅ Meal saved!\n\n🍽️ *{name}*\n🔥 {calories} kcal\n\n{bar} {percent}%\n{consumed} / {goal} kcal",
        "meal_confirmed_toast": "✅ Meal confirmed!",
        "meal_not_found": "❌ Meal not found",
        "xp_gained": "⭐ +{xp} XP",
        "level_up": "🎉 Level up: {level}!",
        "badge_unlocked": "🏅 New badge: {name}",
        "scan_limit": "🚫 *Daily limit reached*\n\nYou have used today's {limit} free analyses.\nUpgrade to *PRO* for unlimited logging! 🚀",
        "not_food": "🤔 I couldn't identify any food. Please send a photo of a meal or dish.",
        "analysis_failed": "⚠️ Something went wrong while analyzing. Please try again.",
        "llm_unavailable": "🤖 AI service is temporarily unavailable. Please try again later.",
        "voice_failed": "⚠️ I couldn't understand the voice message. Please try again.",
        "voice_heard": "🗣️ You said: \"{text}\"",
        "unsupported": "📸 Send a food photo, a voice message or a text.",
        "error": "⚠️ Something went wrong. Please try again.",
        "grant_usage": "Usage: /grant <tg_id> <days>",
        "grant_done": "✅ Granted {days} days to {tg_id}. Ends: {end}",
        "grant_notice": "🎉 Congratulations! You have been granted {days} days of PRO!",
    },
}


def t(language: str, key: str, **kwargs) -> str:
    """Localized text; unknown languages fall back to the default one."""
    catalog = MESSAGES.get(language) or MESSAGES[DEFAULT_LANGUAGE]
    text = catalog.get(key) or MESSAGES["en"][key]
    return text.format(**kwargs) if kwargs else text


def progress_bar(percentage: int) -> str:
    filled = max(0, min(10, round(percentage / 10)))
    return "█" * filled + "░" * (10 - filled)
