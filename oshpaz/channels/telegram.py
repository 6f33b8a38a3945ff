"""
Telegram Bot Integration.
Thin client over the Bot API: sending messages with inline/web-app keyboards,
callback answers, file downloads, and parsing of webhook updates.
"""

import hmac
import logging
from typing import Dict, Any, Optional, List

import httpx

logger = logging.getLogger(__name__)


class TelegramError(Exception):
    """Raised when the Bot API answers with ok=false."""

    def __init__(self, method: str, description: str, error_code: Optional[int] = None):
        super().__init__(f"Telegram {method} failed: {description}")
        self.method = method
        self.description = description
        self.error_code = error_code


class TelegramBot:
    """
    Telegram bot client for receiving updates and sending messages.
    Supports text, photo and voice updates plus inline keyboard callbacks.
    """

    API_URL = "https://api.telegram.org/bot{token}/{method}"
    FILE_URL = "https://api.telegram.org/file/bot{token}/{file_path}"

    def __init__(self, token: str, webhook_secret: Optional[str] = None, timeout: float = 30.0):
        """
        Initialize Telegram bot.

        Args:
            token: Bot token from BotFather
            webhook_secret: Value expected in the X-Telegram-Bot-Api-Secret-Token header
            timeout: HTTP timeout in seconds
        """
        self.token = token
        self.webhook_secret = webhook_secret
        self.timeout = timeout

    async def _call(self, method: str, payload: Dict[str, Any]) -> Any:
        url = self.API_URL.format(token=self.token, method=method)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(url, json=payload)
            data = resp.json()

        if not data.get("ok"):
            description = data.get("description", f"HTTP {resp.status_code}")
            logger.warning(
                f"Telegram API error: {method}",
                extra={"extra_fields": {"method": method, "error": description}}
            )
            raise TelegramError(method, description, data.get("error_code"))
        return data.get("result")

    async def send_message(self, chat_id: str, text: str,
                           reply_markup: Optional[Dict[str, Any]] = None,
                           parse_mode: Optional[str] = None) -> Dict[str, Any]:
        """
        Send a text message to a chat.

        Args:
            chat_id: Target chat id (for private chats this is the user's Telegram id)
            text: Message text
            reply_markup: Optional inline keyboard
            parse_mode: "Markdown" or "HTML"
        """
        payload: Dict[str, Any] = {"chat_id": chat_id, "text": text}
        if reply_markup:
            payload["reply_markup"] = reply_markup
        if parse_mode:
            payload["parse_mode"] = parse_mode
        return await self._call("sendMessage", payload)

    async def edit_message_text(self, chat_id: str, message_id: int, text: str,
                                reply_markup: Optional[Dict[str, Any]] = None,
                                parse_mode: Optional[str] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"chat_id": chat_id, "message_id": message_id, "text": text}
        if reply_markup:
            payload["reply_markup"] = reply_markup
        if parse_mode:
            payload["parse_mode"] = parse_mode
        return await self._call("editMessageText", payload)

    async def answer_callback_query(self, callback_query_id: str, text: Optional[str] = None) -> bool:
        payload: Dict[str, Any] = {"callback_query_id": callback_query_id}
        if text:
            payload["text"] = text
        return await self._call("answerCallbackQuery", payload)

    async def download_file(self, file_id: str) -> bytes:
        """
        Download a file (photo, voice) sent to the bot.

        Args:
            file_id: Telegram file id from the update

        Returns:
            File bytes
        """
        file_info = await self._call("getFile", {"file_id": file_id})
        url = self.FILE_URL.format(token=self.token, file_path=file_info["file_path"])

        async with httpx.AsyncClient(timeout=60.0) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            return resp.content

    def verify_secret_token(self, header_value: Optional[str]) -> bool:
        """
        Check the webhook secret header.

        Returns:
            True if no secret is configured or the header matches
        """
        if not self.webhook_secret:
            return True
        if not header_value:
            return False
        return hmac.compare_digest(self.webhook_secret, header_value)

    @staticmethod
    def inline_keyboard(rows: List[List[Dict[str, Any]]]) -> Dict[str, Any]:
        return {"inline_keyboard": rows}

    @staticmethod
    def callback_button(text: str, data: str) -> Dict[str, Any]:
        return {"text": text, "callback_data": data}

    @staticmethod
    def web_app_button(text: str, url: str) -> Dict[str, Any]:
        """Button that opens the mini-app."""
        return {"text": text, "web_app": {"url": url}}

    @staticmethod
    def parse_update(body: Dict[str, Any]) -> Dict[str, Any]:
        """
        Parse a Bot API update into a flat, standardized dict.

        Args:
            body: Raw update from the webhook

        Returns:
            Parsed update with type, chat/user ids and type-specific fields
        """
        update_id = body.get("update_id")

        callback = body.get("callback_query")
        if callback:
            sender = callback.get("from", {})
            message = callback.get("message", {})
            return {
                "type": "callback",
                "update_id": update_id,
                "callback_id": callback.get("id", ""),
                "data": callback.get("data", ""),
                "chat_id": str(message.get("chat", {}).get("id", sender.get("id", ""))),
                "message_id": message.get("message_id"),
                "from": sender,
            }

        message = body.get("message")
        if not message:
            return {"type": "unknown", "update_id": update_id, "raw": body}

        sender = message.get("from", {})
        parsed: Dict[str, Any] = {
            "type": "message",
            "update_id": update_id,
            "chat_id": str(message.get("chat", {}).get("id", "")),
            "message_id": message.get("message_id"),
            "from": sender,
        }

        if message.get("photo"):
            # Telegram sends several sizes; the last one is the largest
            parsed["message_type"] = "photo"
            parsed["file_id"] = message["photo"][-1]["file_id"]
            parsed["caption"] = message.get("caption", "")
        elif message.get("voice"):
            voice = message["voice"]
            parsed["message_type"] = "voice"
            parsed["file_id"] = voice.get("file_id", "")
            parsed["duration"] = voice.get("duration", 0)
            parsed["mime_type"] = voice.get("mime_type", "audio/ogg")
        elif "text" in message:
            text = message["text"].strip()
            if text.startswith("/"):
                command, _, args = text.partition(" ")
                parsed["message_type"] = "command"
                # "/start@oshpaz_ai_bot payload" -> "start"
                parsed["command"] = command[1:].split("@", 1)[0].lower()
                parsed["args"] = args.split()
            else:
                parsed["message_type"] = "text"
            parsed["text"] = text
        else:
            parsed["message_type"] = "unsupported"

        return parsed
