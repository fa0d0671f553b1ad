"""AdsDesk — Telegram Notifier.

Sends HTML-formatted alert and report messages through the Bot API.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import httpx

from adsdesk.config import Settings, settings as default_settings
from adsdesk.core.logging import get_logger

logger = get_logger("services.telegram")

GET_ME_TIMEOUT = 5.0
TEST_MESSAGE = (
    "✅ <b>Test notification</b>\n\n"
    "This is a test message from AdsDesk. If you received it, "
    "Telegram notifications are configured correctly!"
)


class TelegramError(Exception):
    """Raised when the Bot API rejects a request or is unreachable."""


def format_vnd(amount: float) -> str:
    return f"{amount:,.0f} ₫".replace(",", ".")


def _describe_failure(error_code: Optional[int], description: str) -> str:
    if error_code == 400:
        if "chat not found" in description:
            return (
                "Chat not found. Make sure the chat ID is correct and send /start "
                "to the bot (or add it to the group) before testing."
            )
        if "chat_id" in description:
            return "Invalid chat ID. Please check the chat ID."
        return f"Telegram API error: {description}"
    if error_code == 401:
        return "Invalid bot token. Please check the Telegram bot token."
    if error_code == 403:
        return "The bot was blocked. Send /start to the bot first."
    return description or "Could not send Telegram notification"


def _json_body(resp: httpx.Response) -> Dict[str, Any]:
    try:
        body = resp.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


class TelegramNotifier:
    """Bot API client; the bot token is supplied per call."""

    def __init__(
        self, http_client: httpx.AsyncClient, settings: Optional[Settings] = None
    ):
        self.settings = settings or default_settings
        self._client = http_client

    def _url(self, token: str, method: str) -> str:
        return f"{self.settings.telegram_api_base.rstrip('/')}/bot{token}/{method}"

    async def send_message(self, token: str, chat_id: str, message: str) -> bool:
        try:
            resp = await self._client.post(
                self._url(token, "sendMessage"),
                json={"chat_id": chat_id, "text": message, "parse_mode": "HTML"},
                timeout=self.settings.telegram_timeout,
            )
        except httpx.RequestError as e:
            logger.error(f"Telegram request failed: {e}")
            raise TelegramError(f"Could not reach Telegram: {e}") from e

        body = _json_body(resp)

        if resp.is_error or not body.get("ok"):
            description = str(body.get("description") or f"HTTP {resp.status_code}")
            error_code = body.get("error_code") or (resp.status_code if resp.is_error else None)
            logger.error(
                f"Telegram sendMessage failed: {description}",
                extra={"status_code": resp.status_code},
            )
            if resp.is_error:
                raise TelegramError(_describe_failure(error_code, description))
            return False
        return True

    async def test_connection(self, token: str, chat_id: str) -> bool:
        """Validate the bot token with getMe, then send a test message."""
        try:
            resp = await self._client.get(self._url(token, "getMe"), timeout=GET_ME_TIMEOUT)
        except httpx.RequestError as e:
            raise TelegramError("Could not connect to Telegram API. Please try again later.") from e

        if resp.status_code == 401:
            raise TelegramError(_describe_failure(401, ""))
        if resp.is_error or not _json_body(resp).get("ok"):
            raise TelegramError("Could not connect to Telegram API. Please try again later.")

        return await self.send_message(token, chat_id, TEST_MESSAGE)

    async def send_spend_limit_alert(
        self,
        token: str,
        chat_id: str,
        account_id: str,
        account_name: str,
        current_spend: float,
        limit: float,
        now: Optional[datetime] = None,
    ) -> bool:
        """Alert stamped in the reporting clock (reference UTC offset)."""
        clock = timezone(timedelta(hours=self.settings.reference_utc_offset_hours))
        stamped = (now or datetime.now(timezone.utc)).astimezone(clock)
        message = (
            "⚠️ <b>ALERT: Spend limit reached</b>\n\n"
            f"📊 <b>Account:</b> {account_name}\n"
            f"🆔 <b>ID:</b> {account_id}\n"
            f"💰 <b>Current spend:</b> {format_vnd(current_spend)}\n"
            f"🎯 <b>Limit:</b> {format_vnd(limit)}\n"
            f"\n⏰ <i>Time: {stamped.strftime('%d/%m/%Y %H:%M:%S')}</i>"
        )
        return await self.send_message(token, chat_id, message)

    async def send_report(self, token: str, chat_id: str, title: str, body: str) -> bool:
        return await self.send_message(token, chat_id, f"{title}\n\n{body}")
