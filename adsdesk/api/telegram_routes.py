"""AdsDesk — Telegram Routes."""

from fastapi import APIRouter, Depends

from adsdesk.api.deps import get_notifier, raise_http
from adsdesk.connectors.meta.errors import MalformedInputError
from adsdesk.models.account_models import (
    ReportRequest,
    SpendAlertRequest,
    TelegramTestRequest,
)
from adsdesk.services.telegram import TelegramError, TelegramNotifier

router = APIRouter(prefix="/telegram", tags=["Telegram"])


def _require_bot(body: TelegramTestRequest) -> None:
    if not body.token or not body.chat_id:
        raise_http(MalformedInputError("Bot token and chat ID are required"))


@router.post("/test")
async def test_connection(
    body: TelegramTestRequest, notifier: TelegramNotifier = Depends(get_notifier)
):
    _require_bot(body)
    try:
        sent = await notifier.test_connection(body.token, body.chat_id)
    except TelegramError as e:
        raise_http(e)
    if not sent:
        raise_http(TelegramError("Could not send test message"))
    return {"success": True, "message": "Test message sent"}


@router.post("/spend-alert")
async def spend_alert(
    body: SpendAlertRequest, notifier: TelegramNotifier = Depends(get_notifier)
):
    _require_bot(body)
    if not body.account_id or body.current_spend is None or body.limit is None:
        raise_http(MalformedInputError("accountId, currentSpend and limit are required"))
    try:
        sent = await notifier.send_spend_limit_alert(
            body.token,
            body.chat_id,
            body.account_id,
            body.account_name or body.account_id,
            body.current_spend,
            body.limit,
        )
    except TelegramError as e:
        raise_http(e)
    return {"success": sent}


@router.post("/report")
async def send_report(
    body: ReportRequest, notifier: TelegramNotifier = Depends(get_notifier)
):
    _require_bot(body)
    if not body.title or not body.message:
        raise_http(MalformedInputError("title and message are required"))
    try:
        sent = await notifier.send_report(body.token, body.chat_id, body.title, body.message)
    except TelegramError as e:
        raise_http(e)
    return {"success": sent}
