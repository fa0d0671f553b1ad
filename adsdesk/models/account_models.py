"""AdsDesk — Stored Account & Request Models."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class StoredAccount(BaseModel):
    """Ad account credentials persisted in the flat account file.

    Serialized with camelCase keys so existing ``accounts.json`` files load as-is.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    account_id: str
    access_token: str
    name: str = ""
    created_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    token_expires_at: Optional[int] = None
    """Epoch milliseconds."""


# ── Request bodies ──


class AddAccountRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    account_id: str = ""
    access_token: str = ""
    name: Optional[str] = None


class UpdateTokenRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    access_token: str = ""


class TelegramTestRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    token: str = ""
    chat_id: str = ""


class SpendAlertRequest(TelegramTestRequest):
    account_id: str = ""
    account_name: Optional[str] = None
    current_spend: Optional[float] = None
    limit: Optional[float] = None


class ReportRequest(TelegramTestRequest):
    title: str = ""
    message: str = ""
