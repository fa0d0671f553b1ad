"""AdsDesk — Shared Route Dependencies.

Clients live on ``app.state`` (built in the lifespan) and reach routes via
FastAPI dependencies; nothing is a module-level singleton.
"""

from typing import NoReturn, Optional

from fastapi import HTTPException, Request

from adsdesk.connectors.meta.endpoints import MetaEndpoints
from adsdesk.connectors.meta.errors import (
    GraphAPIError,
    MalformedInputError,
    TokenExpiredError,
)
from adsdesk.services.account_store import AccountStore
from adsdesk.services.telegram import TelegramError, TelegramNotifier

MISSING_TOKEN_MESSAGE = (
    "Access token not found. Add the account with a valid access token."
)


def get_endpoints(request: Request) -> MetaEndpoints:
    return request.app.state.endpoints


def get_store(request: Request) -> AccountStore:
    return request.app.state.account_store


def get_notifier(request: Request) -> TelegramNotifier:
    return request.app.state.notifier


def resolve_token(
    store: AccountStore, account_id: Optional[str], provided: Optional[str] = None
) -> str:
    """Explicit token first, then the stored one; 401 if neither exists."""
    token = provided or (store.resolve(account_id) if account_id else None)
    if not token:
        raise HTTPException(status_code=401, detail={"error": MISSING_TOKEN_MESSAGE})
    return token


def raise_http(error: Exception) -> NoReturn:
    """Translate a core exception into the HTTP response the UI expects.

    Token expiry gets its own 401 with ``token_expired`` so the client can
    route to re-authentication instead of a generic error banner.
    """
    if isinstance(error, TokenExpiredError):
        raise HTTPException(
            status_code=401,
            detail={
                "error": f"Access token expired: {error.message}",
                "token_expired": True,
                "code": error.error_code,
            },
        ) from error
    if isinstance(error, GraphAPIError):
        raise HTTPException(
            status_code=502,
            detail={
                "error": f"Facebook API Error: {error.message}",
                "token_expired": False,
                "code": error.error_code,
            },
        ) from error
    if isinstance(error, MalformedInputError):
        raise HTTPException(status_code=400, detail={"error": str(error)}) from error
    if isinstance(error, TelegramError):
        raise HTTPException(status_code=502, detail={"error": str(error)}) from error
    raise error
