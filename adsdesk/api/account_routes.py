"""AdsDesk — Account Routes.

Stored ad accounts: overview, registration and token maintenance.
"""

import secrets
import time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from adsdesk.api.deps import get_endpoints, get_store, raise_http
from adsdesk.connectors.meta.endpoints import MetaEndpoints
from adsdesk.connectors.meta.errors import GraphAPIError, MalformedInputError
from adsdesk.models.account_models import (
    AddAccountRequest,
    StoredAccount,
    UpdateTokenRequest,
)
from adsdesk.services.account_overview import build_account_overview
from adsdesk.services.account_store import AccountStore
from adsdesk.services.token_manager import exchange_for_long_lived, prepare_token
from adsdesk.core.logging import get_logger

logger = get_logger("api.accounts")

router = APIRouter(prefix="/accounts", tags=["Accounts"])


def _new_storage_id() -> str:
    return f"stored_{int(time.time() * 1000)}_{secrets.token_hex(4)}"


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail={"error": "Account not found"})


@router.get("")
async def list_accounts(
    date_preset: Optional[str] = Query(None, alias="datePreset"),
    endpoints: MetaEndpoints = Depends(get_endpoints),
    store: AccountStore = Depends(get_store),
):
    """Overview row per stored account; failing accounts carry an error flag."""
    accounts = store.all()
    if not accounts:
        return []
    return await build_account_overview(endpoints, accounts, date_preset or "today")


@router.get("/{account_id}")
async def get_account(
    account_id: str,
    endpoints: MetaEndpoints = Depends(get_endpoints),
    store: AccountStore = Depends(get_store),
):
    stored = store.find(account_id)
    if stored is None:
        raise _not_found()
    try:
        details = await endpoints.get_account_details(stored.account_id, stored.access_token)
    except GraphAPIError as e:
        raise_http(e)
    return {**details, "storedId": stored.id}


@router.post("")
async def add_account(
    body: AddAccountRequest,
    endpoints: MetaEndpoints = Depends(get_endpoints),
    store: AccountStore = Depends(get_store),
):
    """Register an account after verifying its token against the Graph API."""
    if not body.account_id or not body.access_token:
        raise_http(MalformedInputError("Account ID and Access Token are required"))
    if not body.account_id.startswith("act_"):
        raise_http(MalformedInputError("Account ID must start with 'act_'"))
    if store.get_by_account_id(body.account_id):
        raise_http(MalformedInputError("Account already exists"))

    token, expires_at = await prepare_token(endpoints, body.access_token)

    try:
        details = await endpoints.get_account_details(body.account_id, token)
    except GraphAPIError as e:
        logger.error(
            f"Could not verify account {body.account_id}: {e}",
            extra={"account_id": body.account_id},
        )
        raise_http(e)

    account = store.add(
        StoredAccount(
            id=_new_storage_id(),
            account_id=body.account_id,
            access_token=token,
            name=body.name or details.get("name") or body.account_id,
            token_expires_at=expires_at,
        )
    )
    logger.info(f"Added account {account.account_id}", extra={"account_id": account.account_id})
    return {**details, "storedId": account.id, "tokenExpiresAt": expires_at}


@router.put("/{account_id}/token")
async def update_token(
    account_id: str,
    body: UpdateTokenRequest,
    endpoints: MetaEndpoints = Depends(get_endpoints),
    store: AccountStore = Depends(get_store),
):
    """Replace a stored token, upgrading it to long-lived when possible."""
    if not body.access_token:
        raise_http(MalformedInputError("Access Token is required"))
    stored = store.find(account_id)
    if stored is None:
        raise _not_found()

    token, expires_at = await prepare_token(endpoints, body.access_token)
    try:
        details = await endpoints.get_account_details(stored.account_id, token)
    except GraphAPIError as e:
        raise_http(e)

    store.update(stored.id, access_token=token, token_expires_at=expires_at)
    logger.info(
        f"Updated token for {stored.account_id}", extra={"account_id": stored.account_id}
    )
    return {
        "success": True,
        "message": "Token updated",
        "account": {**details, "storedId": stored.id, "tokenExpiresAt": expires_at},
    }


@router.post("/{account_id}/refresh-token")
async def refresh_token(
    account_id: str,
    endpoints: MetaEndpoints = Depends(get_endpoints),
    store: AccountStore = Depends(get_store),
):
    """Re-exchange the stored token for a fresh long-lived one."""
    stored = store.find(account_id)
    if stored is None:
        raise _not_found()
    if not endpoints.settings.has_app_credentials:
        raise_http(
            MalformedInputError(
                "Facebook App ID and App Secret must be configured to refresh tokens"
            )
        )

    try:
        token, expires_at = await exchange_for_long_lived(endpoints, stored.access_token)
    except GraphAPIError as e:
        raise_http(e)

    store.update(stored.id, access_token=token, token_expires_at=expires_at)
    return {"success": True, "message": "Token refreshed", "tokenExpiresAt": expires_at}


@router.delete("/{account_id}")
async def delete_account(account_id: str, store: AccountStore = Depends(get_store)):
    stored = store.find(account_id)
    if stored is None or not store.delete(stored.id):
        raise _not_found()
    logger.info(f"Deleted account {stored.account_id}", extra={"account_id": stored.account_id})
    return {"success": True, "message": "Account deleted"}
