"""AdsDesk — Ad Routes."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from adsdesk.api.deps import get_endpoints, get_store, raise_http, resolve_token
from adsdesk.connectors.meta.endpoints import MetaEndpoints
from adsdesk.connectors.meta.errors import GraphAPIError, MalformedInputError
from adsdesk.services.account_store import AccountStore
from adsdesk.services.enrichment import enrich_ads

router = APIRouter(prefix="/ads", tags=["Ads"])


@router.get("")
async def list_ads(
    account_id: Optional[str] = Query(None, alias="accountId"),
    access_token: Optional[str] = Query(None, alias="accessToken"),
    date_preset: Optional[str] = Query(None, alias="datePreset"),
    endpoints: MetaEndpoints = Depends(get_endpoints),
    store: AccountStore = Depends(get_store),
):
    """Ads of an account with impressions, clicks and spend."""
    if not account_id:
        raise_http(MalformedInputError("accountId is required"))
    token = resolve_token(store, account_id, access_token)
    try:
        ads = await endpoints.get_ads(account_id, token)
    except GraphAPIError as e:
        raise_http(e)
    return await enrich_ads(endpoints, ads, token, date_preset or "today")


@router.get("/{ad_id}")
async def get_ad(
    ad_id: str,
    account_id: Optional[str] = Query(None, alias="accountId"),
    access_token: Optional[str] = Query(None, alias="accessToken"),
    endpoints: MetaEndpoints = Depends(get_endpoints),
    store: AccountStore = Depends(get_store),
):
    token = resolve_token(store, account_id, access_token)
    try:
        return await endpoints.get_ad_details(ad_id, token)
    except GraphAPIError as e:
        raise_http(e)


# ── Mutation stubs (echo input) ──


@router.post("")
async def create_ad(payload: Optional[Dict[str, Any]] = Body(None)):
    return {"success": True, "message": "Ad created", "ad": payload or {}}


@router.put("/{ad_id}")
async def update_ad(ad_id: str, payload: Optional[Dict[str, Any]] = Body(None)):
    return {"success": True, "message": "Ad updated", "id": ad_id, **(payload or {})}


@router.delete("/{ad_id}")
async def delete_ad(ad_id: str):
    return {"success": True, "message": "Ad deleted", "id": ad_id}
