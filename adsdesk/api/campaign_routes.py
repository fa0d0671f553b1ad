"""AdsDesk — Campaign Routes."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from adsdesk.api.deps import get_endpoints, get_store, raise_http, resolve_token
from adsdesk.connectors.meta.endpoints import MetaEndpoints
from adsdesk.connectors.meta.errors import GraphAPIError, MalformedInputError
from adsdesk.connectors.meta.time_window import custom_time_window
from adsdesk.services.account_store import AccountStore
from adsdesk.services.enrichment import enrich_campaigns
from adsdesk.core.logging import get_logger

logger = get_logger("api.campaigns")

# Accounts already reporting in the reference clock need no translation.
REFERENCE_TIMEZONE_MARKER = "Ho_Chi_Minh"
DEFAULT_ACCOUNT_TIMEZONE = "Asia/Ho_Chi_Minh"

router = APIRouter(prefix="/campaigns", tags=["Campaigns"])


@router.get("")
async def list_campaigns(
    account_id: Optional[str] = Query(None, alias="accountId"),
    access_token: Optional[str] = Query(None, alias="accessToken"),
    date_preset: Optional[str] = Query(None, alias="datePreset"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    start_time: Optional[str] = Query(None, alias="startTime"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    end_time: Optional[str] = Query(None, alias="endTime"),
    endpoints: MetaEndpoints = Depends(get_endpoints),
    store: AccountStore = Depends(get_store),
):
    """Campaigns of an account, each enriched with insights.

    A complete custom range (dates and times) overrides ``datePreset``.
    """
    if not account_id:
        raise_http(MalformedInputError("accountId is required"))
    token = resolve_token(store, account_id, access_token)

    custom_range = None
    try:
        if start_date and start_time and end_date and end_time:
            custom_range = custom_time_window(start_date, end_date, start_time, end_time)
        campaigns = await endpoints.get_campaigns(account_id, token)
    except (GraphAPIError, MalformedInputError) as e:
        raise_http(e)

    account_timezone = None
    try:
        details = await endpoints.get_account_details(account_id, token)
        account_timezone = details.get("timezone_name")
    except GraphAPIError as e:
        logger.warning(
            f"Could not fetch account timezone: {e}", extra={"account_id": account_id}
        )

    preset = date_preset or "today"
    return await enrich_campaigns(
        endpoints,
        campaigns,
        token,
        date_preset=None if preset == "custom" else preset,
        account_timezone=account_timezone,
        custom_range=custom_range,
    )


@router.get("/{campaign_id}")
async def get_campaign(
    campaign_id: str,
    account_id: Optional[str] = Query(None, alias="accountId"),
    access_token: Optional[str] = Query(None, alias="accessToken"),
    date_preset: Optional[str] = Query(None, alias="datePreset"),
    endpoints: MetaEndpoints = Depends(get_endpoints),
    store: AccountStore = Depends(get_store),
):
    """Campaign details with aggregated insights and a daily time series.

    With ``accountId``, presets for accounts outside the reference clock are
    translated to an explicit window.
    """
    token = resolve_token(store, account_id, access_token)
    try:
        campaign = await endpoints.get_campaign_details(campaign_id, token)
    except (GraphAPIError, MalformedInputError) as e:
        raise_http(e)

    account_timezone = None
    translate = False
    if account_id:
        try:
            details = await endpoints.get_account_details(account_id, token)
            account_timezone = details.get("timezone_name") or DEFAULT_ACCOUNT_TIMEZONE
            translate = REFERENCE_TIMEZONE_MARKER not in account_timezone
        except GraphAPIError as e:
            logger.warning(
                f"Could not fetch account timezone: {e}", extra={"account_id": account_id}
            )

    preset = date_preset or "today"
    objective = campaign.get("objective")
    try:
        insights = await endpoints.get_campaign_insights(
            campaign_id, token, preset, objective, translate, account_timezone
        )
        time_series = await endpoints.get_campaign_insights_with_breakdown(
            campaign_id, token, preset, "1", objective, translate
        )
    except GraphAPIError as e:
        logger.error(
            f"Insights failed for campaign {campaign_id}: {e}",
            extra={"entity_id": campaign_id},
        )
        return campaign

    return {
        **campaign,
        "insights": insights.model_dump(),
        "timeSeries": [point.model_dump() for point in time_series],
    }


# ── Mutation stubs (echo input) ──


@router.post("")
async def create_campaign(payload: Optional[Dict[str, Any]] = Body(None)):
    return {"success": True, "message": "Campaign created", "campaign": payload or {}}


@router.put("/{campaign_id}")
async def update_campaign(
    campaign_id: str, payload: Optional[Dict[str, Any]] = Body(None)
):
    return {"success": True, "message": "Campaign updated", "id": campaign_id, **(payload or {})}


@router.delete("/{campaign_id}")
async def delete_campaign(campaign_id: str):
    return {"success": True, "message": "Campaign deleted", "id": campaign_id}
