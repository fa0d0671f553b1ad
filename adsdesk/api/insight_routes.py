"""AdsDesk — Insight Routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from adsdesk.api.deps import get_endpoints, get_store, raise_http, resolve_token
from adsdesk.connectors.meta.endpoints import MetaEndpoints
from adsdesk.connectors.meta.errors import GraphAPIError
from adsdesk.services.account_overview import aggregate_account_insights
from adsdesk.services.account_store import AccountStore
from adsdesk.core.logging import get_logger

logger = get_logger("api.insights")

router = APIRouter(prefix="/insights", tags=["Insights"])


@router.get("")
async def get_insights(
    account_id: Optional[str] = Query(None, alias="accountId"),
    access_token: Optional[str] = Query(None, alias="accessToken"),
    date_preset: Optional[str] = Query(None, alias="datePreset"),
    endpoints: MetaEndpoints = Depends(get_endpoints),
    store: AccountStore = Depends(get_store),
):
    """Insights for one account with a daily series.

    Without ``accountId``, totals across every stored account.
    """
    preset = date_preset or "today"
    if not account_id:
        return await aggregate_account_insights(endpoints, store.all(), preset)

    token = resolve_token(store, account_id, access_token)
    try:
        insights = await endpoints.get_insights(account_id, token, preset)
    except GraphAPIError as e:
        raise_http(e)

    try:
        series = await endpoints.get_insights_with_breakdown(account_id, token, preset, "1")
    except GraphAPIError as e:
        logger.warning(
            f"Time series failed for {account_id}: {e}", extra={"account_id": account_id}
        )
        return insights.model_dump()

    return {
        **insights.model_dump(),
        "timeSeries": [point.model_dump() for point in series],
    }


@router.get("/account/{account_id}")
async def get_account_insights(
    account_id: str,
    access_token: Optional[str] = Query(None, alias="accessToken"),
    date_preset: Optional[str] = Query(None, alias="datePreset"),
    endpoints: MetaEndpoints = Depends(get_endpoints),
    store: AccountStore = Depends(get_store),
):
    token = resolve_token(store, account_id, access_token)
    try:
        snapshot = await endpoints.get_account_insights(
            account_id, token, date_preset or "today"
        )
    except GraphAPIError as e:
        raise_http(e)
    return snapshot.model_dump()
