"""AdsDesk — Graph API Endpoints.

One method per Graph resource the dashboard reads. Every method takes the
access token explicitly and returns plain data or normalized models.
"""

from typing import Any, Dict, List, Optional

from adsdesk.connectors.meta.client import MetaClient
from adsdesk.connectors.meta.errors import GraphAPIError, MalformedInputError
from adsdesk.connectors.meta.time_window import custom_time_window, resolve_time_window
from adsdesk.connectors.meta.transformer import (
    parse_campaign,
    parse_campaigns,
    parse_insights_response,
    parse_time_series,
)
from adsdesk.models.snapshot_models import MetricSnapshot, TimeSeriesPoint, TimeWindow
from adsdesk.core.logging import get_logger

logger = get_logger("meta.endpoints")

INSIGHT_FIELDS = "impressions,clicks,spend,reach,cpm,cpc,ctr,actions,conversions"
CAMPAIGN_INSIGHT_FIELDS = f"{INSIGHT_FIELDS},frequency"
BREAKDOWN_FIELDS = "date_start,date_stop,impressions,clicks,spend,reach,cpm,cpc,ctr,actions"
CAMPAIGN_BREAKDOWN_FIELDS = f"date_start,date_stop,{CAMPAIGN_INSIGHT_FIELDS}"

AD_ACCOUNT_FIELDS = "id,name,account_status,currency,timezone_name,balance,amount_spent"
ACCOUNT_DETAIL_FIELDS = (
    "id,name,account_status,currency,timezone_name,balance,amount_spent,"
    "created_time,disable_reason,funding_source,is_prepay_account,"
    "is_notifications_enabled,spend_cap,min_campaign_group_spend_cap,min_daily_budget"
)
PAGE_AD_ACCOUNT_FIELDS = "id,name,account_status,currency,timezone_name"
CAMPAIGN_FIELDS = (
    "id,name,status,objective,daily_budget,lifetime_budget,created_time,"
    "updated_time,start_time,stop_time,effective_status"
)
CAMPAIGN_DETAIL_FIELDS = "id,name,status,objective,daily_budget,lifetime_budget"
AD_FIELDS = "id,name,status,campaign_id,adset_id,creative{id}"
AD_DETAIL_FIELDS = "id,name,status,campaign_id,adset_id,creative"
PAGE_FIELDS = "id,name,access_token,category,picture"


def _require(**values: Optional[str]) -> None:
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise MalformedInputError(f"Missing required parameter(s): {', '.join(missing)}")


class MetaEndpoints:
    """Graph API operations consumed by the HTTP layer."""

    def __init__(self, client: MetaClient):
        self.client = client
        self.settings = client.settings

    async def _insights(
        self,
        entity_id: str,
        access_token: str,
        fields: str,
        window: TimeWindow,
        **extra: str,
    ) -> Dict[str, Any]:
        params = {"fields": fields, **window.to_params(), **extra}
        logger.debug(
            f"Insights query for {entity_id}: {sorted(params)}",
            extra={"entity_id": entity_id, "date_preset": window.date_preset},
        )
        return await self.client.request(f"{entity_id}/insights", params, access_token)

    # ── Accounts ──

    async def get_ad_accounts(self, access_token: str) -> List[Dict[str, Any]]:
        _require(access_token=access_token)
        return await self.client.paginated_get(
            "me/adaccounts", {"fields": AD_ACCOUNT_FIELDS}, access_token
        )

    async def get_account_details(self, account_id: str, access_token: str) -> Dict[str, Any]:
        _require(account_id=account_id, access_token=access_token)
        details = await self.client.request(
            account_id, {"fields": ACCOUNT_DETAIL_FIELDS}, access_token
        )
        logger.debug(
            f"Account {account_id}: balance={details.get('balance')!r} "
            f"amount_spent={details.get('amount_spent')!r} currency={details.get('currency')}",
            extra={"account_id": account_id},
        )
        return details

    # ── Account Insights ──

    async def get_insights(
        self,
        account_id: str,
        access_token: str,
        date_preset: str = "today",
        translate: bool = False,
        account_timezone: Optional[str] = None,
    ) -> MetricSnapshot:
        """Aggregated account insights for a preset."""
        _require(account_id=account_id, access_token=access_token)
        window = resolve_time_window(date_preset, translate, account_timezone)
        response = await self._insights(account_id, access_token, INSIGHT_FIELDS, window)
        return parse_insights_response(response, entity_id=account_id)

    async def get_account_insights(
        self, account_id: str, access_token: str, date_preset: str = "last_7d"
    ) -> MetricSnapshot:
        return await self.get_insights(account_id, access_token, date_preset)

    async def get_insights_with_time_range(
        self, account_id: str, access_token: str, since: str, until: str
    ) -> MetricSnapshot:
        """Aggregated account insights for explicit YYYY-MM-DD dates."""
        _require(account_id=account_id, access_token=access_token)
        window = custom_time_window(since, until)
        response = await self._insights(account_id, access_token, INSIGHT_FIELDS, window)
        return parse_insights_response(response, entity_id=account_id)

    async def get_insights_with_breakdown(
        self,
        account_id: str,
        access_token: str,
        date_preset: str = "today",
        time_increment: str = "1",
        translate: bool = False,
    ) -> List[TimeSeriesPoint]:
        """Account insights split into time buckets (daily by default)."""
        _require(account_id=account_id, access_token=access_token)
        window = resolve_time_window(date_preset, translate)
        response = await self._insights(
            account_id,
            access_token,
            BREAKDOWN_FIELDS,
            window,
            time_increment=time_increment,
        )
        return parse_time_series(response.get("data"))

    # ── Campaigns ──

    async def get_campaigns(self, account_id: str, access_token: str) -> List[Dict[str, Any]]:
        """Campaigns of an account, budgets normalized to major units."""
        _require(account_id=account_id, access_token=access_token)
        raw = await self.client.paginated_get(
            f"{account_id}/campaigns", {"fields": CAMPAIGN_FIELDS}, access_token
        )
        return parse_campaigns(raw)

    async def get_campaign_details(self, campaign_id: str, access_token: str) -> Dict[str, Any]:
        _require(campaign_id=campaign_id, access_token=access_token)
        raw = await self.client.request(
            campaign_id, {"fields": CAMPAIGN_DETAIL_FIELDS}, access_token
        )
        return parse_campaign(raw)

    async def get_campaign_insights(
        self,
        campaign_id: str,
        access_token: str,
        date_preset: Optional[str] = "today",
        objective: Optional[str] = None,
        translate: bool = False,
        account_timezone: Optional[str] = None,
        custom_range: Optional[TimeWindow] = None,
    ) -> MetricSnapshot:
        """Campaign insights with results/messages resolved for its objective.

        A custom range wins over the preset; with neither, ``today`` is used.
        """
        _require(campaign_id=campaign_id, access_token=access_token)
        if custom_range is not None:
            window = custom_range
        elif date_preset:
            window = resolve_time_window(date_preset, translate, account_timezone)
        else:
            window = TimeWindow.preset("today")

        try:
            response = await self._insights(
                campaign_id, access_token, CAMPAIGN_INSIGHT_FIELDS, window
            )
        except GraphAPIError as e:
            logger.error(
                f"Campaign insights call failed for {campaign_id}: {e}",
                extra={"entity_id": campaign_id, "status_code": e.status_code},
            )
            raise

        snapshot = parse_insights_response(response, objective, entity_id=campaign_id)
        logger.debug(
            f"Campaign {campaign_id} ({objective or 'no objective'}): "
            f"spend={snapshot.spend} results={snapshot.results} messages={snapshot.messages}",
            extra={"entity_id": campaign_id},
        )
        return snapshot

    async def get_campaign_insights_with_breakdown(
        self,
        campaign_id: str,
        access_token: str,
        date_preset: str = "today",
        time_increment: str = "1",
        objective: Optional[str] = None,
        translate: bool = False,
    ) -> List[TimeSeriesPoint]:
        _require(campaign_id=campaign_id, access_token=access_token)
        window = resolve_time_window(date_preset, translate)
        response = await self._insights(
            campaign_id,
            access_token,
            CAMPAIGN_BREAKDOWN_FIELDS,
            window,
            time_increment=time_increment,
        )
        return parse_time_series(response.get("data"), objective)

    # ── Ads ──

    async def get_ads(self, account_id: str, access_token: str) -> List[Dict[str, Any]]:
        _require(account_id=account_id, access_token=access_token)
        return await self.client.paginated_get(
            f"{account_id}/ads", {"fields": AD_FIELDS}, access_token
        )

    async def get_ad_details(self, ad_id: str, access_token: str) -> Dict[str, Any]:
        _require(ad_id=ad_id, access_token=access_token)
        return await self.client.request(ad_id, {"fields": AD_DETAIL_FIELDS}, access_token)

    async def get_ad_insights(
        self, ad_id: str, access_token: str, date_preset: str = "today"
    ) -> MetricSnapshot:
        _require(ad_id=ad_id, access_token=access_token)
        window = TimeWindow.preset(date_preset or self.settings.default_date_preset)
        response = await self._insights(ad_id, access_token, INSIGHT_FIELDS, window)
        return parse_insights_response(response, entity_id=ad_id)

    # ── Pages ──

    async def get_pages(self, user_access_token: str) -> List[Dict[str, Any]]:
        _require(access_token=user_access_token)
        result = await self.client.request(
            "me/accounts", {"fields": PAGE_FIELDS}, user_access_token
        )
        return result.get("data") or []

    async def get_page_ad_accounts(self, page_id: str, access_token: str) -> List[Dict[str, Any]]:
        """Ad accounts reachable by the token, falling back to the page's business."""
        _require(page_id=page_id, access_token=access_token)
        result = await self.client.request(
            "me/adaccounts", {"fields": PAGE_AD_ACCOUNT_FIELDS}, access_token
        )
        accounts = result.get("data") or []
        if accounts:
            return accounts

        try:
            page = await self.client.request(page_id, {"fields": "business"}, access_token)
            business_id = (page.get("business") or {}).get("id")
            if not business_id:
                return []
            owned = await self.client.request(
                f"{business_id}/owned_ad_accounts",
                {"fields": PAGE_AD_ACCOUNT_FIELDS},
                access_token,
            )
            return owned.get("data") or []
        except GraphAPIError as e:
            logger.warning(f"Business ad account lookup failed for page {page_id}: {e}")
            return []

    # ── Tokens ──

    async def exchange_long_lived_token(
        self, short_lived_token: str, app_id: str, app_secret: str
    ) -> Dict[str, Any]:
        """Swap a short-lived user token for a ~60 day one.

        Returns ``{"access_token": ..., "expires_in": seconds}``.
        """
        _require(
            short_lived_token=short_lived_token, app_id=app_id, app_secret=app_secret
        )
        return await self.client.request(
            "oauth/access_token",
            {
                "grant_type": "fb_exchange_token",
                "client_id": app_id,
                "client_secret": app_secret,
                "fb_exchange_token": short_lived_token,
            },
        )

    async def get_app_access_token(self, app_id: str, app_secret: str) -> str:
        result = await self.client.request(
            "oauth/access_token",
            {
                "client_id": app_id,
                "client_secret": app_secret,
                "grant_type": "client_credentials",
            },
        )
        return result.get("access_token", "")

    async def get_token_info(self, access_token: str) -> Dict[str, Any]:
        """Token metadata from debug_token (``expires_at`` in epoch seconds).

        Debugging a token with itself only works for user tokens; on failure
        the app access token is used when app credentials are configured.
        """
        _require(access_token=access_token)
        try:
            result = await self.client.request(
                "debug_token", {"input_token": access_token}, access_token
            )
            return result.get("data") or {}
        except GraphAPIError as e:
            if not self.settings.has_app_credentials:
                raise
            logger.info(f"Self debug_token failed ({e}); retrying with app token")

        app_token = await self.get_app_access_token(
            self.settings.facebook_app_id, self.settings.facebook_app_secret
        )
        result = await self.client.request(
            "debug_token", {"input_token": access_token}, app_token
        )
        return result.get("data") or {}
