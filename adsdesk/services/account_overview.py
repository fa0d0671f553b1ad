"""AdsDesk — Account Overview.

Builds the per-account dashboard rows: effective status, all-time spend,
top-up needs, and date-preset insights. Every stored account is fetched
concurrently and a failing account becomes an error row instead of failing
the whole list.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

from adsdesk.connectors.meta.endpoints import MetaEndpoints
from adsdesk.connectors.meta.errors import GraphAPIError, TokenExpiredError, is_token_expired
from adsdesk.core.coercion import coerce_float
from adsdesk.models.account_models import StoredAccount
from adsdesk.models.snapshot_models import MetricSnapshot
from adsdesk.core.logging import get_logger

logger = get_logger("services.account_overview")

DEFAULT_CURRENCY = "VND"
DEFAULT_TIMEZONE = "Asia/Ho_Chi_Minh"

# account_status codes
STATUS_NO_BALANCE = 0
STATUS_ACTIVE = 1
STATUS_DISABLED = 2
STATUS_UNSETTLED = 3
STATUS_IN_GRACE_PERIOD = 8
STATUS_PENDING_SETTLEMENT = 9

DISABLE_REASON_PAYMENT_OVERDUE = 5
DISABLE_REASONS = {
    0: "Account disabled",
    1: "Ads policy violation",
    2: "Suspicious activity",
    3: "Payment issue",
    4: "Disabled at user request",
    5: "Payment overdue",
}


def derive_account_status(details: Mapping[str, Any]) -> Tuple[int, str]:
    """Effective status and human message for an ad account.

    Checks disable reason first, then raw status, then balance: a nominally
    ACTIVE prepay account with no funds cannot deliver.
    """
    status = details.get("account_status") or STATUS_ACTIVE
    disable_reason = details.get("disable_reason")
    balance = coerce_float(details.get("balance") or "0")

    if disable_reason == DISABLE_REASON_PAYMENT_OVERDUE or status == STATUS_IN_GRACE_PERIOD:
        return STATUS_IN_GRACE_PERIOD, DISABLE_REASONS[DISABLE_REASON_PAYMENT_OVERDUE]
    if status == STATUS_DISABLED or disable_reason:
        if disable_reason:
            message = DISABLE_REASONS.get(disable_reason, f"Reason: {disable_reason}")
        else:
            message = DISABLE_REASONS[0]
        return STATUS_DISABLED, message
    if status in (STATUS_UNSETTLED, STATUS_PENDING_SETTLEMENT):
        return STATUS_UNSETTLED, "Unsettled"
    if status == STATUS_ACTIVE:
        if details.get("is_prepay_account") and balance <= 0:
            return STATUS_NO_BALANCE, "Out of balance"
        if balance < 0:
            return STATUS_IN_GRACE_PERIOD, "Negative balance, payment required"
        return STATUS_ACTIVE, ""
    return status, f"Status: {status}"


def amount_needed(details: Mapping[str, Any]) -> float:
    """Top-up needed: the negative balance of a prepay account, else 0."""
    balance = coerce_float(details.get("balance") or "0")
    if details.get("is_prepay_account") and balance < 0:
        return abs(balance)
    return 0.0


def _insight_strings(snapshot: MetricSnapshot) -> Dict[str, str]:
    return {
        key: str(getattr(snapshot, key))
        for key in ("spend", "impressions", "clicks", "ctr", "cpm", "reach")
    }


async def _all_time_spend(
    endpoints: MetaEndpoints, stored: StoredAccount, details: Mapping[str, Any]
) -> float:
    """Lifetime spend from insights, falling back to the cached amount_spent."""
    until = datetime.now(timezone.utc).date().isoformat()
    try:
        lifetime = await endpoints.get_insights_with_time_range(
            stored.account_id, stored.access_token, endpoints.settings.all_time_since, until
        )
        if lifetime.spend:
            return lifetime.spend
    except GraphAPIError as e:
        logger.warning(
            f"All-time insights failed for {stored.account_id}: {e}",
            extra={"account_id": stored.account_id},
        )
    return coerce_float(details.get("amount_spent"))


async def build_account_row(
    endpoints: MetaEndpoints, stored: StoredAccount, date_preset: str
) -> Dict[str, Any]:
    """One overview row; never raises for upstream failures."""
    try:
        details = await endpoints.get_account_details(stored.account_id, stored.access_token)
    except GraphAPIError as e:
        return {
            "id": stored.account_id,
            "name": stored.name or stored.account_id,
            "accountStatus": STATUS_NO_BALANCE,
            "currency": DEFAULT_CURRENCY,
            "timezoneName": DEFAULT_TIMEZONE,
            "balance": "0",
            "spend": "0",
            "insights": None,
            "storedId": stored.id,
            "error": e.message,
            "tokenExpired": isinstance(e, TokenExpiredError)
            or is_token_expired(e.message, e.error_code, e.error_type),
            "tokenExpiresAt": stored.token_expires_at,
        }

    timezone_name = details.get("timezone_name") or DEFAULT_TIMEZONE
    insights: Optional[MetricSnapshot]
    try:
        # Follow the account's own timezone so presets match Ads Manager.
        insights = await endpoints.get_insights(
            stored.account_id, stored.access_token, date_preset, False, timezone_name
        )
    except GraphAPIError as e:
        logger.warning(
            f"Preset insights failed for {stored.account_id}: {e}",
            extra={"account_id": stored.account_id, "date_preset": date_preset},
        )
        insights = None

    spend = await _all_time_spend(endpoints, stored, details)
    status, message = derive_account_status(details)

    return {
        "id": stored.account_id,
        "name": stored.name or details.get("name") or stored.account_id,
        "accountStatus": status,
        "accountStatusRaw": details.get("account_status") or STATUS_ACTIVE,
        "disableReason": details.get("disable_reason"),
        "statusMessage": message,
        "currency": details.get("currency") or DEFAULT_CURRENCY,
        "timezoneName": timezone_name,
        "balance": str(coerce_float(details.get("balance") or "0")),
        "spend": str(spend),
        "fundingSource": details.get("funding_source"),
        "isPrepayAccount": details.get("is_prepay_account"),
        "spendCap": str(coerce_float(details.get("spend_cap") or "0")),
        "amountOwed": "0",
        "amountNeeded": str(amount_needed(details)),
        "insights": _insight_strings(insights) if insights else None,
        "storedId": stored.id,
        "tokenExpiresAt": stored.token_expires_at,
    }


async def build_account_overview(
    endpoints: MetaEndpoints, accounts: List[StoredAccount], date_preset: str = "today"
) -> List[Dict[str, Any]]:
    """Overview rows for every stored account, fetched concurrently."""
    logger.info(
        f"Building overview for {len(accounts)} accounts",
        extra={"date_preset": date_preset},
    )
    return list(
        await asyncio.gather(
            *(build_account_row(endpoints, a, date_preset) for a in accounts)
        )
    )


def aggregate_snapshots(snapshots: List[MetricSnapshot]) -> Dict[str, Any]:
    """Sum volumes across accounts; ratios are averaged per account."""
    totals: Dict[str, Any] = {
        "impressions": 0,
        "clicks": 0,
        "spend": 0.0,
        "reach": 0,
        "cpm": 0.0,
        "cpc": 0.0,
        "ctr": 0.0,
        "conversions": 0,
    }
    if not snapshots:
        return totals
    for s in snapshots:
        totals["impressions"] += s.impressions
        totals["clicks"] += s.clicks
        totals["spend"] += s.spend
        totals["reach"] += s.reach
        totals["conversions"] += s.results
        totals["cpm"] += s.cpm
        totals["cpc"] += s.cpc
        totals["ctr"] += s.ctr
    for ratio in ("cpm", "cpc", "ctr"):
        totals[ratio] = totals[ratio] / len(snapshots)
    return totals


async def aggregate_account_insights(
    endpoints: MetaEndpoints, accounts: List[StoredAccount], date_preset: str = "today"
) -> Dict[str, Any]:
    """Insights summed over every stored account; failed accounts are skipped."""

    async def fetch(stored: StoredAccount) -> Optional[MetricSnapshot]:
        try:
            return await endpoints.get_insights(
                stored.account_id, stored.access_token, date_preset
            )
        except GraphAPIError as e:
            logger.warning(
                f"Insights failed for account {stored.account_id}: {e}",
                extra={"account_id": stored.account_id},
            )
            return None

    results = await asyncio.gather(*(fetch(a) for a in accounts))
    return aggregate_snapshots([s for s in results if s is not None])
