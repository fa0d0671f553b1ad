"""AdsDesk — Concurrent Insight Enrichment.

Attaches a MetricSnapshot to every item of an already-fetched list. One task
per item, no cross-item dependency; a failing item degrades to zeros so the
list stays available.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence

from adsdesk.connectors.meta.endpoints import MetaEndpoints
from adsdesk.models.snapshot_models import MetricSnapshot, TimeWindow
from adsdesk.core.logging import get_logger

logger = get_logger("services.enrichment")

InsightFetcher = Callable[[Mapping[str, Any]], Awaitable[MetricSnapshot]]

AD_METRIC_FIELDS = ("impressions", "clicks", "spend")


async def _fetch_isolated(item: Mapping[str, Any], fetch: InsightFetcher) -> MetricSnapshot:
    try:
        return await fetch(item)
    except Exception as e:
        logger.warning(
            f"Insights failed for {item.get('id')}: {e}; using zero metrics",
            extra={"entity_id": item.get("id")},
        )
        return MetricSnapshot.zero()


async def fetch_all_isolated(
    items: Sequence[Mapping[str, Any]], fetch: InsightFetcher
) -> List[MetricSnapshot]:
    """Run ``fetch`` for every item concurrently; results keep input order."""
    return list(await asyncio.gather(*(_fetch_isolated(i, fetch) for i in items)))


async def enrich_with_insights(
    items: Sequence[Mapping[str, Any]],
    fetch: InsightFetcher,
    fields: Optional[Sequence[str]] = None,
) -> List[Dict[str, Any]]:
    """Merge each item's snapshot metrics into a copy of the item."""
    snapshots = await fetch_all_isolated(items, fetch)
    enriched: List[Dict[str, Any]] = []
    for item, snapshot in zip(items, snapshots):
        metrics = snapshot.metrics()
        if fields is not None:
            metrics = {k: metrics[k] for k in fields}
        enriched.append({**item, **metrics})
    return enriched


async def enrich_campaigns(
    endpoints: MetaEndpoints,
    campaigns: Sequence[Mapping[str, Any]],
    access_token: str,
    date_preset: Optional[str] = "today",
    translate: bool = False,
    account_timezone: Optional[str] = None,
    custom_range: Optional[TimeWindow] = None,
) -> List[Dict[str, Any]]:
    """Campaign list with insights for the selected window."""

    async def fetch(campaign: Mapping[str, Any]) -> MetricSnapshot:
        return await endpoints.get_campaign_insights(
            campaign["id"],
            access_token,
            date_preset,
            campaign.get("objective"),
            translate,
            account_timezone,
            custom_range,
        )

    return await enrich_with_insights(campaigns, fetch)


async def enrich_ads(
    endpoints: MetaEndpoints,
    ads: Sequence[Mapping[str, Any]],
    access_token: str,
    date_preset: str = "today",
) -> List[Dict[str, Any]]:
    """Ad list with impressions, clicks and spend."""

    async def fetch(ad: Mapping[str, Any]) -> MetricSnapshot:
        return await endpoints.get_ad_insights(ad["id"], access_token, date_preset)

    return await enrich_with_insights(ads, fetch, AD_METRIC_FIELDS)
