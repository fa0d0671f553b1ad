"""AdsDesk — Graph Insights Raw → MetricSnapshot Transformer.

Turns raw insight rows into MetricSnapshot / TimeSeriesPoint objects using
the metric registry for per-field coercion, and normalizes campaign budgets.
"""

from typing import Any, Dict, List, Mapping, Optional

from adsdesk.core.action_taxonomy import resolve_actions
from adsdesk.core.coercion import coerce_float, coerce_number
from adsdesk.core.metric_registry import INSIGHT_METRICS, RESOLVED_METRICS
from adsdesk.models.snapshot_models import (
    ActionRecord,
    MetricSnapshot,
    TimeSeriesPoint,
)
from adsdesk.core.logging import get_logger

logger = get_logger("meta.transformer")

# At or above this, a budget is taken to be in the currency's minor unit.
MINOR_UNIT_BUDGET_THRESHOLD = 10_000_000
BUDGET_FIELDS = ("daily_budget", "lifetime_budget")


def _parse_actions(raw_actions: Any) -> List[ActionRecord]:
    if not isinstance(raw_actions, list):
        return []
    records: List[ActionRecord] = []
    for action in raw_actions:
        if not isinstance(action, Mapping):
            continue
        value = action.get("value")
        records.append(
            ActionRecord(
                action_type=str(action.get("action_type") or ""),
                value=value if isinstance(value, (str, int, float)) else None,
            )
        )
    return records


def _compute_frequency(row: Mapping[str, Any], impressions: int, reach: int) -> Any:
    """Upstream frequency when supplied, else impressions / reach."""
    if row.get("frequency") is not None:
        return row["frequency"]
    if reach > 0:
        return impressions / reach
    return 0.0


def _parse_metrics(
    row: Mapping[str, Any], objective: Optional[str] = None
) -> Dict[str, Any]:
    values: Dict[str, Any] = {
        name: coerce_number(row.get(name), metric.metric_type)
        for name, metric in INSIGHT_METRICS.items()
    }
    raw_actions = row.get("actions") or []
    results, messages = resolve_actions(
        raw_actions if isinstance(raw_actions, list) else [],
        objective,
        row.get("conversions"),
    )
    resolved = {
        "results": results,
        "messages": messages,
        "frequency": _compute_frequency(row, values["impressions"], values["reach"]),
    }
    for name, metric in RESOLVED_METRICS.items():
        values[name] = coerce_number(resolved[name], metric.metric_type)
    values["actions"] = _parse_actions(raw_actions)
    return values


def parse_snapshot(
    row: Optional[Mapping[str, Any]], objective: Optional[str] = None
) -> MetricSnapshot:
    """Normalize one aggregated insights row."""
    if not row:
        return MetricSnapshot.zero()
    return MetricSnapshot(**_parse_metrics(row, objective))


def parse_insights_response(
    response: Optional[Mapping[str, Any]],
    objective: Optional[str] = None,
    entity_id: str = "",
) -> MetricSnapshot:
    """Parse the first row of an insights response.

    An empty or missing ``data`` array is a valid zero result.
    """
    data = (response or {}).get("data") or []
    if not isinstance(data, list) or not data or not isinstance(data[0], Mapping):
        logger.warning(
            f"No insights data returned for {entity_id or 'entity'}",
            extra={"entity_id": entity_id},
        )
        return MetricSnapshot.zero()
    return parse_snapshot(data[0], objective)


def parse_time_series(
    rows: Optional[List[Mapping[str, Any]]], objective: Optional[str] = None
) -> List[TimeSeriesPoint]:
    """Parse a ``time_increment`` breakdown, one point per bucket."""
    series: List[TimeSeriesPoint] = []
    for row in rows or []:
        if not isinstance(row, Mapping):
            continue
        series.append(
            TimeSeriesPoint(
                date_start=str(row.get("date_start") or ""),
                date_stop=str(row.get("date_stop") or ""),
                **_parse_metrics(row, objective),
            )
        )
    return series


def normalize_budget(raw: Any) -> Optional[float]:
    """Budget in major currency units, or None when no budget is set.

    Heuristic: the Graph API gives no unit indicator. Minor-unit currencies
    (USD cents) come back large, zero-decimal ones (VND) come back as-is, so
    values at or above MINOR_UNIT_BUDGET_THRESHOLD are divided by 100.
    """
    if raw is None or raw == "0":
        return None
    value = coerce_float(raw)
    if value <= 0:
        return None
    if value >= MINOR_UNIT_BUDGET_THRESHOLD:
        return value / 100
    return value


def parse_campaign(raw: Mapping[str, Any]) -> Dict[str, Any]:
    campaign = dict(raw)
    for field in BUDGET_FIELDS:
        campaign[field] = normalize_budget(raw.get(field))
    return campaign


def parse_campaigns(raw_campaigns: Optional[List[Mapping[str, Any]]]) -> List[Dict[str, Any]]:
    """Campaign list with daily/lifetime budgets normalized."""
    campaigns = [parse_campaign(c) for c in raw_campaigns or []]
    if campaigns:
        first = raw_campaigns[0]
        logger.debug(
            f"Budget for campaign {first.get('id')}: "
            f"daily {first.get('daily_budget')!r} → {campaigns[0]['daily_budget']}, "
            f"lifetime {first.get('lifetime_budget')!r} → {campaigns[0]['lifetime_budget']}",
            extra={"entity_id": first.get("id")},
        )
    return campaigns
