"""AdsDesk — Insight Metric Registry.

Declares every numeric field of a MetricSnapshot and how its raw Graph API
value is coerced. The parser walks this registry instead of type-checking
each field inline.
"""

from enum import Enum
from typing import Dict


class MetricType(str, Enum):
    """How a raw upstream value is parsed."""

    COUNT = "count"  # Integer parsing: impressions, clicks, reach
    DECIMAL = "decimal"  # Float parsing: spend, cpm, cpc, ctr, frequency


class MetricDefinition:
    """Describes a single snapshot metric."""

    def __init__(
        self, name: str, metric_type: MetricType, unit: str = "", description: str = ""
    ):
        self.name = name
        self.metric_type = metric_type
        self.unit = unit
        self.description = description

    def __repr__(self) -> str:
        return f"<Metric {self.name} ({self.metric_type.value})>"


# ─────────────────────────────────────────────
# UPSTREAM METRICS: read straight off an insights row
# ─────────────────────────────────────────────

INSIGHT_METRICS: Dict[str, MetricDefinition] = {
    "impressions": MetricDefinition(
        "impressions", MetricType.COUNT, "count", "Number of times ads were shown"
    ),
    "clicks": MetricDefinition("clicks", MetricType.COUNT, "count", "Total clicks"),
    "spend": MetricDefinition(
        "spend", MetricType.DECIMAL, "currency", "Amount spent, major currency unit"
    ),
    "reach": MetricDefinition(
        "reach", MetricType.COUNT, "count", "Unique users who saw the ads"
    ),
    "cpm": MetricDefinition(
        "cpm", MetricType.DECIMAL, "currency", "Cost per 1000 impressions"
    ),
    "cpc": MetricDefinition("cpc", MetricType.DECIMAL, "currency", "Cost per click"),
    "ctr": MetricDefinition("ctr", MetricType.DECIMAL, "%", "Click-through rate"),
}


# ─────────────────────────────────────────────
# RESOLVED METRICS: computed by the parser / action taxonomy
# ─────────────────────────────────────────────

RESOLVED_METRICS: Dict[str, MetricDefinition] = {
    "frequency": MetricDefinition(
        "frequency", MetricType.DECIMAL, "avg", "Impressions per reached user"
    ),
    "results": MetricDefinition(
        "results", MetricType.COUNT, "count", "Headline outcome count per objective"
    ),
    "messages": MetricDefinition(
        "messages", MetricType.COUNT, "count", "Messaging contacts started"
    ),
}

