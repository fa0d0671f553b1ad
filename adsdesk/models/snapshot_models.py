"""AdsDesk — Normalized Insight Models.

Every insight call, whatever the entity level, is parsed into these shapes.
"""

import json
from datetime import date
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# Raw numeric field as the Graph API sends it: "123", 123, 1.5, or nothing.
UpstreamNumber = Union[str, int, float, None]


class ActionRecord(BaseModel):
    """One tagged action line from an insights row."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    action_type: str = ""
    value: UpstreamNumber = None


class MetricSnapshot(BaseModel):
    """Normalized metrics for one entity over one time window.

    Never partially populated: every field falls back to 0.
    """

    model_config = ConfigDict(frozen=True)

    impressions: int = 0
    clicks: int = 0
    spend: float = 0.0
    reach: int = 0
    cpm: float = 0.0
    cpc: float = 0.0
    ctr: float = 0.0
    results: int = 0
    frequency: float = 0.0
    messages: int = 0
    actions: List[ActionRecord] = Field(default_factory=list)

    @classmethod
    def zero(cls) -> "MetricSnapshot":
        return cls()

    def metrics(self) -> Dict[str, Any]:
        """Numeric fields only, for merging into a parent entity."""
        return self.model_dump(exclude={"actions"})


class TimeSeriesPoint(MetricSnapshot):
    """One time bucket (one calendar day with time_increment=1)."""

    date_start: str = ""
    date_stop: str = ""


class TimeWindow(BaseModel):
    """Resolved reporting window.

    Either a concrete since/until pair or, when ``date_preset`` is set, the
    sentinel meaning "let the Graph API resolve the named preset itself".
    """

    model_config = ConfigDict(frozen=True)

    since: Optional[date] = None
    until: Optional[date] = None
    date_preset: Optional[str] = None
    # Informational only: Graph time_range has day granularity.
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    @classmethod
    def preset(cls, date_preset: str) -> "TimeWindow":
        return cls(date_preset=date_preset)

    @property
    def is_preset(self) -> bool:
        return self.date_preset is not None

    def to_params(self) -> Dict[str, str]:
        """Render as Graph API query parameters."""
        if self.is_preset:
            return {"date_preset": self.date_preset}
        return {
            "time_range": json.dumps(
                {"since": self.since.isoformat(), "until": self.until.isoformat()}
            )
        }
