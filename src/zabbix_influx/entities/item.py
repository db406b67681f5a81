import math
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..enums.consolidation import ConsolidateBy, resolve_consolidate_by


class MonitoredItem(BaseModel):
    """Zabbix item whose history or trends are requested."""
    model_config = ConfigDict(frozen=True)

    itemid: str
    value_type: str

    @field_validator("itemid", "value_type", mode="before")
    @classmethod
    def _as_string(cls, v):
        # Zabbix API returns ids and type codes as strings, callers may not
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class QueryOptions(BaseModel):
    """Resolution and consolidation requested for a fetch."""
    interval_ms: float = Field(gt=0)
    consolidate_by: Optional[str] = None

    @property
    def interval_sec(self) -> int:
        return math.ceil(self.interval_ms / 1000)

    @property
    def consolidation(self) -> ConsolidateBy:
        return resolve_consolidate_by(self.consolidate_by)
