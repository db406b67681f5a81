import logging
from enum import Enum
from typing import Optional, Union

logger = logging.getLogger(__name__)


class ConsolidateBy(str, Enum):
    """Consolidation functions applied when downsampling to a resolution."""
    AVG = "avg"
    MIN = "min"
    MAX = "max"
    SUM = "sum"
    COUNT = "count"


def resolve_consolidate_by(value: Optional[Union[str, ConsolidateBy]]) -> ConsolidateBy:
    """Map a requested mode onto ConsolidateBy, falling back to avg."""
    if isinstance(value, ConsolidateBy):
        return value
    if value:
        try:
            return ConsolidateBy(str(value).lower())
        except ValueError:
            logger.debug(f"Unknown consolidation mode {value!r}, using avg")
    return ConsolidateBy.AVG
