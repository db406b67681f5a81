from typing import Any, List, Optional

import pandas as pd
from pydantic import BaseModel, Field


class TimeSeries(BaseModel):
    """Named series of [value, timestamp] points."""
    name: Optional[str] = None
    points: List[List[Any]] = Field(default_factory=list)

    def to_dataframe(self) -> pd.DataFrame:
        """Points as a DataFrame with value and time columns, in point order."""
        return pd.DataFrame(self.points, columns=["value", "time"])
