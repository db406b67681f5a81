from typing import Any, Dict, Protocol

from ..entities.connector import ConnectionStatus


class DataSource(Protocol):
    """Backing time-series store a connector submits queries to."""

    async def series_query(self, query: str) -> Dict[str, Any]: ...

    async def test_datasource(self) -> ConnectionStatus: ...
