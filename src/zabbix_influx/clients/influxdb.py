import logging
from typing import Any, Dict, Optional

import httpx

from ..app_settings import AppSettings, app_settings
from ..entities.connector import ConnectionStatus
from ..exceptions.connector_exceptions import (
    ConnectorException,
    DataSourceConnectionError,
    QueryExecutionError,
)

logger = logging.getLogger(__name__)


class InfluxDBDataSource:
    """InfluxDB 1.x data source speaking InfluxQL over the HTTP API."""

    def __init__(
        self,
        url: str,
        database: str,
        username: str = "",
        password: str = "",
        timeout: float = 30.0,
        epoch: str = "ms",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url.rstrip("/")
        self.database = database
        self.epoch = epoch
        auth = httpx.BasicAuth(username, password) if username else None
        self._client = httpx.AsyncClient(
            base_url=self.url,
            auth=auth,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: AppSettings = app_settings, **kwargs) -> "InfluxDBDataSource":
        """Build a data source from application settings."""
        return cls(
            url=settings.influxdb_url,
            database=settings.influxdb_database,
            username=settings.influxdb_user,
            password=settings.influxdb_password,
            timeout=settings.influxdb_timeout,
            epoch=settings.influxdb_epoch,
            **kwargs,
        )

    async def series_query(self, query: str) -> Dict[str, Any]:
        """Run an InfluxQL query and return the decoded response body."""
        params = {"q": query, "db": self.database, "epoch": self.epoch}
        try:
            response = await self._client.get("/query", params=params)
        except httpx.RequestError as e:
            logger.error(f"InfluxDB request to {self.url} failed: {e}")
            raise DataSourceConnectionError(f"Failed to reach InfluxDB at {self.url}: {e}") from e

        if response.status_code >= 400:
            detail = _error_text(response)
            logger.error(f"InfluxDB query failed with status {response.status_code}: {detail}")
            raise QueryExecutionError(f"InfluxDB error {response.status_code}: {detail}")

        try:
            data = response.json() if response.content else {}
        except ValueError as e:
            raise QueryExecutionError(f"InfluxDB returned a non-JSON body: {e}") from e
        if not isinstance(data, dict):
            raise QueryExecutionError(f"InfluxDB returned an unexpected body: {data!r}")
        if data.get("error"):
            raise QueryExecutionError(f"InfluxDB error: {data['error']}")
        for result in data.get("results") or []:
            if result and result.get("error"):
                raise QueryExecutionError(f"InfluxDB error: {result['error']}")
        return data

    async def test_datasource(self) -> ConnectionStatus:
        """Probe the database with a cheap metadata query."""
        try:
            await self.series_query("SHOW MEASUREMENTS LIMIT 1")
        except ConnectorException as e:
            logger.warning(f"InfluxDB connection test failed: {e}")
            return ConnectionStatus(status="error", message=str(e))
        return ConnectionStatus(status="success", message="Data source is working")

    async def aclose(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "InfluxDBDataSource":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


def _error_text(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.text
