import asyncio
import logging
from typing import Optional

from ..app_settings import AppSettings, app_settings
from ..clients.base import DataSource
from ..clients.registry import DataSourceRegistry
from ..entities.connector import ConnectionStatus, ConnectorOptions
from ..exceptions.connector_exceptions import DataSourceResolutionError

logger = logging.getLogger(__name__)


class DBConnector:
    """Base class for connectors reading Zabbix data from a database data source.

    The data source is either injected already resolved, or looked up in the
    registry by uid (falling back to name) once, on ``initialize()`` or on
    first use. Concurrent callers wait on the same lookup.
    """

    def __init__(
        self,
        options: Optional[ConnectorOptions] = None,
        registry: Optional[DataSourceRegistry] = None,
        data_source: Optional[DataSource] = None,
        settings: AppSettings = app_settings,
    ):
        self.options = options or ConnectorOptions()
        self.settings = settings
        self.datasource_id = self.options.datasource_id
        self.datasource_name = self.options.datasource_name
        self._registry = registry
        self._data_source = data_source
        self._lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self._data_source is not None

    async def initialize(self) -> DataSource:
        """Resolve and cache the backing data source."""
        return await self.get_data_source()

    async def get_data_source(self) -> DataSource:
        if self._data_source is not None:
            return self._data_source
        async with self._lock:
            if self._data_source is None:
                self._data_source = await self.load_db_data_source()
        return self._data_source

    async def load_db_data_source(self) -> DataSource:
        key = self.datasource_id or self.datasource_name
        if self._registry is None:
            raise DataSourceResolutionError("No data source registry configured")
        if not key:
            raise DataSourceResolutionError("Neither datasource_id nor datasource_name is set")

        data_source = await self._registry.get(key)
        logger.info(f"Resolved data source {key}")
        return data_source

    async def test_connection(self) -> ConnectionStatus:
        """Run the data source's own connectivity probe."""
        data_source = await self.get_data_source()
        return await data_source.test_datasource()
